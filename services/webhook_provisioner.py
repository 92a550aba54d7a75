# Per-channel webhooks used to post relayed copies under the original author's name
import asyncio
from typing import Any, Dict, Iterable, Optional

import discord

from core.errors import ProvisionError
from core.formatting import MAX_USERNAME_LENGTH, sanitize_display_name
from core.models import BridgeConfig


class WebhookProvisioner:
    def __init__(self, transport, logger):
        self.transport = transport
        self.logger = logger
        self._webhooks: Dict[int, Any] = {}
        self._locks: Dict[int, asyncio.Lock] = {}

    def get(self, channel_id: int) -> Optional[Any]:
        return self._webhooks.get(channel_id)

    def forget(self, channel_id: int) -> None:
        if self._webhooks.pop(channel_id, None) is not None:
            self.logger.warning(f"Dropped cached webhook for channel {channel_id}; it will be recreated on the next reconcile")

    @property
    def channel_ids(self):
        return frozenset(self._webhooks)

    def _is_ours(self, webhook) -> bool:
        owner = getattr(webhook, "user", None)
        return owner is not None and owner.id == self.transport.own_user_id and bool(getattr(webhook, "token", None))

    async def ensure(self, channel, bridge: BridgeConfig):
        cached = self._webhooks.get(channel.id)
        if cached is not None:
            return cached
        if not hasattr(channel, "create_webhook"):
            raise ProvisionError(channel.id, "channel is not a text channel")
        lock = self._locks.setdefault(channel.id, asyncio.Lock())
        async with lock:
            cached = self._webhooks.get(channel.id)
            if cached is not None:
                return cached
            try:
                webhooks = await channel.webhooks()
                webhook = discord.utils.find(self._is_ours, webhooks)
                if webhook is not None:
                    self.logger.info(f"Found existing webhook for '{bridge.name}' in channel {channel.id}")
                else:
                    self.logger.info(f"Creating webhook for '{bridge.name}' in channel {channel.id}")
                    avatar = await self.transport.fetch_own_avatar()
                    name = sanitize_display_name(bridge.name)[:MAX_USERNAME_LENGTH] or "Relay"
                    webhook = await channel.create_webhook(
                        name=name,
                        avatar=avatar,
                        reason=f"Relay webhook for bridge {bridge.id}",
                    )
            except discord.Forbidden as exc:
                raise ProvisionError(channel.id, f"missing permissions ({exc})") from exc
            except discord.HTTPException as exc:
                raise ProvisionError(channel.id, str(exc)) from exc
            self._webhooks[channel.id] = webhook
            return webhook

    async def reconcile(self, bridges: Iterable[BridgeConfig]) -> Dict[int, ProvisionError]:
        """Make sure every channel of every bridge has a webhook.

        Channels that cannot be provisioned are logged and left out of the
        working set; the next reconcile tries them again. Cached webhooks for
        channels that no longer belong to any bridge are dropped from the cache
        (the webhooks themselves are left in place).
        """
        bridges = list(bridges)
        wanted = {channel_id for bridge in bridges for channel_id in bridge.channels}
        for channel_id in set(self._webhooks) - wanted:
            self._webhooks.pop(channel_id, None)

        failures: Dict[int, ProvisionError] = {}
        for bridge in bridges:
            for channel_id in bridge.channels:
                if channel_id in self._webhooks or channel_id in failures:
                    continue
                channel = await self.transport.resolve_text_channel(channel_id)
                if channel is None:
                    exc = ProvisionError(channel_id, "channel not found or not a text channel")
                    self.logger.warning(f"[{bridge.name}] {exc}")
                    failures[channel_id] = exc
                    continue
                try:
                    await self.ensure(channel, bridge)
                except ProvisionError as exc:
                    self.logger.warning(f"[{bridge.name}] {exc}")
                    failures[channel_id] = exc
        self.logger.debug(f"Webhook working set: {len(self._webhooks)} channel(s), {len(failures)} failure(s)")
        return failures
