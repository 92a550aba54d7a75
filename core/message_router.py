# Relay propagation: fans message create/edit/delete out across bridge channels
import asyncio
from typing import Any, List, Optional, Sequence, Tuple

import discord

from core.errors import DeliveryError
from core.formatting import append_urls_to_content, format_display_name, truncate
from core.message_map import MessageMap
from core.models import BridgeConfig, DeliveryOutcome

MAX_EMBEDS = 10
UNKNOWN_WEBHOOK = 10015


class MessageRouter:
    def __init__(self, registry, provisioner, message_map: MessageMap, logger, command_prefix: str = "!", max_message_length: int = 2000):
        self.registry = registry
        self.provisioner = provisioner
        self.message_map = message_map
        self.logger = logger
        self.command_prefix = command_prefix
        self.max_message_length = max_message_length
        self.allowed_mentions = discord.AllowedMentions(everyone=False, users=True, roles=False, replied_user=False)

    def _compose_body(self, message) -> Optional[str]:
        urls = [attachment.url for attachment in message.attachments]
        body = append_urls_to_content(message.content or None, urls)
        return truncate(body, self.max_message_length)

    @staticmethod
    def _author_name(author) -> str:
        return getattr(author, "display_name", None) or author.name

    def _plan_destinations(self, message, bridges: Sequence[BridgeConfig]) -> List[Tuple[BridgeConfig, int]]:
        role_ids = {role.id for role in getattr(message.author, "roles", [])}
        seen = {message.channel.id}
        targets: List[Tuple[BridgeConfig, int]] = []
        for bridge in bridges:
            if bridge.blocks(role_ids):
                self.logger.debug(f"[{bridge.name}] Author {message.author.id} holds a blacklisted role, not relaying")
                continue
            for channel_id in bridge.other_channels(message.channel.id):
                if channel_id in seen:
                    continue
                seen.add(channel_id)
                targets.append((bridge, channel_id))
        return targets

    def _failure(self, channel_id: int, action: str, exc: Exception) -> DeliveryOutcome:
        if isinstance(exc, discord.NotFound) and getattr(exc, "code", None) == UNKNOWN_WEBHOOK:
            self.provisioner.forget(channel_id)
        error = DeliveryError(channel_id, action, str(exc))
        error.__cause__ = exc
        return DeliveryOutcome(channel_id=channel_id, error=error)

    async def relay_message(self, message) -> List[DeliveryOutcome]:
        if message.author.bot or message.webhook_id is not None:
            return []
        bridges = self.registry.bridges_for(message.channel.id)
        if not bridges:
            return []
        content = message.content or ""
        if not content and not message.attachments and not message.embeds:
            return []
        if self.command_prefix and content.startswith(self.command_prefix):
            return []

        targets = self._plan_destinations(message, bridges)
        if not targets:
            return []

        body = self._compose_body(message)
        embeds = list(message.embeds)[:MAX_EMBEDS]
        self.message_map.begin(message.id)
        try:
            outcomes = await asyncio.gather(
                *(self._send_copy(bridge, channel_id, message, body, embeds) for bridge, channel_id in targets)
            )
            copies = {outcome.channel_id: outcome.remote_id for outcome in outcomes if outcome.ok}
            self.message_map.record(message.id, copies)
        finally:
            self.message_map.settle(message.id)
        self.logger.info(f"Relayed message {message.id} to {len(copies)}/{len(targets)} channel(s)")
        return list(outcomes)

    async def _send_copy(self, bridge: BridgeConfig, channel_id: int, message, body: Optional[str], embeds: List[Any]) -> DeliveryOutcome:
        webhook = self.provisioner.get(channel_id)
        if webhook is None:
            self.logger.warning(f"[{bridge.name}] No webhook for channel {channel_id}, skipping")
            return DeliveryOutcome(channel_id=channel_id, error=DeliveryError(channel_id, "send", "no webhook"))
        guild_name = message.guild.name if message.guild else ""
        try:
            sent = await webhook.send(
                content=body,
                username=format_display_name(bridge.name_format, guild_name, self._author_name(message.author)),
                avatar_url=str(message.author.display_avatar.url),
                embeds=embeds,
                allowed_mentions=self.allowed_mentions,
                wait=True,
            )
        except Exception as exc:
            self.logger.error(f"[{bridge.name}] Failed to send message to channel {channel_id}: {exc}", exc_info=True)
            return self._failure(channel_id, "send", exc)
        return DeliveryOutcome(channel_id=channel_id, remote_id=sent.id)

    async def relay_edit(self, message) -> List[DeliveryOutcome]:
        if message.author.bot or message.webhook_id is not None:
            return []
        bridges = self.registry.bridges_for(message.channel.id)
        if not bridges:
            return []
        await self.message_map.wait_settled(message.id)
        copies = self.message_map.get(message.id)
        if copies is None:
            self.logger.info(f"Message not mapped - {self._author_name(message.author)} ({message.id}), nothing to edit")
            return []

        destinations = {channel_id for bridge in bridges for channel_id in bridge.other_channels(message.channel.id)}
        body = self._compose_body(message)
        embeds = list(message.embeds)[:MAX_EMBEDS]
        outcomes = await asyncio.gather(
            *(
                self._edit_copy(channel_id, remote_id, body, embeds)
                for channel_id, remote_id in copies.items()
                if channel_id in destinations
            )
        )
        return list(outcomes)

    async def _edit_copy(self, channel_id: int, remote_id: int, body: Optional[str], embeds: List[Any]) -> DeliveryOutcome:
        webhook = self.provisioner.get(channel_id)
        if webhook is None:
            self.logger.warning(f"No webhook for channel {channel_id}, cannot edit message {remote_id}")
            return DeliveryOutcome(channel_id=channel_id, error=DeliveryError(channel_id, "edit", "no webhook"))
        try:
            await webhook.edit_message(
                remote_id,
                content=body,
                embeds=embeds,
                allowed_mentions=self.allowed_mentions,
            )
        except Exception as exc:
            self.logger.warning(f"Failed to edit message {remote_id} in channel {channel_id}: {exc}")
            return self._failure(channel_id, "edit", exc)
        self.logger.info(f"Edited message {remote_id} in channel {channel_id}")
        return DeliveryOutcome(channel_id=channel_id, remote_id=remote_id)

    async def relay_delete(self, message_id: int, channel_id: Optional[int] = None) -> List[DeliveryOutcome]:
        await self.message_map.wait_settled(message_id)
        copies = self.message_map.get(message_id)
        if copies is None:
            self.logger.info(f"Message not mapped - {message_id} in channel {channel_id}, nothing to delete")
            return []
        try:
            outcomes = await asyncio.gather(
                *(self._delete_copy(dest_id, remote_id) for dest_id, remote_id in copies.items())
            )
        finally:
            self.message_map.discard(message_id)
        return list(outcomes)

    async def _delete_copy(self, channel_id: int, remote_id: int) -> DeliveryOutcome:
        webhook = self.provisioner.get(channel_id)
        if webhook is None:
            self.logger.warning(f"No webhook for channel {channel_id}, cannot delete message {remote_id}")
            return DeliveryOutcome(channel_id=channel_id, error=DeliveryError(channel_id, "delete", "no webhook"))
        try:
            await webhook.delete_message(remote_id)
        except Exception as exc:
            self.logger.warning(f"Failed to delete message {remote_id} in channel {channel_id}: {exc}")
            return self._failure(channel_id, "delete", exc)
        self.logger.info(f"Deleted message {remote_id} in channel {channel_id}")
        return DeliveryOutcome(channel_id=channel_id, remote_id=remote_id)
