# Discord transport client
from typing import Optional

import aiohttp
import discord


class DiscordClient:
    def __init__(self, bot, logger):
        self.bot = bot
        self.logger = logger
        self.router = None
        self.registry = None
        self.provisioner = None
        self.role_snapshots = None
        self.default_presence = None
        self._avatar_bytes: Optional[bytes] = None

    @property
    def own_user_id(self) -> Optional[int]:
        return self.bot.user.id if self.bot.user else None

    def bind(self, router, registry, provisioner, role_snapshots, default_presence=None):
        self.router = router
        self.registry = registry
        self.provisioner = provisioner
        self.role_snapshots = role_snapshots
        self.default_presence = default_presence

        @self.bot.event
        async def on_ready():
            self.logger.info(f"Discord connected as {self.bot.user}")
            self.logger.info("Setting up bridges...")
            await self.provisioner.reconcile(self.registry.list_bridges())
            if self.default_presence is not None:
                activity, status = self.default_presence
                await self.bot.change_presence(activity=activity, status=status)
            self.logger.info(f"{self.bot.user} is ready!")

        @self.bot.event
        async def on_message(message: discord.Message):
            if message.guild is None:
                return
            await self.router.relay_message(message)

        @self.bot.event
        async def on_raw_message_edit(payload: discord.RawMessageUpdateEvent):
            # Fires for messages that already left the message cache too
            if payload.guild_id is None:
                return
            await self.router.relay_edit(payload.message)

        @self.bot.event
        async def on_raw_message_delete(payload: discord.RawMessageDeleteEvent):
            if payload.guild_id is None:
                return
            await self.router.relay_delete(payload.message_id, payload.channel_id)

        @self.bot.event
        async def on_member_join(member: discord.Member):
            await self.role_snapshots.handle_member_join(member)

        @self.bot.event
        async def on_member_remove(member: discord.Member):
            await self.role_snapshots.handle_member_remove(member)

    async def start(self, token):
        self.logger.info("Starting Discord bot")
        await self.bot.start(token)

    async def resolve_text_channel(self, channel_id: int):
        channel = self.bot.get_channel(channel_id)
        if channel is None:
            try:
                channel = await self.bot.fetch_channel(channel_id)
            except (discord.NotFound, discord.Forbidden, discord.InvalidData) as exc:
                self.logger.warning(f"Discord channel not found: {channel_id}: {exc}")
                return None
            except discord.HTTPException as exc:
                self.logger.error(f"Failed to fetch Discord channel {channel_id}: {exc}")
                return None
        if not isinstance(channel, (discord.TextChannel, discord.VoiceChannel)):
            self.logger.info(f"Channel {channel_id} is not a text channel")
            return None
        return channel

    async def fetch_own_avatar(self) -> Optional[bytes]:
        if self._avatar_bytes is not None:
            return self._avatar_bytes
        if self.bot.user is None:
            return None
        url = str(self.bot.user.display_avatar.url)
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        self.logger.warning(f"Avatar download failed {url}: HTTP {response.status}")
                        return None
                    self._avatar_bytes = await response.read()
        except aiohttp.ClientError as exc:
            self.logger.warning(f"Avatar download failed {url}: {exc}")
            return None
        return self._avatar_bytes
