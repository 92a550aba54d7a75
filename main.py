# Main entrypoint for the channel relay
from core.config import AppConfig, load_config
from core.errors import ConfigError
from core.message_map import MessageMap
from core.message_router import MessageRouter
from storage.bridge_repository import BridgeRepository
from storage.role_repository import RoleSnapshotRepository
from services.bridge_registry import BridgeRegistry
from services.webhook_provisioner import WebhookProvisioner
from services.bridge_admin import BridgeAdmin
from services.role_snapshot import RoleSnapshotService
from services.presence import build_presence
from transports.discord_client import DiscordClient
from cogs.admin import BridgeCommands
import logging
import asyncio
import sys
import os

import discord
from discord.ext import commands


class BridgeApp:
    def __init__(self, config: AppConfig):
        self.config = config
        # Main logger for app-wide events
        self.logger = logging.getLogger("ChannelRelay")
        self.discord_logger = self.logger.getChild("Discord")

        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = True
        intents.webhooks = True
        discord_bot = commands.Bot(
            command_prefix=commands.when_mentioned,
            intents=intents,
            debug_guilds=config.discord.guild_ids or None,
        )
        self.discord = DiscordClient(discord_bot, self.discord_logger)

        self.bridge_repo = BridgeRepository(config.relay.bridges_dir, self.logger.getChild("Storage"))
        self.role_repo = RoleSnapshotRepository(config.storage.db_path)
        self.provisioner = WebhookProvisioner(self.discord, self.logger.getChild("Webhooks"))
        self.registry = BridgeRegistry(self.bridge_repo, self.provisioner, self.discord, self.logger.getChild("Registry"))
        self.registry.load()

        ttl_hours = config.relay.message_map_ttl_hours
        self.message_map = MessageMap(ttl_seconds=ttl_hours * 3600 if ttl_hours > 0 else None)
        self.router = MessageRouter(
            self.registry,
            self.provisioner,
            self.message_map,
            self.logger.getChild("Router"),
            command_prefix=config.relay.command_prefix,
            max_message_length=config.relay.max_message_length,
        )
        self.role_snapshots = RoleSnapshotService(self.role_repo, self.logger.getChild("Roles"))
        self.admin = BridgeAdmin(self.registry, self.logger.getChild("Admin"))

        self.discord.bind(
            self.router,
            self.registry,
            self.provisioner,
            self.role_snapshots,
            default_presence=self._default_presence(),
        )
        discord_bot.add_cog(BridgeCommands(discord_bot, self.admin, config.discord.owner_id, self.logger.getChild("Admin")))

    def _default_presence(self):
        presence = self.config.presence
        if not presence.type or not presence.text:
            return None
        try:
            return build_presence(presence.type, presence.text, presence.url, presence.status)
        except ConfigError as exc:
            self.logger.warning(f"Ignoring configured presence: {exc}")
            return None

    async def start(self):
        await self.discord.start(self.config.discord.token)


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    # Suppress noisy INFO logs from third-party libraries
    logging.getLogger("discord").setLevel(logging.WARNING)

    config_path = os.environ.get("BRIDGE_CONFIG", "config.json")
    config = load_config(config_path)
    if not config.discord.token:
        logging.error("No Discord token configured. Exiting.")
        sys.exit(1)
    if not config.discord.owner_id:
        logging.warning("No owner_id configured: /dev commands will not work for anyone.")
    app = BridgeApp(config)
    asyncio.run(app.start())
