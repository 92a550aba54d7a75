# /dev slash commands for managing bridges, restricted to the bot owner
import discord
from discord import Option, OptionChoice, SlashCommandGroup
from discord import errors as discord_errors
from discord.ext import commands

from core.errors import ConfigError
from services.presence import ACTIVITY_TYPES, build_presence, describe_presence

STATUS_CHOICES = [
    OptionChoice("Online", "online"),
    OptionChoice("Idle", "idle"),
    OptionChoice("Do Not Disturb", "dnd"),
    OptionChoice("Invisible", "invisible"),
]


class BridgeCommands(commands.Cog):
    dev = SlashCommandGroup("dev", "Developer commands for managing bridges")

    def __init__(self, bot: commands.Bot, admin, owner_id: int, logger):
        self.bot = bot
        self.admin = admin
        self.owner_id = owner_id
        self.logger = logger

    async def cog_check(self, ctx):
        cmd_name = ctx.command.qualified_name if ctx.command else "unknown"
        if ctx.author.id == self.owner_id:
            self.logger.info(f"User {ctx.author.id} executed the '{cmd_name}' command.")
            return True
        await ctx.respond("❌ You are not allowed to use this command!", ephemeral=True)
        self.logger.warning(f"Unauthorized access: user {ctx.author.id} attempted to run command '{cmd_name}'")
        return False

    @commands.Cog.listener()
    async def on_application_command_error(self, ctx, error):
        err = getattr(error, "original", None) or error
        if isinstance(err, (commands.CheckFailure, discord_errors.CheckFailure)):
            return
        cmd = ctx.command.qualified_name if ctx.command else "<unknown>"
        self.logger.error(f"Error in command '{cmd}'", exc_info=err)

    @dev.command(name="create", description="Create a new bridge")
    async def create(
        self,
        ctx: discord.ApplicationContext,
        name: str = Option(str, "Name of the bridge", required=True),
        channel1: str = Option(str, "First channel to bridge", required=True),
        channel2: str = Option(str, "Second channel to bridge", required=True),
    ):
        await ctx.defer(ephemeral=True)
        result = await self.admin.create_bridge(name, channel1, channel2)
        await ctx.followup.send(result.message, ephemeral=True)

    @dev.command(name="edit", description="Edit an existing bridge")
    async def edit(
        self,
        ctx: discord.ApplicationContext,
        bridge_id: str = Option(str, "ID of the bridge to edit", required=True),
        name: str = Option(str, "New name for the bridge", required=False, default=None),
        add_channel: str = Option(str, "Add a channel to the bridge", required=False, default=None),
        remove_channel: str = Option(str, "Remove a channel from the bridge", required=False, default=None),
    ):
        await ctx.defer(ephemeral=True)
        result = await self.admin.edit_bridge(bridge_id, name=name, add_channel=add_channel, remove_channel=remove_channel)
        await ctx.followup.send(result.message, ephemeral=True)

    @dev.command(name="list", description="List all bridges")
    async def list_bridges(self, ctx: discord.ApplicationContext):
        result = self.admin.list_bridges()
        await ctx.respond(result.message, ephemeral=True)

    @dev.command(name="delete", description="Delete a bridge")
    async def delete(
        self,
        ctx: discord.ApplicationContext,
        bridge_id: str = Option(str, "ID of the bridge to delete", required=True),
    ):
        await ctx.defer(ephemeral=True)
        result = await self.admin.delete_bridge(bridge_id)
        await ctx.followup.send(result.message, ephemeral=True)

    @dev.command(name="status", description="Update bot status and activity")
    async def status(
        self,
        ctx: discord.ApplicationContext,
        activity_type: str = Option(str, "Activity type", name="type", choices=list(ACTIVITY_TYPES), required=True),
        text: str = Option(str, "Status text", required=True),
        url: str = Option(str, "URL (required for Streaming activity)", required=False, default=None),
        online_status: str = Option(str, "Online status", name="status", choices=STATUS_CHOICES, required=False, default=None),
    ):
        try:
            activity, status = build_presence(activity_type, text, url, online_status)
        except ConfigError as exc:
            await ctx.respond(f"❌ {exc}", ephemeral=True)
            return
        try:
            await self.bot.change_presence(activity=activity, status=status)
        except Exception as exc:
            self.logger.error(f"Failed to update status: {exc}", exc_info=True)
            await ctx.respond("❌ Failed to update status. Check console for details.", ephemeral=True)
            return
        await ctx.respond(describe_presence(activity_type, text, url, online_status), ephemeral=True)
