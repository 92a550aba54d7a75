import logging
from types import SimpleNamespace
from unittest.mock import MagicMock

import discord
import pytest

from conftest import http_error, make_message
from transports.discord_client import DiscordClient


class FakeBot:
    def __init__(self, channels=None):
        self.handlers = {}
        self.user = SimpleNamespace(id=999)
        self.channels = channels or {}

    def event(self, coro):
        self.handlers[coro.__name__] = coro
        return coro

    def get_channel(self, channel_id):
        return self.channels.get(channel_id)

    async def fetch_channel(self, channel_id):
        raise http_error(discord.NotFound, 404, code=10003)


class RecordingRouter:
    def __init__(self):
        self.edited = []

    async def relay_edit(self, message):
        self.edited.append(message.id)
        return []


@pytest.fixture
def bot():
    return FakeBot()


@pytest.fixture
def client(bot, logger):
    return DiscordClient(bot, logger)


@pytest.mark.asyncio
async def test_edit_of_uncached_message_reaches_router(bot, client):
    router = RecordingRouter()
    client.bind(router, registry=None, provisioner=None, role_snapshots=None)

    assert "on_message_edit" not in bot.handlers
    payload = SimpleNamespace(guild_id=7, channel_id=1, message_id=500, cached_message=None, message=make_message(500, 1))
    await bot.handlers["on_raw_message_edit"](payload)

    assert router.edited == [500]


@pytest.mark.asyncio
async def test_edit_outside_a_guild_is_ignored(bot, client):
    router = RecordingRouter()
    client.bind(router, registry=None, provisioner=None, role_snapshots=None)

    payload = SimpleNamespace(guild_id=None, channel_id=1, message_id=500, cached_message=None, message=make_message(500, 1))
    await bot.handlers["on_raw_message_edit"](payload)

    assert router.edited == []


@pytest.mark.asyncio
@pytest.mark.parametrize("channel_type", [discord.TextChannel, discord.VoiceChannel])
async def test_text_capable_channels_resolve(bot, client, channel_type):
    channel = MagicMock(spec=channel_type)
    bot.channels[5] = channel

    assert await client.resolve_text_channel(5) is channel


@pytest.mark.asyncio
async def test_category_channel_is_rejected(bot, client):
    bot.channels[5] = MagicMock(spec=discord.CategoryChannel)

    assert await client.resolve_text_channel(5) is None


@pytest.mark.asyncio
async def test_unknown_channel_resolves_to_none(client):
    assert await client.resolve_text_channel(404) is None


@pytest.mark.asyncio
async def test_ready_reconciles_and_logs_identity(bot, client, caplog):
    reconciled = []

    class Provisioner:
        async def reconcile(self, bridges):
            reconciled.append(bridges)
            return {}

    registry = SimpleNamespace(list_bridges=lambda: ())
    client.bind(RecordingRouter(), registry, Provisioner(), role_snapshots=None)
    caplog.set_level(logging.INFO)

    await bot.handlers["on_ready"]()

    assert reconciled == [()]
    assert f"Discord connected as {bot.user}" in caplog.text
