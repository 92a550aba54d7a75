import itertools
import logging
from types import SimpleNamespace

import pytest

from core.message_map import MessageMap
from core.message_router import MessageRouter
from services.bridge_registry import BridgeRegistry
from services.webhook_provisioner import WebhookProvisioner
from storage.bridge_repository import BridgeRepository

BOT_ID = 999
_ids = itertools.count(10_000)


class FakeWebhook:
    def __init__(self, channel_id, owner_id=BOT_ID, name="Relay", token="token"):
        self.id = next(_ids)
        self.channel_id = channel_id
        self.user = SimpleNamespace(id=owner_id)
        self.name = name
        self.token = token
        self.sent = []
        self.edits = []
        self.deletes = []
        self.send_error = None
        self.edit_error = None
        self.delete_error = None
        self.gate = None

    async def send(self, **kwargs):
        if self.gate is not None:
            await self.gate.wait()
        if self.send_error is not None:
            raise self.send_error
        sent = SimpleNamespace(id=next(_ids))
        self.sent.append((sent.id, kwargs))
        return sent

    async def edit_message(self, message_id, **kwargs):
        if self.edit_error is not None:
            raise self.edit_error
        self.edits.append((message_id, kwargs))

    async def delete_message(self, message_id):
        if self.delete_error is not None:
            raise self.delete_error
        self.deletes.append(message_id)


class FakeChannel:
    def __init__(self, channel_id, webhooks=None):
        self.id = channel_id
        self.existing = list(webhooks or [])
        self.created = []
        self.webhooks_error = None

    async def webhooks(self):
        if self.webhooks_error is not None:
            raise self.webhooks_error
        return list(self.existing)

    async def create_webhook(self, *, name, avatar=None, reason=None):
        webhook = FakeWebhook(self.id, name=name)
        webhook.avatar = avatar
        self.created.append(webhook)
        self.existing.append(webhook)
        return webhook


class FakeTransport:
    own_user_id = BOT_ID

    def __init__(self):
        self.channels = {}

    def add_channel(self, channel_id, webhooks=None):
        channel = FakeChannel(channel_id, webhooks)
        self.channels[channel_id] = channel
        return channel

    async def resolve_text_channel(self, channel_id):
        return self.channels.get(channel_id)

    async def fetch_own_avatar(self):
        return b"avatar"


def make_author(author_id=1, name="alice", display_name="Alice", bot=False, roles=()):
    return SimpleNamespace(
        id=author_id,
        name=name,
        display_name=display_name,
        bot=bot,
        roles=[SimpleNamespace(id=role_id) for role_id in roles],
        display_avatar=SimpleNamespace(url="https://cdn.example/avatar.png"),
    )


def make_message(message_id, channel_id, content="hello", author=None, attachments=(), embeds=(), webhook_id=None, guild_name="Home"):
    return SimpleNamespace(
        id=message_id,
        channel=SimpleNamespace(id=channel_id),
        guild=SimpleNamespace(name=guild_name),
        content=content,
        author=author or make_author(),
        attachments=[SimpleNamespace(url=url) for url in attachments],
        embeds=list(embeds),
        webhook_id=webhook_id,
    )


def http_error(cls, status, code=0):
    """Build a discord HTTPException subclass without a real response."""
    response = SimpleNamespace(status=status, reason="error")
    return cls(response, {"code": code, "message": "error"})


@pytest.fixture
def logger():
    return logging.getLogger("tests")


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def provisioner(transport, logger):
    return WebhookProvisioner(transport, logger)


@pytest.fixture
def bridge_repo(tmp_path, logger):
    return BridgeRepository(str(tmp_path / "bridges"), logger)


@pytest.fixture
def registry(bridge_repo, provisioner, transport, logger):
    return BridgeRegistry(bridge_repo, provisioner, transport, logger)


@pytest.fixture
def message_map():
    return MessageMap()


@pytest.fixture
def router(registry, provisioner, message_map, logger):
    return MessageRouter(registry, provisioner, message_map, logger, command_prefix="!", max_message_length=2000)


@pytest.fixture
def make_bridge(registry, transport):
    """Create a bridge over the given channel ids, adding fake channels as needed."""

    async def _make(name, *channel_ids):
        for channel_id in channel_ids:
            if channel_id not in transport.channels:
                transport.add_channel(channel_id)
        bridge = await registry.create(name, channel_ids[0], channel_ids[1])
        for channel_id in channel_ids[2:]:
            bridge = await registry.edit(bridge.id, add_channel=channel_id)
        return bridge

    return _make
