# Registry of bridge configurations backed by the bridge repository
import asyncio
import time
from typing import List, Optional, Tuple

from core.errors import BridgeNotFound, InvalidChannel, InvariantViolation
from core.models import BridgeConfig, DEFAULT_NAME_FORMAT

MIN_CHANNELS = 2


def parse_channel_id(value) -> int:
    """Accept a raw id or a ``<#id>`` channel mention."""
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.startswith("<#") and text.endswith(">"):
        text = text[2:-1]
    try:
        return int(text)
    except ValueError:
        raise InvalidChannel(value, f"'{value}' is not a channel id!") from None


class BridgeRegistry:
    def __init__(self, repository, provisioner, transport, logger):
        self.repository = repository
        self.provisioner = provisioner
        self.transport = transport
        self.logger = logger
        self._bridges: List[BridgeConfig] = []
        self._lock = asyncio.Lock()
        self._last_id = 0

    def load(self) -> None:
        self._bridges = self.repository.load_all()
        for bridge in self._bridges:
            if bridge.id.isdigit():
                self._last_id = max(self._last_id, int(bridge.id))

    def list_bridges(self) -> Tuple[BridgeConfig, ...]:
        return tuple(self._bridges)

    def get(self, bridge_id: str) -> Optional[BridgeConfig]:
        for bridge in self._bridges:
            if bridge.id == bridge_id:
                return bridge
        return None

    def bridges_for(self, channel_id: int) -> List[BridgeConfig]:
        return [bridge for bridge in self._bridges if bridge.has_channel(channel_id)]

    def bridge_for(self, channel_id: int) -> Optional[BridgeConfig]:
        bridges = self.bridges_for(channel_id)
        return bridges[0] if bridges else None

    def _next_id(self) -> str:
        self._last_id = max(int(time.time() * 1000), self._last_id + 1)
        return str(self._last_id)

    async def _resolve_text_channel(self, value) -> int:
        channel_id = parse_channel_id(value)
        channel = await self.transport.resolve_text_channel(channel_id)
        if channel is None:
            raise InvalidChannel(channel_id)
        return channel_id

    def _replace(self, bridge: BridgeConfig) -> None:
        for index, existing in enumerate(self._bridges):
            if existing.id == bridge.id:
                self._bridges[index] = bridge
                return
        self._bridges.append(bridge)

    async def _converge(self) -> None:
        await self.provisioner.reconcile(self.list_bridges())

    async def create(self, name: str, channel1, channel2) -> BridgeConfig:
        first = await self._resolve_text_channel(channel1)
        second = await self._resolve_text_channel(channel2)
        if first == second:
            raise InvariantViolation("A bridge needs two different channels!")
        async with self._lock:
            bridge = BridgeConfig(
                id=self._next_id(),
                name=name,
                channels=(first, second),
                name_format=DEFAULT_NAME_FORMAT,
            )
            self.repository.save(bridge)
            self._replace(bridge)
            self.logger.info(f"Created bridge '{bridge.name}' ({bridge.id}) for channels {list(bridge.channels)}")
            await self._converge()
        return bridge

    async def edit(self, bridge_id: str, name: Optional[str] = None, add_channel=None, remove_channel=None) -> BridgeConfig:
        async with self._lock:
            bridge = self.get(bridge_id)
            if bridge is None:
                raise BridgeNotFound(bridge_id)
            updated = bridge
            if name:
                updated = updated.renamed(name)
            if add_channel is not None:
                updated = updated.with_channel(await self._resolve_text_channel(add_channel))
            if remove_channel is not None:
                channel_id = parse_channel_id(remove_channel)
                if updated.has_channel(channel_id):
                    updated = updated.without_channel(channel_id)
                    if len(updated.channels) < MIN_CHANNELS:
                        raise InvariantViolation(f"Bridge must have at least {MIN_CHANNELS} channels!")
            if updated != bridge:
                self.repository.save(updated)
                self._replace(updated)
                self.logger.info(f"Updated bridge '{updated.name}' ({updated.id}): channels {list(updated.channels)}")
            await self._converge()
        return updated

    async def delete(self, bridge_id: str) -> BridgeConfig:
        async with self._lock:
            bridge = self.get(bridge_id)
            if bridge is None:
                raise BridgeNotFound(bridge_id)
            self.repository.delete(bridge_id)
            self._bridges = [existing for existing in self._bridges if existing.id != bridge_id]
            self.logger.info(f"Deleted bridge '{bridge.name}' ({bridge.id})")
            await self._converge()
        return bridge
