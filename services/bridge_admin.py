# Administrative bridge operations with human-readable results
from typing import NamedTuple, Optional

from core.errors import ConfigError


class AdminResult(NamedTuple):
    ok: bool
    message: str


def format_bridge_list(bridges) -> str:
    if not bridges:
        return "No bridges found!"
    entries = []
    for bridge in bridges:
        channels = ", ".join(f"<#{channel_id}>" for channel_id in bridge.channels)
        entries.append(f"**{bridge.name}** (ID: `{bridge.id}`)\nChannels: {channels}")
    return "**Bridge List**\n\n" + "\n\n".join(entries)


class BridgeAdmin:
    def __init__(self, registry, logger):
        self.registry = registry
        self.logger = logger

    async def create_bridge(self, name: str, channel1: str, channel2: str) -> AdminResult:
        try:
            bridge = await self.registry.create(name, channel1, channel2)
        except ConfigError as exc:
            return AdminResult(False, f"❌ {exc}")
        except Exception as exc:
            self.logger.error(f"Failed to create bridge: {exc}", exc_info=True)
            return AdminResult(False, "❌ Failed to create bridge. Check console for details.")
        return AdminResult(True, f'✅ Bridge "{bridge.name}" created successfully!\nID: `{bridge.id}`')

    async def edit_bridge(
        self,
        bridge_id: str,
        name: Optional[str] = None,
        add_channel: Optional[str] = None,
        remove_channel: Optional[str] = None,
    ) -> AdminResult:
        try:
            bridge = await self.registry.edit(bridge_id, name=name, add_channel=add_channel, remove_channel=remove_channel)
        except ConfigError as exc:
            return AdminResult(False, f"❌ {exc}")
        except Exception as exc:
            self.logger.error(f"Failed to edit bridge: {exc}", exc_info=True)
            return AdminResult(False, "❌ Failed to edit bridge. Check console for details.")
        return AdminResult(True, f'✅ Bridge "{bridge.name}" updated successfully!')

    async def delete_bridge(self, bridge_id: str) -> AdminResult:
        try:
            await self.registry.delete(bridge_id)
        except ConfigError as exc:
            return AdminResult(False, f"❌ {exc}")
        except Exception as exc:
            self.logger.error(f"Failed to delete bridge: {exc}", exc_info=True)
            return AdminResult(False, "❌ Failed to delete bridge. Check console for details.")
        return AdminResult(True, "✅ Bridge deleted successfully!")

    def list_bridges(self) -> AdminResult:
        return AdminResult(True, format_bridge_list(self.registry.list_bridges()))
