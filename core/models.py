# Core data models for the relay
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Optional, Tuple

DEFAULT_NAME_FORMAT = "{{USERNAME}} ({{GUILDNAME}})"


@dataclass(frozen=True)
class BridgeConfig:
    id: str
    name: str
    channels: Tuple[int, ...]
    name_format: str = DEFAULT_NAME_FORMAT
    blacklist_roles: FrozenSet[int] = field(default_factory=frozenset)

    def has_channel(self, channel_id: int) -> bool:
        return channel_id in self.channels

    def other_channels(self, channel_id: int) -> Tuple[int, ...]:
        return tuple(cid for cid in self.channels if cid != channel_id)

    def blocks(self, role_ids) -> bool:
        return any(role_id in self.blacklist_roles for role_id in role_ids)

    def renamed(self, name: str) -> BridgeConfig:
        return replace(self, name=name)

    def with_channel(self, channel_id: int) -> BridgeConfig:
        if channel_id in self.channels:
            return self
        return replace(self, channels=self.channels + (channel_id,))

    def without_channel(self, channel_id: int) -> BridgeConfig:
        return replace(self, channels=tuple(cid for cid in self.channels if cid != channel_id))

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "name_format": self.name_format,
            "channels": [str(cid) for cid in self.channels],
            "blacklist_roles": [str(rid) for rid in sorted(self.blacklist_roles)],
        }

    @classmethod
    def from_record(cls, raw: Dict[str, Any]) -> BridgeConfig:
        channels: list[int] = []
        for value in raw.get("channels", []):
            cid = int(value)
            if cid not in channels:
                channels.append(cid)
        return cls(
            id=str(raw["id"]),
            name=str(raw.get("name", "")),
            channels=tuple(channels),
            name_format=str(raw.get("name_format") or DEFAULT_NAME_FORMAT),
            blacklist_roles=frozenset(int(value) for value in raw.get("blacklist_roles", [])),
        )


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of one relay action against one destination channel."""

    channel_id: int
    remote_id: Optional[int] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None
