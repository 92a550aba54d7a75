from __future__ import annotations

import json
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class DiscordConfig:
    token: str
    owner_id: int
    guild_ids: List[int]


@dataclass(frozen=True)
class RelayConfig:
    bridges_dir: str
    command_prefix: str
    message_map_ttl_hours: float
    max_message_length: int


@dataclass(frozen=True)
class StorageConfig:
    db_path: str


@dataclass(frozen=True)
class PresenceConfig:
    type: Optional[str]
    text: Optional[str]
    url: Optional[str]
    status: Optional[str]


@dataclass(frozen=True)
class AppConfig:
    discord: DiscordConfig
    relay: RelayConfig
    storage: StorageConfig
    presence: PresenceConfig


def load_config(path: str) -> AppConfig:
    with open(path, "r", encoding="utf-8") as handle:
        raw = json.load(handle)
    return parse_config(raw)


def parse_config(raw: dict) -> AppConfig:
    discord_raw = raw.get("discord", {})
    relay_raw = raw.get("relay", {})
    storage_raw = raw.get("storage", {})
    presence_raw = raw.get("presence", {})

    discord = DiscordConfig(
        token=str(discord_raw.get("token", "")),
        owner_id=int(discord_raw.get("owner_id", 0)),
        guild_ids=[int(value) for value in discord_raw.get("guild_ids", [])],
    )

    relay = RelayConfig(
        bridges_dir=str(relay_raw.get("bridges_dir", "bridges")),
        command_prefix=str(relay_raw.get("command_prefix", "!")),
        message_map_ttl_hours=float(relay_raw.get("message_map_ttl_hours", 72)),
        max_message_length=int(relay_raw.get("max_message_length", 2000)),
    )

    storage = StorageConfig(
        db_path=str(storage_raw.get("db_path", "database.db")),
    )

    presence = PresenceConfig(
        type=presence_raw.get("type"),
        text=presence_raw.get("text"),
        url=presence_raw.get("url"),
        status=presence_raw.get("status"),
    )

    return AppConfig(discord=discord, relay=relay, storage=storage, presence=presence)
