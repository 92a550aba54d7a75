# Bot presence (activity + online status)
from typing import Optional, Tuple

import discord

from core.errors import ConfigError

ACTIVITY_TYPES = {
    "Playing": discord.ActivityType.playing,
    "Streaming": discord.ActivityType.streaming,
    "Listening": discord.ActivityType.listening,
    "Watching": discord.ActivityType.watching,
    "Custom": discord.ActivityType.custom,
    "Competing": discord.ActivityType.competing,
}

STATUSES = {
    "online": discord.Status.online,
    "idle": discord.Status.idle,
    "dnd": discord.Status.dnd,
    "invisible": discord.Status.invisible,
}


def build_presence(activity_type: str, text: str, url: Optional[str] = None, status: Optional[str] = None) -> Tuple[discord.BaseActivity, Optional[discord.Status]]:
    if activity_type not in ACTIVITY_TYPES:
        raise ConfigError(f"Unknown activity type '{activity_type}'!")
    if status is not None and status not in STATUSES:
        raise ConfigError(f"Unknown status '{status}'!")

    if activity_type == "Streaming":
        if not url:
            raise ConfigError("URL is required for Streaming activity!")
        activity = discord.Streaming(name=text, url=url)
    elif activity_type == "Custom":
        activity = discord.CustomActivity(name=text)
    else:
        activity = discord.Activity(type=ACTIVITY_TYPES[activity_type], name=text, url=url)

    return activity, STATUSES.get(status) if status else None


def describe_presence(activity_type: str, text: str, url: Optional[str] = None, status: Optional[str] = None) -> str:
    lines = ["✅ Updated bot status:", f"Type: {activity_type}", f"Text: {text}"]
    if url:
        lines.append(f"URL: {url}")
    if status:
        lines.append(f"Status: {status}")
    return "\n".join(lines)
