# Display-name and body helpers shared by the relay paths
import re
from typing import Optional, Sequence

GUILDNAME_PLACEHOLDER = "{{GUILDNAME}}"
USERNAME_PLACEHOLDER = "{{USERNAME}}"
REDACTION_MARKER = "[redacted]"
MAX_USERNAME_LENGTH = 80

# Webhook usernames may not name the platform or its mascot.
_RESERVED_TOKENS = re.compile(r"clyde|discord", re.IGNORECASE)


def sanitize_display_name(name: str) -> str:
    return _RESERVED_TOKENS.sub(REDACTION_MARKER, name)


def format_display_name(name_format: str, guild_name: str, author_name: str) -> str:
    username = sanitize_display_name(author_name)
    formatted = name_format.replace(GUILDNAME_PLACEHOLDER, guild_name or "").replace(
        USERNAME_PLACEHOLDER, username
    )
    formatted = sanitize_display_name(formatted).strip()
    return formatted[:MAX_USERNAME_LENGTH] or REDACTION_MARKER


def append_urls_to_content(content: Optional[str], urls: Sequence[str]) -> Optional[str]:
    if not urls:
        return content
    base = content or ""
    if base:
        return f"{base}\n" + "\n".join(urls)
    return "\n".join(urls)


def truncate(content: Optional[str], limit: int) -> Optional[str]:
    if content is None:
        return None
    return content[:limit]
