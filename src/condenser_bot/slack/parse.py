import html
import re
from typing import Any, Dict, List, Optional

# Slack wraps links as <https://x.y/|label> or <https://x.y/>
_SLACK_LINK_RE = re.compile(r"<((?:https?|ftp|mailto):[^|>\s]+)(?:\|[^>]*)?>")
_MENTION_RE = re.compile(r"^<@([A-Z0-9]+)(?:\|[^>]*)?>")


def parse_event(event: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Parse a Slack message event.
    Returns a simplified event dict if it could carry a command, else None.
    """
    # 1. Ignore bots, including ourselves
    if event.get("subtype") == "bot_message" or event.get("bot_id"):
        return None

    # 2. Ignore edits/deletions and other system subtypes
    if event.get("subtype"):
        return None

    text = event.get("text", "")
    user = event.get("user")
    channel = event.get("channel")
    if not text or not user or not channel:
        return None

    return {
        "channel": channel,
        "channel_type": event.get("channel_type"),
        "user": user,
        "user_profile": event.get("user_profile") or {},
        "text": text,
    }


def unwrap_links(text: str) -> str:
    return _SLACK_LINK_RE.sub(r"\1", text)


def leading_mention(text: str) -> Optional[str]:
    """Returns the user ID mentioned at the very start of the text, if any."""
    match = _MENTION_RE.match(text.strip())
    return match.group(1) if match else None


def strip_command_prefix(text: str, prefix: str, bot_user_id: Optional[str] = None) -> Optional[str]:
    """
    Returns the command body if the text addresses the bot, either with the prefix
    (`!shorten ...`) or by mentioning it (`@bot shorten ...`). Otherwise None.
    """
    text = text.strip()

    match = _MENTION_RE.match(text)
    if match and bot_user_id and match.group(1) == bot_user_id:
        body = text[match.end():].strip()
        if prefix and body.startswith(prefix):
            body = body[len(prefix):]
        return body.strip()

    if prefix and text.startswith(prefix):
        return text[len(prefix):].strip()

    return None


def tokenize(body: str) -> List[str]:
    """
    Splits a command body on whitespace. Quotes are literal characters.
    Slack escapes &, < and > as entities; they are decoded per token, after
    links are unwrapped, so a decoded < or > can never open a link.
    """
    return [html.unescape(token) for token in unwrap_links(body).split()]


def author_tag(user_id: str, profile: Dict[str, Any]) -> str:
    for key in ("display_name", "real_name", "name"):
        value = profile.get(key)
        if value:
            return value
    return user_id


def mention(user_id: str) -> str:
    return f"<@{user_id}>"
