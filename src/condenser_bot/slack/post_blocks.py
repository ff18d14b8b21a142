"""Slack message payload builders.

Provides functions to build chat.postMessage payloads from Reply objects.
"""

from __future__ import annotations

from typing import Any, Dict, List

from ..schemas.reply import Reply


def build_attachment(reply: Reply) -> Dict[str, Any]:
    """
    A legacy attachment renders like a card: coloured bar, title, text and a field grid.
    """
    attachment: Dict[str, Any] = {
        "color": reply.colour,
        "title": reply.title,
        "fallback": reply.title,
        "mrkdwn_in": ["text", "fields"],
    }
    if reply.description:
        attachment["text"] = reply.description
    if reply.fields:
        attachment["fields"] = [
            {"title": f.name, "value": f.value, "short": f.inline}
            for f in reply.fields
        ]
    return attachment


def build_post_payload(channel: str, reply: Reply) -> Dict[str, Any]:
    """
    Payload for chat.postMessage.
    The top-level text carries the mention so the user gets notified.
    """
    attachments: List[Dict[str, Any]] = [build_attachment(reply)]
    return {
        "channel": channel,
        "text": reply.mention or reply.title,
        "attachments": attachments,
        "mrkdwn": True,
        "unfurl_links": False,
        "unfurl_media": False,
    }
