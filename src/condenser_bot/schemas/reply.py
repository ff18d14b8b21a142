"""Pydantic schema for outbound chat messages.

A Reply is one message to a channel: an optional mention line plus a
titled card with fields. slack/post_blocks.py turns it into a Slack payload.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict

COLOUR_ERROR = "#E74C3C"
COLOUR_CONDENSER = "#1ABC9C"
COLOUR_INFO = "#E67E22"


class ReplyField(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: str
    inline: bool = False


class Reply(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    description: Optional[str] = None
    colour: str = COLOUR_INFO
    fields: List[ReplyField] = []
    mention: Optional[str] = None

    def with_field(self, name: str, value: str, inline: bool = False) -> "Reply":
        field = ReplyField(name=name, value=value, inline=inline)
        return self.model_copy(update={"fields": [*self.fields, field]})

    def field_value(self, name: str) -> Optional[str]:
        for field in self.fields:
            if field.name == name:
                return field.value
        return None

    def all_text(self) -> str:
        """Every visible string of the reply, joined. Handy for logs and assertions."""
        parts = [self.mention or "", self.title, self.description or ""]
        for field in self.fields:
            parts.extend([field.name, field.value])
        return "\n".join(p for p in parts if p)


def error_reply(text: str, mention: Optional[str] = None) -> Reply:
    return Reply(title="Error", description=text, colour=COLOUR_ERROR, mention=mention)
