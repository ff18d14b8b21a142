"""Maps Condenser outcomes to user-facing replies.

Every command shares one vocabulary of failure; statuses whose meaning depends
on the command (409 for shorten, 404 for meta and delete) carry the short code
the user asked for. Raw exception details are logged, never shown.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..errors import ProtocolError, TransportError
from ..log import get_logger
from ..schemas.reply import Reply, error_reply

logger = get_logger("condenser_translate")

COMMUNICATION_ERROR = "An error occurred when communicating with Condenser. Ask your admin for assistance."
HTTP_ERROR = "A HTTP error occurred when communicating with Condenser. Ask your admin for assistance."
PARSE_ERROR = "Unable to parse response from server."
INVALID_API_KEY = "The bot's API key is invalid. Ask your admin for assistance."
CODE_EXISTS = "The provided code already exists."
CODE_NOT_FOUND = "The provided code does not exist."
UNKNOWN_ERROR = "An unknown error occurred when communicating with Condenser. Ask your admin for assistance."


class CommandKind(str, Enum):
    SHORTEN = "shorten"
    META = "meta"
    DELETE = "delete"


@dataclass(frozen=True)
class ReplyContext:
    command: CommandKind
    code: Optional[str] = None
    mention: Optional[str] = None


def translate_transport_error(err: TransportError, ctx: ReplyContext) -> Reply:
    if err.status_code is not None:
        logger.warning(f"Invalid {ctx.command.value} response with HTTP status {err.status_code}: {err}")
        return error_reply(HTTP_ERROR, ctx.mention)
    logger.warning(f"Error sending Condenser {ctx.command.value} request: {err}")
    return error_reply(COMMUNICATION_ERROR, ctx.mention)


def translate_parse_failure(err: ProtocolError, ctx: ReplyContext) -> Reply:
    logger.warning(f"Error parsing {ctx.command.value} response ({err.status_code}): {err} body={err.body[:200]!r}")
    return error_reply(PARSE_ERROR, ctx.mention)


def translate_status(status_code: int, ctx: ReplyContext) -> Reply:
    """
    Reply for a non-200 status. Deterministic for a given status and context.
    """
    if status_code == 401:
        return error_reply(INVALID_API_KEY, ctx.mention)

    if status_code == 409 and ctx.command is CommandKind.SHORTEN:
        reply = error_reply(CODE_EXISTS, ctx.mention)
        if ctx.code:
            reply = reply.with_field("Conflicting Code", ctx.code, inline=True)
        return reply

    if status_code == 404 and ctx.command in (CommandKind.META, CommandKind.DELETE):
        reply = error_reply(CODE_NOT_FOUND, ctx.mention)
        if ctx.code:
            reply = reply.with_field("Code", ctx.code, inline=True)
        return reply

    logger.warning(f"Unhandled status code for {ctx.command.value}: {status_code}")
    return error_reply(UNKNOWN_ERROR, ctx.mention)
