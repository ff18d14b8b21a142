"""
Command framework: options, invocations and the base Command class.

A Command validates its arguments on the calling thread. Anything that
blocks is handed to the worker pool by the command itself.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

from ..errors import UsageError
from ..log import get_logger
from ..rendering.slack_format import inline_code
from ..schemas.reply import Reply, error_reply

logger = get_logger("commands")

BUSY = "The bot is busy right now. Try again in a moment."


class Messenger(Protocol):
    def send(self, channel_id: str, reply: Reply) -> None:
        ...


class Shutdown(Protocol):
    def request(self, exit_code: int = 0) -> None:
        ...


@dataclass(frozen=True)
class CommandOptions:
    """Read-only description of a command, shared by all of its invocations."""
    description: str
    usage: Optional[str] = None
    example: Optional[str] = None
    min_args: Optional[int] = None
    max_args: Optional[int] = None
    owners_only: bool = False
    aliases: Tuple[str, ...] = ()
    help_available: bool = True

    def describe_arg_count(self) -> str:
        lo, hi = self.min_args, self.max_args
        if lo is not None and lo == hi:
            return f"exactly {lo}"
        if lo is not None and hi is not None:
            if hi == lo + 1:
                return f"{lo} or {hi}"
            return f"between {lo} and {hi}"
        if lo is not None:
            return f"at least {lo}"
        return f"at most {hi}"


@dataclass(frozen=True)
class Origin:
    """Who sent an invocation and where the answer goes."""
    author_id: str
    author_tag: str
    mention: str
    channel_id: str
    guild_name: Optional[str] = None


@dataclass(frozen=True)
class Invocation:
    name: str
    args: Tuple[str, ...]
    origin: Origin
    prefix: str = "!"


def usage_error_reply(invocation: Invocation, err_text: str, options: CommandOptions) -> Reply:
    reply = error_reply(err_text)
    command = f"{invocation.prefix}{invocation.name}"
    if options.usage:
        reply = reply.with_field("Usage", inline_code(f"{command} {options.usage}"))
    if options.example:
        reply = reply.with_field("Example", inline_code(f"{command} {options.example}"))
    return reply


class Command(ABC):
    options: CommandOptions

    def __init__(self, messenger: Messenger):
        self.messenger = messenger

    def __call__(self, invocation: Invocation) -> None:
        try:
            self.check_arg_count(invocation)
            self.execute(invocation)
        except UsageError as e:
            logger.debug(f"Usage error in '{invocation.name}': {e}")
            self.reply(invocation, usage_error_reply(invocation, str(e), self.options))

    def check_arg_count(self, invocation: Invocation) -> None:
        argc = len(invocation.args)
        lo, hi = self.options.min_args, self.options.max_args
        if (lo is not None and argc < lo) or (hi is not None and argc > hi):
            raise UsageError(
                f"Wrong number of arguments (must be {self.options.describe_arg_count()})"
            )

    def reply(self, invocation: Invocation, reply: Reply) -> None:
        self.messenger.send(invocation.origin.channel_id, reply)

    @abstractmethod
    def execute(self, invocation: Invocation) -> None:
        """Runs the command. Raise UsageError to reject the arguments."""
