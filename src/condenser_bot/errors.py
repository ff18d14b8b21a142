"""Exception hierarchy shared by the worker pool, the Condenser client and command handlers."""

from typing import Optional


class BotError(Exception):
    """Base class for errors raised by condenser_bot."""


class UsageError(BotError):
    """The user invoked a command with bad arguments. Reported back, never logged as a fault."""


class WorkerPoolError(BotError):
    """The worker pool could not be built or no longer accepts work."""


class WorkerPoolFull(WorkerPoolError):
    """The bounded worker queue is at capacity."""


class CondenserError(BotError):
    """Base class for failures talking to the Condenser service."""


class TransportError(CondenserError):
    """
    The request did not complete.

    status_code is set when the server answered but the response could not be read,
    and is None for DNS, connect and timeout failures.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ProtocolError(CondenserError):
    """A success status came back with a body that does not match the expected schema."""

    def __init__(self, message: str, status_code: int, body: bytes = b""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class InvalidPathError(CondenserError):
    """A user-supplied short code cannot be used as a URL path segment."""

    def __init__(self, code: str):
        super().__init__(f"Invalid short code for a URL path: {code!r}")
        self.code = code
