"""Basic utilities: ping, stop and update. Not worth splitting into modules of their own."""

from ..log import get_logger
from ..schemas.reply import Reply
from .base import Command, CommandOptions, Invocation, Messenger, Shutdown

logger = get_logger("commands.utility")

UPDATE_EXIT_CODE = 100


class PingCommand(Command):
    options = CommandOptions(description="Are you still there?", max_args=0)

    def execute(self, invocation: Invocation) -> None:
        self.reply(invocation, Reply(title="Pong!", mention=invocation.origin.mention))


class StopCommand(Command):
    options = CommandOptions(
        description="Stops the bot",
        owners_only=True,
        aliases=("stahp",),
        max_args=0,
    )

    def __init__(self, messenger: Messenger, shutdown: Shutdown):
        super().__init__(messenger)
        self.shutdown = shutdown

    def execute(self, invocation: Invocation) -> None:
        logger.warning(f"Shutdown started by {invocation.origin.author_tag}")
        self.reply(invocation, Reply(title="Shutting down.", mention=invocation.origin.mention))
        self.shutdown.request()


class UpdateCommand(Command):
    options = CommandOptions(
        description="Triggers a bot update. Only works if the bot is run from a wrapper script "
                    "and not inside a Docker container.",
        owners_only=True,
        max_args=0,
    )

    def __init__(self, messenger: Messenger, shutdown: Shutdown):
        super().__init__(messenger)
        self.shutdown = shutdown

    def execute(self, invocation: Invocation) -> None:
        logger.warning(f"Going down for update, requested by {invocation.origin.author_tag}")
        self.reply(invocation, Reply(title="Shutting down for update.", mention=invocation.origin.mention))
        self.shutdown.request(UPDATE_EXIT_CODE)
