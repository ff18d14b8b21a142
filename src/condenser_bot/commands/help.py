from typing import TYPE_CHECKING

from ..rendering.slack_format import inline_code
from ..schemas.reply import COLOUR_INFO, Reply, error_reply
from .base import Command, CommandOptions, Invocation, Messenger

if TYPE_CHECKING:
    from .registry import CommandRegistry

NO_HELP_AVAILABLE = ":warning: No help available for that command."


class HelpCommand(Command):
    options = CommandOptions(
        description="Lists the available commands, or explains one of them",
        usage="[COMMAND]",
        example="shorten",
    )

    def __init__(self, messenger: Messenger, registry: "CommandRegistry"):
        super().__init__(messenger)
        self.registry = registry

    def execute(self, invocation: Invocation) -> None:
        if invocation.args:
            self.reply(invocation, self.command_help(" ".join(invocation.args), invocation))
        else:
            self.reply(invocation, self.overview(invocation))

    def overview(self, invocation: Invocation) -> Reply:
        prefix = self.registry.prefix
        is_owner = self.registry.is_owner(invocation.origin.author_id)
        reply = Reply(
            title="Help",
            description=(
                f"For help on a specific command, run {inline_code(prefix + 'help')} followed by the command name.\n"
                "Struck out commands are not available to you here."
            ),
            colour=COLOUR_INFO,
        )
        for group, names in self.registry.groups():
            entries = []
            for name in names:
                entry = inline_code(prefix + name)
                command = self.registry.get(name)
                if command.options.owners_only and not is_owner:
                    entry = f"~{entry}~"
                entries.append(entry)
            reply = reply.with_field(group, ", ".join(entries))
        return reply

    def command_help(self, name: str, invocation: Invocation) -> Reply:
        prefix = self.registry.prefix
        resolved = self.registry.resolve(name.split())
        if resolved is None or resolved[2]:
            return error_reply(f":skull_crossbones: Command {inline_code(name)} does not exist.")

        canonical, command, _ = resolved
        options = command.options
        if not options.help_available:
            return error_reply(NO_HELP_AVAILABLE)

        reply = Reply(title=canonical, description=options.description, colour=COLOUR_INFO)
        if options.usage:
            reply = reply.with_field("Usage", inline_code(f"{prefix}{canonical} {options.usage}"))
        if options.example:
            reply = reply.with_field("Example", inline_code(f"{prefix}{canonical} {options.example}"))
        if options.aliases:
            reply = reply.with_field("Aliases", ", ".join(inline_code(prefix + a) for a in options.aliases), inline=True)
        if options.owners_only:
            reply = reply.with_field("Availability", "Owners only", inline=True)
        return reply
