"""
Command registry and router.

Commands are registered under a group and a (possibly multi-word) name, e.g.
`condenser meta`. Which commands exist is decided once at startup from the
capabilities the configuration provides.
"""

from collections import OrderedDict
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from ..condenser.commands import DeleteCommand, MetaCommand, ShortenCommand
from ..condenser.client import CondenserClient
from ..condenser.schemas import ServiceCredentials
from ..config import Settings
from ..log import get_logger
from ..schemas.reply import error_reply
from ..workers import WorkerPool
from .base import Command, Invocation, Messenger, Origin, Shutdown
from .help import HelpCommand
from .utility import PingCommand, StopCommand, UpdateCommand

logger = get_logger("registry")

MAX_NAME_DEPTH = 3
NOT_PERMITTED = "You do not have permission to use this command."
COMMAND_FAILED = "Something went wrong while running that command. Ask your admin for assistance."

CAP_CONDENSER = "condenser"
CAP_UPDATE = "update"


class CommandRegistry:
    def __init__(self, messenger: Messenger, prefix: str = "!", owners: Iterable[str] = ()):
        self.messenger = messenger
        self.prefix = prefix
        self.owners = frozenset(owners)
        self._commands: Dict[str, Command] = {}
        self._aliases: Dict[str, str] = {}
        self._groups: "OrderedDict[str, List[str]]" = OrderedDict()

    def register(self, group: str, name: str, command: Command) -> None:
        name = name.lower()
        if name in self._commands or name in self._aliases:
            raise ValueError(f"Command '{name}' is already registered")
        self._commands[name] = command
        self._groups.setdefault(group, []).append(name)
        for alias in command.options.aliases:
            self._aliases[alias.lower()] = name
        logger.debug(f"Registered command '{name}' in group '{group}'")

    def get(self, name: str) -> Optional[Command]:
        name = name.lower()
        return self._commands.get(self._aliases.get(name, name))

    def names(self) -> List[str]:
        return list(self._commands)

    def groups(self) -> List[Tuple[str, List[str]]]:
        return [(group, list(names)) for group, names in self._groups.items()]

    def is_owner(self, user_id: str) -> bool:
        return user_id in self.owners

    def resolve(self, tokens: Sequence[str]) -> Optional[Tuple[str, Command, Tuple[str, ...]]]:
        """
        Matches the longest registered name at the start of `tokens`.
        Returns (canonical name, command, remaining args) or None.
        """
        for depth in range(min(MAX_NAME_DEPTH, len(tokens)), 0, -1):
            candidate = " ".join(tokens[:depth]).lower()
            canonical = self._aliases.get(candidate, candidate)
            command = self._commands.get(canonical)
            if command is not None:
                return canonical, command, tuple(tokens[depth:])
        return None

    def dispatch(self, tokens: Sequence[str], origin: Origin) -> bool:
        """
        Routes one command. Returns False if no command matched.
        """
        resolved = self.resolve(tokens)
        if resolved is None:
            logger.debug(f"No command matches {list(tokens[:MAX_NAME_DEPTH])}")
            return False

        name, command, args = resolved
        logger.debug(f"Command execution: '{name}' from {origin.author_id} ('{origin.author_tag}')")

        if command.options.owners_only and not self.is_owner(origin.author_id):
            logger.warning(f"Unauthorized access attempt: user {origin.author_id} -> {name}")
            self.messenger.send(origin.channel_id, error_reply(NOT_PERMITTED, origin.mention))
            return True

        invocation = Invocation(name=name, args=args, origin=origin, prefix=self.prefix)
        try:
            command(invocation)
        except Exception:
            logger.exception(f"Error in command '{name}'")
            self.messenger.send(origin.channel_id, error_reply(COMMAND_FAILED, origin.mention))
        return True


def capabilities(settings: Settings) -> FrozenSet[str]:
    caps = set()
    if settings.CONDENSER_API_KEY and settings.condenser_server_url():
        caps.add(CAP_CONDENSER)
    elif settings.CONDENSER_API_KEY or settings.CONDENSER_SERVER:
        logger.warning("Condenser is only partly configured (need an API key and an http(s) server URL); commands disabled")
    if settings.ALLOW_UPDATE:
        caps.add(CAP_UPDATE)
    return frozenset(caps)


def build_registry(
    settings: Settings,
    messenger: Messenger,
    shutdown: Shutdown,
    pool: Optional[WorkerPool] = None,
    client: Optional[CondenserClient] = None,
) -> CommandRegistry:
    """
    Builds the registry for the given settings. Commands whose configuration is
    missing are simply not registered.
    """
    caps = capabilities(settings)
    registry = CommandRegistry(messenger, prefix=settings.COMMAND_PREFIX, owners=settings.OWNER_IDS)

    if CAP_CONDENSER in caps:
        credentials = ServiceCredentials(
            api_key=settings.CONDENSER_API_KEY,
            base_url=settings.condenser_server_url(),
        )
        client = client or CondenserClient(credentials.base_url)
        registry.register("Actions", "shorten", ShortenCommand(
            messenger, credentials, client=client, pool=pool, bot_name=settings.BOT_NAME,
        ))
        registry.register("Condenser", "condenser meta", MetaCommand(messenger, credentials, client=client, pool=pool))
        registry.register("Condenser", "condenser delete", DeleteCommand(messenger, credentials, client=client, pool=pool))

    registry.register("Utilities", "ping", PingCommand(messenger))
    registry.register("Utilities", "stop", StopCommand(messenger, shutdown))
    if CAP_UPDATE in caps:
        registry.register("Utilities", "update", UpdateCommand(messenger, shutdown))
    registry.register("Utilities", "help", HelpCommand(messenger, registry))

    logger.info(f"Registered {len(registry.names())} commands: {registry.names()}")
    return registry
