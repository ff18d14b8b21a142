"""
Socket Mode entry point for Condenser Bot.
Connects to Slack via WebSocket - no public URL needed.

Usage:
    condenser-bot -c config.yaml -vv
    python -m condenser_bot.main
"""
import argparse
import os
import signal
import sys
import threading
from typing import Any, Dict, Optional, Sequence

from slack_bolt import App
from slack_bolt.adapter.socket_mode import SocketModeHandler
from slack_sdk.errors import SlackApiError

from .commands.base import Origin
from .commands.registry import CommandRegistry, build_registry
from .config import CONFIG_ENV, get_settings
from .errors import WorkerPoolError
from .log import get_logger, setup_logging
from .slack import parse
from .slack.client import SlackMessenger
from .workers import init_worker_pool, shutdown_worker_pool

logger = get_logger("main")

RESTART_SECONDS = 30
VERBOSITY = {1: "WARNING", 2: "INFO", 3: "DEBUG"}


class BotShutdown:
    """
    Process-wide shutdown state. Owned here and handed to the commands that
    may stop the bot; the first requested exit code wins.
    """

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self.exit_code = 0

    def request(self, exit_code: int = 0) -> None:
        with self._lock:
            if not self._event.is_set():
                self.exit_code = exit_code
                self._event.set()

    @property
    def requested(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)


def parse_args(argv: Optional[Sequence[str]] = None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Condenser Bot - shorten links from Slack")
    parser.add_argument(
        "-c", "--config",
        default=os.getenv(CONFIG_ENV),
        help=f"Path to a YAML config file (default: ${CONFIG_ENV} or ./config.yaml)",
    )
    parser.add_argument(
        "-v",
        dest="verbose",
        action="count",
        default=0,
        help="Sets verbosity. May be specified up to 3 times; overrides LOG_LEVEL.",
    )
    return parser.parse_args(argv)


def log_level_for(verbose: int, default: str) -> str:
    if verbose <= 0:
        return default
    return VERBOSITY[min(verbose, 3)]


def resolve_workspace_name(app: App) -> Optional[str]:
    try:
        return app.client.team_info()["team"]["name"]
    except SlackApiError as e:
        logger.warning(f"Could not resolve workspace name: {e.response.get('error')}")
        return None


def origin_from_event(parsed: Dict[str, Any], workspace_name: Optional[str]) -> Origin:
    user = parsed["user"]
    return Origin(
        author_id=user,
        author_tag=parse.author_tag(user, parsed["user_profile"]),
        mention=parse.mention(user),
        channel_id=parsed["channel"],
        guild_name=None if parsed["channel_type"] == "im" else workspace_name,
    )


def route_event(
    event: Dict[str, Any],
    registry: CommandRegistry,
    bot_user_id: Optional[str],
    workspace_name: Optional[str],
) -> bool:
    """
    Turns one Slack event into at most one command dispatch.
    Returns True if a command ran.
    """
    parsed = parse.parse_event(event)
    if parsed is None:
        return False

    body = parse.strip_command_prefix(parsed["text"], registry.prefix, bot_user_id)
    if body is None:
        return False

    tokens = parse.tokenize(body)
    if not tokens:
        return False

    return registry.dispatch(tokens, origin_from_event(parsed, workspace_name))


def register_listeners(
    app: App,
    registry: CommandRegistry,
    bot_user_id: Optional[str],
    workspace_name: Optional[str],
) -> None:
    @app.event("message")
    def handle_message_events(event):
        # Outside DMs, a message that mentions the bot also arrives as app_mention.
        if event.get("channel_type") != "im" and parse.leading_mention(event.get("text", "")) == bot_user_id:
            return
        route_event(event, registry, bot_user_id, workspace_name)

    @app.event("app_mention")
    def handle_mention(event):
        route_event(event, registry, bot_user_id, workspace_name)


def serve(app: App, app_token: str, shutdown: BotShutdown) -> None:
    """Keeps a Socket Mode connection open until shutdown is requested."""
    while not shutdown.requested:
        handler = SocketModeHandler(app, app_token)
        try:
            handler.connect()
        except Exception as e:
            logger.error(f"Socket Mode connection failed: {e}")
            logger.info(f"Attempting restart in {RESTART_SECONDS} seconds")
            shutdown.wait(RESTART_SECONDS)
            continue

        logger.info("Bot is running! Press Ctrl+C to stop.")
        try:
            while not shutdown.wait(1.0):
                pass
        finally:
            handler.close()


def main(argv: Optional[Sequence[str]] = None):
    """Start the bot."""
    args = parse_args(argv)
    if args.config:
        os.environ[CONFIG_ENV] = args.config

    settings = get_settings()
    level = log_level_for(args.verbose, settings.LOG_LEVEL)
    setup_logging(level)
    logger.info(f"Logger configured; using log level {level}")

    try:
        init_worker_pool(settings.WORKER_THREADS, settings.WORKER_QUEUE_LIMIT)
    except WorkerPoolError:
        logger.critical("Unable to build the worker pool, refusing to start", exc_info=True)
        sys.exit(1)

    shutdown = BotShutdown()
    signal.signal(signal.SIGINT, lambda signum, frame: shutdown.request())
    signal.signal(signal.SIGTERM, lambda signum, frame: shutdown.request())

    app = App(token=settings.SLACK_BOT_TOKEN)
    bot_user_id = app.client.auth_test().get("user_id")
    workspace_name = resolve_workspace_name(app)

    registry = build_registry(settings, SlackMessenger(app.client), shutdown)
    register_listeners(app, registry, bot_user_id, workspace_name)

    logger.info("Starting Socket Mode listener...")
    serve(app, settings.SLACK_APP_TOKEN, shutdown)

    logger.info("Stopping...")
    shutdown_worker_pool(wait=True)
    sys.exit(shutdown.exit_code)


if __name__ == "__main__":
    main()
