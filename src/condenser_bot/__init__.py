"""Condenser Bot - A Slack bot that shortens links with the Condenser service.

Commands are parsed on the Slack listener thread; every call to Condenser
runs on a shared worker pool and reports back to the originating channel.

Components:
- main: Socket Mode entry point and bootstrap
- commands: command framework, registry and utility commands
- condenser: Condenser HTTP client, schemas, error translation and commands
- workers: shared worker thread pool
- slack: Slack event parsing and message posting
"""

__version__ = "0.1.0"
