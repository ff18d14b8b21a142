#!/usr/bin/env python3
"""
Quick script to verify the bot's configuration before starting it.
Loads settings exactly as the bot does (environment, .env, YAML file) and
reports which commands will be enabled.
"""
import os
import sys

from dotenv import load_dotenv
from pydantic import ValidationError

from condenser_bot.commands.registry import CAP_CONDENSER, CAP_UPDATE, capabilities
from condenser_bot.config import CONFIG_ENV, DEFAULT_CONFIG_PATH, Settings, get_settings


def mask(value, keep=8):
    if not value:
        return "NOT SET"
    return value[:keep] + "..." if len(value) > keep else "***"


def check_config(settings: Settings = None) -> bool:
    """Print the configuration report. Returns False if the bot cannot start."""
    print("=" * 60)
    print("Condenser Bot Configuration Check")
    print("=" * 60)
    print(f"  Config file: {os.getenv(CONFIG_ENV, DEFAULT_CONFIG_PATH)}")

    if settings is None:
        try:
            settings = get_settings()
        except ValidationError as e:
            for error in e.errors():
                print(f"✗ {'.'.join(str(p) for p in error['loc'])}: {error['msg']}")
            print("\n✗ The bot cannot start with this configuration.")
            print("Please add the missing values to your .env file, or to the YAML config file.")
            print()
            return False

    caps = capabilities(settings)

    print(f"✓ SLACK_BOT_TOKEN: {mask(settings.SLACK_BOT_TOKEN)}")
    print(f"✓ SLACK_APP_TOKEN: {mask(settings.SLACK_APP_TOKEN)}")
    print(f"  CONDENSER_API_KEY: {mask(settings.CONDENSER_API_KEY, keep=4)}")
    print(f"  CONDENSER_SERVER: {settings.CONDENSER_SERVER or 'NOT SET'}")
    print(f"  COMMAND_PREFIX: {settings.COMMAND_PREFIX}")
    print(f"  OWNER_IDS: {', '.join(settings.OWNER_IDS) or 'none'}")
    print("=" * 60)

    prefix = settings.COMMAND_PREFIX
    if CAP_CONDENSER in caps:
        print(f"\n✓ Condenser commands will be enabled ({prefix}shorten, {prefix}condenser meta, {prefix}condenser delete).")
    elif settings.CONDENSER_API_KEY or settings.CONDENSER_SERVER:
        print("\n✗ Condenser is only partly configured; its commands will be disabled.")
        print("  Both CONDENSER_API_KEY and an absolute http(s) CONDENSER_SERVER are required.")
    else:
        print("\n- Condenser is not configured; only utility commands will be available.")

    if CAP_UPDATE in caps:
        print(f"✓ {prefix}update is enabled.")

    print("\nNext steps:")
    print("1. Run the bot:")
    print("   condenser-bot -vv")
    print(f"\n2. Send `{prefix}ping` in a channel the bot is in, or in a DM.")
    print()
    return True


if __name__ == "__main__":
    # Exports .env into the environment so CONDENSER_BOT_CONFIG can live there too.
    load_dotenv()
    sys.exit(0 if check_config() else 1)
