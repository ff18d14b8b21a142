import os
from functools import lru_cache
from typing import List, Optional, Tuple, Type
from urllib.parse import urlsplit

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

CONFIG_ENV = "CONDENSER_BOT_CONFIG"
DEFAULT_CONFIG_PATH = "config.yaml"


class Settings(BaseSettings):
    SLACK_BOT_TOKEN: str = Field(..., description="Slack Bot User OAuth Token")
    SLACK_APP_TOKEN: str = Field(..., description="Slack App-Level Token (for Socket Mode)")
    COMMAND_PREFIX: str = Field("!", description="Prefix that marks a message as a command")
    OWNER_IDS: List[str] = Field(default_factory=list, description="Slack user IDs allowed to run owner commands")
    BOT_NAME: str = "Condenser Bot"
    LOG_LEVEL: str = "INFO"
    ALLOW_UPDATE: bool = Field(False, description="Enable !update when running under a wrapper script")

    # Condenser link shortener
    CONDENSER_API_KEY: Optional[str] = Field(None, description="API key sent in the X-API-Key header")
    CONDENSER_SERVER: Optional[str] = Field(None, description="Base URL of the Condenser service")

    # Worker pool
    WORKER_THREADS: Optional[int] = Field(None, ge=1, description="Defaults to the host CPU count")
    WORKER_QUEUE_LIMIT: Optional[int] = Field(None, ge=1, description="Reject new jobs above this many; unbounded if unset")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # A missing YAML file is skipped; env and .env take precedence over it.
        yaml_settings = YamlConfigSettingsSource(
            settings_cls,
            yaml_file=os.getenv(CONFIG_ENV, DEFAULT_CONFIG_PATH),
        )
        return init_settings, env_settings, dotenv_settings, yaml_settings, file_secret_settings

    def condenser_server_url(self) -> Optional[str]:
        """
        Returns the configured Condenser base URL if it is an absolute http(s) URL.
        """
        if not self.CONDENSER_SERVER:
            return None
        parts = urlsplit(self.CONDENSER_SERVER)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            return None
        return self.CONDENSER_SERVER


@lru_cache()
def get_settings() -> Settings:
    return Settings()
