"""Configuration system for cdptargets.

Values are read from the environment (and an optional ``.env`` file) on every
access, so tests and long-running processes always see the current settings.
"""

import logging
import os

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class EnvConfig(BaseSettings):
    """Environment variable configuration using pydantic-settings."""

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra='allow'
    )

    # Logging
    CDPTARGETS_LOGGING_LEVEL: str = Field(default='info')
    CDP_LOGGING_LEVEL: str = Field(default='WARNING')
    CDPTARGETS_SETUP_LOGGING: bool = Field(default=True)
    CDPTARGETS_DEBUG_LOG_FILE: str | None = Field(default=None)
    CDPTARGETS_INFO_LOG_FILE: str | None = Field(default=None)

    # Browser connection
    CDPTARGETS_HOST: str = Field(default='127.0.0.1')
    CDPTARGETS_PORT: int = Field(default=9222)
    CDPTARGETS_BROWSER_DEBUG_URL: str | None = Field(default=None)
    CDPTARGETS_FIREFOX: bool = Field(default=False)
    CDPTARGETS_TARGET_WAIT_ATTEMPTS: int = Field(default=10)


class Config:
    """Configuration class backed by environment variables.

    Re-reads environment variables on every access for flexibility.
    """

    _instance: 'Config | None' = None

    def __new__(cls) -> 'Config':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def LOGGING_LEVEL(self) -> str:
        return os.getenv('CDPTARGETS_LOGGING_LEVEL', 'info').lower()

    @property
    def CDP_LOGGING_LEVEL(self) -> str:
        return os.getenv('CDP_LOGGING_LEVEL', 'WARNING')

    @property
    def SETUP_LOGGING(self) -> bool:
        return os.getenv('CDPTARGETS_SETUP_LOGGING', 'true').lower()[:1] in 'ty1'

    @property
    def DEBUG_LOG_FILE(self) -> str | None:
        return os.getenv('CDPTARGETS_DEBUG_LOG_FILE') or None

    @property
    def INFO_LOG_FILE(self) -> str | None:
        return os.getenv('CDPTARGETS_INFO_LOG_FILE') or None


# Create singleton instance
CONFIG = Config()


class ConnectionConfig(BaseModel):
    """Where the browser lives and how to talk to it."""

    host: str = '127.0.0.1'
    port: int = 9222
    browser_debug_url: str | None = Field(
        default=None, description='Browser-level websocket URL; discovered from /json/version when unset'
    )
    firefox: bool = Field(
        default=False, description='Firefox does not report openerId reliably, so every new page is surfaced'
    )
    max_attempts: int = Field(default=10, ge=1, description='Polls of /json/list before giving up on a page target')

    @property
    def http_url(self) -> str:
        return f'http://{self.host}:{self.port}'

    @classmethod
    def from_env(cls) -> 'ConnectionConfig':
        """Build a connection config from the current environment."""
        env_config = EnvConfig()
        return cls(
            host=env_config.CDPTARGETS_HOST,
            port=env_config.CDPTARGETS_PORT,
            browser_debug_url=env_config.CDPTARGETS_BROWSER_DEBUG_URL or None,
            firefox=env_config.CDPTARGETS_FIREFOX,
            max_attempts=max(1, env_config.CDPTARGETS_TARGET_WAIT_ATTEMPTS),
        )
