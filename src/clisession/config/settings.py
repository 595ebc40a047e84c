"""Configuration management for clisession.

Loads settings from a YAML configuration file with environment variable
overrides. Supports .env files.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/clisession.yaml")
DEFAULT_APP_NAME = "clisession"


class SessionConfig(BaseModel):
    app_name: str = Field(default=DEFAULT_APP_NAME, description="Shown in the prompt")
    expiration: int = Field(default=300, gt=0, description="Idle seconds before a session expires")
    sweep_interval: float = Field(default=30.0, gt=0)
    page_size: int = Field(default=20, gt=0, description="Lines per cursor page")
    banner: str | None = Field(default=None, description="Inline startup banner")
    banner_file: str | None = Field(default=None, description="Path to a banner text file")


class ServerConfig(BaseModel):
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=5461, ge=1, le=65535)
    encoding: str = Field(default="utf-8")


class HttpConfig(BaseModel):
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8080, ge=1, le=65535)
    cookie_name: str = Field(default="cli_session")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for clisession.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "CLISESSION_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    session: SessionConfig = Field(default_factory=SessionConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Values present in the YAML file win over environment variables, which
    win over the .env file and the built-in defaults.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    return Settings(**yaml_data)


def read_banner(config: SessionConfig) -> str:
    """Resolve the startup banner text for new sessions.

    An inline banner takes precedence over ``banner_file``. A missing or
    unreadable banner file falls back to a one-line default.
    """
    if config.banner is not None:
        return config.banner
    if config.banner_file:
        try:
            return Path(config.banner_file).read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("Cannot read banner file %s: %s", config.banner_file, e)
    name = config.app_name.strip() or DEFAULT_APP_NAME
    return f"Welcome to {name} command line\nType 'help' for a list of commands"
