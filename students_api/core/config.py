import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple, Type

import yaml
from pydantic import BaseModel, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when the config file cannot be located or parsed."""


class HTTPServer(BaseModel):
    """Listen address of the HTTP server, written as ``host:port``."""

    address: str = "localhost:8082"

    @field_validator("address")
    @classmethod
    def check_address(cls, v: str) -> str:
        _, sep, port = v.rpartition(":")
        if not sep or not port.isdigit():
            raise ValueError(f"address must look like 'host:port', got {v!r}")
        return v

    @property
    def host(self) -> str:
        """Host part of the address; an empty host listens on every interface."""
        host, _, _ = self.address.rpartition(":")
        return host or "0.0.0.0"

    @property
    def port(self) -> int:
        _, _, port = self.address.rpartition(":")
        return int(port)


class Settings(BaseSettings):
    """
    Application settings.

    Values are read from the YAML config file and can be overridden by
    environment variables (or a .env file). Nested values use ``__`` as
    delimiter, e.g. ``HTTP_SERVER__ADDRESS=0.0.0.0:9000``.
    """

    # =============================================================================
    # APPLICATION
    # =============================================================================
    project_name: str = "Students API"
    app_version: str = "1.0.0"
    env: str = "production"
    api_prefix: str = "/api"

    # =============================================================================
    # SERVER
    # =============================================================================
    http_server: HTTPServer = HTTPServer()

    # =============================================================================
    # STORAGE
    # =============================================================================
    storage_path: str
    db_echo_sql: bool = False

    # =============================================================================
    # LOGGING
    # =============================================================================
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("storage_path")
    @classmethod
    def check_storage_path(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("storage_path must not be empty")
        return v

    @field_validator("api_prefix")
    @classmethod
    def normalize_api_prefix(cls, v: str) -> str:
        """Routes are mounted under the prefix, so it needs a leading slash and no trailing one."""
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            v = "/" + v
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # File values arrive as init kwargs; the environment wins over them.
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    def get_database_url(self) -> str:
        """SQLAlchemy URL for the storage location (a plain path means a SQLite file)."""
        if "://" in self.storage_path:
            return self.storage_path
        return f"sqlite:///{self.storage_path}"


def resolve_config_path(argv: Optional[Sequence[str]] = None) -> str:
    """
    Find the config file path.

    CONFIG_PATH takes priority; otherwise the ``--config`` command line flag is used.
    """
    config_path = os.getenv("CONFIG_PATH", "")
    if config_path:
        return config_path

    parser = argparse.ArgumentParser(description="Students API server")
    parser.add_argument("--config", default="", help="path to the config file")
    args, _ = parser.parse_known_args(argv)
    return args.config


def read_config_file(config_path: str) -> Dict[str, Any]:
    if not config_path:
        raise ConfigError("config path is not set")

    path = Path(config_path)
    if not path.is_file():
        raise ConfigError(f"config file does not exist: {config_path}")

    with path.open(encoding="utf-8") as fh:
        data = yaml.safe_load(fh)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file must contain a mapping: {config_path}")
    return data


def load_settings(config_path: str) -> Settings:
    """Build settings from the YAML file at ``config_path`` plus the environment."""
    return Settings(**read_config_file(config_path))


def must_load(argv: Optional[Sequence[str]] = None) -> Settings:
    """Load settings or terminate the process; there is nothing to serve without them."""
    try:
        return load_settings(resolve_config_path(argv))
    except (ConfigError, yaml.YAMLError, ValidationError) as e:
        logger.critical(f"failed to read config: {e}")
        sys.exit(1)
