"""Runtime settings.

Values come from environment variables, optionally layered on top of a
YAML settings file. Environment variables always win.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from restforge.errors import ConfigurationError

TRUTHY = ("1", "true", "yes", "on")

# Settings field -> environment variable
ENV_VARS = {
    "database_url": "DATABASE_URL",
    "controllers_path": "RESTFORGE_CONTROLLERS_PATH",
    "api_prefix": "RESTFORGE_API_PREFIX",
    "cors": "CORS",
    "display_error_details": "DISPLAY_ERROR_DETAILS",
    "log_level": "RESTFORGE_LOG_LEVEL",
}


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUTHY


@dataclass
class Settings:
    """Application settings.

    Supports sqlite:/// and postgresql:// database URLs.
    """

    database_url: str = "sqlite:///restforge.db"
    controllers_path: Path = Path("controllers")
    api_prefix: str = "/v1"
    cors: bool = False
    display_error_details: bool = False
    log_level: str = "info"

    def __post_init__(self):
        self.controllers_path = Path(self.controllers_path)
        self.cors = _as_bool(self.cors)
        self.display_error_details = _as_bool(self.display_error_details)
        prefix = "/" + str(self.api_prefix).strip("/")
        self.api_prefix = "" if prefix == "/" else prefix

    @classmethod
    def from_env(cls, base: dict[str, Any] | None = None) -> Settings:
        """Create settings from environment variables.

        Resolution order (later wins):
        1. Field defaults
        2. YAML file named by RESTFORGE_CONFIG, or the ``base`` mapping
        3. Environment variables listed in ENV_VARS
        """
        values: dict[str, Any] = {}
        config_file = os.environ.get("RESTFORGE_CONFIG")
        if base is not None:
            values.update(base)
        elif config_file:
            values.update(_read_yaml(Path(config_file)))

        for name, env_var in ENV_VARS.items():
            raw = os.environ.get(env_var)
            if raw is not None and raw != "":
                values[name] = raw

        return cls(**values)

    @classmethod
    def from_file(cls, path: Path) -> Settings:
        """Load settings from a YAML file, then apply environment overrides."""
        return cls.from_env(base=_read_yaml(Path(path)))

    @property
    def sqlalchemy_url(self) -> str:
        """URL suitable for SQLAlchemy engine creation.

        Ensures postgresql:// URLs use the psycopg (v3) driver.
        """
        if self.database_url.startswith("postgresql://"):
            return self.database_url.replace("postgresql://", "postgresql+psycopg://", 1)
        return self.database_url


def _read_yaml(path: Path) -> dict[str, Any]:
    """Read a settings mapping from YAML, keeping only known keys."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Unable to read settings file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {path} must contain a mapping")

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(
            f"Unknown setting(s) in {path}: {', '.join(unknown)}"
        )
    return data
