"""Configuration management for the accounts service."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from .database import resolve_database_path

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the accounts service."""

    database_path: Path
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL

    @staticmethod
    def from_dict(data: Dict[str, object], base_path: Path | None = None) -> "Settings":
        """Create :class:`Settings` from raw YAML data."""
        raw_db = data.get("database_path")
        if raw_db:
            candidate = Path(str(raw_db)).expanduser()
            if not candidate.is_absolute() and base_path is not None:
                candidate = base_path / candidate
            database_path = candidate.resolve(strict=False)
        else:
            database_path = resolve_database_path(None)

        return Settings(
            database_path=database_path,
            host=str(data.get("host", DEFAULT_HOST)),
            port=int(data.get("port", DEFAULT_PORT)),
            log_level=str(data.get("log_level", DEFAULT_LOG_LEVEL)).upper(),
        )


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    return (Path(__file__).resolve().parent.parent / "config" / "accounts.yaml").resolve(strict=False)


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Load settings from the optional YAML file, then apply environment overrides."""
    env = os.environ if environ is None else environ
    config_path = resolve_config_path(env.get("ACCOUNTS_CONFIG"))

    raw: Dict[str, object] = {}
    if config_path.is_file():
        with config_path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Configuration file {config_path} must contain a mapping")
        raw = loaded

    settings = Settings.from_dict(raw, base_path=config_path.parent)

    db_env = env.get("ACCOUNTS_DB_PATH")
    return Settings(
        database_path=resolve_database_path(db_env) if db_env else settings.database_path,
        host=env.get("ACCOUNTS_HOST") or settings.host,
        port=int(env["ACCOUNTS_PORT"]) if env.get("ACCOUNTS_PORT") else settings.port,
        log_level=(env.get("ACCOUNTS_LOG_LEVEL") or settings.log_level).upper(),
    )


__all__ = ["Settings", "load_settings", "resolve_config_path"]
