"""
Launcher settings and the data directory they live in.
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

DATA_ROOT_ENV_VAR = "TERASOLOGY_LAUNCHER_DATA_DIR"
_DEFAULT_DATA_DIR = Path("~/.terasology-launcher")
SETTINGS_FILE = "launcher.json"


class LauncherSettings(BaseModel):
    """
    Persisted at: <DATA_DIR>/launcher.json
    """

    cache_dir: str = Field(
        default="cache",
        description="Package cache directory; relative paths resolve against the data directory.",
    )
    install_dir: str = Field(
        default="games",
        description="Install root; relative paths resolve against the data directory.",
    )
    connect_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Connect timeout for downloads.",
    )
    read_timeout_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Read timeout for downloads.",
    )
    chunk_size: int = Field(
        default=64 * 1024,
        gt=0,
        description="Bytes written between progress reports and cancellation checks.",
    )
    log_level: str = Field(default="INFO")
    runtime_major_version: int = Field(
        default=17,
        description="Managed runtime major version used to launch games.",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"):
            raise ValueError(f"Unknown log level: {value}")
        return level

    def resolve_cache_dir(self, data_dir: Path) -> Path:
        return _resolve(data_dir, self.cache_dir)

    def resolve_install_dir(self, data_dir: Path) -> Path:
        return _resolve(data_dir, self.install_dir)


def _resolve(data_dir: Path, value: str) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else data_dir / path


def get_data_dir(override: Optional[Path] = None) -> Path:
    """
    Determine the data directory path.

    Priority:
    1. Explicit override
    2. Environment variable TERASOLOGY_LAUNCHER_DATA_DIR
    3. ~/.terasology-launcher
    """
    if override is not None:
        d = Path(override).expanduser()
    else:
        env_path = os.environ.get(DATA_ROOT_ENV_VAR)
        d = Path(env_path).expanduser() if env_path else _DEFAULT_DATA_DIR.expanduser()
    d.mkdir(parents=True, exist_ok=True)
    return d


def settings_path(data_dir: Path) -> Path:
    return data_dir / SETTINGS_FILE


def load_settings(data_dir: Path) -> LauncherSettings:
    """
    Load launcher.json, merging with defaults for any missing fields,
    and write it back so any new fields are persisted.
    """
    path = settings_path(data_dir)
    if path.exists():
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            settings = LauncherSettings(**raw)
        except (ValueError, TypeError, ValidationError) as e:
            # Corrupt or invalid file: fall back to defaults and overwrite it.
            logger.warning(f"Ignoring unreadable settings in {path}: {e}")
            settings = LauncherSettings()
    else:
        settings = LauncherSettings()

    save_settings(data_dir, settings)
    return settings


def save_settings(data_dir: Path, settings: LauncherSettings) -> None:
    settings_path(data_dir).write_text(settings.model_dump_json(indent=2), encoding="utf-8")
