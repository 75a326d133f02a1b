"""Session persistence configuration via environment variables."""

from __future__ import annotations

import tempfile
from pathlib import Path

from pydantic_settings import BaseSettings

SESSIONS_DIR_NAME = "servlet-sessions"


class Settings(BaseSettings):
    persistent: bool = False
    store_dir: str = ""  # Empty: a directory under the system temp dir
    backend: str = "file"  # "file" or "memory"
    app_name: str = "app"

    @property
    def default_store_dir(self) -> Path:
        return Path(tempfile.gettempdir()) / self.app_name / SESSIONS_DIR_NAME

    model_config = {"env_prefix": "SESSION_", "case_sensitive": False}


settings: Settings | None = None


def get_settings() -> Settings:
    global settings
    if settings is None:
        settings = Settings()
    return settings


def override_settings(s: Settings | None) -> None:
    """For testing: inject a Settings instance (None resets)."""
    global settings
    settings = s


def get_valid_store_dir(s: Settings, mkdirs: bool = True) -> Path:
    """Resolve the session store directory, creating it if asked.

    Relative ``store_dir`` values are resolved against the working directory.
    """
    store_dir = Path(s.store_dir) if s.store_dir else s.default_store_dir
    if not store_dir.is_absolute():
        store_dir = Path.cwd() / store_dir
    if store_dir.exists() and not store_dir.is_dir():
        raise ValueError(f"Session dir {store_dir} is not a directory")
    if mkdirs:
        store_dir.mkdir(parents=True, exist_ok=True)
    return store_dir
