# src/todo_client/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time (the session token lives in the session store).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "TODO"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Backend API ----
    api_base_url: str
    http_connect_timeout: float
    http_read_timeout: float

    # ---- Reminder poller ----
    poll_interval_seconds: float

    # ---- Desktop notifications ----
    notify_backend: Optional[str]
    notify_title: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    session_path: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "todo-client")
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        # Unprefixed API_BASE_URL is accepted as a fallback.
        api_base_url = (
            _first_env(_k("API_BASE_URL"), "API_BASE_URL", default="http://localhost:8080")
            or "http://localhost:8080"
        ).rstrip("/")
        http_connect_timeout = _env_float(_k("HTTP_CONNECT_TIMEOUT_SECONDS"), 5.0)
        http_read_timeout = _env_float(_k("HTTP_READ_TIMEOUT_SECONDS"), 20.0)

        poll_interval_seconds = _env_float(_k("POLL_INTERVAL_SECONDS"), 60.0)

        notify_backend = (_env(_k("NOTIFY_BACKEND"), "").strip().lower() or None)
        notify_title = _env(_k("NOTIFY_TITLE"), "Reminder")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/todo_client"))
        session_path = _env_path(_k("SESSION_PATH"), data_dir / "session.json")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            api_base_url=api_base_url,
            http_connect_timeout=http_connect_timeout,
            http_read_timeout=http_read_timeout,
            poll_interval_seconds=poll_interval_seconds,
            notify_backend=notify_backend,
            notify_title=notify_title,
            data_dir=data_dir,
            session_path=session_path,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
