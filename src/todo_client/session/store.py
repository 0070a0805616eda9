# src/todo_client/session/store.py

from __future__ import annotations

import contextlib
import json
import logging
import os
import threading
from pathlib import Path

from ..api.models import Session

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Persisted login session (token + identity) as ONE JSON record.

    - save() writes the whole record atomically (tmp file + os.replace)
    - clear() removes it as a unit
    - a malformed record on disk is deleted and treated as "logged out"

    Thread-safety:
    - the console thread and the background loop both read it; a lock guards
      the in-memory copy and the file.
    """

    def __init__(self, path: str | Path = "session.json") -> None:
        self._path = Path(path)
        self._lock = threading.Lock()
        self._session: Session | None = None
        self._loaded = False

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Session | None:
        """Read the record from disk, replacing the in-memory copy."""
        with self._lock:
            self._session = self._read_locked()
            self._loaded = True
            return self._session

    def current(self) -> Session | None:
        """In-memory session, falling back to the persisted record on first use."""
        with self._lock:
            if self._session is None and not self._loaded:
                self._session = self._read_locked()
                self._loaded = True
            return self._session

    def token(self) -> str | None:
        session = self.current()
        return session.token if session is not None else None

    def save(self, session: Session) -> None:
        with self._lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(".tmp")
            # The record holds a bearer token: the tmp file is private from creation.
            fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(json.dumps(session.to_record(), ensure_ascii=False, indent=2))
            with contextlib.suppress(OSError):
                # O_CREAT keeps the mode of a stale tmp file left by a crash.
                os.chmod(tmp, 0o600)
            os.replace(tmp, self._path)
            self._session = session
            self._loaded = True
        logger.info("Session saved user_id=%s path=%s", session.user_id, self._path)

    def clear(self) -> None:
        with self._lock:
            self._session = None
            self._loaded = True
            self._unlink_locked()
        logger.info("Session cleared path=%s", self._path)

    # ---- low-level helpers ----

    def _read_locked(self) -> Session | None:
        if not self._path.exists():
            return None
        try:
            data = json.loads(self._path.read_text("utf-8"))
            if not isinstance(data, dict):
                raise ValueError("session record is not an object")
            return Session.from_record(data)
        except (OSError, ValueError, KeyError, TypeError):
            logger.warning("Stored session at %s is corrupted; clearing it.", self._path, exc_info=True)
            self._unlink_locked()
            return None

    def _unlink_locked(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError:
            logger.exception("Failed to remove session file %s", self._path)
