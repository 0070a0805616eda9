# src/todo_client/reminders/notifier.py

from __future__ import annotations

import asyncio
import logging
import shutil
import sys

from ..core.ports import NotificationPermission

logger = logging.getLogger(__name__)

BACKENDS = ("notify-send", "osascript", "none")


class NotificationError(Exception):
    """A desktop notification could not be shown."""


def _escape_applescript(s: str) -> str:
    return s.replace("\\", "\\\\").replace('"', '\\"')


def detect_backend(preferred: str | None = None) -> str:
    """
    Pick the native notification command.

    - explicit preference wins (if it is a known backend)
    - macOS: osascript
    - everything else: notify-send (libnotify)
    """
    if preferred:
        if preferred not in BACKENDS:
            logger.warning("Unknown notification backend %r; auto-detecting.", preferred)
        else:
            return preferred
    if sys.platform == "darwin":
        return "osascript"
    return "notify-send"


async def _kill(proc: asyncio.subprocess.Process) -> None:
    try:
        proc.kill()
    except ProcessLookupError:
        pass
    await proc.wait()
    logger.debug("Killed stuck notifier process pid=%s", proc.pid)


class DesktopNotifier:
    """
    Permission-gated desktop notifications via a native command.

    "Permission" is granted when the backend command exists on PATH; it is
    decided once by request_permission() and stays fixed afterwards.
    """

    def __init__(self, backend: str | None = None, *, timeout_seconds: float = 10.0) -> None:
        self._backend = detect_backend(backend)
        self._timeout = timeout_seconds
        self._permission = NotificationPermission.DEFAULT

    @property
    def backend(self) -> str:
        return self._backend

    @property
    def permission(self) -> NotificationPermission:
        return self._permission

    async def request_permission(self) -> NotificationPermission:
        if self._permission is not NotificationPermission.DEFAULT:
            return self._permission

        if self._backend != "none" and shutil.which(self._backend):
            self._permission = NotificationPermission.GRANTED
        else:
            self._permission = NotificationPermission.DENIED
        logger.info("Desktop notifications %s (backend=%s)", self._permission.value, self._backend)
        return self._permission

    def _command(self, title: str, body: str) -> list[str]:
        if self._backend == "osascript":
            script = (
                f'display notification "{_escape_applescript(body)}" '
                f'with title "{_escape_applescript(title)}" sound name "default"'
            )
            return ["osascript", "-e", script]
        return ["notify-send", "--app-name=todo-client", title, body]

    async def notify(self, title: str, body: str) -> None:
        if self._permission is not NotificationPermission.GRANTED:
            raise NotificationError(f"desktop notifications not permitted ({self._permission.value})")

        cmd = self._command(title, body)
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise NotificationError(f"{cmd[0]} failed: {e}") from e

        try:
            _, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise NotificationError(f"{cmd[0]} timed out after {self._timeout:.1f}s") from e
        finally:
            # Timeout or cancellation: never leave the child behind.
            if proc.returncode is None:
                await _kill(proc)

        if proc.returncode != 0:
            err = (stderr or b"").decode("utf-8", errors="replace").strip()
            raise NotificationError(f"{cmd[0]} exited with {proc.returncode}: {err}")
        logger.debug("Desktop notification shown: %s", title)
