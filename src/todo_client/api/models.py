# src/todo_client/api/models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any


class ReminderType(StrEnum):
    """
    Reminder delivery channel.

    Notes:
    - BOTH is a client-side composite: the creation path expands it into one
      EMAIL and one DESKTOP_NOTIFICATION record, so the backend never stores it.
      It is still understood when read back, for older records.
    - "PUSH" is a legacy alias for desktop notifications.
    - Unknown values fall back to DESKTOP_NOTIFICATION.
    """

    EMAIL = "EMAIL"
    DESKTOP_NOTIFICATION = "DESKTOP_NOTIFICATION"
    BOTH = "BOTH"

    @classmethod
    def from_api(cls, raw: str | None) -> ReminderType:
        key = (raw or "").strip().upper()
        if key == cls.EMAIL.value:
            return cls.EMAIL
        if key == cls.BOTH.value:
            return cls.BOTH
        return cls.DESKTOP_NOTIFICATION

    @classmethod
    def parse(cls, raw: str) -> ReminderType:
        """Parse user input (console): accepts short aliases, rejects unknown values."""
        key = (raw or "").strip().upper()
        aliases = {
            "DESKTOP": cls.DESKTOP_NOTIFICATION,
            "NOTIFICATION": cls.DESKTOP_NOTIFICATION,
            "PUSH": cls.DESKTOP_NOTIFICATION,
            "MAIL": cls.EMAIL,
        }
        if key in aliases:
            return aliases[key]
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown reminder type: {raw!r}") from None

    def concrete_types(self) -> tuple[ReminderType, ...]:
        if self is ReminderType.BOTH:
            return (ReminderType.EMAIL, ReminderType.DESKTOP_NOTIFICATION)
        return (self,)


def parse_instant(raw: Any) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are treated as UTC."""
    if isinstance(raw, datetime):
        dt = raw
    else:
        s = str(raw or "").strip()
        if not s:
            raise ValueError("empty timestamp")
        # fromisoformat() before 3.11 did not accept a trailing Z.
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_instant(dt: datetime) -> str:
    """UTC ISO string with millisecond precision, like JavaScript's toISOString()."""
    if dt.tzinfo is None:
        dt = dt.astimezone()
    utc = dt.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def _opt_instant(raw: Any) -> datetime | None:
    if raw is None or raw == "":
        return None
    return parse_instant(raw)


@dataclass(slots=True, frozen=True)
class Session:
    token: str
    user_id: int
    username: str
    email: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Session:
        return cls(
            token=str(data["token"]),
            user_id=int(data["userId"]),
            username=str(data.get("username") or ""),
            email=str(data.get("email") or ""),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "token": self.token,
            "user_id": self.user_id,
            "username": self.username,
            "email": self.email,
        }

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> Session:
        token = data["token"]
        if not isinstance(token, str) or not token:
            raise ValueError("session token missing")
        user_id = data["user_id"]
        if isinstance(user_id, bool) or not isinstance(user_id, int):
            raise ValueError("session user_id must be an integer")
        return cls(
            token=token,
            user_id=user_id,
            username=str(data.get("username") or ""),
            email=str(data.get("email") or ""),
        )


@dataclass(slots=True, frozen=True)
class User:
    id: int
    username: str
    email: str
    created_at: datetime | None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> User:
        return cls(
            id=int(data["id"]),
            username=str(data.get("username") or ""),
            email=str(data.get("email") or ""),
            created_at=_opt_instant(data.get("createdAt")),
        )


@dataclass(slots=True, frozen=True)
class Todo:
    id: int
    title: str
    description: str
    due_date: datetime | None
    completed: bool
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Todo:
        return cls(
            id=int(data["id"]),
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            due_date=_opt_instant(data.get("dueDate")),
            completed=bool(data.get("completed", False)),
            created_at=_opt_instant(data.get("createdAt")),
            updated_at=_opt_instant(data.get("updatedAt")),
        )


@dataclass(slots=True, frozen=True)
class Reminder:
    id: int
    remind_at: datetime
    type: ReminderType
    triggered: bool
    todo_id: int

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Reminder:
        return cls(
            id=int(data["id"]),
            remind_at=parse_instant(data["remindAt"]),
            type=ReminderType.from_api(data.get("type")),
            triggered=bool(data.get("triggered", False)),
            todo_id=int(data["todoId"]),
        )

    @property
    def wants_desktop(self) -> bool:
        return self.type in (ReminderType.DESKTOP_NOTIFICATION, ReminderType.BOTH)

    @property
    def wants_email(self) -> bool:
        return self.type in (ReminderType.EMAIL, ReminderType.BOTH)
