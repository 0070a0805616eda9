# src/todo_client/api/client.py

"""
Async REST client for the todo backend.

Every call attaches the bearer token from the session store (if any), maps
HTTP failures onto the typed errors in `errors.py` and returns dataclasses
from `models.py`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

import httpx

from .errors import ApiConnectionError, ApiError, error_for_status
from .models import Reminder, ReminderType, Session, Todo, User, format_instant

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], str | None]


def _make_timeout(connect_s: float, read_s: float) -> httpx.Timeout:
    return httpx.Timeout(connect=connect_s, read=read_s, write=10.0, pool=connect_s)


def _error_detail(response: httpx.Response) -> str:
    """Prefer a JSON `message` field, else the raw body."""
    try:
        if "application/json" in response.headers.get("content-type", ""):
            body = response.json()
            if isinstance(body, dict) and isinstance(body.get("message"), str):
                return body["message"]
            return response.text.strip()
        return response.text.strip()
    except ValueError:
        return response.text.strip()


class TodoApiClient:
    """Thin typed wrapper over the backend endpoints."""

    def __init__(
        self,
        base_url: str,
        *,
        token_provider: TokenProvider | None = None,
        connect_timeout: float = 5.0,
        read_timeout: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token_provider = token_provider
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=_make_timeout(connect_timeout, read_timeout),
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings, *, token_provider: TokenProvider | None = None) -> TodoApiClient:
        return cls(
            settings.api_base_url,
            token_provider=token_provider,
            connect_timeout=float(getattr(settings, "http_connect_timeout", 5.0)),
            read_timeout=float(getattr(settings, "http_read_timeout", 20.0)),
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        await self._client.aclose()

    # ---- low-level helpers ----

    def _auth_headers(self) -> dict[str, str]:
        token = self._token_provider() if self._token_provider is not None else None
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        what: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
        auth: bool = True,
    ) -> httpx.Response:
        headers = self._auth_headers() if auth else {}
        try:
            response = await self._client.request(method, path, json=json, params=params, headers=headers)
        except httpx.TransportError as e:
            raise ApiConnectionError(f"Failed to {what}: {e}") from e

        if response.is_success:
            return response

        detail = _error_detail(response)
        message = f"Failed to {what} ({response.status_code} {response.reason_phrase})"
        if detail:
            message = f"{message}: {detail}"
        logger.debug("%s %s -> %s", method, path, response.status_code)
        raise error_for_status(response.status_code, message, detail)

    @staticmethod
    def _json(response: httpx.Response, what: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"Failed to {what}: malformed JSON response", status=response.status_code) from e

    # ---- auth / users ----

    async def login(self, username_or_email: str, password: str) -> Session:
        response = await self._request(
            "POST",
            "/api/auth/login",
            what="log in",
            json={"usernameOrEmail": username_or_email, "password": password},
            auth=False,
        )
        return Session.from_api(self._json(response, "log in"))

    async def register(self, username: str, email: str, password: str) -> User:
        response = await self._request(
            "POST",
            "/api/auth/register",
            what="register",
            json={"username": username, "email": email, "password": password},
            auth=False,
        )
        return User.from_api(self._json(response, "register"))

    async def get_user(self, user_id: int) -> User:
        response = await self._request("GET", f"/api/users/{user_id}", what="fetch user")
        return User.from_api(self._json(response, "fetch user"))

    # ---- todos ----

    async def get_todos_by_user(self, user_id: int) -> list[Todo]:
        """All todos of a user. The backend answers 404 for a user without todos."""
        try:
            response = await self._request("GET", f"/api/todos/user/{user_id}", what="fetch todos")
        except ApiError as e:
            if e.status == 404:
                return []
            raise
        return [Todo.from_api(item) for item in self._json(response, "fetch todos") or []]

    async def get_todo(self, todo_id: int) -> Todo:
        response = await self._request("GET", f"/api/todos/{todo_id}", what="fetch todo")
        return Todo.from_api(self._json(response, "fetch todo"))

    async def create_todo(
        self,
        user_id: int,
        *,
        title: str,
        description: str | None = None,
        due_date: datetime | None = None,
    ) -> Todo:
        payload: dict[str, Any] = {"title": title}
        if description:
            payload["description"] = description
        if due_date is not None:
            payload["dueDate"] = format_instant(due_date)
        response = await self._request("POST", f"/api/todos/{user_id}", what="create todo", json=payload)
        return Todo.from_api(self._json(response, "create todo"))

    async def update_todo(
        self,
        todo_id: int,
        *,
        title: str | None = None,
        description: str | None = None,
        due_date: datetime | None = None,
        completed: bool | None = None,
    ) -> Todo:
        payload: dict[str, Any] = {}
        if title is not None:
            payload["title"] = title
        if description is not None:
            payload["description"] = description
        if due_date is not None:
            payload["dueDate"] = format_instant(due_date)
        if completed is not None:
            payload["completed"] = completed
        response = await self._request("PUT", f"/api/todos/{todo_id}", what="update todo", json=payload)
        return Todo.from_api(self._json(response, "update todo"))

    async def delete_todo(self, todo_id: int) -> None:
        await self._request("DELETE", f"/api/todos/{todo_id}", what="delete todo")

    # ---- reminders ----

    async def get_reminders_by_todo(self, todo_id: int) -> list[Reminder]:
        response = await self._request("GET", f"/api/reminders/todo/{todo_id}", what="fetch reminders")
        return [Reminder.from_api(item) for item in self._json(response, "fetch reminders") or []]

    async def create_reminder(self, todo_id: int, *, remind_at: datetime, type: ReminderType) -> Reminder:
        """Create ONE reminder. BOTH must be expanded by the caller (see reminders.reminder_api)."""
        if type is ReminderType.BOTH:
            raise ValueError("BOTH is not a persisted reminder type; create one reminder per channel")
        payload = {"remindAt": format_instant(remind_at), "type": type.value}
        response = await self._request("POST", f"/api/reminders/{todo_id}", what="create reminder", json=payload)
        return Reminder.from_api(self._json(response, "create reminder"))

    async def update_reminder(
        self,
        reminder_id: int,
        *,
        remind_at: datetime,
        type: ReminderType,
        todo_id: int,
        triggered: bool | None = None,
    ) -> Reminder:
        payload: dict[str, Any] = {
            "remindAt": format_instant(remind_at),
            "type": type.value,
            "todoId": todo_id,
        }
        if triggered is not None:
            payload["triggered"] = triggered
        response = await self._request(
            "PUT", f"/api/reminders/{reminder_id}", what="update reminder", json=payload
        )
        return Reminder.from_api(self._json(response, "update reminder"))

    async def mark_reminder_triggered(self, reminder: Reminder) -> Reminder:
        return await self.update_reminder(
            reminder.id,
            remind_at=reminder.remind_at,
            type=reminder.type,
            todo_id=reminder.todo_id,
            triggered=True,
        )

    async def delete_reminder(self, reminder_id: int) -> None:
        await self._request("DELETE", f"/api/reminders/{reminder_id}", what="delete reminder")

    # ---- email ----

    async def send_email(self, user_id: int, *, to: str, subject: str, message: str) -> None:
        """Fire-and-forget email via the backend's mail dispatcher."""
        await self._request(
            "POST",
            "/api/email/send",
            what="send email",
            params={"userId": user_id, "to": to, "subject": subject, "message": message},
        )
