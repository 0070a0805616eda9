# tests/fakes.py

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone

import httpx

from todo_client.api.models import Reminder, ReminderType, Todo
from todo_client.core.ports import NotificationPermission

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


def make_todo(todo_id: int, title: str = "Write report", **kw) -> Todo:
    return Todo(
        id=todo_id,
        title=title,
        description=kw.get("description", ""),
        due_date=kw.get("due_date"),
        completed=kw.get("completed", False),
        created_at=NOW,
        updated_at=NOW,
    )


def make_reminder(
    reminder_id: int,
    todo_id: int,
    remind_at: datetime,
    type: ReminderType = ReminderType.EMAIL,
    triggered: bool = False,
) -> Reminder:
    return Reminder(id=reminder_id, remind_at=remind_at, type=type, triggered=triggered, todo_id=todo_id)


class FakeReminderApi:
    """
    In-memory ReminderApi used by poller tests.

    - records every call in order (self.calls) for assertions
    - does NOT flip `triggered` on mark by default, so only the poller's own
      dedup set can prevent a second delivery
    """

    def __init__(
        self,
        todos: dict[int, list[Todo]] | None = None,
        reminders: dict[int, list[Reminder]] | None = None,
    ) -> None:
        self.todos = todos or {}
        self.reminders = reminders or {}
        self.calls: list[tuple] = []
        self.emails: list[dict] = []
        self.marked: list[int] = []
        self.fail_todos = False
        self.fail_email = False
        self.fail_mark = False
        self.fail_reminders_for: set[int] = set()
        self.persist_marks = False

    async def get_todos_by_user(self, user_id: int) -> list[Todo]:
        self.calls.append(("get_todos", user_id))
        if self.fail_todos:
            raise httpx.ConnectError("backend down")
        return list(self.todos.get(user_id, []))

    async def get_reminders_by_todo(self, todo_id: int) -> list[Reminder]:
        self.calls.append(("get_reminders", todo_id))
        if todo_id in self.fail_reminders_for:
            raise ValueError("malformed reminder payload")
        return list(self.reminders.get(todo_id, []))

    async def send_email(self, user_id: int, *, to: str, subject: str, message: str) -> None:
        self.calls.append(("send_email", user_id))
        if self.fail_email:
            raise RuntimeError("smtp down")
        self.emails.append({"user_id": user_id, "to": to, "subject": subject, "message": message})

    async def mark_reminder_triggered(self, reminder: Reminder) -> Reminder:
        self.calls.append(("mark", reminder.id))
        if self.fail_mark:
            raise RuntimeError("update failed")
        self.marked.append(reminder.id)
        updated = Reminder(
            id=reminder.id,
            remind_at=reminder.remind_at,
            type=reminder.type,
            triggered=True,
            todo_id=reminder.todo_id,
        )
        if self.persist_marks:
            items = self.reminders.get(reminder.todo_id, [])
            self.reminders[reminder.todo_id] = [updated if r.id == reminder.id else r for r in items]
        return updated

    def count(self, name: str) -> int:
        return sum(1 for c in self.calls if c[0] == name)


@dataclass(slots=True)
class FakeNotifier:
    """Desktop notifier double: permission is decided by `grant` on request."""

    grant: bool = True
    fail: bool = False
    permission: NotificationPermission = NotificationPermission.DEFAULT
    permission_requests: int = 0
    shown: list[tuple[str, str]] = field(default_factory=list)

    async def request_permission(self) -> NotificationPermission:
        self.permission_requests += 1
        self.permission = NotificationPermission.GRANTED if self.grant else NotificationPermission.DENIED
        return self.permission

    async def notify(self, title: str, body: str) -> None:
        if self.fail or self.permission is not NotificationPermission.GRANTED:
            raise RuntimeError("notification blocked")
        self.shown.append((title, body))


class FakeBackend:
    """
    Minimal in-memory todo backend served through httpx.MockTransport.

    Mirrors the real server's quirks the client depends on:
    - GET /api/todos/user/{id} answers 404 when the user has no todos
    - errors carry a JSON {"message": ...} body
    """

    TOKEN = "tok-1"

    def __init__(self) -> None:
        self.users = {1: {"id": 1, "username": "alice", "email": "alice@example.com", "createdAt": "2026-01-01T00:00:00"}}
        self.password = "secret"
        self.todos: dict[int, dict] = {}
        self.reminders: dict[int, dict] = {}
        self.emails: list[dict] = []
        self.requests: list[httpx.Request] = []
        self._next_id = 100

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def _id(self) -> int:
        self._next_id += 1
        return self._next_id

    def add_todo(self, user_id: int, title: str, **extra) -> dict:
        todo = {
            "id": self._id(),
            "title": title,
            "description": extra.get("description", ""),
            "dueDate": extra.get("dueDate"),
            "completed": extra.get("completed", False),
            "createdAt": "2026-10-17T10:00:00",
            "updatedAt": "2026-10-17T10:00:00",
            "userId": user_id,
        }
        self.todos[todo["id"]] = todo
        return todo

    def add_reminder(self, todo_id: int, remind_at: str, type: str, triggered: bool = False) -> dict:
        rem = {"id": self._id(), "remindAt": remind_at, "type": type, "triggered": triggered, "todoId": todo_id}
        self.reminders[rem["id"]] = rem
        return rem

    def paths(self, method: str | None = None) -> list[str]:
        return [r.url.path for r in self.requests if method is None or r.method == method]

    @staticmethod
    def _error(status: int, message: str) -> httpx.Response:
        return httpx.Response(status, json={"message": message})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method = request.method
        path = request.url.path
        body = json.loads(request.content) if request.content else {}

        if path == "/api/auth/login" and method == "POST":
            if body.get("usernameOrEmail") in ("alice", "alice@example.com") and body.get("password") == self.password:
                return httpx.Response(
                    200,
                    json={"message": "ok", "token": self.TOKEN, "userId": 1, "username": "alice", "email": "alice@example.com"},
                )
            return self._error(401, "Bad credentials")

        if path == "/api/auth/register" and method == "POST":
            user = {"id": self._id(), "username": body["username"], "email": body["email"], "createdAt": "2026-10-17T10:00:00"}
            self.users[user["id"]] = user
            return httpx.Response(201, json=user)

        if request.headers.get("Authorization") != f"Bearer {self.TOKEN}":
            return self._error(401, "Unauthorized")

        if m := re.fullmatch(r"/api/users/(\d+)", path):
            user = self.users.get(int(m.group(1)))
            return httpx.Response(200, json=user) if user else self._error(404, "User not found")

        if m := re.fullmatch(r"/api/todos/user/(\d+)", path):
            items = [t for t in self.todos.values() if t["userId"] == int(m.group(1))]
            return httpx.Response(200, json=items) if items else self._error(404, "No todos")

        if m := re.fullmatch(r"/api/todos/(\d+)", path):
            key = int(m.group(1))
            if method == "POST":
                todo = self.add_todo(
                    key, body["title"], description=body.get("description", ""), dueDate=body.get("dueDate")
                )
                return httpx.Response(201, json=todo)
            todo = self.todos.get(key)
            if todo is None:
                return self._error(404, "Todo not found")
            if method == "GET":
                return httpx.Response(200, json=todo)
            if method == "PUT":
                todo.update({k: v for k, v in body.items() if k in ("title", "description", "dueDate", "completed")})
                return httpx.Response(200, json=todo)
            if method == "DELETE":
                del self.todos[key]
                return httpx.Response(204)

        if m := re.fullmatch(r"/api/reminders/todo/(\d+)", path):
            todo_id = int(m.group(1))
            return httpx.Response(200, json=[r for r in self.reminders.values() if r["todoId"] == todo_id])

        if m := re.fullmatch(r"/api/reminders/(\d+)", path):
            key = int(m.group(1))
            if method == "POST":
                if key not in self.todos:
                    return self._error(404, "Todo not found")
                if body.get("type") not in ("EMAIL", "DESKTOP_NOTIFICATION"):
                    return self._error(400, "Unsupported reminder type")
                return httpx.Response(201, json=self.add_reminder(key, body["remindAt"], body["type"]))
            rem = self.reminders.get(key)
            if rem is None:
                return self._error(404, "Reminder not found")
            if method == "PUT":
                rem.update({k: v for k, v in body.items() if k in ("remindAt", "type", "triggered")})
                return httpx.Response(200, json=rem)
            if method == "DELETE":
                del self.reminders[key]
                return httpx.Response(204)

        if path == "/api/email/send" and method == "POST":
            self.emails.append(dict(request.url.params))
            return httpx.Response(200, text="sent")

        return self._error(404, f"No route {method} {path}")
