# src/todo_client/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
import re
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import cast

from ..api.errors import ApiError, friendly_api_error_message
from ..api.models import Reminder, ReminderType, Todo
from ..core.state import AppState
from ..reminders.reminder_api import load_todo_with_reminders, schedule_reminder

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

_RELATIVE_RE = re.compile(r"^\+(\d+)\s*([mhd])$", re.IGNORECASE)
_UNITS = {"m": "minutes", "h": "hours", "d": "days"}


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /todos, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        Backend and input errors are turned into a one-line reply.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except ApiError as e:
            logger.info("/%s failed: %s", name, e)
            return friendly_api_error_message(e)
        except ValueError as e:
            return f"Invalid input: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting / parsing helpers ----


def _fmt_dt(dt: datetime | None) -> str:
    if dt is None:
        return "-"
    return dt.astimezone().strftime("%Y-%m-%d %H:%M")


def format_todo(todo: Todo) -> str:
    mark = "x" if todo.completed else " "
    line = f"#{todo.id} [{mark}] {todo.title}"
    if todo.due_date is not None:
        line += f" (due {_fmt_dt(todo.due_date)})"
    return line


def format_reminder(reminder: Reminder) -> str:
    status = "sent" if reminder.triggered else "pending"
    return f"#{reminder.id} {reminder.type.value} at {_fmt_dt(reminder.remind_at)} [{status}]"


def parse_when(text: str, now: datetime | None = None) -> datetime:
    """
    "+15m" / "+2h" / "+1d" relative to now, or an ISO date/time
    ("2026-10-17 14:30", "2026-10-17T14:30:00Z"). Naive values are local time.
    """
    s = text.strip()
    m = _RELATIVE_RE.match(s)
    if m:
        base = now or datetime.now().astimezone()
        return base + timedelta(**{_UNITS[m.group(2).lower()]: int(m.group(1))})
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        raise ValueError(f"cannot parse time {text!r} (use +15m, +2h, +1d or YYYY-MM-DD HH:MM)") from None
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt


def _parse_id(raw: str, what: str = "id") -> int:
    try:
        value = int(raw.lstrip("#"))
    except ValueError:
        raise ValueError(f"{what} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{what} must be positive")
    return value


def _split_pipe(args: list[str]) -> list[str]:
    return [p.strip() for p in " ".join(args).split("|")]


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    session = state.sessions.current()
    who = f"{session.username} (id={session.user_id})" if session else "not logged in"
    identity = state.poller.identity
    poller = f"active for user {identity.user_id}" if identity else "inactive"
    fired = len(state.poller.fired or ())
    return (
        "Status:\n"
        f"  Backend: {state.api.base_url}\n"
        f"  User: {who}\n"
        f"  Reminder poller: {poller} (fired this session: {fired})\n"
        f"  Desktop notifications: {state.notifier.permission.value} ({state.notifier.backend})"
    )


def cmd_login(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/login <username or email> <password>"""
    if len(args) != 2:
        return "Usage: /login <username or email> <password>"

    if emit:
        with contextlib.suppress(Exception):
            emit("Logging in...")

    session = state.run(state.api.login(args[0], args[1]))
    active = state.start_session(session)
    reply = f"Logged in as {session.username or session.email} (id={session.user_id})."
    if not active:
        reply += " Reminders are off: the account has no email address."
    return reply


def cmd_register(state: AppState, args: list[str]) -> str:
    """/register <username> <email> <password>"""
    if len(args) != 3:
        return "Usage: /register <username> <email> <password>"
    user = state.run(state.api.register(args[0], args[1], args[2]))
    return f"Registered {user.username} (id={user.id}). Now /login {user.username} <password>."


def cmd_logout(state: AppState, args: list[str]) -> str:
    if state.sessions.current() is None:
        return "Not logged in."
    state.end_session()
    return "Logged out."


def cmd_whoami(state: AppState, args: list[str]) -> str:
    session = state.require_session()
    user = state.run(state.api.get_user(session.user_id))
    return f"{user.username} <{user.email}> id={user.id} since {_fmt_dt(user.created_at)}"


def cmd_todos(state: AppState, args: list[str]) -> str:
    session = state.require_session()
    todos = state.run(state.api.get_todos_by_user(session.user_id))
    if not todos:
        return "No todos yet. Add one with /add <title>."
    done = sum(1 for t in todos if t.completed)
    lines = [f"Todos ({done}/{len(todos)} done):"]
    lines.extend(format_todo(t) for t in todos)
    return "\n".join(lines)


def cmd_todo(state: AppState, args: list[str]) -> str:
    """/todo <id>: details + reminders"""
    if len(args) != 1:
        return "Usage: /todo <id>"
    state.require_session()
    todo, reminders = state.run(load_todo_with_reminders(state.api, _parse_id(args[0])))
    lines = [format_todo(todo)]
    if todo.description:
        lines.append(f"  {todo.description}")
    lines.append(f"  created {_fmt_dt(todo.created_at)}, updated {_fmt_dt(todo.updated_at)}")
    if reminders:
        lines.append("  Reminders:")
        lines.extend(f"    {format_reminder(r)}" for r in reminders)
    else:
        lines.append("  No reminders.")
    return "\n".join(lines)


def cmd_add(state: AppState, args: list[str]) -> str:
    """/add <title> [| description] [| due]"""
    parts = _split_pipe(args)
    title = parts[0] if parts else ""
    if not title:
        return "Usage: /add <title> [| description] [| due: +1d or YYYY-MM-DD HH:MM]"
    description = parts[1] if len(parts) > 1 and parts[1] else None
    due = parse_when(parts[2]) if len(parts) > 2 and parts[2] else None

    session = state.require_session()
    todo = state.run(
        state.api.create_todo(session.user_id, title=title, description=description, due_date=due)
    )
    return f"Created {format_todo(todo)}"


def _set_completed(state: AppState, args: list[str], completed: bool) -> str:
    if len(args) != 1:
        return f"Usage: /{'done' if completed else 'undone'} <id>"
    state.require_session()
    todo = state.run(state.api.update_todo(_parse_id(args[0]), completed=completed))
    return f"Updated {format_todo(todo)}"


def cmd_done(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, True)


def cmd_undone(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, False)


def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit <id> <title> [| description]"""
    if len(args) < 2:
        return "Usage: /edit <id> <title> [| description]"
    todo_id = _parse_id(args[0])
    parts = _split_pipe(args[1:])
    title = parts[0] or None
    description = parts[1] if len(parts) > 1 else None
    state.require_session()
    todo = state.run(state.api.update_todo(todo_id, title=title, description=description))
    return f"Updated {format_todo(todo)}"


def cmd_rm(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /rm <id>"
    todo_id = _parse_id(args[0])
    state.require_session()
    state.run(state.api.delete_todo(todo_id))
    return f"Deleted todo #{todo_id}."


def cmd_reminders(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /reminders <todo_id>"
    todo_id = _parse_id(args[0], "todo_id")
    state.require_session()
    reminders = state.run(state.api.get_reminders_by_todo(todo_id))
    if not reminders:
        return f"Todo #{todo_id} has no reminders."
    return "\n".join([f"Reminders for todo #{todo_id}:"] + [format_reminder(r) for r in reminders])


def cmd_remind(state: AppState, args: list[str]) -> str:
    """/remind <todo_id> <EMAIL|DESKTOP|BOTH> <when>"""
    if len(args) < 3:
        return "Usage: /remind <todo_id> <EMAIL|DESKTOP|BOTH> <when: +15m | YYYY-MM-DD HH:MM>"
    todo_id = _parse_id(args[0], "todo_id")
    type = ReminderType.parse(args[1])
    when = parse_when(" ".join(args[2:]))
    state.require_session()
    created = state.run(schedule_reminder(state.api, todo_id, when, type))
    return "\n".join(["Created:"] + [format_reminder(r) for r in created])


def cmd_unremind(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /unremind <reminder_id>"
    reminder_id = _parse_id(args[0], "reminder_id")
    state.require_session()
    state.run(state.api.delete_reminder(reminder_id))
    return f"Deleted reminder #{reminder_id}."


def cmd_email(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/email <to> <subject> | <message>"""
    if len(args) < 2:
        return "Usage: /email <to> <subject> | <message>"
    to = args[0]
    parts = _split_pipe(args[1:])
    if len(parts) < 2 or not parts[0] or not parts[1]:
        return "Please fill all fields: /email <to> <subject> | <message>"
    session = state.require_session()

    if emit:
        with contextlib.suppress(Exception):
            emit("Sending...")

    state.run(state.api.send_email(session.user_id, to=to, subject=parts[0], message=parts[1]))
    return "Email reminder sent."


def cmd_poll(state: AppState, args: list[str]) -> str:
    """Run one reminder scan now instead of waiting for the timer."""
    if not state.poller.is_active:
        return "Reminder poller is inactive (log in with an account that has an email)."
    report = state.run(state.poller.run_cycle())
    return f"Reminder scan: {report.summary()}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show backend, user and reminder poller status.")
registry.register("login", cmd_login, help_text="Log in: /login <username or email> <password>.")
registry.register("register", cmd_register, help_text="Create an account: /register <user> <email> <password>.")
registry.register("logout", cmd_logout, help_text="Log out and stop reminders.")
registry.register("whoami", cmd_whoami, help_text="Show the logged-in user's profile.", aliases=["me"])
registry.register("todos", cmd_todos, help_text="List your todos.", aliases=["ls"])
registry.register("todo", cmd_todo, help_text="Show one todo with its reminders: /todo <id>.")
registry.register("add", cmd_add, help_text="Add a todo: /add <title> [| description] [| due].")
registry.register("done", cmd_done, help_text="Mark a todo completed: /done <id>.")
registry.register("undone", cmd_undone, help_text="Mark a todo not completed: /undone <id>.")
registry.register("edit", cmd_edit, help_text="Edit a todo: /edit <id> <title> [| description].")
registry.register("rm", cmd_rm, help_text="Delete a todo: /rm <id>.")
registry.register("reminders", cmd_reminders, help_text="List reminders of a todo: /reminders <todo_id>.")
registry.register(
    "remind", cmd_remind, help_text="Add a reminder: /remind <todo_id> <EMAIL|DESKTOP|BOTH> <when>."
)
registry.register("unremind", cmd_unremind, help_text="Delete a reminder: /unremind <reminder_id>.")
registry.register("email", cmd_email, help_text="Send an email: /email <to> <subject> | <message>.")
registry.register("poll", cmd_poll, help_text="Check due reminders now.")
