# src/todo_client/reminders/poller.py

from __future__ import annotations

"""
Reminder poller.

A small polling loop, scoped to the logged-in user, that:
- fetches the user's todos and each todo's reminders,
- picks reminders whose remind_at has passed and that were not fired yet,
- delivers them (desktop notification and/or email),
- marks them triggered on the backend (best-effort).

Delivery is at most one attempt per reminder per activation: the id goes into
the dedup set before anything is sent, so an overlapping cycle (timer tick vs.
a manual /poll) cannot fire it twice.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from ..api.models import Reminder, Session, Todo
from ..core.ports import NotificationPermission, Notifier, ReminderApi, SessionSource
from .scan import FiredReminders, is_due

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True, frozen=True)
class PollIdentity:
    user_id: int
    email: str


def resolve_identity(session: Session | None) -> PollIdentity | None:
    """A numeric user id and a non-empty email, or None (poller stays inactive)."""
    if session is None:
        return None
    user_id = session.user_id
    if isinstance(user_id, bool) or not isinstance(user_id, int) or user_id <= 0:
        return None
    email = (session.email or "").strip()
    if not email:
        return None
    return PollIdentity(user_id=user_id, email=email)


@dataclass(slots=True)
class _Activation:
    identity: PollIdentity
    fired: FiredReminders
    active: bool = True
    task: asyncio.Task | None = None


@dataclass(slots=True)
class CycleReport:
    """What one scan cycle did (for logs and the /poll command)."""

    todos: int = 0
    due: int = 0
    notifications: int = 0
    emails: int = 0
    marked: int = 0
    failures: list[str] = field(default_factory=list)
    aborted: bool = False

    def summary(self) -> str:
        text = (
            f"todos={self.todos} due={self.due} notified={self.notifications} "
            f"emailed={self.emails} marked={self.marked}"
        )
        if self.aborted:
            text += " (aborted)"
        if self.failures:
            text += f" failures={len(self.failures)}"
        return text


class ReminderPoller:
    """
    Inactive -> Active (activate() with a usable session) -> Inactive (deactivate()).

    Must be driven from one asyncio event loop; the dedup set is only touched there.
    """

    def __init__(
        self,
        api: ReminderApi,
        notifier: Notifier,
        sessions: SessionSource | None = None,
        *,
        interval_seconds: float = 60.0,
        notify_title: str = "Reminder",
        clock: Clock | None = None,
    ) -> None:
        self._api = api
        self._notifier = notifier
        self._sessions = sessions
        self._interval = max(0.01, float(interval_seconds))
        self._notify_title = notify_title
        self._clock = clock or _utcnow
        self._activation: _Activation | None = None
        self._permission_requested = False

    # ---- state ----

    @property
    def is_active(self) -> bool:
        return self._activation is not None

    @property
    def identity(self) -> PollIdentity | None:
        return self._activation.identity if self._activation is not None else None

    @property
    def fired(self) -> FiredReminders | None:
        return self._activation.fired if self._activation is not None else None

    # ---- lifecycle ----

    def activate(self, session: Session | None = None) -> bool:
        """
        Start polling for the given session (or the persisted one).

        Returns False and stays inactive when no usable identity exists.
        Must be called from inside the running event loop.
        """
        if session is None and self._sessions is not None:
            session = self._sessions.current()
        identity = resolve_identity(session)

        if identity is None:
            logger.debug("Reminder poller not activated: no user id/email available.")
            if self._activation is not None:
                self.deactivate()
            return False

        if self._activation is not None:
            if self._activation.identity == identity:
                return True
            self.deactivate()

        activation = _Activation(identity=identity, fired=FiredReminders())
        activation.task = asyncio.get_running_loop().create_task(
            self._run(activation), name=f"reminder-poller-{identity.user_id}"
        )
        self._activation = activation
        logger.info(
            "Reminder poller active user_id=%s interval=%.0fs", identity.user_id, self._interval
        )
        return True

    def deactivate(self) -> None:
        """Cancel the timer and drop the dedup set. No network call happens afterwards."""
        activation = self._activation
        if activation is None:
            return
        self._activation = None
        activation.active = False
        activation.fired.clear()
        if activation.task is not None and not activation.task.done():
            activation.task.cancel()
        logger.info("Reminder poller stopped user_id=%s", activation.identity.user_id)

    async def stop(self) -> None:
        """deactivate() and wait for the loop task to finish unwinding."""
        activation = self._activation
        self.deactivate()
        if activation is not None and activation.task is not None:
            try:
                await activation.task
            except asyncio.CancelledError:
                pass

    async def _run(self, activation: _Activation) -> None:
        await self._ensure_permission()
        while activation.active:
            await asyncio.sleep(self._interval)
            if not activation.active:
                break
            report = await self._cycle(activation)
            logger.debug("Reminder cycle done user_id=%s %s", activation.identity.user_id, report.summary())

    async def _ensure_permission(self) -> None:
        """Ask for desktop notification permission once, if still undecided."""
        if self._permission_requested:
            return
        if self._notifier.permission is not NotificationPermission.DEFAULT:
            return
        self._permission_requested = True
        try:
            await self._notifier.request_permission()
        except Exception:
            logger.exception("Notification permission request failed")

    # ---- scanning ----

    async def run_cycle(self) -> CycleReport:
        """Run one scan cycle now (no-op when inactive)."""
        activation = self._activation
        if activation is None:
            return CycleReport(aborted=True)
        await self._ensure_permission()
        return await self._cycle(activation)

    async def _cycle(self, activation: _Activation) -> CycleReport:
        report = CycleReport()
        user_id = activation.identity.user_id
        try:
            todos = await self._api.get_todos_by_user(user_id)
            report.todos = len(todos)

            for todo in todos:
                if not activation.active:
                    report.aborted = True
                    break
                reminders = await self._api.get_reminders_by_todo(todo.id)
                for reminder in reminders:
                    if not activation.active:
                        report.aborted = True
                        break
                    if not is_due(reminder, self._clock(), activation.fired):
                        continue
                    report.due += 1
                    await self._deliver(activation, todo, reminder, report)
        except Exception as e:
            # Fetch failures end the cycle; the next tick starts from scratch.
            logger.exception("Reminder poller cycle failed user_id=%s", user_id)
            report.failures.append(f"cycle: {e}")
            report.aborted = True
        return report

    async def _deliver(
        self,
        activation: _Activation,
        todo: Todo,
        reminder: Reminder,
        report: CycleReport,
    ) -> None:
        # Record first: a concurrent cycle must not pick it up while we are sending.
        activation.fired.add(reminder.id)
        identity = activation.identity

        if reminder.wants_desktop:
            try:
                await self._notifier.notify(self._notify_title, f"Task: {todo.title}")
                report.notifications += 1
            except Exception as e:
                logger.warning("Desktop notification failed reminder_id=%s: %s", reminder.id, e)
                report.failures.append(f"notify {reminder.id}: {e}")

        if reminder.wants_email and activation.active:
            try:
                await self._api.send_email(
                    identity.user_id,
                    to=identity.email,
                    subject=f"Reminder: {todo.title}",
                    message=_email_body(todo, reminder),
                )
                report.emails += 1
            except Exception as e:
                logger.warning("Reminder email failed reminder_id=%s: %s", reminder.id, e)
                report.failures.append(f"email {reminder.id}: {e}")

        if not activation.active:
            return

        try:
            await self._api.mark_reminder_triggered(reminder)
            report.marked += 1
            logger.info("Reminder %s fired (todo_id=%s type=%s)", reminder.id, todo.id, reminder.type.value)
        except Exception as e:
            logger.exception("Failed to mark reminder %s as triggered", reminder.id)
            report.failures.append(f"mark {reminder.id}: {e}")


def _email_body(todo: Todo, reminder: Reminder) -> str:
    lines = [f'This is your reminder for the task "{todo.title}".']
    if todo.description:
        lines.append("")
        lines.append(todo.description)
    if todo.due_date is not None:
        lines.append("")
        lines.append(f"Due: {todo.due_date.astimezone().strftime('%Y-%m-%d %H:%M')}")
    lines.append("")
    lines.append(f"Reminder set for {reminder.remind_at.astimezone().strftime('%Y-%m-%d %H:%M')}.")
    return "\n".join(lines)
