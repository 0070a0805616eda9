"""
Reminder subsystem.

Components:
- scan.py: due check + per-activation dedup set (FiredReminders)
- poller.py: polling loop that delivers due reminders and marks them triggered
- notifier.py: desktop notifications via notify-send / osascript
- reminder_api.py: creation helpers (validation, BOTH expansion)
"""
