"""
Backend REST API.

Components:
- models.py: response dataclasses (Session, User, Todo, Reminder) and ReminderType
- errors.py: typed failures
- client.py: async httpx client
"""
