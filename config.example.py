# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
The login token is NOT configuration: it is stored by /login in <data_dir>/session.json.

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TODO_APP_NAME": "App display name (default: todo-client).",
    "TODO_LOG_LEVEL": "Console logging level (default: INFO).",
    # Backend
    "TODO_API_BASE_URL": "Backend base URL (default: http://localhost:8080).",
    "TODO_HTTP_CONNECT_TIMEOUT_SECONDS": "HTTP connect timeout (default: 5).",
    "TODO_HTTP_READ_TIMEOUT_SECONDS": "HTTP read timeout (default: 20).",
    # Reminders
    "TODO_POLL_INTERVAL_SECONDS": "How often due reminders are checked (default: 60).",
    "TODO_NOTIFY_BACKEND": "notify-send | osascript | none (default: auto-detect).",
    "TODO_NOTIFY_TITLE": "Desktop notification title (default: Reminder).",
    # Paths (gitignored)
    "TODO_DATA_DIR": "Local data directory (default: .local/todo_client).",
    "TODO_SESSION_PATH": "Saved login record (default: <data_dir>/session.json).",
}
