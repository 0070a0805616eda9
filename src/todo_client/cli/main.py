# src/todo_client/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState (background loop + poller), restores a
saved login, then runs the console REPL in the main thread.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s (backend %s)...", settings.app_name, settings.api_base_url)

    state = create_initial_state(settings=settings)

    try:
        session = state.restore_session()
        if session is not None:
            print(f"Welcome back, {session.username or session.email}.")
    except Exception:
        logger.exception("Failed to restore the saved session.")

    try:
        run_console_loop(state)
    finally:
        state.shutdown()
        logger.info("Bye.")


if __name__ == "__main__":
    main()
