"""Terminal client for the todo backend, with a background reminder poller."""

__version__ = "0.1.0"
