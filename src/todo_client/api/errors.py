# src/todo_client/api/errors.py

from __future__ import annotations


class ApiError(Exception):
    """Backend call failed. `status` is None for transport-level failures."""

    def __init__(self, message: str, *, status: int | None = None, detail: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.detail = detail


class AuthError(ApiError):
    """401/403: missing, expired or rejected token (or bad credentials on login)."""


class NotFoundError(ApiError):
    """404 from the backend."""


class ApiConnectionError(ApiError):
    """Backend unreachable or timed out."""


class NotAuthenticatedError(ApiError):
    """A call needs a session but nobody is logged in."""


def error_for_status(status: int, message: str, detail: str = "") -> ApiError:
    if status in (401, 403):
        return AuthError(message, status=status, detail=detail)
    if status == 404:
        return NotFoundError(message, status=status, detail=detail)
    return ApiError(message, status=status, detail=detail)


def friendly_api_error_message(err: Exception) -> str:
    if isinstance(err, NotAuthenticatedError):
        return "You are not logged in. Use /login <username> <password>."
    if isinstance(err, AuthError):
        return "Not authorized (session expired or wrong credentials). Use /login again."
    if isinstance(err, ApiConnectionError):
        return "Backend is unreachable. Check TODO_API_BASE_URL and that the server is running."
    if isinstance(err, NotFoundError):
        return "Not found."
    msg = str(err).strip()
    return msg or "Backend error."
