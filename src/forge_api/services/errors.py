# src/forge_api/services/errors.py
"""Domain errors raised by Forge services.

Each error carries the HTTP status the API layer answers with, so services
never import FastAPI.
"""

from __future__ import annotations


class ForgeError(Exception):
    """Base class for expected domain failures."""

    status_code = 400

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class AuthenticationError(ForgeError):
    status_code = 401


class PermissionDeniedError(ForgeError):
    status_code = 403


class NotFoundError(ForgeError):
    status_code = 404


class ConflictError(ForgeError):
    """Raised when a write would violate a uniqueness rule."""

    status_code = 409


class InvalidActionError(ForgeError):
    """Raised when a requested action does not apply to its target."""

    status_code = 422
