"""Domain error taxonomy surfaced to API callers as structured failures."""

from __future__ import annotations

from typing import Any, Optional


class BookmarkdError(Exception):
    """Base exception for all domain errors.

    ``extensions`` is picked up by graphql-core when the error is raised inside
    a resolver, so every failure reaches the caller with a stable ``code``.
    """

    code = "INTERNAL_SERVER_ERROR"
    default_message = "Something went wrong."

    def __init__(self, message: Optional[str] = None, details: Optional[dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def extensions(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code}
        if self.details:
            payload["details"] = dict(self.details)
        return payload

    def __str__(self) -> str:
        return self.message


class Unauthenticated(BookmarkdError):
    code = "UNAUTHENTICATED"
    default_message = "Could not authenticate user."


class Forbidden(BookmarkdError):
    code = "FORBIDDEN"
    default_message = "You are not authorized to perform this action."


class NotFound(BookmarkdError):
    code = "NOT_FOUND"
    default_message = "Not found."

    @classmethod
    def entity(cls, name: str, entity_id: Any) -> "NotFound":
        return cls(f"{name} not found", {"id": str(entity_id)})


class InvalidState(BookmarkdError):
    code = "INVALID_STATE"
    default_message = "Operation is not valid in the current state."


class Conflict(BookmarkdError):
    code = "CONFLICT"
    default_message = "Resource already exists."

    @classmethod
    def field(cls, field: str, message: str) -> "Conflict":
        return cls(message, {"field": field})


class InvalidInput(BookmarkdError):
    code = "BAD_USER_INPUT"
    default_message = "Invalid input."
