"""Application error hierarchy.

Every error carries a user-facing ``message``, a ``details`` dict and the HTTP
status the API layer answers with.
"""

from typing import Optional


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input (dates, deltas, payload fields)."""

    status_code = 400


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409


class InsufficientStockError(ConflictError):
    """A stock delta would drive one ledger dimension below zero."""

    def __init__(self, dimension: str, message: str, *, label=None, available=0, delta=0):
        self.dimension = dimension
        self.label = label
        self.available = available
        self.delta = delta
        super().__init__(
            message,
            details={
                "dimension": dimension,
                "label": label,
                "available": available,
                "delta": delta,
            },
        )


class ConcurrentUpdateError(ConflictError):
    """The record kept changing underneath us; retries were exhausted."""


__all__ = [
    "AppError",
    "ConcurrentUpdateError",
    "ConflictError",
    "InsufficientStockError",
    "NotFoundError",
    "ValidationError",
]
