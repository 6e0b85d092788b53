"""Base error taxonomy shared by every module.

Each error carries a stable, machine-inspectable ``code`` plus the
human-readable message passed to the constructor.  Module-specific errors
(``InsufficientStock``, ``CouponExpired``...) subclass these.
"""

from __future__ import annotations


class DomainError(Exception):
    """Root of all business errors raised by the service layer."""

    code = "domain_error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class ValidationError(DomainError):
    """Malformed or empty input rejected at the boundary."""

    code = "validation_error"


class NotFoundError(DomainError):
    """A referenced product, order or coupon does not exist."""

    code = "not_found"


class UnauthorizedError(DomainError):
    """The actor is not allowed to act on the resource."""

    code = "unauthorized"


class PersistenceError(DomainError):
    """Storage kept failing after the bounded retry budget was spent."""

    code = "persistence_error"
