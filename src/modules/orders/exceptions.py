"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.
The inbound layer translates them into responses using ``code`` and
``message``; product, stock and coupon errors come from their own modules.
"""

from __future__ import annotations

from modules.core.exceptions import DomainError, NotFoundError


class OrderNotFound(NotFoundError):
    """The requested order does not exist."""


class MultiSupplierError(DomainError):
    """The items of one order reference more than one supplier."""

    code = "multi_supplier"


class InvalidTransitionError(DomainError):
    """The requested status is not reachable from the current status."""

    code = "invalid_transition"
