"""Inventory domain exceptions.

Raised by the Inventory Ledger when a reservation or a stock change
cannot be honoured.
"""

from __future__ import annotations

from modules.core.exceptions import DomainError, NotFoundError


class ProductNotFound(NotFoundError):
    """The product does not exist or is inactive."""


class InsufficientStock(DomainError):
    """Available quantity is lower than the requested quantity."""

    code = "insufficient_stock"
