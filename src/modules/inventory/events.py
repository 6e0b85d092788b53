"""Domain events for the Inventory bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from modules.inventory.constants import NOTIFICATION_PRODUCT_STOCK_UPDATED
from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class ProductStockUpdated(DomainEvent):
    """Raised when a supplier overwrites a product's stock level."""

    name: ClassVar[str] = NOTIFICATION_PRODUCT_STOCK_UPDATED

    new_stock: int = 0
    product_name: str = ""
