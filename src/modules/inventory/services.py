"""Inventory Ledger (Use Cases).

Owns per-product available quantity and exposes atomic reserve / release.

Business rules enforced:
- A reservation never drives ``available_quantity`` below zero, even under
  concurrent callers (conditional row update, see the repository).
- Insufficient stock fails immediately; callers never wait for stock.
- Missing or inactive products cannot be reserved.
- Release is not idempotent: callers release each reservation at most once.
- Only a product's supplier may overwrite its stock level.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

import structlog
from django.db import transaction

from modules.core.exceptions import UnauthorizedError, ValidationError
from modules.inventory.exceptions import InsufficientStock, ProductNotFound

if TYPE_CHECKING:
    from modules.inventory.models import Product
    from modules.inventory.notifications import StockNotifier
    from modules.inventory.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


@dataclass
class Reservation:
    """Quantities taken from the ledger during one placement attempt."""

    lines: List[Tuple[UUID, int]] = field(default_factory=list)

    def totals(self) -> Dict[UUID, int]:
        counter: Counter = Counter()
        for product_id, quantity in self.lines:
            counter[product_id] += quantity
        return dict(counter)


class InventoryLedger:
    """Application service for stock reservation.

    Receives an ``IProductRepository`` via constructor injection (DIP).
    Stock overwrites are announced through the optional ``StockNotifier``.
    """

    def __init__(
        self,
        product_repository: IProductRepository,
        notifier: Optional[StockNotifier] = None,
    ) -> None:
        self._repo = product_repository
        self._notifier = notifier

    # ------------------------------------------------------------------
    # Look-ups
    # ------------------------------------------------------------------

    def get_products(self, product_ids: Iterable[UUID]) -> Dict[UUID, Product]:
        """Resolve active products for pricing.

        Raises:
            ProductNotFound: a product is missing or inactive.
        """
        wanted = list(dict.fromkeys(product_ids))
        products = self._repo.get_many(wanted)
        for product_id in wanted:
            product = products.get(product_id)
            if product is None or not product.is_active:
                raise ProductNotFound(f"Product {product_id} not found.")
        return products

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def reserve(self, product_id: UUID, quantity: int) -> None:
        """Atomically take *quantity* units of *product_id*.

        Raises:
            ValidationError: quantity is not positive.
            ProductNotFound: the product is missing or inactive.
            InsufficientStock: fewer than *quantity* units are available.
        """
        _require_positive(quantity)
        if self._repo.decrement_if_available(product_id, quantity):
            logger.info(
                "inventory.reserved",
                product_id=str(product_id),
                quantity=quantity,
            )
            return

        product = self._repo.get_by_id(str(product_id))
        if product is None or not product.is_active:
            raise ProductNotFound(f"Product {product_id} not found.")
        logger.warning(
            "inventory.insufficient_stock",
            product_id=str(product_id),
            requested=quantity,
            available=product.available_quantity,
        )
        raise InsufficientStock(
            f"Product {product.sku}: requested {quantity}, "
            f"available {product.available_quantity}."
        )

    def release(self, product_id: UUID, quantity: int) -> None:
        """Atomically give *quantity* units back to *product_id*.

        Raises:
            ValidationError: quantity is not positive.
            ProductNotFound: the product row no longer exists.
        """
        _require_positive(quantity)
        if not self._repo.increment(product_id, quantity):
            raise ProductNotFound(f"Product {product_id} not found.")
        logger.info("inventory.released", product_id=str(product_id), quantity=quantity)

    def reserve_many(self, lines: Iterable[Tuple[UUID, int]]) -> Reservation:
        """Reserve every line or nothing.

        Lines are reserved in product-id order so two concurrent callers
        lock rows in the same sequence.  If any line fails, the lines
        already reserved are released before the error propagates.
        """
        reservation = Reservation()
        try:
            for product_id, quantity in sorted(lines, key=lambda line: str(line[0])):
                self.reserve(product_id, quantity)
                reservation.lines.append((product_id, quantity))
        except Exception:
            self.release_reservation(reservation)
            raise
        return reservation

    def release_reservation(self, reservation: Reservation) -> None:
        """Return every unit held by *reservation*, summed per product."""
        for product_id, quantity in sorted(
            reservation.totals().items(), key=lambda item: str(item[0])
        ):
            self.release(product_id, quantity)
        reservation.lines.clear()

    @transaction.atomic
    def set_stock(self, product_id: UUID, actor_id: str, quantity: int) -> Product:
        """Overwrite the available quantity on behalf of the supplier.

        Raises:
            ValidationError: quantity is negative.
            ProductNotFound: the product does not exist.
            UnauthorizedError: *actor_id* is not the product's supplier.
        """
        if quantity < 0:
            raise ValidationError("Quantity must be a non-negative number.")

        product = self._repo.get_for_update(str(product_id))
        if product is None:
            raise ProductNotFound(f"Product {product_id} not found.")
        if product.supplier_id != actor_id:
            logger.warning(
                "inventory.set_stock_forbidden",
                product_id=str(product_id),
                actor_id=actor_id,
            )
            raise UnauthorizedError(
                "Not authorized to update stock for this product."
            )

        previous = product.available_quantity
        product.available_quantity = quantity
        self._repo.save(product)
        logger.info(
            "inventory.stock_set",
            product_id=str(product_id),
            previous=previous,
            quantity=quantity,
        )
        if self._notifier is not None:
            self._notifier.stock_updated(product)
        return product


def _require_positive(quantity: int) -> None:
    if quantity < 1:
        raise ValidationError("Quantity must be at least 1.")
