"""Product repository interface.

Extends ``IRepository[Product]`` with the atomic quantity primitives the
Inventory Ledger is built on.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Dict, Iterable, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.inventory.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def save(self, entity: "Product") -> "Product":
        """Persist (create or update) a product."""

    @abstractmethod
    def get_many(self, ids: Iterable[UUID]) -> Dict[UUID, "Product"]:
        """Return the existing products among *ids*, keyed by id."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional["Product"]:
        """Retrieve a product with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def decrement_if_available(self, id: UUID, quantity: int) -> bool:
        """Atomically take *quantity* units from an active product.

        Returns ``False`` (and changes nothing) when the product is missing,
        inactive or holds fewer than *quantity* units.
        """

    @abstractmethod
    def increment(self, id: UUID, quantity: int) -> bool:
        """Atomically return *quantity* units; ``False`` if the row is gone."""
