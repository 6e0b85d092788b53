"""Order repository interface.

Extends ``IRepository[Order]`` with the methods required by the Order
aggregate: atomic creation with items and the initial history record,
locked look-up for transitions, and append-only history.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes OrderItem children and
    OrderStatusHistory records.  Mutations must be atomic and raise
    ``PersistenceError`` once the retry budget is exhausted.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order, its items and its first history record atomically.

        ``data`` must include ``vendor_id``, ``supplier_id``,
        ``delivery_option``, the pricing figures (``subtotal``,
        ``item_discount``, ``coupon_code``, ``coupon_discount``,
        ``delivery_fee``, ``total``) and ``items`` (list of dicts with
        ``product_id``, ``product_name``, ``quantity``, ``unit_price``,
        ``discount_amount``).
        """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with prefetched items and status history."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders, newest first, with optional filters."""

    @abstractmethod
    def record_transition(
        self, order: Order, new_status: str, actor_id: str, notes: str = ""
    ) -> Order:
        """Persist ``order.status = new_status`` and append the history entry."""
