"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
Write operations go through ``run_with_retry``: each attempt runs in its
own savepoint, transient ``OperationalError``s are retried a bounded number
of times and then surface as ``PersistenceError``.

Concurrency control on status updates uses ``select_for_update()``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.utils import timezone

from modules.core.persistence import run_with_retry
from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    def create(self, data: Dict[str, Any]) -> Order:
        order = run_with_retry(lambda: self._create(data), label="order.create")
        logger.info(
            "order.persisted",
            order_id=str(order.id),
            item_count=len(data["items"]),
        )
        return self.get_by_id(str(order.id)) or order

    def _create(self, data: Dict[str, Any]) -> Order:
        order = Order(
            vendor_id=data["vendor_id"],
            supplier_id=data["supplier_id"],
            delivery_option=data["delivery_option"],
            subtotal=data["subtotal"],
            item_discount=data["item_discount"],
            coupon_code=data.get("coupon_code"),
            coupon_discount=data["coupon_discount"],
            delivery_fee=data["delivery_fee"],
            total=data["total"],
            status=OrderStatus.PENDING,
        )
        order.save()

        OrderItem.objects.bulk_create(
            [
                _build_item(order, position, item_data)
                for position, item_data in enumerate(data["items"])
            ]
        )
        OrderStatusHistory.objects.create(
            order=order,
            old_status=None,
            new_status=OrderStatus.PENDING,
            actor_id=data["vendor_id"],
            notes="Order placed",
        )
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with eager-loaded items and status history.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return (
                Order.objects.prefetch_related("items", "status_history")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Eager-loads items so the caller can iterate over them while the
        row is locked.  Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return (
                Order.objects.select_for_update()
                .prefetch_related("items")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders (newest first) with eager-loaded relations.

        Supported filter keys include ``vendor_id``, ``supplier_id`` and
        ``status``.
        """
        queryset = Order.objects.prefetch_related("items", "status_history")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset.order_by("-created_at", "-id"))

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def record_transition(
        self, order: Order, new_status: str, actor_id: str, notes: str = ""
    ) -> Order:
        old_status = order.status

        def _transition() -> None:
            Order.objects.filter(id=order.id).update(
                status=new_status, updated_at=timezone.now()
            )
            OrderStatusHistory.objects.create(
                order=order,
                old_status=old_status,
                new_status=new_status,
                actor_id=actor_id,
                notes=notes,
            )

        run_with_retry(_transition, label="order.transition")
        logger.info(
            "order.history_added",
            order_id=str(order.id),
            old_status=old_status,
            new_status=new_status,
        )
        return self.get_by_id(str(order.id)) or order


def _build_item(order: Order, position: int, item_data: Dict[str, Any]) -> OrderItem:
    item = OrderItem(
        order=order,
        position=position,
        product_id=item_data["product_id"],
        product_name=item_data["product_name"],
        quantity=item_data["quantity"],
        unit_price=item_data["unit_price"],
        discount_amount=item_data["discount_amount"],
    )
    # bulk_create skips save(); compute the derived subtotal here.
    item.subtotal = item.quantity * item.unit_price - item.discount_amount
    return item
