"""Order, OrderItem, and OrderStatusHistory models.

Business rules implemented:
- Every item of an order belongs to the order's single supplier.
- Items and pricing fields are written once, at placement; afterwards only
  ``status`` and the status history change.
- ``total = subtotal - item_discount - coupon_discount + delivery_fee``
  and is never negative (check constraint).
- Each status change appends a history record; the latest record's status
  equals ``Order.status``.
- Order number auto-generated as human-readable identifier.
- OrderItem snapshots product name and price at placement time.
"""

from __future__ import annotations

import secrets
from decimal import Decimal
from typing import Any

import structlog
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.exceptions import PersistenceError
from modules.core.models import BaseModel
from modules.orders.constants import (
    ORDER_NUMBER_MAX_RETRIES,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    DeliveryOption,
    OrderStatus,
)

logger = structlog.get_logger(__name__)


def _money_field(**kwargs: Any) -> models.DecimalField:
    kwargs.setdefault("default", Decimal("0.00"))
    return models.DecimalField(max_digits=12, decimal_places=2, **kwargs)


class Order(BaseModel):
    """Order aggregate root.

    ``order_number`` is a human-readable identifier auto-generated on first
    save (format: ``ORD-YYYYMMDD-XXXXXX``).  The UUIDv7 ``id`` is used for
    all internal references and look-ups.

    ``subtotal`` is the gross amount (unit price x quantity over all lines);
    ``item_discount`` holds the bulk discounts and ``coupon_discount`` the
    promotional discount.
    """

    order_number: models.CharField = models.CharField(
        max_length=20, unique=True, editable=False
    )
    vendor_id: models.CharField = models.CharField(max_length=64, db_index=True)
    supplier_id: models.CharField = models.CharField(max_length=64, db_index=True)
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    delivery_option: models.CharField = models.CharField(
        max_length=20,
        choices=DeliveryOption.choices,
        default=DeliveryOption.STANDARD,
    )
    subtotal: models.DecimalField = _money_field()
    item_discount: models.DecimalField = _money_field()
    coupon_code: models.CharField = models.CharField(  # noqa: DJ01
        max_length=32, null=True, blank=True
    )
    coupon_discount: models.DecimalField = _money_field()
    delivery_fee: models.DecimalField = _money_field()
    total: models.DecimalField = _money_field()

    class Meta:
        db_table = "orders"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total__gte=0),
                name="orders_total_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # Pricing helpers
    # ------------------------------------------------------------------

    @property
    def discount(self) -> Decimal:
        """Bulk and coupon discounts combined."""
        return self.item_discount + self.coupon_discount

    @property
    def discounted_subtotal(self) -> Decimal:
        return self.subtotal - self.item_discount

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        """Return ``True`` if the order is in a terminal state."""
        return self.status in TERMINAL_STATES

    def can_transition_to(self, new_status: str) -> bool:
        """Check whether transitioning to *new_status* is valid."""
        allowed = VALID_TRANSITIONS.get(self.status, set())
        return new_status in allowed

    def involves(self, actor_id: str) -> bool:
        """``True`` when *actor_id* is the order's vendor or supplier."""
        return actor_id in (self.vendor_id, self.supplier_id)

    # ------------------------------------------------------------------
    # Order number generation
    # ------------------------------------------------------------------

    @staticmethod
    def generate_order_number() -> str:
        """Generate a human-readable order number: ``ORD-YYYYMMDD-XXXXXX``."""
        now = timezone.now()
        suffix = secrets.token_hex(3).upper()
        return f"ORD-{now:%Y%m%d}-{suffix}"

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.order_number:
            for _ in range(ORDER_NUMBER_MAX_RETRIES):
                candidate = self.generate_order_number()
                if not Order.objects.filter(order_number=candidate).exists():
                    self.order_number = candidate
                    break
            else:
                raise PersistenceError(
                    f"Failed to generate unique order_number after "
                    f"{ORDER_NUMBER_MAX_RETRIES} attempts"
                )
        super().save(*args, **kwargs)

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.order_number} ({self.status})"


class OrderItem(BaseModel):
    """Line item linking an Order to a Product.

    ``product_name`` and ``unit_price`` are **snapshots** taken at placement
    time; they never change even if the product is updated later.
    ``subtotal`` is ``quantity * unit_price - discount_amount``.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product: models.ForeignKey = models.ForeignKey(
        "inventory.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    position: models.PositiveIntegerField = models.PositiveIntegerField(default=0)
    product_name: models.CharField = models.CharField(max_length=255)
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )
    unit_price: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
    )
    discount_amount: models.DecimalField = _money_field()
    subtotal: models.DecimalField = _money_field(editable=False)

    class Meta:
        db_table = "order_items"
        ordering = ["position"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.subtotal = self.quantity * self.unit_price - self.discount_amount
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.product_name} x{self.quantity} (${self.subtotal})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status transitions.

    ``actor_id`` is the vendor who placed the order (initial ``pending``
    record) or the supplier who moved it.  Records are never edited or
    deleted.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status: models.CharField = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
    )
    actor_id: models.CharField = models.CharField(max_length=64)
    notes: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["order", "created_at"],
                name="osh_order_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order} : {self.old_status} -> {self.new_status}"
