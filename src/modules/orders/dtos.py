"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the inbound layer and the Service
layer.  DTOs are immutable (``frozen=True``).

- ``PlaceOrderItemDTO``: input for a single order line.
- ``PlaceOrderDTO``: input for order placement (nested items).
- ``UpdateOrderStatusDTO``: input for a status transition.
- ``ListOrdersDTO``: input for the actor's order listing.
- ``OrderItemOutputDTO`` / ``StatusHistoryDTO`` / ``OrderOutputDTO``: output.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderItem, OrderStatusHistory


# ---------------------------------------------------------------------------
# Enums (framework-agnostic, not Django TextChoices)
# ---------------------------------------------------------------------------


class DeliveryOptionEnum(StrEnum):
    STANDARD = "standard"
    EXPRESS = "express"


class OrderStatusEnum(StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class ActorRoleEnum(StrEnum):
    VENDOR = "vendor"
    SUPPLIER = "supplier"


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class PlaceOrderItemDTO(BaseModel):
    """Immutable DTO for a single line of a placement request.

    Price, name and supplier are resolved by the Service Layer from the
    catalog; the caller only names the product and the quantity.
    """

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: int

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v


class PlaceOrderDTO(BaseModel):
    """Immutable DTO for order placement requests.

    Validates:
    - ``vendor_id`` is non-empty.
    - ``items`` must contain at least one item.
    - A blank ``coupon_code`` means no coupon.
    """

    model_config = ConfigDict(frozen=True)

    vendor_id: str = Field(min_length=1)
    items: List[PlaceOrderItemDTO]
    delivery_option: DeliveryOptionEnum = DeliveryOptionEnum.STANDARD
    coupon_code: Optional[str] = None

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[PlaceOrderItemDTO]
    ) -> List[PlaceOrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v

    @field_validator("coupon_code")
    @classmethod
    def blank_coupon_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip().upper()


class UpdateOrderStatusDTO(BaseModel):
    """Immutable DTO for status transition requests."""

    model_config = ConfigDict(frozen=True)

    order_id: UUID
    actor_id: str = Field(min_length=1)
    new_status: OrderStatusEnum
    notes: str = ""


class ListOrdersDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    actor_id: str = Field(min_length=1)
    role: ActorRoleEnum


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class OrderItemOutputDTO(BaseModel):
    """Immutable DTO for order item responses."""

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    product_name: str
    quantity: int
    unit_price: Decimal
    discount_amount: Decimal
    subtotal: Decimal

    @classmethod
    def from_entity(cls, item: OrderItem) -> OrderItemOutputDTO:
        return cls(
            product_id=item.product_id,
            product_name=item.product_name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            discount_amount=item.discount_amount,
            subtotal=item.subtotal,
        )


class StatusHistoryDTO(BaseModel):
    """Immutable DTO for order status history responses."""

    model_config = ConfigDict(frozen=True)

    old_status: Optional[str]
    status: str
    actor_id: str
    notes: str
    timestamp: datetime

    @classmethod
    def from_entity(cls, history: OrderStatusHistory) -> StatusHistoryDTO:
        return cls(
            old_status=history.old_status,
            status=history.new_status,
            actor_id=history.actor_id,
            notes=history.notes,
            timestamp=history.created_at,
        )


class OrderOutputDTO(BaseModel):
    """Immutable DTO for order responses and notification payloads."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    order_number: str
    vendor_id: str
    supplier_id: str
    status: str
    delivery_option: str
    subtotal: Decimal
    item_discount: Decimal
    coupon_code: Optional[str]
    coupon_discount: Decimal
    discount: Decimal
    delivery_fee: Decimal
    total: Decimal
    created_at: datetime
    items: List[OrderItemOutputDTO]
    status_history: List[StatusHistoryDTO]

    @classmethod
    def from_entity(cls, order: Order) -> OrderOutputDTO:
        """Build an output DTO from an Order model instance.

        Assumes ``items`` and ``status_history`` are prefetched.
        """
        return cls(
            id=order.id,
            order_number=order.order_number,
            vendor_id=order.vendor_id,
            supplier_id=order.supplier_id,
            status=order.status,
            delivery_option=order.delivery_option,
            subtotal=order.subtotal,
            item_discount=order.item_discount,
            coupon_code=order.coupon_code,
            coupon_discount=order.coupon_discount,
            discount=order.discount,
            delivery_fee=order.delivery_fee,
            total=order.total,
            created_at=order.created_at,
            items=[OrderItemOutputDTO.from_entity(i) for i in order.items.all()],
            status_history=[
                StatusHistoryDTO.from_entity(h) for h in order.status_history.all()
            ],
        )
