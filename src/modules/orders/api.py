"""Inbound operations of the order engine.

Called by the routing/authentication layer with an already-authenticated
actor.  Raw arguments are parsed into DTOs here; pydantic validation
failures become the domain ``ValidationError`` so callers only ever see
``DomainError`` subclasses.  Results are returned as ``OrderOutputDTO``.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional
from uuid import UUID

from modules.core.exceptions import ValidationError
from modules.core.validation import parse_dto
from modules.coupons.repositories.django_repository import CouponDjangoRepository
from modules.coupons.services import CouponService
from modules.inventory.api import build_inventory_ledger
from modules.orders.dtos import (
    ListOrdersDTO,
    OrderOutputDTO,
    PlaceOrderDTO,
    UpdateOrderStatusDTO,
)
from modules.orders.notifications import OrderNotifier
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from shared.domain.notifications import INotificationDispatcher
from shared.infrastructure.notifications import get_dispatcher


def build_order_service(
    dispatcher: Optional[INotificationDispatcher] = None,
) -> OrderService:
    """Wire ``OrderService`` with the Django repositories."""
    dispatcher = dispatcher or get_dispatcher()
    return OrderService(
        order_repository=OrderDjangoRepository(),
        inventory=build_inventory_ledger(dispatcher),
        coupons=CouponService(CouponDjangoRepository()),
        notifier=OrderNotifier(dispatcher),
    )


def place_order(
    vendor_id: str,
    items: Iterable[Mapping[str, Any]],
    delivery_option: str = "standard",
    coupon_code: Optional[str] = None,
    *,
    service: Optional[OrderService] = None,
) -> OrderOutputDTO:
    dto = parse_dto(
        PlaceOrderDTO,
        vendor_id=vendor_id,
        items=items,
        delivery_option=delivery_option,
        coupon_code=coupon_code,
    )
    order = (service or build_order_service()).place_order(dto)
    return OrderOutputDTO.from_entity(order)


def update_order_status(
    order_id: UUID | str,
    actor_id: str,
    new_status: str,
    notes: str = "",
    *,
    service: Optional[OrderService] = None,
) -> OrderOutputDTO:
    dto = parse_dto(
        UpdateOrderStatusDTO,
        order_id=order_id,
        actor_id=actor_id,
        new_status=new_status,
        notes=notes,
    )
    order = (service or build_order_service()).update_status(dto)
    return OrderOutputDTO.from_entity(order)


def get_orders(
    actor_id: str, role: str, *, service: Optional[OrderService] = None
) -> List[OrderOutputDTO]:
    dto = parse_dto(ListOrdersDTO, actor_id=actor_id, role=role)
    orders = (service or build_order_service()).list_orders(dto)
    return [OrderOutputDTO.from_entity(order) for order in orders]


def get_order_by_id(
    order_id: UUID | str, actor_id: str, *, service: Optional[OrderService] = None
) -> OrderOutputDTO:
    try:
        parsed_id = order_id if isinstance(order_id, UUID) else UUID(str(order_id))
    except ValueError as exc:
        raise ValidationError(f"Invalid order id: {order_id}.") from exc
    order = (service or build_order_service()).get_order(parsed_id, actor_id)
    return OrderOutputDTO.from_entity(order)

