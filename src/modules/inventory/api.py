"""Inbound operations of the inventory ledger."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from modules.core.validation import parse_dto
from modules.inventory.dtos import ProductOutputDTO, SetStockDTO
from modules.inventory.notifications import StockNotifier
from modules.inventory.repositories.django_repository import ProductDjangoRepository
from modules.inventory.services import InventoryLedger
from shared.domain.notifications import INotificationDispatcher
from shared.infrastructure.notifications import get_dispatcher


def build_inventory_ledger(
    dispatcher: Optional[INotificationDispatcher] = None,
) -> InventoryLedger:
    """Wire ``InventoryLedger`` with the Django repository."""
    return InventoryLedger(
        ProductDjangoRepository(),
        notifier=StockNotifier(dispatcher or get_dispatcher()),
    )


def set_product_stock(
    product_id: UUID | str,
    actor_id: str,
    quantity: int,
    *,
    ledger: Optional[InventoryLedger] = None,
) -> ProductOutputDTO:
    dto = parse_dto(
        SetStockDTO, product_id=product_id, actor_id=actor_id, quantity=quantity
    )
    product = (ledger or build_inventory_ledger()).set_stock(
        dto.product_id, dto.actor_id, dto.quantity
    )
    return ProductOutputDTO.from_entity(product)
