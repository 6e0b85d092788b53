"""Inventory DTOs for the Service Layer.

- ``SetStockDTO``: input for a supplier's stock overwrite.
- ``ProductOutputDTO``: output.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from modules.inventory.models import Product


class SetStockDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: UUID
    actor_id: str = Field(min_length=1)
    quantity: int

    @field_validator("quantity")
    @classmethod
    def quantity_must_not_be_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Quantity must be a non-negative number.")
        return v


class ProductOutputDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    sku: str
    name: str
    supplier_id: str
    price: Decimal
    available_quantity: int
    min_bulk_quantity: int
    discount_percent: Decimal
    status: str

    @classmethod
    def from_entity(cls, product: Product) -> ProductOutputDTO:
        return cls(
            id=product.id,
            sku=product.sku,
            name=product.name,
            supplier_id=product.supplier_id,
            price=product.price,
            available_quantity=product.available_quantity,
            min_bulk_quantity=product.min_bulk_quantity,
            discount_percent=product.discount_percent,
            status=product.status,
        )
