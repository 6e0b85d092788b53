"""Django ORM implementation of the Product repository.

Quantity changes are single conditional ``UPDATE`` statements built from
``F()`` expressions: the database evaluates the guard and the arithmetic
on the locked row, so concurrent reservations can never read a stale
quantity and drive it below zero.

Error handling follows the Null Object pattern: look-ups return ``None``
and the ledger decides which error to raise.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from modules.inventory.models import Product, ProductStatus
from modules.inventory.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Product]:
        """Retrieve a product by primary key.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return Product.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_many(self, ids: Iterable[UUID]) -> Dict[UUID, Product]:
        return {product.id: product for product in Product.objects.filter(id__in=set(ids))}

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        """List products with optional Django ORM look-ups.

        Examples of valid filters::

            {"status": "active"}
            {"supplier_id": "supplier-1"}
        """
        queryset = Product.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        """Persist (create or update) a product."""
        entity.save()
        logger.info("product.saved", product_id=str(entity.id), sku=entity.sku)
        return entity

    def get_for_update(self, id: str) -> Optional[Product]:
        try:
            return Product.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    # ------------------------------------------------------------------
    # Atomic quantity primitives
    # ------------------------------------------------------------------

    def decrement_if_available(self, id: UUID, quantity: int) -> bool:
        updated = Product.objects.filter(
            id=id,
            status=ProductStatus.ACTIVE,
            available_quantity__gte=quantity,
        ).update(
            available_quantity=F("available_quantity") - quantity,
            updated_at=timezone.now(),
        )
        return updated == 1

    def increment(self, id: UUID, quantity: int) -> bool:
        updated = Product.objects.filter(id=id).update(
            available_quantity=F("available_quantity") + quantity,
            updated_at=timezone.now(),
        )
        return updated == 1
