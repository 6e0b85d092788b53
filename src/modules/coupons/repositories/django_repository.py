"""Django ORM implementation of the Coupon repository."""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone

from modules.coupons.models import Coupon, normalize_code
from modules.coupons.repositories.interfaces import ICouponRepository

logger = structlog.get_logger(__name__)


class CouponDjangoRepository(ICouponRepository):
    """Concrete Coupon repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Coupon]:
        return Coupon.objects.filter(id=id).first()

    def get_by_code(self, code: str) -> Optional[Coupon]:
        return Coupon.objects.filter(code=normalize_code(code)).first()

    def get_for_update(self, code: str) -> Optional[Coupon]:
        return (
            Coupon.objects.select_for_update()
            .filter(code=normalize_code(code))
            .first()
        )

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Coupon]:
        queryset = Coupon.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Coupon) -> Coupon:
        entity.save()
        logger.info("coupon.saved", coupon_id=str(entity.id), code=entity.code)
        return entity

    def increment_usage(self, id: UUID) -> bool:
        # The guard repeats the limit check so the counter stays bounded
        # even on backends where SELECT FOR UPDATE is a no-op.
        updated = (
            Coupon.objects.filter(id=id)
            .filter(Q(usage_limit__isnull=True) | Q(used_count__lt=F("usage_limit")))
            .update(used_count=F("used_count") + 1, updated_at=timezone.now())
        )
        return updated == 1
