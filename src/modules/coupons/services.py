"""Coupon Validator (Use Cases).

Validates a promotional code against an order subtotal and redeems it.

Business rules enforced:
- Unknown code -> ``CouponNotFound``.
- Outside ``[valid_from, valid_until]`` -> ``CouponExpired``.
- ``usage_limit`` set and reached -> ``CouponUsageExceeded``.
- Subtotal below ``min_order_value`` -> ``OrderBelowMinimum``.
- ``discount = min(subtotal * pct / 100, cap or subtotal)``.
- Redemption checks and increments ``used_count`` under one row lock, so
  two concurrent redemptions of the last use cannot both pass.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Optional

import structlog
from django.db import transaction
from django.utils import timezone

from modules.core.money import percent_of, to_money
from modules.coupons.exceptions import (
    CouponExpired,
    CouponNotFound,
    CouponUsageExceeded,
    OrderBelowMinimum,
)

if TYPE_CHECKING:
    from modules.coupons.models import Coupon
    from modules.coupons.repositories.interfaces import ICouponRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CouponRedemption:
    code: str
    discount: Decimal


class CouponService:
    """Application service for coupon validation and redemption.

    ``clock`` defaults to ``django.utils.timezone.now``; tests may pin it.
    """

    def __init__(
        self,
        coupon_repository: ICouponRepository,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._repo = coupon_repository
        self._clock = clock or timezone.now

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def check(self, code: str, order_subtotal: Decimal) -> CouponRedemption:
        """Validate *code* and compute its discount without redeeming it."""
        coupon = self._repo.get_by_code(code)
        return self._evaluate(code, coupon, order_subtotal)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def redeem(self, code: str, order_subtotal: Decimal) -> CouponRedemption:
        """Validate *code* and consume one use.

        Raises:
            CouponNotFound, CouponExpired, CouponUsageExceeded,
            OrderBelowMinimum: see module docstring.
        """
        coupon = self._repo.get_for_update(code)
        redemption = self._evaluate(code, coupon, order_subtotal)

        if not self._repo.increment_usage(coupon.id):
            logger.warning("coupon.usage_exceeded", code=coupon.code)
            raise CouponUsageExceeded(f"Coupon {coupon.code} has no uses left.")

        logger.info(
            "coupon.redeemed",
            code=coupon.code,
            discount=str(redemption.discount),
            used_count=coupon.used_count + 1,
        )
        return redemption

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def _evaluate(
        self, code: str, coupon: Optional[Coupon], order_subtotal: Decimal
    ) -> CouponRedemption:
        if coupon is None:
            raise CouponNotFound(f"Coupon {code} not found.")

        log = logger.bind(code=coupon.code, subtotal=str(order_subtotal))

        if not coupon.is_valid_at(self._clock()):
            log.warning("coupon.expired")
            raise CouponExpired(f"Coupon {coupon.code} is not valid at this time.")
        if coupon.is_exhausted:
            log.warning("coupon.usage_exceeded", used_count=coupon.used_count)
            raise CouponUsageExceeded(f"Coupon {coupon.code} has no uses left.")
        if order_subtotal < coupon.min_order_value:
            log.warning("coupon.below_minimum", minimum=str(coupon.min_order_value))
            raise OrderBelowMinimum(
                f"Coupon {coupon.code} requires a minimum order of "
                f"{coupon.min_order_value}."
            )

        return CouponRedemption(
            code=coupon.code,
            discount=compute_discount(coupon, order_subtotal),
        )


def compute_discount(coupon: Coupon, order_subtotal: Decimal) -> Decimal:
    discount = percent_of(order_subtotal, coupon.discount_percent)
    cap = coupon.max_discount_cap if coupon.max_discount_cap is not None else order_subtotal
    return to_money(min(discount, cap))
