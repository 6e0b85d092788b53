"""Inbound operations of the coupon validator.

``check_coupon`` previews a code against a cart subtotal without
consuming a use; redemption only happens as part of order placement.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from modules.core.validation import parse_dto
from modules.coupons.dtos import CheckCouponDTO, CouponCheckOutputDTO
from modules.coupons.repositories.django_repository import CouponDjangoRepository
from modules.coupons.services import CouponService


def check_coupon(
    code: str,
    order_subtotal: Decimal | str,
    *,
    service: Optional[CouponService] = None,
) -> CouponCheckOutputDTO:
    dto = parse_dto(CheckCouponDTO, code=code, order_subtotal=order_subtotal)
    redemption = (service or CouponService(CouponDjangoRepository())).check(
        dto.code, dto.order_subtotal
    )
    return CouponCheckOutputDTO(code=redemption.code, discount=redemption.discount)
