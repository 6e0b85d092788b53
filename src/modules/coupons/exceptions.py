"""Coupon domain exceptions.

Every coupon failure is a ``CouponError``; the subclass (and its ``code``)
tells the caller which rule rejected the code.
"""

from __future__ import annotations

from modules.core.exceptions import DomainError, NotFoundError


class CouponError(DomainError):
    """A coupon could not be applied to the order."""

    code = "coupon_error"


class CouponNotFound(CouponError, NotFoundError):
    code = "coupon_not_found"


class CouponExpired(CouponError):
    """The current time lies outside the coupon's validity window."""

    code = "coupon_expired"


class CouponUsageExceeded(CouponError):
    code = "coupon_usage_exceeded"


class OrderBelowMinimum(CouponError):
    """The order subtotal is lower than the coupon's minimum order value."""

    code = "order_below_minimum"
