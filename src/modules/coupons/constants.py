"""Coupon constants: the marketplace's default promotional codes."""

from decimal import Decimal

DEFAULT_COUPON_VALIDITY_DAYS = 30

DEFAULT_COUPONS: list[dict] = [
    {
        "code": "SAVE10",
        "description": "10% off your order",
        "discount_percent": Decimal("10"),
        "min_order_value": Decimal("20.00"),
        "max_discount_cap": Decimal("50.00"),
        "usage_limit": None,
    },
    {
        "code": "BULK15",
        "description": "15% off bulk orders",
        "discount_percent": Decimal("15"),
        "min_order_value": Decimal("100.00"),
        "max_discount_cap": Decimal("100.00"),
        "usage_limit": None,
    },
    {
        "code": "FIRST20",
        "description": "20% off first order",
        "discount_percent": Decimal("20"),
        "min_order_value": Decimal("50.00"),
        "max_discount_cap": Decimal("75.00"),
        "usage_limit": 1,
    },
]
