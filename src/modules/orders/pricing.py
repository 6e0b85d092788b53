"""Pricing Calculator.

Pure functions, no side effects, no database access:

- line: ``gross = price * qty``; when ``qty >= min_bulk_quantity`` the
  product's bulk discount is taken off the line.
- order subtotal: sum of the discounted lines.
- delivery fee: free above the threshold, otherwise the express or
  standard fee.  The threshold is compared with the subtotal after bulk
  discounts and before any coupon.
- total: ``subtotal - coupon_discount + delivery_fee``, never negative.

Thresholds and fees are configuration (``PRICING_*`` settings).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, Protocol, Tuple

from django.conf import settings

from modules.core.money import ZERO, percent_of, to_money
from modules.orders.constants import DeliveryOption


class PricedProduct(Protocol):
    price: Decimal
    min_bulk_quantity: int
    discount_percent: Decimal


@dataclass(frozen=True)
class PricingConfig:
    free_delivery_threshold: Decimal = Decimal("50.00")
    standard_delivery_fee: Decimal = Decimal("8.00")
    express_delivery_fee: Decimal = Decimal("15.00")

    @classmethod
    def from_settings(cls) -> PricingConfig:
        return cls(
            free_delivery_threshold=to_money(settings.PRICING_FREE_DELIVERY_THRESHOLD),
            standard_delivery_fee=to_money(settings.PRICING_STANDARD_DELIVERY_FEE),
            express_delivery_fee=to_money(settings.PRICING_EXPRESS_DELIVERY_FEE),
        )


@dataclass(frozen=True)
class LinePricing:
    unit_price: Decimal
    quantity: int
    gross: Decimal
    discount: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.gross - self.discount


@dataclass(frozen=True)
class OrderPricing:
    """Order-level figures.

    ``gross_subtotal - item_discount`` is the discounted ``subtotal`` the
    delivery threshold and coupons are evaluated against.
    """

    lines: Tuple[LinePricing, ...]
    gross_subtotal: Decimal
    item_discount: Decimal
    delivery_fee: Decimal
    coupon_discount: Decimal = ZERO

    @property
    def subtotal(self) -> Decimal:
        return self.gross_subtotal - self.item_discount

    @property
    def total(self) -> Decimal:
        return max(self.subtotal - self.coupon_discount + self.delivery_fee, ZERO)

    def with_coupon(self, discount: Decimal) -> OrderPricing:
        return replace(self, coupon_discount=to_money(discount))


def price_line(product: PricedProduct, quantity: int) -> LinePricing:
    unit_price = to_money(product.price)
    gross = to_money(unit_price * quantity)
    discount = ZERO
    if quantity >= product.min_bulk_quantity:
        discount = percent_of(gross, product.discount_percent)
    return LinePricing(
        unit_price=unit_price,
        quantity=quantity,
        gross=gross,
        discount=discount,
    )


def delivery_fee(
    subtotal: Decimal, delivery_option: str, config: PricingConfig
) -> Decimal:
    if subtotal > config.free_delivery_threshold:
        return ZERO
    if delivery_option == DeliveryOption.EXPRESS:
        return config.express_delivery_fee
    return config.standard_delivery_fee


def price_order(
    lines: Iterable[Tuple[PricedProduct, int]],
    delivery_option: str,
    config: PricingConfig,
) -> OrderPricing:
    priced = tuple(price_line(product, quantity) for product, quantity in lines)
    gross_subtotal = sum((line.gross for line in priced), ZERO)
    item_discount = sum((line.discount for line in priced), ZERO)
    return OrderPricing(
        lines=priced,
        gross_subtotal=gross_subtotal,
        item_discount=item_discount,
        delivery_fee=delivery_fee(
            gross_subtotal - item_discount, delivery_option, config
        ),
    )
