"""Unit tests for OrderService.place_order and the read operations.

Covers:
- Pricing is persisted and satisfies the totals identity.
- Stock is reserved on success.
- Validation, missing product, multi-supplier and stock failures.
- Coupon redemption and rollback of stock when the coupon is rejected.
- Persistence failure releases the reservation.
- Initial history entry.
- Authorization on single-order reads and role-based listing.
"""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch
from uuid import uuid4

import pytest
from django.db import OperationalError
from django.utils import timezone

from modules.core.exceptions import PersistenceError, UnauthorizedError, ValidationError
from modules.coupons.exceptions import CouponExpired, OrderBelowMinimum
from modules.coupons.models import Coupon
from modules.inventory.exceptions import InsufficientStock, ProductNotFound
from modules.inventory.models import ProductStatus
from modules.orders.constants import ActorRole, OrderStatus
from modules.orders.dtos import ListOrdersDTO, PlaceOrderDTO, PlaceOrderItemDTO
from modules.orders.exceptions import MultiSupplierError, OrderNotFound
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from tests.conftest import (
    OTHER_SUPPLIER_ID,
    OTHER_VENDOR_ID,
    SUPPLIER_ID,
    VENDOR_ID,
)

pytestmark = pytest.mark.unit


def place_dto(*lines, vendor_id=VENDOR_ID, delivery_option="standard", coupon_code=None):
    return PlaceOrderDTO(
        vendor_id=vendor_id,
        items=[
            PlaceOrderItemDTO(product_id=product.id, quantity=quantity)
            for product, quantity in lines
        ],
        delivery_option=delivery_option,
        coupon_code=coupon_code,
    )


@pytest.fixture()
def save10():
    now = timezone.now()
    return Coupon.objects.create(
        code="SAVE10",
        discount_percent=Decimal("10"),
        min_order_value=Decimal("20.00"),
        max_discount_cap=Decimal("50.00"),
        valid_from=now - timedelta(days=1),
        valid_until=now + timedelta(days=30),
    )


# ===========================================================================
# Successful placement
# ===========================================================================


class TestPlaceOrder:
    def test_bulk_order_with_standard_delivery(self, service, product):
        order = service.place_order(place_dto((product, 5)))

        assert order.status == OrderStatus.PENDING
        assert order.vendor_id == VENDOR_ID
        assert order.supplier_id == SUPPLIER_ID
        assert order.subtotal == Decimal("50.00")
        assert order.item_discount == Decimal("10.00")
        assert order.discounted_subtotal == Decimal("40.00")
        assert order.delivery_fee == Decimal("8.00")
        assert order.total == Decimal("48.00")
        assert order.order_number.startswith("ORD-")

    def test_reserves_stock(self, service, product):
        service.place_order(place_dto((product, 4)))

        product.refresh_from_db()
        assert product.available_quantity == 6

    def test_items_snapshot_product(self, service, product):
        order = service.place_order(place_dto((product, 5)))

        item = order.items.get()
        assert item.product_id == product.id
        assert item.product_name == "Widget"
        assert item.unit_price == Decimal("10.00")
        assert item.discount_amount == Decimal("10.00")
        assert item.subtotal == Decimal("40.00")

    def test_totals_identity(self, service, make_product):
        a = make_product(price=Decimal("7.35"), discount_percent=Decimal("12.5"))
        b = make_product(price=Decimal("19.99"), min_bulk_quantity=2, discount_percent=Decimal("5"))

        order = service.place_order(place_dto((a, 6), (b, 3), delivery_option="express"))

        lines = list(order.items.all())
        assert sum(i.subtotal for i in lines) == order.subtotal - order.item_discount
        assert order.total == (
            order.subtotal
            - order.item_discount
            - order.coupon_discount
            + order.delivery_fee
        )
        assert order.total >= 0

    def test_express_delivery_fee(self, service, make_product):
        cheap = make_product(price=Decimal("5.00"), min_bulk_quantity=100)
        order = service.place_order(place_dto((cheap, 2), delivery_option="express"))
        assert order.delivery_fee == Decimal("15.00")
        assert order.total == Decimal("25.00")

    def test_free_delivery_above_threshold(self, service, make_product):
        pricey = make_product(price=Decimal("60.00"), min_bulk_quantity=100)
        order = service.place_order(place_dto((pricey, 1)))
        assert order.delivery_fee == Decimal("0.00")

    def test_initial_history_entry(self, service, product):
        order = service.place_order(place_dto((product, 1)))

        history = list(order.status_history.all())
        assert len(history) == 1
        assert history[0].old_status is None
        assert history[0].new_status == OrderStatus.PENDING
        assert history[0].actor_id == VENDOR_ID

    def test_duplicate_product_lines(self, service, product):
        order = service.place_order(place_dto((product, 2), (product, 3)))

        product.refresh_from_db()
        assert product.available_quantity == 5
        assert order.items.count() == 2


# ===========================================================================
# Coupons
# ===========================================================================


class TestPlaceOrderWithCoupon:
    def test_save10_discount(self, service, product, save10):
        order = service.place_order(place_dto((product, 5), coupon_code="save10"))

        assert order.coupon_code == "SAVE10"
        assert order.coupon_discount == Decimal("4.00")
        assert order.discount == Decimal("14.00")
        assert order.delivery_fee == Decimal("8.00")
        assert order.total == Decimal("44.00")
        save10.refresh_from_db()
        assert save10.used_count == 1

    def test_blank_coupon_is_ignored(self, service, product, save10):
        order = service.place_order(place_dto((product, 5), coupon_code="  "))

        assert order.coupon_code is None
        assert order.coupon_discount == Decimal("0.00")
        save10.refresh_from_db()
        assert save10.used_count == 0

    def test_rejected_coupon_releases_stock(self, service, product, save10):
        with pytest.raises(OrderBelowMinimum):
            service.place_order(place_dto((product, 1), coupon_code="SAVE10"))

        product.refresh_from_db()
        assert product.available_quantity == 10
        assert Order.objects.count() == 0
        save10.refresh_from_db()
        assert save10.used_count == 0

    def test_expired_coupon(self, service, product, save10):
        Coupon.objects.filter(pk=save10.pk).update(
            valid_until=timezone.now() - timedelta(minutes=1)
        )

        with pytest.raises(CouponExpired):
            service.place_order(place_dto((product, 5), coupon_code="SAVE10"))

        product.refresh_from_db()
        assert product.available_quantity == 10


# ===========================================================================
# Rejections
# ===========================================================================


class TestPlaceOrderRejections:
    def test_empty_items_rejected(self, service):
        dto = PlaceOrderDTO.model_construct(vendor_id=VENDOR_ID, items=[], coupon_code=None)
        with pytest.raises(ValidationError):
            service.place_order(dto)

    def test_unknown_product(self, service, product):
        dto = PlaceOrderDTO(
            vendor_id=VENDOR_ID,
            items=[
                PlaceOrderItemDTO(product_id=product.id, quantity=1),
                PlaceOrderItemDTO(product_id=uuid4(), quantity=1),
            ],
        )
        with pytest.raises(ProductNotFound):
            service.place_order(dto)

        product.refresh_from_db()
        assert product.available_quantity == 10

    def test_inactive_product(self, service, make_product):
        inactive = make_product(status=ProductStatus.INACTIVE)
        with pytest.raises(ProductNotFound):
            service.place_order(place_dto((inactive, 1)))

    def test_multi_supplier(self, service, product, make_product):
        foreign = make_product(supplier_id=OTHER_SUPPLIER_ID)

        with pytest.raises(MultiSupplierError):
            service.place_order(place_dto((product, 1), (foreign, 1)))

        product.refresh_from_db()
        foreign.refresh_from_db()
        assert product.available_quantity == 10
        assert foreign.available_quantity == 100

    def test_insufficient_stock_reserves_nothing(self, service, product, make_product):
        plenty = make_product(available_quantity=50)

        with pytest.raises(InsufficientStock):
            service.place_order(place_dto((plenty, 5), (product, 11)))

        plenty.refresh_from_db()
        product.refresh_from_db()
        assert plenty.available_quantity == 50
        assert product.available_quantity == 10
        assert Order.objects.count() == 0

    def test_persistence_failure_releases_stock(self, service, product, settings):
        settings.PERSISTENCE_MAX_RETRIES = 2
        with patch.object(
            OrderItem.objects, "bulk_create", side_effect=OperationalError("locked")
        ) as bulk_create:
            with pytest.raises(PersistenceError):
                service.place_order(place_dto((product, 3)))

        assert bulk_create.call_count == 2
        product.refresh_from_db()
        assert product.available_quantity == 10
        assert Order.objects.count() == 0
        assert OrderStatusHistory.objects.count() == 0

    def test_failed_placement_sends_no_notification(
        self, service, product, dispatcher, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            with pytest.raises(InsufficientStock):
                service.place_order(place_dto((product, 99)))

        assert dispatcher.published == []


# ===========================================================================
# Reads
# ===========================================================================


class TestGetOrder:
    def test_vendor_can_read(self, service, product):
        order = service.place_order(place_dto((product, 1)))
        assert service.get_order(order.id, VENDOR_ID).id == order.id

    def test_supplier_can_read(self, service, product):
        order = service.place_order(place_dto((product, 1)))
        assert service.get_order(order.id, SUPPLIER_ID).id == order.id

    def test_stranger_is_unauthorized(self, service, product):
        order = service.place_order(place_dto((product, 1)))
        with pytest.raises(UnauthorizedError):
            service.get_order(order.id, OTHER_VENDOR_ID)

    def test_unknown_order(self, service):
        with pytest.raises(OrderNotFound):
            service.get_order(uuid4(), VENDOR_ID)


class TestListOrders:
    def test_vendor_sees_own_orders_newest_first(self, service, product):
        first = service.place_order(place_dto((product, 1)))
        second = service.place_order(place_dto((product, 1)))
        service.place_order(place_dto((product, 1), vendor_id=OTHER_VENDOR_ID))

        orders = service.list_orders(
            ListOrdersDTO(actor_id=VENDOR_ID, role=ActorRole.VENDOR)
        )

        assert [o.id for o in orders] == [second.id, first.id]

    def test_supplier_sees_orders_addressed_to_them(self, service, product, make_product):
        foreign = make_product(supplier_id=OTHER_SUPPLIER_ID)
        mine = service.place_order(place_dto((product, 1)))
        service.place_order(place_dto((foreign, 1)))

        orders = service.list_orders(
            ListOrdersDTO(actor_id=SUPPLIER_ID, role=ActorRole.SUPPLIER)
        )

        assert [o.id for o in orders] == [mine.id]

    def test_no_orders(self, service):
        orders = service.list_orders(
            ListOrdersDTO(actor_id="nobody", role=ActorRole.VENDOR)
        )
        assert orders == []
