"""Unit tests for order notifications.

Notifications are dispatched on commit to both parties; a failing
dispatcher is logged and never affects the order change.
"""

from __future__ import annotations

import logging

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.dtos import PlaceOrderDTO, PlaceOrderItemDTO, UpdateOrderStatusDTO
from modules.orders.models import Order
from modules.orders.notifications import OrderNotifier
from tests.conftest import SUPPLIER_ID, VENDOR_ID

pytestmark = pytest.mark.unit


class ExplodingDispatcher:
    def __init__(self) -> None:
        self.calls = 0

    def publish(self, recipient, event, payload):
        self.calls += 1
        raise ConnectionError("socket gateway down")


def _place(service, product, quantity=1):
    return service.place_order(
        PlaceOrderDTO(
            vendor_id=VENDOR_ID,
            items=[PlaceOrderItemDTO(product_id=product.id, quantity=quantity)],
        )
    )


class TestOrderCreatedNotification:
    def test_sent_to_vendor_and_supplier_after_commit(
        self, service, product, dispatcher, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            order = _place(service, product)
            assert dispatcher.published == []

        assert len(callbacks) == 1
        assert [n.recipient for n in dispatcher.published] == [VENDOR_ID, SUPPLIER_ID]
        for notification in dispatcher.published:
            assert notification.event == "order_created"
            assert notification.payload["order_id"] == str(order.id)
            assert notification.payload["order"]["status"] == "pending"
            assert notification.payload["order"]["total"] == str(order.total)

    def test_not_sent_without_commit(self, service, product, dispatcher):
        _place(service, product)
        assert dispatcher.published == []


class TestStatusChangedNotification:
    def test_payload_carries_both_statuses(
        self, service, product, dispatcher, django_capture_on_commit_callbacks
    ):
        order = _place(service, product)

        with django_capture_on_commit_callbacks(execute=True):
            service.update_status(
                UpdateOrderStatusDTO(
                    order_id=order.id,
                    actor_id=SUPPLIER_ID,
                    new_status=OrderStatus.CONFIRMED,
                )
            )

        notifications = dispatcher.for_recipient(VENDOR_ID)
        assert len(notifications) == 1
        payload = notifications[0].payload
        assert notifications[0].event == "order_status_changed"
        assert payload["previous_status"] == "pending"
        assert payload["new_status"] == "confirmed"
        assert payload["order"]["status"] == "confirmed"
        assert len(dispatcher.for_recipient(SUPPLIER_ID)) == 1


class TestDispatcherFailure:
    def test_failure_is_logged_and_swallowed(
        self,
        service,
        product,
        ledger,
        coupon_service,
        caplog,
        django_capture_on_commit_callbacks,
    ):
        from modules.orders.repositories.django_repository import OrderDjangoRepository
        from modules.orders.services import OrderService

        exploding = ExplodingDispatcher()
        failing_service = OrderService(
            order_repository=OrderDjangoRepository(),
            inventory=ledger,
            coupons=coupon_service,
            notifier=OrderNotifier(exploding),
        )

        with caplog.at_level(logging.ERROR):
            with django_capture_on_commit_callbacks(execute=True):
                order = _place(failing_service, product, quantity=2)

        assert exploding.calls == 2
        assert Order.objects.filter(id=order.id).exists()
        product.refresh_from_db()
        assert product.available_quantity == 8
        assert any(
            "notification.dispatch_failed" in record.getMessage()
            for record in caplog.records
        )

    def test_same_party_receives_one_message(
        self, service, make_product, dispatcher, django_capture_on_commit_callbacks
    ):
        own = make_product(supplier_id=VENDOR_ID)

        with django_capture_on_commit_callbacks(execute=True):
            _place(service, own)

        assert [n.recipient for n in dispatcher.published] == [VENDOR_ID]
