"""Unit tests for stock level notifications."""

from __future__ import annotations

import logging

import pytest
from django.db import transaction

from modules.core.exceptions import UnauthorizedError
from modules.inventory.constants import VENDORS_CHANNEL
from modules.inventory.notifications import StockNotifier
from modules.inventory.repositories.django_repository import ProductDjangoRepository
from modules.inventory.services import InventoryLedger
from tests.conftest import OTHER_SUPPLIER_ID, SUPPLIER_ID

pytestmark = pytest.mark.unit


class ExplodingDispatcher:
    def __init__(self) -> None:
        self.calls = 0

    def publish(self, recipient, event, payload):
        self.calls += 1
        raise ConnectionError("socket gateway down")


class TestStockUpdatedNotification:
    def test_broadcast_to_vendors_after_commit(
        self, ledger, product, dispatcher, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            ledger.set_stock(product.id, SUPPLIER_ID, 25)
            assert dispatcher.published == []

        assert len(callbacks) == 1
        [notification] = dispatcher.published
        assert notification.recipient == VENDORS_CHANNEL
        assert notification.event == "product_stock_updated"
        assert notification.payload["product_id"] == str(product.id)
        assert notification.payload["new_stock"] == 25
        assert notification.payload["product_name"] == "Widget"

    def test_rejected_overwrite_sends_nothing(
        self, ledger, product, dispatcher, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            with pytest.raises(UnauthorizedError):
                ledger.set_stock(product.id, OTHER_SUPPLIER_ID, 25)

        assert dispatcher.published == []

    def test_rolled_back_overwrite_sends_nothing(
        self, ledger, product, dispatcher, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            with pytest.raises(RuntimeError):
                with transaction.atomic():
                    ledger.set_stock(product.id, SUPPLIER_ID, 25)
                    raise RuntimeError("abort")

        assert dispatcher.published == []
        product.refresh_from_db()
        assert product.available_quantity == 10

    def test_ledger_without_notifier_stays_silent(
        self, product, dispatcher, django_capture_on_commit_callbacks
    ):
        silent = InventoryLedger(ProductDjangoRepository())

        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            silent.set_stock(product.id, SUPPLIER_ID, 3)

        assert callbacks == []
        assert dispatcher.published == []


class TestDispatcherFailure:
    def test_failure_is_logged_and_swallowed(
        self, product, caplog, django_capture_on_commit_callbacks
    ):
        exploding = ExplodingDispatcher()
        ledger = InventoryLedger(
            ProductDjangoRepository(), notifier=StockNotifier(exploding)
        )

        with caplog.at_level(logging.ERROR):
            with django_capture_on_commit_callbacks(execute=True):
                ledger.set_stock(product.id, SUPPLIER_ID, 7)

        assert exploding.calls == 1
        product.refresh_from_db()
        assert product.available_quantity == 7
        assert any(
            "notification.dispatch_failed" in record.getMessage()
            for record in caplog.records
        )
