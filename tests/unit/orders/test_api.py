"""Unit tests for the inbound operations in ``modules.orders.api``."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from modules.core.exceptions import DomainError, UnauthorizedError, ValidationError
from modules.orders import api
from modules.orders.dtos import OrderOutputDTO
from modules.orders.exceptions import OrderNotFound
from tests.conftest import OTHER_VENDOR_ID, SUPPLIER_ID, VENDOR_ID

pytestmark = pytest.mark.unit


@pytest.fixture()
def placed(service, product):
    return api.place_order(
        VENDOR_ID,
        [{"product_id": str(product.id), "quantity": 5}],
        service=service,
    )


class TestPlaceOrder:
    def test_returns_output_dto(self, placed):
        assert isinstance(placed, OrderOutputDTO)
        assert placed.total == Decimal("48.00")
        assert placed.discount == Decimal("10.00")
        assert placed.status == "pending"
        assert [h.status for h in placed.status_history] == ["pending"]
        assert placed.items[0].quantity == 5

    def test_empty_items(self, service):
        with pytest.raises(ValidationError, match="items"):
            api.place_order(VENDOR_ID, [], service=service)

    def test_missing_items(self, service):
        with pytest.raises(ValidationError, match="items"):
            api.place_order(VENDOR_ID, None, service=service)

    def test_non_iterable_items(self, service):
        with pytest.raises(ValidationError, match="items"):
            api.place_order(VENDOR_ID, 42, service=service)

    def test_items_may_be_any_iterable(self, service, product):
        lines = ({"product_id": str(product.id), "quantity": q} for q in (1, 2))

        order = api.place_order(VENDOR_ID, lines, service=service)

        assert [item.quantity for item in order.items] == [1, 2]

    def test_zero_quantity(self, service, product):
        with pytest.raises(ValidationError, match="quantity"):
            api.place_order(
                VENDOR_ID,
                [{"product_id": str(product.id), "quantity": 0}],
                service=service,
            )

    def test_malformed_product_id(self, service):
        with pytest.raises(ValidationError):
            api.place_order(
                VENDOR_ID, [{"product_id": "not-a-uuid", "quantity": 1}], service=service
            )

    def test_unknown_delivery_option(self, service, product):
        with pytest.raises(ValidationError, match="delivery_option"):
            api.place_order(
                VENDOR_ID,
                [{"product_id": str(product.id), "quantity": 1}],
                delivery_option="drone",
                service=service,
            )

    def test_errors_are_domain_errors(self, service):
        with pytest.raises(DomainError) as exc_info:
            api.place_order("", [], service=service)
        assert exc_info.value.code == "validation_error"


class TestUpdateOrderStatus:
    def test_transition(self, service, placed):
        result = api.update_order_status(
            placed.id, SUPPLIER_ID, "confirmed", "ok", service=service
        )
        assert result.status == "confirmed"
        assert result.status_history[-1].notes == "ok"
        assert result.status_history[-1].old_status == "pending"

    def test_unknown_status_is_validation_error(self, service, placed):
        with pytest.raises(ValidationError, match="new_status"):
            api.update_order_status(placed.id, SUPPLIER_ID, "teleported", service=service)


class TestGetOrders:
    def test_vendor_listing(self, service, placed):
        orders = api.get_orders(VENDOR_ID, "vendor", service=service)
        assert [o.id for o in orders] == [placed.id]

    def test_supplier_listing(self, service, placed):
        orders = api.get_orders(SUPPLIER_ID, "supplier", service=service)
        assert [o.id for o in orders] == [placed.id]

    def test_unknown_role(self, service):
        with pytest.raises(ValidationError, match="role"):
            api.get_orders(VENDOR_ID, "admin", service=service)


class TestGetOrderById:
    def test_accepts_string_id(self, service, placed):
        result = api.get_order_by_id(str(placed.id), VENDOR_ID, service=service)
        assert result.id == placed.id

    def test_stranger(self, service, placed):
        with pytest.raises(UnauthorizedError):
            api.get_order_by_id(placed.id, OTHER_VENDOR_ID, service=service)

    def test_malformed_id(self, service):
        with pytest.raises(ValidationError):
            api.get_order_by_id("nope", VENDOR_ID, service=service)

    def test_unknown(self, service):
        with pytest.raises(OrderNotFound):
            api.get_order_by_id(uuid4(), VENDOR_ID, service=service)


def test_build_order_service_uses_configured_dispatcher(product):
    service = api.build_order_service()
    order = service.place_order(
        api.PlaceOrderDTO(
            vendor_id=VENDOR_ID,
            items=[{"product_id": product.id, "quantity": 1}],
        )
    )
    assert order.total == Decimal("18.00")
