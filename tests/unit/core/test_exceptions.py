import pytest

from modules.core.exceptions import DomainError, NotFoundError, ValidationError
from modules.coupons.exceptions import CouponError, CouponNotFound
from modules.inventory.exceptions import InsufficientStock, ProductNotFound
from modules.orders.exceptions import (
    InvalidTransitionError,
    MultiSupplierError,
    OrderNotFound,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "error_class, code",
    [
        (ValidationError, "validation_error"),
        (ProductNotFound, "not_found"),
        (OrderNotFound, "not_found"),
        (InsufficientStock, "insufficient_stock"),
        (MultiSupplierError, "multi_supplier"),
        (InvalidTransitionError, "invalid_transition"),
        (CouponNotFound, "coupon_not_found"),
    ],
)
def test_error_codes(error_class, code):
    error = error_class("boom")
    assert isinstance(error, DomainError)
    assert error.to_dict() == {"code": code, "message": "boom"}


def test_coupon_not_found_is_both_coupon_and_not_found_error():
    error = CouponNotFound("SAVE10")
    assert isinstance(error, CouponError)
    assert isinstance(error, NotFoundError)
