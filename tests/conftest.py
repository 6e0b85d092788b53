from decimal import Decimal

import pytest

from modules.coupons.repositories.django_repository import CouponDjangoRepository
from modules.coupons.services import CouponService
from modules.inventory.models import Product, ProductStatus
from modules.inventory.notifications import StockNotifier
from modules.inventory.repositories.django_repository import ProductDjangoRepository
from modules.inventory.services import InventoryLedger
from modules.orders.notifications import OrderNotifier
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from shared.infrastructure.notifications import InMemoryNotificationDispatcher

SUPPLIER_ID = "supplier-1"
OTHER_SUPPLIER_ID = "supplier-2"
VENDOR_ID = "vendor-1"
OTHER_VENDOR_ID = "vendor-2"


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def make_product():
    """Factory for active products owned by ``SUPPLIER_ID`` by default."""
    counter = {"n": 0}

    def _make(**overrides) -> Product:
        counter["n"] += 1
        values = {
            "sku": f"SKU-{counter['n']:03d}",
            "name": f"Product {counter['n']}",
            "supplier_id": SUPPLIER_ID,
            "price": Decimal("10.00"),
            "available_quantity": 100,
            "min_bulk_quantity": 5,
            "discount_percent": Decimal("0"),
            "status": ProductStatus.ACTIVE,
        }
        values.update(overrides)
        return Product.objects.create(**values)

    return _make


@pytest.fixture()
def product(make_product):
    """Price 10, bulk 20% off from 5 units, 10 units in stock."""
    return make_product(
        sku="WIDGET",
        name="Widget",
        available_quantity=10,
        discount_percent=Decimal("20"),
    )


@pytest.fixture()
def dispatcher():
    return InMemoryNotificationDispatcher()


@pytest.fixture()
def ledger(dispatcher):
    return InventoryLedger(ProductDjangoRepository(), notifier=StockNotifier(dispatcher))


@pytest.fixture()
def coupon_service():
    return CouponService(CouponDjangoRepository())


@pytest.fixture()
def service(ledger, coupon_service, dispatcher):
    return OrderService(
        order_repository=OrderDjangoRepository(),
        inventory=ledger,
        coupons=coupon_service,
        notifier=OrderNotifier(dispatcher),
    )
