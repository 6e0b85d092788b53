"""Order service layer (Use Cases).

Orchestrates order placement and the order status state machine.  All
write operations are atomic: the service defines the unit-of-work
boundary.

Business rules enforced:
- Every referenced product exists and is active.
- All items of an order belong to one supplier.
- Stock is reserved for every line or for none: a failure after partial
  reservation releases what was taken before the error propagates.
- Coupon errors and persistence errors also release the reservation.
- Status transitions follow ``VALID_TRANSITIONS`` and only the order's
  supplier may perform them; a row lock linearizes transitions per order.
- Cancellation returns every reserved unit to the ledger.
- Notifications go out after commit and never affect the outcome.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Dict, List, Optional
from uuid import UUID

import structlog
from django.db import transaction

from modules.core.exceptions import UnauthorizedError, ValidationError
from modules.orders.constants import ActorRole, OrderStatus
from modules.orders.exceptions import (
    InvalidTransitionError,
    MultiSupplierError,
    OrderNotFound,
)
from modules.orders.pricing import PricingConfig, price_order

if TYPE_CHECKING:
    from modules.coupons.services import CouponService
    from modules.inventory.models import Product
    from modules.inventory.services import InventoryLedger
    from modules.orders.dtos import (
        ListOrdersDTO,
        PlaceOrderDTO,
        UpdateOrderStatusDTO,
    )
    from modules.orders.models import Order
    from modules.orders.notifications import OrderNotifier
    from modules.orders.pricing import OrderPricing
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives repositories and collaborators via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        inventory: InventoryLedger,
        coupons: CouponService,
        notifier: OrderNotifier,
        pricing_config: Optional[PricingConfig] = None,
    ) -> None:
        self._order_repo = order_repository
        self._inventory = inventory
        self._coupons = coupons
        self._notifier = notifier
        self._pricing_config = pricing_config or PricingConfig.from_settings()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def place_order(self, dto: PlaceOrderDTO) -> Order:
        """Place an order: reserve, price, redeem, persist, notify.

        Steps:
        1. Reject an empty item list.
        2. Resolve products; reject unknown/inactive ones and orders that
           span more than one supplier.
        3. Reserve stock for every line (all or nothing).
        4. Price the order.
        5. Redeem the coupon, if any.
        6. Persist the order with its initial ``pending`` history entry.
        7. Schedule the ``order_created`` notification.

        Raises:
            ValidationError: the item list is empty.
            ProductNotFound: a product is missing or inactive.
            MultiSupplierError: items reference several suppliers.
            InsufficientStock: a line cannot be reserved.
            CouponError: the coupon was rejected.
            PersistenceError: the order could not be stored.
        """
        log = logger.bind(vendor_id=dto.vendor_id, item_count=len(dto.items))
        log.info("order.placement_started")

        if not dto.items:
            raise ValidationError("Order must have at least one item.")

        products = self._inventory.get_products(item.product_id for item in dto.items)
        supplier_id = _single_supplier(products)

        reservation = self._inventory.reserve_many(
            (item.product_id, item.quantity) for item in dto.items
        )
        try:
            pricing = price_order(
                ((products[item.product_id], item.quantity) for item in dto.items),
                dto.delivery_option,
                self._pricing_config,
            )
            if dto.coupon_code:
                redemption = self._coupons.redeem(dto.coupon_code, pricing.subtotal)
                pricing = pricing.with_coupon(redemption.discount)

            order = self._order_repo.create(
                _order_data(dto, supplier_id, products, pricing)
            )
        except Exception:
            # Compensate explicitly: the ledger is not assumed to share
            # this transaction.
            log.warning("order.placement_compensated")
            self._inventory.release_reservation(reservation)
            raise

        log.info(
            "order.placed",
            order_id=str(order.id),
            supplier_id=supplier_id,
            total=str(order.total),
        )
        self._notifier.order_created(order)
        return order

    @transaction.atomic
    def update_status(self, dto: UpdateOrderStatusDTO) -> Order:
        """Transition an order to a new status.

        Acquires a row-level lock (``SELECT FOR UPDATE``) on the order
        before validating the transition, so two concurrent requests from
        the same status cannot both succeed.  Cancelling releases the
        reserved stock.

        Raises:
            OrderNotFound: order does not exist.
            UnauthorizedError: the actor is not the order's supplier.
            InvalidTransitionError: transition is not allowed.
        """
        order = self._order_repo.get_for_update(str(dto.order_id))
        if not order:
            raise OrderNotFound(f"Order {dto.order_id} not found.")

        new_status = str(dto.new_status)
        log = logger.bind(
            order_id=str(dto.order_id),
            actor_id=dto.actor_id,
            current_status=order.status,
            new_status=new_status,
        )

        if order.supplier_id != dto.actor_id:
            log.warning("order.transition_forbidden")
            raise UnauthorizedError("Not authorized to update this order.")

        if not order.can_transition_to(new_status):
            log.warning("order.invalid_transition")
            raise InvalidTransitionError(
                f"Cannot transition from {order.status} to {new_status}."
            )

        if new_status == OrderStatus.CANCELLED:
            self._release_items(order)

        previous_status = order.status
        updated = self._order_repo.record_transition(
            order, new_status, dto.actor_id, dto.notes
        )

        log.info("order.status_updated")
        self._notifier.order_status_changed(updated, previous_status, new_status)
        return updated

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: UUID, actor_id: str) -> Order:
        """Retrieve a single order visible to *actor_id*.

        Raises:
            OrderNotFound: the order does not exist.
            UnauthorizedError: the actor is neither its vendor nor supplier.
        """
        order = self._order_repo.get_by_id(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        if not order.involves(actor_id):
            logger.warning(
                "order.read_forbidden", order_id=str(order_id), actor_id=actor_id
            )
            raise UnauthorizedError("Not authorized to view this order.")
        return order

    def list_orders(self, dto: ListOrdersDTO) -> List[Order]:
        """Return the actor's orders, newest first.

        Vendors see the orders they placed; suppliers see the orders
        addressed to them.
        """
        if dto.role == ActorRole.VENDOR:
            return self._order_repo.list({"vendor_id": dto.actor_id})
        return self._order_repo.list({"supplier_id": dto.actor_id})

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _release_items(self, order: Order) -> None:
        """Return every reserved unit of *order*, summed per product."""
        totals: Counter = Counter()
        for item in order.items.all():
            totals[item.product_id] += item.quantity
        for product_id in sorted(totals, key=str):
            self._inventory.release(product_id, totals[product_id])
        logger.info(
            "order.stock_released",
            order_id=str(order.id),
            products=len(totals),
        )


def _single_supplier(products: Dict[UUID, Product]) -> str:
    suppliers = {product.supplier_id for product in products.values()}
    if len(suppliers) != 1:
        raise MultiSupplierError(
            "All items of an order must come from a single supplier."
        )
    return suppliers.pop()


def _order_data(
    dto: PlaceOrderDTO,
    supplier_id: str,
    products: Dict[UUID, Product],
    pricing: OrderPricing,
) -> dict:
    return {
        "vendor_id": dto.vendor_id,
        "supplier_id": supplier_id,
        "delivery_option": str(dto.delivery_option),
        "subtotal": pricing.gross_subtotal,
        "item_discount": pricing.item_discount,
        "coupon_code": dto.coupon_code,
        "coupon_discount": pricing.coupon_discount,
        "delivery_fee": pricing.delivery_fee,
        "total": pricing.total,
        "items": [
            {
                "product_id": item.product_id,
                "product_name": products[item.product_id].name,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
                "discount_amount": line.discount,
            }
            for item, line in zip(dto.items, pricing.lines)
        ],
    }
