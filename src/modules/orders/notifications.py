"""Order change notifications.

Turns placed orders and status transitions into ``order_created`` /
``order_status_changed`` events and hands them to the notification
dispatcher, addressed to both the vendor and the supplier.

Dispatch is scheduled with ``transaction.on_commit``: nothing is sent for
a rolled-back transaction, and a dispatcher failure is logged and dropped
so it can never undo or block the order change.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from django.db import transaction

from modules.orders.dtos import OrderOutputDTO
from modules.orders.events import OrderCreated, OrderStatusChanged

if TYPE_CHECKING:
    from modules.orders.models import Order
    from shared.domain.events import DomainEvent
    from shared.domain.notifications import INotificationDispatcher

logger = structlog.get_logger(__name__)


class OrderNotifier:
    def __init__(self, dispatcher: INotificationDispatcher) -> None:
        self._dispatcher = dispatcher

    def order_created(self, order: Order) -> None:
        event = OrderCreated(
            aggregate_id=order.id,
            order=_snapshot(order),
        )
        self._schedule(event, order)

    def order_status_changed(
        self, order: Order, previous_status: str, new_status: str
    ) -> None:
        event = OrderStatusChanged(
            aggregate_id=order.id,
            previous_status=previous_status,
            new_status=new_status,
            order=_snapshot(order),
        )
        self._schedule(event, order)

    def _schedule(self, event: DomainEvent, order: Order) -> None:
        recipients = list(dict.fromkeys([order.vendor_id, order.supplier_id]))
        transaction.on_commit(lambda: self._dispatch(event, recipients))

    def _dispatch(self, event: DomainEvent, recipients: list[str]) -> None:
        payload = event.to_payload()
        payload["order_id"] = str(event.aggregate_id)
        for recipient in recipients:
            try:
                self._dispatcher.publish(recipient, event.event_name, payload)
            except Exception:
                logger.exception(
                    "notification.dispatch_failed",
                    recipient=recipient,
                    notification=event.event_name,
                    order_id=payload["order_id"],
                )


def _snapshot(order: Order) -> dict:
    return OrderOutputDTO.from_entity(order).model_dump(mode="json")
