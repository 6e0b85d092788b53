"""Stock level notifications.

A supplier's stock overwrite is announced to every vendor as a
``product_stock_updated`` event on the vendors channel, after commit.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from django.db import transaction

from modules.inventory.constants import VENDORS_CHANNEL
from modules.inventory.events import ProductStockUpdated

if TYPE_CHECKING:
    from modules.inventory.models import Product
    from shared.domain.notifications import INotificationDispatcher

logger = structlog.get_logger(__name__)


class StockNotifier:
    def __init__(self, dispatcher: INotificationDispatcher) -> None:
        self._dispatcher = dispatcher

    def stock_updated(self, product: Product) -> None:
        event = ProductStockUpdated(
            aggregate_id=product.id,
            new_stock=product.available_quantity,
            product_name=product.name,
        )
        transaction.on_commit(lambda: self._dispatch(event))

    def _dispatch(self, event: ProductStockUpdated) -> None:
        payload = event.to_payload()
        payload["product_id"] = str(event.aggregate_id)
        try:
            self._dispatcher.publish(VENDORS_CHANNEL, event.event_name, payload)
        except Exception:
            logger.exception(
                "notification.dispatch_failed",
                recipient=VENDORS_CHANNEL,
                notification=event.event_name,
                product_id=payload["product_id"],
            )
