"""Asynchronous tasks of the core module."""

import structlog
from celery import shared_task

logger = structlog.get_logger(__name__)


@shared_task(name="notifications.deliver", ignore_result=True)
def deliver_notification(recipient, event, payload):
    """Deliver a notification to the real-time transport.

    The transport (socket sessions, push gateways) lives outside this
    service.  This task is the hand-off point: it runs off the request path
    and records the delivery.
    """
    logger.info(
        "notification.delivered",
        recipient=recipient,
        notification=event,
        order_id=payload.get("order_id"),
    )
    return {"recipient": recipient, "event": event}
