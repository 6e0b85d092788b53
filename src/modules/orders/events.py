"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict

from modules.orders.constants import (
    NOTIFICATION_ORDER_CREATED,
    NOTIFICATION_ORDER_STATUS_CHANGED,
)
from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    """Raised when an order is placed."""

    name: ClassVar[str] = NOTIFICATION_ORDER_CREATED

    order: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised when an order moves to a new status."""

    name: ClassVar[str] = NOTIFICATION_ORDER_STATUS_CHANGED

    previous_status: str = ""
    new_status: str = ""
    order: Dict[str, Any] = field(default_factory=dict)
