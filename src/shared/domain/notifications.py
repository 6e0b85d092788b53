"""Notification dispatcher port.

The core never manages transport sessions or connection registries; it
hands event payloads to an injected dispatcher and moves on.  No delivery
order or durability guarantee is assumed.
"""

from __future__ import annotations

from typing import Any, Dict, Protocol


class INotificationDispatcher(Protocol):
    """Fire-and-forget publisher of events addressed to a single actor."""

    def publish(self, recipient: str, event: str, payload: Dict[str, Any]) -> None: ...
