"""Bounded retry for repository writes.

Transient database failures (lock timeouts, dropped connections) surface as
``OperationalError``.  Each attempt runs inside its own savepoint so a failed
attempt never poisons the caller's transaction.  Integrity errors are not
transient and are reported immediately.
"""

from __future__ import annotations

from typing import Callable, Optional, TypeVar

import structlog
from django.conf import settings
from django.db import IntegrityError, OperationalError, transaction

from modules.core.exceptions import PersistenceError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def run_with_retry(operation: Callable[[], T], *, label: str) -> T:
    """Run *operation* up to ``PERSISTENCE_MAX_RETRIES`` times.

    Raises:
        PersistenceError: the integrity check failed or every attempt hit an
            operational error.
    """
    max_attempts = getattr(settings, "PERSISTENCE_MAX_RETRIES", 3)
    log = logger.bind(operation=label)
    last_error: Optional[OperationalError] = None

    for attempt in range(1, max_attempts + 1):
        try:
            with transaction.atomic():
                return operation()
        except IntegrityError as exc:
            log.error("persistence.integrity_error", error=str(exc))
            raise PersistenceError(f"{label} violated a storage constraint.") from exc
        except OperationalError as exc:
            log.warning(
                "persistence.retry",
                attempt=attempt,
                max_attempts=max_attempts,
                error=str(exc),
            )
            last_error = exc

    log.error("persistence.exhausted", max_attempts=max_attempts)
    raise PersistenceError(
        f"{label} failed after {max_attempts} attempts."
    ) from last_error
