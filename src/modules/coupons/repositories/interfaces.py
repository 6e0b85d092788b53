"""Coupon repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.coupons.models import Coupon


class ICouponRepository(IRepository["Coupon"]):
    """Repository contract for coupons.

    ``get_for_update`` and ``increment_usage`` must be called inside the
    same transaction: the row lock taken by the first makes the usage check
    and the increment a single unit per code.
    """

    @abstractmethod
    def save(self, entity: "Coupon") -> "Coupon":
        """Persist (create or update) a coupon."""

    @abstractmethod
    def get_by_code(self, code: str) -> Optional["Coupon"]:
        """Retrieve a coupon by its (normalised) code."""

    @abstractmethod
    def get_for_update(self, code: str) -> Optional["Coupon"]:
        """Retrieve a coupon by code with a row-level lock."""

    @abstractmethod
    def increment_usage(self, id: UUID) -> bool:
        """Add one use; ``False`` when the usage limit is already reached."""
