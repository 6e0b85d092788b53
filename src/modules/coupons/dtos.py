"""Coupon DTOs for the Service Layer.

- ``CheckCouponDTO``: input for a coupon check against an order subtotal.
- ``CouponCheckOutputDTO``: the normalized code and the discount it grants.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CheckCouponDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    order_subtotal: Decimal = Field(ge=0)

    @field_validator("code")
    @classmethod
    def code_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Coupon code is required.")
        return v.strip()


class CouponCheckOutputDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    discount: Decimal
