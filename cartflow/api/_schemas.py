"""
Wire schemas — one explicit model per endpoint.

The storefront API speaks camelCase JSON; models accept either spelling
and always serialize by alias.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def _blank_if_none(value: Any) -> Any:
    return "" if value is None else value


_Text = Annotated[str, BeforeValidator(_blank_if_none)]


# ═══════════════════════════════════════════════════════════════════════════════
# Responses
# ═══════════════════════════════════════════════════════════════════════════════


class ProductOut(WireModel):
    """GET /products/{id} — only stock is authoritative here."""

    quantity: int
    name: _Text = ""
    price: Decimal | None = None


class CouponOut(WireModel):
    """GET /coupons/validate?code=..."""

    coupon_id: int
    discount_percentage: Decimal
    code: str | None = None


class AddressOut(WireModel):
    """One entry of GET /address."""

    address_id: int
    address: str
    city: str
    postal_code: _Text = ""
    created_at: str | None = None


class UserOut(WireModel):
    """GET /auth/me — contact prefill."""

    full_name: _Text = ""
    email: _Text = ""
    phone: _Text = ""


class CheckoutOut(WireModel):
    """POST /checkout success body. Unknown fields are kept."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    order_id: int | str | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Requests
# ═══════════════════════════════════════════════════════════════════════════════


class OrderDetailIn(WireModel):
    product_id: int
    quantity: int = Field(..., gt=0)
    price: int = Field(..., ge=0)


class CheckoutIn(WireModel):
    """POST /checkout body."""

    user_id: int | None = None
    total_price: int = Field(..., ge=0)
    coupon_id: int | None = None
    status: str = "pending"
    payment_method: str
    payment_status: str
    transaction_id: str | None = None
    full_name: str
    email: str
    phone: str
    address: str
    note: str = ""
    order_details: list[OrderDetailIn]

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


__all__ = (
    "WireModel",
    "ProductOut",
    "CouponOut",
    "AddressOut",
    "UserOut",
    "CheckoutOut",
    "OrderDetailIn",
    "CheckoutIn",
)
