"""
Order types — payment, pricing results, the order request.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, StrEnum, auto
from typing import Any

from cartflow._types import Amount
from cartflow.address._types import Contact
from cartflow.api._schemas import CheckoutIn, OrderDetailIn


# ═══════════════════════════════════════════════════════════════════════════════
# Payment
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentMethod(StrEnum):
    """Payment methods accepted by the order endpoint."""

    COD = "cod"
    CREDIT_CARD = "credit_card"
    VNPAY = "vnpay"

    @property
    def label(self) -> str:
        return _PAYMENT_LABELS[self]

    @property
    def payment_status(self) -> str:
        """Cash on delivery is paid later; every other method is paid upfront."""
        return "UNPAID" if self is PaymentMethod.COD else "PAID"

    @property
    def needs_transaction(self) -> bool:
        return self is not PaymentMethod.COD


_PAYMENT_LABELS = {
    PaymentMethod.COD: "Cash on delivery",
    PaymentMethod.CREDIT_CARD: "Credit card",
    PaymentMethod.VNPAY: "VNPay",
}


# ═══════════════════════════════════════════════════════════════════════════════
# Pricing
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Totals:
    """
    Price breakdown in whole currency units.

    Invariant: total == subtotal - discount + shipping_fee, total >= 0.
    """

    subtotal: Amount
    discount: Amount
    shipping_fee: Amount
    total: Amount


# ═══════════════════════════════════════════════════════════════════════════════
# Order Request / Confirmation
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OrderLine:
    product_id: int
    quantity: int
    price: Amount


@dataclass(frozen=True, slots=True)
class OrderRequest:
    """The immutable order as it is submitted. Built once per attempt."""

    lines: tuple[OrderLine, ...]
    totals: Totals
    coupon_id: int | None
    shipping_address: str
    payment_method: PaymentMethod
    transaction_id: str | None
    contact: Contact
    note: str = ""
    status: str = "pending"
    user_id: int | None = None

    @property
    def total_price(self) -> Amount:
        return self.totals.total

    @property
    def payment_status(self) -> str:
        return self.payment_method.payment_status

    def to_payload(self) -> CheckoutIn:
        return CheckoutIn(
            user_id=self.user_id,
            total_price=self.total_price,
            coupon_id=self.coupon_id,
            status=self.status,
            payment_method=self.payment_method.value,
            payment_status=self.payment_status,
            transaction_id=self.transaction_id,
            full_name=self.contact.full_name,
            email=self.contact.email,
            phone=self.contact.phone,
            address=self.shipping_address,
            note=self.note,
            order_details=[
                OrderDetailIn(product_id=line.product_id, quantity=line.quantity, price=line.price)
                for line in self.lines
            ],
        )


@dataclass(frozen=True, slots=True)
class OrderConfirmation:
    """A persisted order. order_id is None if the server did not echo one."""

    order_id: int | str | None
    request: OrderRequest
    raw: dict[str, Any]


# ═══════════════════════════════════════════════════════════════════════════════
# Attempt State
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutState(Enum):
    """
    State of one checkout attempt.

    Lifecycle:
        IDLE → VALIDATING_ADDRESS → VALIDATING_STOCK → COMPUTING → SUBMITTING
             → CONFIRMED
             → REJECTED (from any step)
    """

    IDLE = auto()
    VALIDATING_ADDRESS = auto()
    VALIDATING_STOCK = auto()
    COMPUTING = auto()
    SUBMITTING = auto()
    CONFIRMED = auto()
    REJECTED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in (CheckoutState.CONFIRMED, CheckoutState.REJECTED)


class OnPending(Enum):
    """
    What to do when submit() is called while an attempt is in flight.

    WAIT: Join the running attempt and return its result.
    FAIL: Return CheckoutInFlight immediately.
    """

    WAIT = auto()
    FAIL = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "PaymentMethod",
    "Totals",
    "OrderLine",
    "OrderRequest",
    "OrderConfirmation",
    "CheckoutState",
    "OnPending",
)
