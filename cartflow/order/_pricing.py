"""
Pricing — deterministic integer arithmetic, no I/O.

    totals = compute_totals(lines, Decimal("10"), ShippingPolicy())
    totals.total    # subtotal - discount + shipping_fee
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from decimal import ROUND_FLOOR, Decimal

from cartflow._types import Amount, Percentage
from cartflow.cart._types import CartLine
from cartflow.order._types import Totals

DEFAULT_FREE_SHIPPING_THRESHOLD = 200_000
DEFAULT_SHIPPING_FEE = 30_000


# ═══════════════════════════════════════════════════════════════════════════════
# Shipping Policy
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ShippingPolicy:
    """
    Flat-fee shipping, free from a subtotal threshold upward.

    Example:
        policy = (
            ShippingPolicy()
            .with_threshold(300_000)
            .with_fee(25_000)
        )

    Note: Immutable, each method returns a new policy.
    The threshold applies to the subtotal before discount.
    """

    free_threshold: Amount = DEFAULT_FREE_SHIPPING_THRESHOLD
    flat_fee: Amount = DEFAULT_SHIPPING_FEE

    def with_threshold(self, threshold: int) -> ShippingPolicy:
        if threshold < 0:
            raise ValueError("threshold must not be negative")
        return replace(self, free_threshold=threshold)

    def with_fee(self, fee: int) -> ShippingPolicy:
        if fee < 0:
            raise ValueError("fee must not be negative")
        return replace(self, flat_fee=fee)

    def fee_for(self, subtotal: Amount) -> Amount:
        return 0 if subtotal >= self.free_threshold else self.flat_fee


# ═══════════════════════════════════════════════════════════════════════════════
# Arithmetic
# ═══════════════════════════════════════════════════════════════════════════════


def subtotal(lines: Iterable[CartLine]) -> Amount:
    return sum(line.unit_price * line.quantity for line in lines)


def discount(subtotal: Amount, percentage: Percentage | None) -> Amount:
    """
    subtotal * percentage / 100, floored to a whole unit.

    Never more than the subtotal; no coupon or a non-positive rate is 0.
    """
    if percentage is None or percentage <= 0:
        return 0
    amount = (Decimal(subtotal) * Decimal(percentage) / 100).to_integral_value(ROUND_FLOOR)
    return min(int(amount), subtotal)


def shipping_fee(subtotal: Amount, policy: ShippingPolicy | None = None) -> Amount:
    return (policy or ShippingPolicy()).fee_for(subtotal)


def compute_totals(
    lines: Iterable[CartLine],
    percentage: Percentage | None = None,
    policy: ShippingPolicy | None = None,
) -> Totals:
    sub = subtotal(lines)
    off = discount(sub, percentage)
    fee = shipping_fee(sub, policy)
    return Totals(sub, off, fee, max(sub - off + fee, 0))


__all__ = (
    "DEFAULT_FREE_SHIPPING_THRESHOLD",
    "DEFAULT_SHIPPING_FEE",
    "ShippingPolicy",
    "subtotal",
    "discount",
    "shipping_fee",
    "compute_totals",
)
