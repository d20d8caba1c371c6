"""
Coupon types.
"""

from __future__ import annotations

from dataclasses import dataclass

from cartflow._types import Percentage


@dataclass(frozen=True, slots=True)
class AppliedCoupon:
    """
    A coupon the server accepted.

    Note: Only the percentage is kept. The absolute discount is always
    recomputed from the current subtotal.
    """

    coupon_id: int
    code: str
    discount_percentage: Percentage


__all__ = ("AppliedCoupon",)
