"""
Coupon — resolve a coupon code into a discount percentage.
"""

from cartflow.coupon._types import AppliedCoupon
from cartflow.coupon._resolver import (
    CouponError,
    CouponResolver,
)

__all__ = (
    "AppliedCoupon",
    "CouponError",
    "CouponResolver",
)
