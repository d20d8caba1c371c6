"""
cartflow — cart-to-order composition for a storefront client.

    from cartflow import cart     # Client-local cart + address selection
    from cartflow import coupon   # Coupon resolution
    from cartflow import address  # Shipping address resolution
    from cartflow import stock    # Stock reconciliation
    from cartflow import order    # Pricing + single-flight submission
"""

import logging

from cartflow import api
from cartflow import address
from cartflow import cart
from cartflow import stock
from cartflow import coupon
from cartflow import order
from cartflow import lift
from cartflow.config import Settings
from cartflow._types import (
    Lazy,
    Remote,
    Amount,
    Percentage,
)
from cartflow._errors import (
    FieldViolation,
    ValidationError,
    Shortfall,
    StockShortfallError,
    CouponRejected,
    NetworkError,
    AuthExpired,
    ServerRejected,
    CheckoutInFlight,
    CheckoutAbandoned,
    CheckoutError,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = (
    # Subpackages
    "api",
    "address",
    "cart",
    "stock",
    "coupon",
    "order",
    "lift",
    # Config
    "Settings",
    # Types
    "Lazy",
    "Remote",
    "Amount",
    "Percentage",
    # Errors
    "FieldViolation",
    "ValidationError",
    "Shortfall",
    "StockShortfallError",
    "CouponRejected",
    "NetworkError",
    "AuthExpired",
    "ServerRejected",
    "CheckoutInFlight",
    "CheckoutAbandoned",
    "CheckoutError",
)
