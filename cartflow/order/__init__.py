"""
Order — pricing and single-flight order submission.

    from cartflow import order

    order.compute_totals(lines, Decimal("10"))       # Totals
    composer = order.OrderComposer(client, cart, selection, coupons)
    result = await composer.submit(None, contact, order.PaymentMethod.VNPAY)
"""

from cartflow.order._types import (
    PaymentMethod,
    Totals,
    OrderLine,
    OrderRequest,
    OrderConfirmation,
    CheckoutState,
    OnPending,
)
from cartflow.order._pricing import (
    DEFAULT_FREE_SHIPPING_THRESHOLD,
    DEFAULT_SHIPPING_FEE,
    ShippingPolicy,
    subtotal,
    discount,
    shipping_fee,
    compute_totals,
)
from cartflow.order._composer import (
    transaction_marker,
    checkout_failure,
    CheckoutAttempt,
    OrderComposer,
)

__all__ = (
    # Types
    "PaymentMethod",
    "Totals",
    "OrderLine",
    "OrderRequest",
    "OrderConfirmation",
    "CheckoutState",
    "OnPending",
    # Pricing
    "DEFAULT_FREE_SHIPPING_THRESHOLD",
    "DEFAULT_SHIPPING_FEE",
    "ShippingPolicy",
    "subtotal",
    "discount",
    "shipping_fee",
    "compute_totals",
    # Composer
    "transaction_marker",
    "checkout_failure",
    "CheckoutAttempt",
    "OrderComposer",
)
