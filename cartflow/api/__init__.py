"""
API — typed client for the storefront REST API.

    from cartflow import api

    async with api.StorefrontClient(settings) as client:
        result = await client.get_product(7)   # Result[ProductOut, ApiError]
"""

from cartflow.api._types import (
    ApiErrorKind,
    ApiError,
)
from cartflow.api._schemas import (
    ProductOut,
    CouponOut,
    AddressOut,
    UserOut,
    CheckoutOut,
    OrderDetailIn,
    CheckoutIn,
)
from cartflow.api._client import StorefrontClient

__all__ = (
    # Errors
    "ApiErrorKind",
    "ApiError",
    # Schemas
    "ProductOut",
    "CouponOut",
    "AddressOut",
    "UserOut",
    "CheckoutOut",
    "OrderDetailIn",
    "CheckoutIn",
    # Client
    "StorefrontClient",
)
