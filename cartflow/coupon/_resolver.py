"""
Coupon resolution — validate a code against the coupon service.

Every apply() revalidates remotely; a previous success is never trusted.
Any failure clears the applied coupon.

    coupons = CouponResolver(client, cart)
    match await coupons.apply("SUMMER10", cart.subtotal()):
        case Ok(applied):
            coupons.discount_for(cart.subtotal())
        case Error(CouponRejected()):
            ...   # checkout continues without a discount

Note: Each apply()/remove() starts a new generation. A resolution that
finishes after a newer generation started, or after the cart changed, is
discarded and writes nothing.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from kungfu import Error, LazyCoroResult, Ok, Result

from cartflow._errors import (
    AuthExpired,
    CheckoutAbandoned,
    CouponRejected,
    NetworkError,
    ValidationError,
    from_api_error,
)
from cartflow.api import ApiError, ApiErrorKind, CouponOut, StorefrontClient
from cartflow.cart import CartLine, CartStore
from cartflow.coupon._types import AppliedCoupon

logger = logging.getLogger(__name__)

type CouponError = (
    ValidationError | CouponRejected | NetworkError | AuthExpired | CheckoutAbandoned
)

_MAX_PERCENTAGE = Decimal(100)


class CouponResolver:
    """
    Holds at most one applied coupon for the current session.

    cart: when given, a cart edit made while a code is being validated
    discards that resolution.
    """

    def __init__(self, client: StorefrontClient, cart: CartStore | None = None) -> None:
        self._client = client
        self._cart = cart
        self._applied: AppliedCoupon | None = None
        self._generation = 0

    @property
    def applied(self) -> AppliedCoupon | None:
        return self._applied

    @property
    def generation(self) -> int:
        return self._generation

    def discount_for(self, subtotal: int) -> int:
        """Absolute discount for this subtotal, 0 without a coupon."""
        # Import here to avoid circular import
        from cartflow.order._pricing import discount

        if self._applied is None:
            return 0
        return discount(subtotal, self._applied.discount_percentage)

    def remove(self) -> None:
        """Local reset. Any resolution still in flight is discarded."""
        self._generation += 1
        if self._applied is not None:
            logger.info("coupon %s removed", self._applied.code)
        self._applied = None

    def invalidate(self) -> None:
        """Discard in-flight resolutions, keep a completed one."""
        self._generation += 1

    def apply(self, code: str, subtotal: int) -> LazyCoroResult[AppliedCoupon, CouponError]:
        """
        Validate code remotely and make it the applied coupon.

        subtotal is only used for the log line; the discount is recomputed
        whenever it is needed.
        """
        code = code.strip()

        async def impl() -> Result[AppliedCoupon, CouponError]:
            self._generation += 1
            generation = self._generation

            if not code:
                self._applied = None
                return Error(ValidationError.of("coupon_code", "please enter a coupon code"))

            cart_before = self._cart_state()
            outcome = await self._client.validate_coupon(code)

            if generation != self._generation:
                logger.info("discarding stale resolution of coupon %s", code)
                return Error(CheckoutAbandoned("coupon state changed while validating"))
            if self._cart_state() != cart_before:
                logger.info("discarding resolution of coupon %s: cart changed", code)
                return Error(CheckoutAbandoned("cart changed while validating the coupon"))

            result = self._interpret(code, outcome)
            match result:
                case Ok(applied):
                    self._applied = applied
                    logger.info(
                        "coupon %s applied: %s%% off subtotal %s",
                        code, applied.discount_percentage, subtotal,
                    )
                case Error(err):
                    self._applied = None
                    logger.warning("coupon %s not applied: %s", code, err.message)
            return result

        return LazyCoroResult(impl)

    def _cart_state(self) -> tuple[int, tuple[CartLine, ...]] | None:
        # lines catch writes made through another store over the same storage
        if self._cart is None:
            return None
        return self._cart.revision, self._cart.lines()

    @staticmethod
    def _interpret(
        code: str,
        outcome: Result[CouponOut, ApiError],
    ) -> Result[AppliedCoupon, CouponError]:
        match outcome:
            case Ok(coupon):
                percentage = coupon.discount_percentage
                if not (0 < percentage <= _MAX_PERCENTAGE):
                    return Error(CouponRejected(code, f"invalid discount percentage {percentage}"))
                return Ok(AppliedCoupon(coupon.coupon_id, coupon.code or code, percentage))
            case Error(err) if err.kind in (ApiErrorKind.NOT_FOUND, ApiErrorKind.REJECTED):
                if err.retryable:
                    return Error(from_api_error(err, "validate_coupon"))
                return Error(CouponRejected(code))
            case Error(err):
                return Error(from_api_error(err, "validate_coupon"))


__all__ = (
    "CouponError",
    "CouponResolver",
)
