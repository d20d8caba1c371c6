"""
Order composer — turn the cart into exactly one submitted order.

One attempt runs a fixed sequence and stops at the first failing step:

    IDLE → VALIDATING_ADDRESS → VALIDATING_STOCK → COMPUTING → SUBMITTING
         → CONFIRMED | REJECTED

    composer = OrderComposer(client, cart, selection, coupons)
    match await composer.submit(address, contact, PaymentMethod.COD):
        case Ok(confirmation):
            show_success(confirmation.order_id)
        case Error(AuthExpired()):
            redirect_to_login()         # cart is kept
        case Error(err):
            show_error(err)             # cart is kept

Note: Only a confirmed order clears the cart, the address selection and
the applied coupon. Every other outcome leaves them untouched.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field

import pydantic
from kungfu import Error, LazyCoroResult, Ok, Result

from cartflow._errors import (
    AuthExpired,
    CheckoutAbandoned,
    CheckoutError,
    CheckoutInFlight,
    FieldViolation,
    NetworkError,
    ServerRejected,
    StockShortfallError,
    ValidationError,
    from_api_error,
)
from cartflow._types import Lazy
from cartflow.address import (
    AddressInput,
    Contact,
    SelectedAddress,
    ShippingAddress,
    resolve,
)
from cartflow.api import ApiError, ApiErrorKind, StorefrontClient
from cartflow.cart import AddressSelectionStore, CartLine, CartStore
from cartflow.coupon import AppliedCoupon, CouponResolver
from cartflow.order._pricing import ShippingPolicy, compute_totals
from cartflow.order._types import (
    CheckoutState,
    OnPending,
    OrderConfirmation,
    OrderLine,
    OrderRequest,
    PaymentMethod,
    Totals,
)
from cartflow.stock import StockReconciler

logger = logging.getLogger(__name__)

_attempt_ids = itertools.count(1)


def transaction_marker(clock: Callable[[], float] = time.time) -> str:
    """Opaque per-attempt payment reference: TRANS-<epoch ms>-<random hex>."""
    return f"TRANS-{int(clock() * 1000)}-{uuid.uuid4().hex[:8]}"


def checkout_failure(error: ApiError) -> ServerRejected | NetworkError | AuthExpired:
    """Map a POST /checkout failure."""
    match error.kind:
        case ApiErrorKind.REJECTED | ApiErrorKind.NOT_FOUND if not error.retryable:
            return ServerRejected(error.message, error.status)
        case ApiErrorKind.REJECTED:
            return NetworkError("checkout", "server error, please try again later")
        case _:
            return from_api_error(error, "checkout")


# ═══════════════════════════════════════════════════════════════════════════════
# Attempt
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True, eq=False)
class CheckoutAttempt:
    """
    One run of submit(). Owns its snapshot of cart and coupon.

    Note: Never reused. A new submit() always starts a new attempt with
    fresh address validation and freshly fetched stock.
    """

    attempt_id: int
    lines: tuple[CartLine, ...]
    cart_revision: int
    coupon: AppliedCoupon | None
    state: CheckoutState = CheckoutState.IDLE
    abandoned: str | None = None
    totals: Totals | None = None
    request: OrderRequest | None = None
    outcome: Result[OrderConfirmation, CheckoutError] | None = None
    started_at: float = field(default_factory=time.monotonic)

    @property
    def cancellable(self) -> bool:
        return self.state is not CheckoutState.SUBMITTING and not self.state.is_terminal


# ═══════════════════════════════════════════════════════════════════════════════
# Composer
# ═══════════════════════════════════════════════════════════════════════════════


class OrderComposer:
    """
    Single-flight checkout for one session.

    on_pending: what a second submit() does while one is running
    (see OnPending). FAIL by default.
    """

    def __init__(
        self,
        client: StorefrontClient,
        cart: CartStore,
        selection: AddressSelectionStore,
        coupons: CouponResolver,
        *,
        policy: ShippingPolicy | None = None,
        on_pending: OnPending = OnPending.FAIL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._cart = cart
        self._selection = selection
        self._coupons = coupons
        self._stock = StockReconciler(client)
        self._policy = policy or ShippingPolicy()
        self._on_pending = on_pending
        self._clock = clock
        self._current: CheckoutAttempt | None = None
        self._pending: asyncio.Future[Result[OrderConfirmation, CheckoutError]] | None = None
        self._last: CheckoutAttempt | None = None

    # ───────────────────────────────────────────────────────────────────────────
    # Inspection
    # ───────────────────────────────────────────────────────────────────────────

    @property
    def policy(self) -> ShippingPolicy:
        return self._policy

    @property
    def in_flight(self) -> bool:
        return self._current is not None

    @property
    def state(self) -> CheckoutState:
        attempt = self._current or self._last
        return attempt.state if attempt is not None else CheckoutState.IDLE

    @property
    def last_attempt(self) -> CheckoutAttempt | None:
        return self._last

    def quote(self) -> Totals:
        """Totals for the current cart and applied coupon. No network."""
        applied = self._coupons.applied
        return compute_totals(
            self._cart.lines(),
            applied.discount_percentage if applied else None,
            self._policy,
        )

    # ───────────────────────────────────────────────────────────────────────────
    # Abandonment
    # ───────────────────────────────────────────────────────────────────────────

    def abandon(self, reason: str = "checkout left") -> bool:
        """
        Abandon the running attempt before it submits.

        Returns False if nothing is running or the order is already being
        submitted (a submitted order cannot be called back).
        """
        attempt = self._current
        if attempt is None or not attempt.cancellable:
            return False
        attempt.abandoned = reason
        self._coupons.invalidate()
        logger.info("checkout attempt %d abandoned: %s", attempt.attempt_id, reason)
        return True

    def _check_abandoned(self, attempt: CheckoutAttempt) -> CheckoutAbandoned | None:
        if attempt.abandoned is None:
            if self._cart.revision != attempt.cart_revision or self._cart.lines() != attempt.lines:
                attempt.abandoned = "cart changed during checkout"
            elif self._coupons.applied != attempt.coupon:
                attempt.abandoned = "coupon changed during checkout"
        if attempt.abandoned is None:
            return None
        return CheckoutAbandoned(attempt.abandoned)

    # ───────────────────────────────────────────────────────────────────────────
    # Submit
    # ───────────────────────────────────────────────────────────────────────────

    def submit(
        self,
        address: AddressInput | None,
        contact: Contact,
        payment_method: PaymentMethod | str,
        note: str = "",
    ) -> Lazy[OrderConfirmation, CheckoutError]:
        """
        Compose and submit the order.

        address: None ships to the stored address selection.
        """

        async def impl() -> Result[OrderConfirmation, CheckoutError]:
            if self._pending is not None:
                if self._on_pending is OnPending.FAIL:
                    logger.warning("checkout submitted while another attempt is in flight")
                    return Error(CheckoutInFlight())
                return await asyncio.shield(self._pending)

            attempt = CheckoutAttempt(
                attempt_id=next(_attempt_ids),
                lines=self._cart.lines(),
                cart_revision=self._cart.revision,
                coupon=self._coupons.applied,
            )
            pending = asyncio.get_running_loop().create_future()
            self._current, self._pending = attempt, pending

            try:
                result = await self._run(attempt, address, contact, payment_method, note)
            except asyncio.CancelledError:
                attempt.state = CheckoutState.REJECTED
                pending.cancel()
                raise
            except Exception as e:
                attempt.state = CheckoutState.REJECTED
                pending.set_exception(e)
                # Joined callers re-raise it; mark it retrieved for the rest.
                pending.exception()
                raise
            else:
                attempt.outcome = result
                pending.set_result(result)
                return result
            finally:
                self._current, self._pending = None, None
                self._last = attempt

        return LazyCoroResult(impl)

    async def _run(
        self,
        attempt: CheckoutAttempt,
        address: AddressInput | None,
        contact: Contact,
        payment_method: PaymentMethod | str,
        note: str,
    ) -> Result[OrderConfirmation, CheckoutError]:
        def reject(error: CheckoutError) -> Result[OrderConfirmation, CheckoutError]:
            attempt.state = CheckoutState.REJECTED
            logger.warning(
                "checkout attempt %d rejected: %s",
                attempt.attempt_id, getattr(error, "message", error),
            )
            return Error(error)

        logger.info(
            "checkout attempt %d started: %d line(s)", attempt.attempt_id, len(attempt.lines),
        )

        if not attempt.lines:
            return reject(ValidationError.of("cart", "cart is empty, add products before checking out"))

        try:
            method = PaymentMethod(payment_method)
        except ValueError:
            return reject(ValidationError.of("payment_method", f"unknown payment method {payment_method!r}"))

        # Address
        self._advance(attempt, CheckoutState.VALIDATING_ADDRESS)
        if address is None:
            stored = self._selection.get()
            if stored is None:
                return reject(ValidationError.of("address", "choose a saved address or enter one"))
            address = SelectedAddress(stored)

        shipping: ShippingAddress
        match resolve(address, contact):
            case Ok(shipping):
                pass
            case Error(err):
                return reject(err)

        # Stock
        if abandoned := self._check_abandoned(attempt):
            return reject(abandoned)
        self._advance(attempt, CheckoutState.VALIDATING_STOCK)

        match await self._stock.reconcile(attempt.lines):
            case Ok(check) if not check.ok:
                return reject(StockShortfallError(check.shortfalls))
            case Ok(_):
                pass
            case Error(err):
                return reject(err)

        if abandoned := self._check_abandoned(attempt):
            return reject(abandoned)

        # Totals
        self._advance(attempt, CheckoutState.COMPUTING)
        coupon = attempt.coupon
        totals = compute_totals(
            attempt.lines,
            coupon.discount_percentage if coupon else None,
            self._policy,
        )
        request = OrderRequest(
            lines=tuple(
                OrderLine(line.product_id, line.quantity, line.unit_price)
                for line in attempt.lines
            ),
            totals=totals,
            coupon_id=coupon.coupon_id if coupon else None,
            shipping_address=shipping.canonical,
            payment_method=method,
            transaction_id=transaction_marker(self._clock) if method.needs_transaction else None,
            contact=contact,
            note=note,
        )
        attempt.totals, attempt.request = totals, request

        try:
            payload = request.to_payload()
        except pydantic.ValidationError as e:
            return reject(ValidationError(tuple(
                FieldViolation(".".join(str(part) for part in err["loc"]), err["msg"])
                for err in e.errors()
            )))

        if abandoned := self._check_abandoned(attempt):
            return reject(abandoned)

        # Submit
        self._advance(attempt, CheckoutState.SUBMITTING)
        match await self._client.checkout(payload):
            case Ok(body):
                pass
            case Error(api_error):
                return reject(checkout_failure(api_error))

        confirmation = OrderConfirmation(body.order_id, request, body.model_dump(by_alias=True))
        self._advance(attempt, CheckoutState.CONFIRMED)
        logger.info(
            "order %s confirmed: total=%s payment=%s",
            confirmation.order_id, totals.total, method.value,
        )

        self._cart.clear()
        self._selection.clear()
        self._coupons.remove()
        return Ok(confirmation)

    @staticmethod
    def _advance(attempt: CheckoutAttempt, state: CheckoutState) -> None:
        logger.debug("checkout attempt %d: %s → %s", attempt.attempt_id, attempt.state.name, state.name)
        attempt.state = state


__all__ = (
    "transaction_marker",
    "checkout_failure",
    "CheckoutAttempt",
    "OrderComposer",
)
