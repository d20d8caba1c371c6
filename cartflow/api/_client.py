"""
Storefront API client — httpx transport, typed outcomes.

Every method returns a LazyCoroResult: nothing is sent until awaited, and
awaiting never raises for remote failures. Failures come back as ApiError
values tagged with an ApiErrorKind.

    async with StorefrontClient(settings) as client:
        match await client.get_product(7):
            case Ok(product):
                print(product.quantity)
            case Error(err):
                print(err.kind, err.message)

Note: Reads are retried on transport failures (tenacity). POST /checkout
is sent exactly once per call.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

import httpx
from kungfu import Error, LazyCoroResult, Ok, Result
from pydantic import TypeAdapter
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from cartflow.api._schemas import (
    AddressOut,
    CheckoutIn,
    CheckoutOut,
    CouponOut,
    ProductOut,
    UserOut,
)
from cartflow._types import Remote
from cartflow.api._types import ApiError, ApiErrorKind
from cartflow.config import Settings

logger = logging.getLogger(__name__)

_ADDRESS_LIST = TypeAdapter(list[AddressOut])


# ═══════════════════════════════════════════════════════════════════════════════
# Response Handling
# ═══════════════════════════════════════════════════════════════════════════════


def _error_message(response: httpx.Response) -> str:
    """Best-effort server message from an error response."""
    try:
        data = response.json()
    except ValueError:
        text = response.text.strip()
        return text or f"HTTP {response.status_code}"

    if isinstance(data, dict):
        for field in ("message", "error", "detail"):
            value = data.get(field)
            if isinstance(value, str) and value:
                return value
    if isinstance(data, str) and data:
        return data
    return f"HTTP {response.status_code}"


def _status_error(operation: str, response: httpx.Response) -> ApiError:
    status = response.status_code
    message = _error_message(response)
    if status in (401, 403):
        return ApiError(ApiErrorKind.AUTH_EXPIRED, message, status)
    if status == 404:
        return ApiError(ApiErrorKind.NOT_FOUND, f"{operation}: {message}", status)
    return ApiError(ApiErrorKind.REJECTED, message, status)


def _parse_confirmation(response: httpx.Response) -> CheckoutOut:
    # The order exists once the server said 2xx, body or not.
    try:
        data = response.json()
    except ValueError:
        data = {}
    return CheckoutOut.model_validate(data if isinstance(data, dict) else {})


# ═══════════════════════════════════════════════════════════════════════════════
# Client
# ═══════════════════════════════════════════════════════════════════════════════


class StorefrontClient:
    """
    Async client for the storefront REST API.

    transport: optional httpx transport (httpx.MockTransport in tests).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings if settings is not None else Settings.from_env()
        headers = {"Accept": "application/json"}
        if self._settings.api_token:
            headers["Authorization"] = f"Bearer {self._settings.api_token}"
        self._http = httpx.AsyncClient(
            base_url=self._settings.api_url,
            timeout=self._settings.request_timeout,
            headers=headers,
            transport=transport,
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> StorefrontClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    # ───────────────────────────────────────────────────────────────────────────
    # Endpoints
    # ───────────────────────────────────────────────────────────────────────────

    def get_product(self, product_id: int) -> Remote[ProductOut, ApiError]:
        """GET /products/{id}"""
        return self._read(
            f"get_product({product_id})",
            f"/products/{product_id}",
            lambda r: ProductOut.model_validate(r.json()),
        )

    def validate_coupon(self, code: str) -> Remote[CouponOut, ApiError]:
        """GET /coupons/validate?code=..."""
        return self._read(
            "validate_coupon",
            "/coupons/validate",
            lambda r: CouponOut.model_validate(r.json()),
            params={"code": code},
        )

    def list_addresses(self) -> Remote[list[AddressOut], ApiError]:
        """GET /address"""
        return self._read(
            "list_addresses",
            "/address",
            lambda r: _ADDRESS_LIST.validate_python(r.json()),
        )

    def get_me(self) -> Remote[UserOut, ApiError]:
        """GET /auth/me"""
        return self._read(
            "get_me",
            "/auth/me",
            lambda r: UserOut.model_validate(r.json()),
        )

    def checkout(self, body: CheckoutIn) -> Remote[CheckoutOut, ApiError]:
        """POST /checkout — never retried."""
        payload = body.to_json()

        async def impl() -> Result[CheckoutOut, ApiError]:
            logger.debug("POST /checkout total=%s", payload["totalPrice"])
            return await self._exchange(
                "checkout",
                lambda: self._http.post("/checkout", json=payload),
                _parse_confirmation,
            )

        return LazyCoroResult(impl)

    # ───────────────────────────────────────────────────────────────────────────
    # Plumbing
    # ───────────────────────────────────────────────────────────────────────────

    def _read[T](
        self,
        operation: str,
        path: str,
        parse: Callable[[httpx.Response], T],
        params: dict[str, str] | None = None,
    ) -> LazyCoroResult[T, ApiError]:
        async def impl() -> Result[T, ApiError]:
            logger.debug("GET %s", path)
            return await self._exchange(
                operation,
                lambda: self._get_with_retry(path, params),
                parse,
            )

        return LazyCoroResult(impl)

    async def _get_with_retry(
        self, path: str, params: dict[str, str] | None
    ) -> httpx.Response:
        retrying = AsyncRetrying(
            reraise=True,
            stop=stop_after_attempt(max(self._settings.retry_attempts, 1)),
            wait=wait_exponential(
                multiplier=self._settings.retry_wait,
                min=self._settings.retry_wait,
                max=3,
            ),
            retry=retry_if_exception_type(httpx.TransportError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
        )
        return await retrying(self._http.get, path, params=params)

    async def _exchange[T](
        self,
        operation: str,
        send: Callable[[], Awaitable[httpx.Response]],
        parse: Callable[[httpx.Response], T],
    ) -> Result[T, ApiError]:
        try:
            response = await send()
        except httpx.TimeoutException as e:
            logger.warning("%s timed out: %s", operation, e)
            return Error(ApiError(ApiErrorKind.NETWORK, f"{operation} timed out"))
        except httpx.TransportError as e:
            logger.warning("%s failed: %s", operation, e)
            return Error(ApiError(ApiErrorKind.NETWORK, f"{operation} failed: {e}"))

        if not response.is_success:
            error = _status_error(operation, response)
            logger.warning("%s -> %s %s", operation, response.status_code, error.kind.name)
            return Error(error)

        try:
            return Ok(parse(response))
        except ValueError as e:
            # json.JSONDecodeError and pydantic.ValidationError are both ValueError
            logger.warning("%s returned an unexpected body: %s", operation, e)
            return Error(ApiError(
                ApiErrorKind.INVALID_RESPONSE,
                f"{operation}: unexpected response body",
                response.status_code,
            ))


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("StorefrontClient",)