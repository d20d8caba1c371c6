import asyncio
import re
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio

from cartflow.api import StorefrontClient
from cartflow.cart import AddressSelectionStore, CartStore, MemoryStorage
from cartflow.config import Settings
from cartflow.coupon import CouponResolver

API_URL = "http://shop.test/api"

_PRODUCT_PATH = re.compile(r"^/api/products/(\d+)$")


class FakeStorefront:
    """
    In-memory storefront API behind httpx.MockTransport.

    Set products/coupons/addresses for the happy path, or put a callable in
    `overrides[path]` to answer a path differently (it may raise httpx errors).
    An Event in `gates[path]` holds requests to that path until it is set.
    """

    def __init__(self) -> None:
        self.products: dict[int, dict[str, Any]] = {}
        self.coupons: dict[str, dict[str, Any]] = {}
        self.addresses: list[dict[str, Any]] = []
        self.me: dict[str, Any] = {
            "fullName": "Nguyen Van A",
            "email": "a@example.com",
            "phone": "0912345678",
        }
        self.order_id = 101
        self.overrides: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.requests: list[httpx.Request] = []

    # ── inspection ──

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    @property
    def checkout_calls(self) -> list[httpx.Request]:
        return self.calls("POST", "/api/checkout")

    def product_calls(self) -> list[httpx.Request]:
        return [r for r in self.requests if _PRODUCT_PATH.match(r.url.path)]

    # ── handler ──

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if (gate := self.gates.get(path)) is not None:
            await gate.wait()

        if path in self.overrides:
            return self.overrides[path](request)

        if request.method == "POST" and path == "/api/checkout":
            return httpx.Response(200, json={"orderId": self.order_id, "status": "pending"})

        if match := _PRODUCT_PATH.match(path):
            product = self.products.get(int(match.group(1)))
            if product is None:
                return httpx.Response(404, json={"message": "Product not found"})
            return httpx.Response(200, json=product)

        if path == "/api/coupons/validate":
            coupon = self.coupons.get(request.url.params.get("code", ""))
            if coupon is None:
                return httpx.Response(400, json={"message": "Coupon is invalid or expired"})
            return httpx.Response(200, json=coupon)

        if path == "/api/address":
            return httpx.Response(200, json=self.addresses)

        if path == "/api/auth/me":
            return httpx.Response(200, json=self.me)

        return httpx.Response(404, json={"message": f"no route for {path}"})


def respond(status: int, body: Any = None) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(status, json=body)


def fail_with(exc_type: type[httpx.TransportError]) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc_type("boom", request=request)
    return handler


@pytest.fixture
def settings() -> Settings:
    return Settings(api_url=API_URL, api_token="test-token", retry_attempts=3, retry_wait=0)


@pytest.fixture
def server() -> FakeStorefront:
    return FakeStorefront()


@pytest_asyncio.fixture
async def client(settings: Settings, server: FakeStorefront) -> AsyncIterator[StorefrontClient]:
    async with StorefrontClient(settings, transport=httpx.MockTransport(server)) as client:
        yield client


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def cart(storage: MemoryStorage) -> CartStore:
    return CartStore(storage)


@pytest.fixture
def selection(storage: MemoryStorage) -> AddressSelectionStore:
    return AddressSelectionStore(storage)


@pytest.fixture
def coupons(client: StorefrontClient, cart: CartStore) -> CouponResolver:
    return CouponResolver(client, cart)


async def until(predicate: Callable[[], bool], *, spins: int = 1000) -> None:
    """Yield to the event loop until predicate() holds."""
    for _ in range(spins):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")
