"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
import re
from collections.abc import Callable, Coroutine

import httpx

from cartflow.api import StorefrontClient
from cartflow.config import Settings

_PRODUCT = re.compile(r"/api/products/(\d+)$")

# Demo catalogue: product id → stock
STOCK = {1: 12, 2: 3, 3: 40}

COUPONS = {
    "WELCOME10": {"couponId": 1, "discountPercentage": 10},
    "HALF": {"couponId": 2, "discountPercentage": 50},
}

_order_ids = iter(range(1001, 10_000))


def demo_storefront(request: httpx.Request) -> httpx.Response:
    """A tiny in-process storefront API."""
    path = request.url.path

    if match := _PRODUCT.search(path):
        product_id = int(match.group(1))
        if product_id not in STOCK:
            return httpx.Response(404, json={"message": "Product not found"})
        return httpx.Response(200, json={"id": product_id, "quantity": STOCK[product_id]})

    if path.endswith("/coupons/validate"):
        coupon = COUPONS.get(request.url.params.get("code", ""))
        if coupon is None:
            return httpx.Response(400, json={"message": "Coupon is invalid or expired"})
        return httpx.Response(200, json=coupon)

    if path.endswith("/address"):
        return httpx.Response(200, json=[
            {"addressId": 7, "address": "12 Ly Thuong Kiet", "city": "Hanoi", "postalCode": "100000"},
        ])

    if path.endswith("/auth/me"):
        return httpx.Response(200, json={
            "fullName": "Nguyen Van A", "email": "a@example.com", "phone": "0912345678",
        })

    if path.endswith("/checkout") and request.method == "POST":
        return httpx.Response(200, json={"orderId": next(_order_ids)})

    return httpx.Response(404, json={"message": "not found"})


def demo_client() -> StorefrontClient:
    settings = Settings(api_url="http://demo.local/api", api_token="demo", retry_wait=0)
    return StorefrontClient(settings, transport=httpx.MockTransport(demo_storefront))


def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    asyncio.run(main())
