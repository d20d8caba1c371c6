import json

import httpx
import pytest
from kungfu import Error, Ok

from cartflow.api import (
    ApiError,
    ApiErrorKind,
    CheckoutIn,
    OrderDetailIn,
    StorefrontClient,
)
from cartflow.config import Settings

from conftest import API_URL, FakeStorefront, fail_with, respond


def _checkout_body() -> CheckoutIn:
    return CheckoutIn(
        total_price=130_000,
        payment_method="cod",
        payment_status="UNPAID",
        full_name="Nguyen Van A",
        email="a@example.com",
        phone="0912345678",
        address="12 Ly Thuong Kiet, 100000, Hanoi",
        order_details=[OrderDetailIn(product_id=1, quantity=2, price=50_000)],
    )


async def _kind_of(computation) -> ApiErrorKind:
    match await computation:
        case Error(ApiError(kind=kind)):
            return kind
        case other:
            pytest.fail(f"expected ApiError, got {other!r}")


@pytest.mark.asyncio
async def test_get_product_parses_stock(server: FakeStorefront, client: StorefrontClient) -> None:
    server.products[1] = {"id": 1, "name": "Coffee", "price": 50000, "quantity": 7, "extra": "ignored"}

    match await client.get_product(1):
        case Ok(product):
            assert product.quantity == 7
            assert product.name == "Coffee"
        case Error(err):
            pytest.fail(f"expected Ok, got {err}")


@pytest.mark.asyncio
async def test_bearer_token_is_sent(server: FakeStorefront, client: StorefrontClient) -> None:
    server.products[1] = {"quantity": 1}
    await client.get_product(1)
    assert server.requests[0].headers["Authorization"] == "Bearer test-token"


@pytest.mark.asyncio
async def test_no_token_no_header(server: FakeStorefront) -> None:
    server.products[1] = {"quantity": 1}
    async with StorefrontClient(Settings(api_url=API_URL), transport=httpx.MockTransport(server)) as client:
        await client.get_product(1)
    assert "Authorization" not in server.requests[0].headers


@pytest.mark.parametrize(
    ("status", "kind"),
    [
        (401, ApiErrorKind.AUTH_EXPIRED),
        (403, ApiErrorKind.AUTH_EXPIRED),
        (404, ApiErrorKind.NOT_FOUND),
        (400, ApiErrorKind.REJECTED),
        (500, ApiErrorKind.REJECTED),
    ],
)
@pytest.mark.asyncio
async def test_status_mapping(
    server: FakeStorefront, client: StorefrontClient, status: int, kind: ApiErrorKind
) -> None:
    server.overrides["/api/products/1"] = respond(status, {"message": "nope"})
    assert await _kind_of(client.get_product(1)) is kind


@pytest.mark.asyncio
async def test_error_message_and_retryable(server: FakeStorefront, client: StorefrontClient) -> None:
    server.overrides["/api/checkout"] = respond(409, {"message": "Product 1 is out of stock"})
    server.overrides["/api/products/1"] = respond(502, "bad gateway")

    match await client.checkout(_checkout_body()):
        case Error(err):
            assert err == ApiError(ApiErrorKind.REJECTED, "Product 1 is out of stock", 409)
            assert not err.retryable
        case Ok(body):
            pytest.fail(f"expected Error, got {body}")

    match await client.get_product(1):
        case Error(err):
            assert err.message == "bad gateway"
            assert err.retryable
        case Ok(body):
            pytest.fail(f"expected Error, got {body}")


@pytest.mark.asyncio
async def test_unexpected_body_is_invalid_response(
    server: FakeStorefront, client: StorefrontClient
) -> None:
    server.products[1] = {"name": "no stock field"}
    assert await _kind_of(client.get_product(1)) is ApiErrorKind.INVALID_RESPONSE


@pytest.mark.asyncio
async def test_reads_are_retried_on_transport_errors(
    server: FakeStorefront, client: StorefrontClient
) -> None:
    attempts = []

    def flaky(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        if len(attempts) < 3:
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(200, json={"quantity": 4})

    server.overrides["/api/products/1"] = flaky

    match await client.get_product(1):
        case Ok(product):
            assert product.quantity == 4
        case Error(err):
            pytest.fail(f"expected Ok, got {err}")
    assert len(attempts) == 3


@pytest.mark.asyncio
async def test_retries_are_bounded(server: FakeStorefront, client: StorefrontClient) -> None:
    server.overrides["/api/products/1"] = fail_with(httpx.ReadTimeout)

    match await client.get_product(1):
        case Error(ApiError(kind=ApiErrorKind.NETWORK) as err):
            assert err.retryable
            assert err.status is None
        case other:
            pytest.fail(f"expected NETWORK error, got {other!r}")
    assert len(server.calls("GET", "/api/products/1")) == 3


@pytest.mark.asyncio
async def test_checkout_is_never_retried(server: FakeStorefront, client: StorefrontClient) -> None:
    server.overrides["/api/checkout"] = fail_with(httpx.ReadTimeout)

    assert await _kind_of(client.checkout(_checkout_body())) is ApiErrorKind.NETWORK
    assert len(server.checkout_calls) == 1


@pytest.mark.asyncio
async def test_checkout_sends_camel_case_body(server: FakeStorefront, client: StorefrontClient) -> None:
    match await client.checkout(_checkout_body()):
        case Ok(confirmation):
            assert confirmation.order_id == 101
        case Error(err):
            pytest.fail(f"expected Ok, got {err}")

    body = json.loads(server.checkout_calls[0].content)
    assert body["totalPrice"] == 130_000
    assert body["paymentStatus"] == "UNPAID"
    assert body["transactionId"] is None
    assert body["status"] == "pending"
    assert body["orderDetails"] == [{"productId": 1, "quantity": 2, "price": 50_000}]


@pytest.mark.asyncio
async def test_checkout_without_body_still_confirms(
    server: FakeStorefront, client: StorefrontClient
) -> None:
    server.overrides["/api/checkout"] = lambda request: httpx.Response(200, text="OK")

    match await client.checkout(_checkout_body()):
        case Ok(confirmation):
            assert confirmation.order_id is None
        case Error(err):
            pytest.fail(f"expected Ok, got {err}")


@pytest.mark.asyncio
async def test_validate_coupon_and_addresses(server: FakeStorefront, client: StorefrontClient) -> None:
    server.coupons["SALE"] = {"couponId": 2, "discountPercentage": 15.5}
    server.addresses = [{"addressId": 1, "address": "1 Main St", "city": "Hue", "postalCode": "53000"}]

    coupon = await client.validate_coupon("SALE")
    addresses = await client.list_addresses()

    match coupon, addresses:
        case Ok(c), Ok([a]):
            assert c.coupon_id == 2
            assert str(c.discount_percentage) == "15.5"
            assert a.postal_code == "53000"
        case other:
            pytest.fail(f"unexpected {other!r}")
