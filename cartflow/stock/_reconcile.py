"""
Stock reconciliation — compare requested quantities against live stock.

Fan-out one GET /products/{id} per distinct product, fan-in after every
fetch has settled. The result is advisory: the order endpoint has the
final say.

    match await StockReconciler(client).reconcile(cart.lines()):
        case Ok(check) if check.ok:
            ...
        case Ok(check):
            report(check.shortfalls)
        case Error(err):
            retry_later(err)       # NetworkError / AuthExpired
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from kungfu import Error, LazyCoroResult, Ok, Result

from cartflow import lift
from cartflow._errors import AuthExpired, NetworkError, Shortfall
from cartflow.api import ApiErrorKind, StorefrontClient
from cartflow.cart._types import CartLine
from cartflow.stock._types import StockCheck, StockSnapshot

logger = logging.getLogger(__name__)


def requested_quantities(lines: Iterable[CartLine]) -> dict[int, int]:
    """Total requested quantity per product, in first-seen order."""
    requested: dict[int, int] = {}
    for line in lines:
        requested[line.product_id] = requested.get(line.product_id, 0) + line.quantity
    return requested


class StockReconciler:
    """Checks cart lines against the product service."""

    def __init__(self, client: StorefrontClient) -> None:
        self._client = client

    def reconcile(
        self,
        lines: Iterable[CartLine],
    ) -> LazyCoroResult[StockCheck, NetworkError | AuthExpired]:
        lines = tuple(lines)
        requested = requested_quantities(lines)
        names = {line.product_id: line.name for line in lines}
        client = self._client

        async def impl() -> Result[StockCheck, NetworkError | AuthExpired]:
            product_ids = list(requested)
            match await lift.wait_all([client.get_product(pid) for pid in product_ids]):
                case Ok(outcomes):
                    pass
                case Error(reason):
                    logger.error("stock lookup crashed: %s", reason)
                    return Error(NetworkError("check_stock", f"stock lookup failed: {reason}"))

            snapshots: list[StockSnapshot] = []
            failed: list[int] = []
            auth_expired: AuthExpired | None = None

            for product_id, outcome in zip(product_ids, outcomes, strict=True):
                match outcome:
                    case Ok(product):
                        snapshots.append(StockSnapshot(
                            product_id,
                            product.quantity,
                            product.name or names.get(product_id, ""),
                        ))
                    case Error(err) if err.kind is ApiErrorKind.NOT_FOUND:
                        # Gone from the catalogue: nothing left to buy.
                        snapshots.append(StockSnapshot(product_id, 0, names.get(product_id, "")))
                    case Error(err) if err.kind is ApiErrorKind.AUTH_EXPIRED:
                        auth_expired = AuthExpired(err.message)
                    case Error(err):
                        logger.warning("stock lookup for %s failed: %s", product_id, err.message)
                        failed.append(product_id)

            if auth_expired is not None:
                return Error(auth_expired)
            if failed:
                return Error(NetworkError(
                    "check_stock",
                    "could not verify stock for products " + ", ".join(map(str, failed)),
                ))

            shortfalls = tuple(
                Shortfall(s.product_id, requested[s.product_id], s.available_quantity, s.name)
                for s in snapshots
                if requested[s.product_id] > s.available_quantity
            )
            if shortfalls:
                logger.info("stock shortfall for %d product(s)", len(shortfalls))
            return Ok(StockCheck(tuple(snapshots), shortfalls))

        return LazyCoroResult(impl)


__all__ = (
    "requested_quantities",
    "StockReconciler",
)
