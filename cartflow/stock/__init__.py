"""
Stock — revalidate cart quantities against the product service.

    from cartflow import stock

    result = await stock.StockReconciler(client).reconcile(lines)
"""

from cartflow.stock._types import (
    Shortfall,
    StockSnapshot,
    StockCheck,
)
from cartflow.stock._reconcile import (
    requested_quantities,
    StockReconciler,
)

__all__ = (
    "Shortfall",
    "StockSnapshot",
    "StockCheck",
    "requested_quantities",
    "StockReconciler",
)
