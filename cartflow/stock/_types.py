"""
Stock types.
"""

from __future__ import annotations

from dataclasses import dataclass

from cartflow._errors import Shortfall


@dataclass(frozen=True, slots=True)
class StockSnapshot:
    """Available quantity as reported by the product service for one attempt."""

    product_id: int
    available_quantity: int
    name: str = ""


@dataclass(frozen=True, slots=True)
class StockCheck:
    """Outcome of a completed reconciliation."""

    snapshots: tuple[StockSnapshot, ...]
    shortfalls: tuple[Shortfall, ...]

    @property
    def ok(self) -> bool:
        return not self.shortfalls


__all__ = (
    "Shortfall",
    "StockSnapshot",
    "StockCheck",
)
