"""
Cart types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

CART_KEY = "cart"
SELECTED_ADDRESS_KEY = "selectedAddress"


class CartError(ValueError):
    """Invalid cart operation (bad quantity, unknown product)."""


@dataclass(frozen=True, slots=True)
class CartLine:
    """
    One product in the cart.

    Note: unit_price is the price at the time the product was added.
    Only stock is revalidated at checkout, never price.
    """

    product_id: int
    unit_price: int
    quantity: int
    name: str = ""

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.product_id,
            "name": self.name,
            "price": self.unit_price,
            "quantity": self.quantity,
        }

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> CartLine:
        """Raises ValueError for entries the cart itself would never write."""
        # Product ids were stored as strings by older clients.
        line = cls(
            product_id=int(data["id"]),
            unit_price=int(data["price"]),
            quantity=int(data["quantity"]),
            name=str(data.get("name") or ""),
        )
        if line.quantity < 1:
            raise ValueError(f"quantity must be at least 1, got {line.quantity}")
        if line.unit_price < 0:
            raise ValueError(f"price must not be negative, got {line.unit_price}")
        return line


__all__ = (
    "CART_KEY",
    "SELECTED_ADDRESS_KEY",
    "CartError",
    "CartLine",
)
