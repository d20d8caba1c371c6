"""
Cart store — the cart and the selected address in client-local storage.

    cart = CartStore(JsonFileStorage(settings.storage_path))
    cart.add(7, unit_price=50_000, quantity=2, name="Coffee")
    cart.add(7, unit_price=50_000)          # merges → quantity 3
    cart.subtotal()                          # 150_000

Note: Reads always go to storage, so two stores over the same storage see
each other's writes. revision only counts writes made through this store.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from cartflow.address._types import AddressRecord
from cartflow.cart._storage import Storage
from cartflow.cart._types import (
    CART_KEY,
    SELECTED_ADDRESS_KEY,
    CartError,
    CartLine,
)

logger = logging.getLogger(__name__)


def _require_quantity(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise CartError(f"quantity must be a positive integer, got {quantity!r}")


def _require_price(unit_price: int) -> None:
    if isinstance(unit_price, bool) or not isinstance(unit_price, int) or unit_price < 0:
        raise CartError(f"unit price must be a non-negative integer, got {unit_price!r}")


# ═══════════════════════════════════════════════════════════════════════════════
# Cart Store
# ═══════════════════════════════════════════════════════════════════════════════


class CartStore:
    """Ordered cart lines, unique by product_id."""

    def __init__(self, storage: Storage) -> None:
        self._storage = storage
        self._revision = 0

    @property
    def revision(self) -> int:
        """Bumped on every mutation."""
        return self._revision

    @property
    def is_empty(self) -> bool:
        return not self.lines()

    def lines(self) -> tuple[CartLine, ...]:
        raw = self._storage.get(CART_KEY)
        if not isinstance(raw, list):
            return ()
        lines: list[CartLine] = []
        for entry in raw:
            try:
                lines.append(CartLine.from_json(entry))
            except (KeyError, TypeError, ValueError):
                logger.warning("dropping malformed cart entry: %r", entry)
        return tuple(lines)

    def get(self, product_id: int) -> CartLine | None:
        for line in self.lines():
            if line.product_id == product_id:
                return line
        return None

    def subtotal(self) -> int:
        return sum(line.line_total for line in self.lines())

    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines())

    # ───────────────────────────────────────────────────────────────────────────
    # Mutations
    # ───────────────────────────────────────────────────────────────────────────

    def add(
        self,
        product_id: int,
        unit_price: int,
        quantity: int = 1,
        name: str = "",
    ) -> CartLine:
        """Add a product. Re-adding merges quantities and refreshes the price."""
        _require_quantity(quantity)
        _require_price(unit_price)

        lines = list(self.lines())
        for i, line in enumerate(lines):
            if line.product_id == product_id:
                merged = replace(
                    line,
                    quantity=line.quantity + quantity,
                    unit_price=unit_price,
                    name=name or line.name,
                )
                lines[i] = merged
                self._write(lines)
                return merged

        added = CartLine(product_id, unit_price, quantity, name)
        lines.append(added)
        self._write(lines)
        return added

    def set_quantity(self, product_id: int, quantity: int) -> CartLine:
        _require_quantity(quantity)
        lines = list(self.lines())
        for i, line in enumerate(lines):
            if line.product_id == product_id:
                lines[i] = replace(line, quantity=quantity)
                self._write(lines)
                return lines[i]
        raise CartError(f"product {product_id} is not in the cart")

    def remove(self, product_id: int) -> bool:
        """Returns True if the product was in the cart."""
        lines = self.lines()
        kept = [line for line in lines if line.product_id != product_id]
        if len(kept) == len(lines):
            return False
        self._write(kept)
        return True

    def clear(self) -> None:
        self._storage.clear(CART_KEY)
        self._revision += 1
        logger.debug("cart cleared")

    def _write(self, lines: list[CartLine]) -> None:
        self._storage.set(CART_KEY, [line.to_json() for line in lines])
        self._revision += 1


# ═══════════════════════════════════════════════════════════════════════════════
# Address Selection Store
# ═══════════════════════════════════════════════════════════════════════════════


class AddressSelectionStore:
    """The saved address chosen for the next order."""

    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    def get(self) -> AddressRecord | None:
        raw: Any = self._storage.get(SELECTED_ADDRESS_KEY)
        if not isinstance(raw, dict) or raw.get("addressId") is None:
            return None
        try:
            return AddressRecord.from_json(raw)
        except ValueError:
            logger.warning("dropping malformed address selection: %r", raw)
            return None

    def select(self, record: AddressRecord) -> None:
        self._storage.set(SELECTED_ADDRESS_KEY, record.to_json())

    def clear(self) -> None:
        self._storage.clear(SELECTED_ADDRESS_KEY)


__all__ = (
    "CartStore",
    "AddressSelectionStore",
)
