"""
Cart — client-local cart and address selection.

    from cartflow import cart

    store = cart.CartStore(cart.MemoryStorage())
    store.add(1, unit_price=120_000, quantity=2)
    store.lines()      # (CartLine(product_id=1, unit_price=120000, quantity=2),)
"""

from cartflow.cart._types import (
    CART_KEY,
    SELECTED_ADDRESS_KEY,
    CartError,
    CartLine,
)
from cartflow.cart._storage import (
    Storage,
    MemoryStorage,
    JsonFileStorage,
)
from cartflow.cart._store import (
    CartStore,
    AddressSelectionStore,
)

__all__ = (
    # Types
    "CART_KEY",
    "SELECTED_ADDRESS_KEY",
    "CartError",
    "CartLine",
    # Storage
    "Storage",
    "MemoryStorage",
    "JsonFileStorage",
    # Stores
    "CartStore",
    "AddressSelectionStore",
)
