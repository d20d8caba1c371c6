import json
from pathlib import Path

import pytest

from cartflow.address import AddressRecord
from cartflow.cart import (
    CART_KEY,
    SELECTED_ADDRESS_KEY,
    AddressSelectionStore,
    CartError,
    CartLine,
    CartStore,
    JsonFileStorage,
    MemoryStorage,
)


def test_add_then_readd_merges_quantity(cart: CartStore) -> None:
    cart.add(1, unit_price=50_000, quantity=2, name="Coffee")
    merged = cart.add(1, unit_price=55_000, quantity=3)

    assert merged == CartLine(1, 55_000, 5, "Coffee")
    assert cart.lines() == (merged,)
    assert cart.item_count() == 5
    assert cart.subtotal() == 275_000


def test_lines_keep_insertion_order(cart: CartStore) -> None:
    cart.add(3, 10)
    cart.add(1, 20)
    cart.add(2, 30)
    assert [line.product_id for line in cart.lines()] == [3, 1, 2]


@pytest.mark.parametrize("quantity", [0, -1])
def test_add_rejects_non_positive_quantity(cart: CartStore, quantity: int) -> None:
    with pytest.raises(CartError):
        cart.add(1, 10, quantity)
    assert cart.is_empty


def test_add_rejects_negative_price(cart: CartStore) -> None:
    with pytest.raises(CartError):
        cart.add(1, -5)


@pytest.mark.parametrize("price", [10.5, "100", True])
def test_add_rejects_non_integer_price(cart: CartStore, price: object) -> None:
    with pytest.raises(CartError):
        cart.add(1, price)
    assert cart.is_empty


def test_set_quantity(cart: CartStore) -> None:
    cart.add(1, 10, 4)
    assert cart.set_quantity(1, 2).quantity == 2

    with pytest.raises(CartError):
        cart.set_quantity(1, 0)
    with pytest.raises(CartError):
        cart.set_quantity(99, 1)
    assert cart.get(1) == CartLine(1, 10, 2)


def test_remove_and_clear(cart: CartStore) -> None:
    cart.add(1, 10)
    cart.add(2, 20)

    assert cart.remove(1) is True
    assert cart.remove(1) is False
    assert [line.product_id for line in cart.lines()] == [2]

    cart.clear()
    assert cart.is_empty
    assert cart.subtotal() == 0


def test_revision_bumps_on_every_mutation(cart: CartStore) -> None:
    start = cart.revision
    cart.add(1, 10)
    cart.set_quantity(1, 3)
    cart.remove(1)
    cart.clear()
    assert cart.revision == start + 4


def test_cart_is_stored_under_cart_key(storage: MemoryStorage, cart: CartStore) -> None:
    cart.add(7, 12_000, 2, "Tea")
    assert storage.get(CART_KEY) == [{"id": 7, "name": "Tea", "price": 12_000, "quantity": 2}]


def test_cart_reads_string_ids_and_skips_malformed_entries() -> None:
    storage = MemoryStorage({
        CART_KEY: [
            {"id": "4", "name": "Cake", "price": 30_000, "quantity": 1},
            {"name": "broken"},
        ],
    })
    assert CartStore(storage).lines() == (CartLine(4, 30_000, 1, "Cake"),)


def test_cart_skips_entries_it_would_never_write() -> None:
    storage = MemoryStorage({
        CART_KEY: [
            {"id": 1, "price": 1000, "quantity": 0},
            {"id": 2, "price": 1000, "quantity": -3},
            {"id": 3, "price": -1, "quantity": 1},
            {"id": 4, "price": 0, "quantity": 1},
        ],
    })
    cart = CartStore(storage)

    assert cart.lines() == (CartLine(4, 0, 1),)
    assert cart.item_count() == 1


def test_memory_storage_returns_copies() -> None:
    storage = MemoryStorage()
    value = [{"id": 1}]
    storage.set("k", value)
    value.append({"id": 2})
    storage.get("k").append({"id": 3})
    assert storage.get("k") == [{"id": 1}]


def test_json_file_storage_survives_restart(tmp_path: Path) -> None:
    path = tmp_path / "state" / "cartflow.json"
    CartStore(JsonFileStorage(path)).add(1, 99_000, 2, "Rice")

    reopened = CartStore(JsonFileStorage(path))
    assert reopened.lines() == (CartLine(1, 99_000, 2, "Rice"),)
    assert json.loads(path.read_text(encoding="utf-8"))[CART_KEY][0]["quantity"] == 2


def test_json_file_storage_treats_garbage_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "cartflow.json"
    path.write_text("{not json", encoding="utf-8")
    storage = JsonFileStorage(path)

    assert storage.get(CART_KEY) is None
    storage.set("x", 1)
    assert storage.get("x") == 1


def test_json_file_storage_clear_missing_key_is_noop(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path / "cartflow.json")
    storage.clear(CART_KEY)
    assert not storage.path.exists()


def test_address_selection_round_trip(storage: MemoryStorage, selection: AddressSelectionStore) -> None:
    record = AddressRecord(5, "12 Ly Thuong Kiet", "Hanoi", "100000", "2024-05-01")
    assert selection.get() is None

    selection.select(record)
    assert storage.get(SELECTED_ADDRESS_KEY)["addressId"] == 5
    assert selection.get() == record

    selection.clear()
    assert selection.get() is None


def test_address_selection_without_id_is_ignored() -> None:
    storage = MemoryStorage({SELECTED_ADDRESS_KEY: {}})
    assert AddressSelectionStore(storage).get() is None
