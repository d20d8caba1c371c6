import pytest
from kungfu import Error, Ok

from cartflow import AuthExpired, ValidationError
from cartflow.address import (
    AddressFields,
    AddressForm,
    AddressRecord,
    Contact,
    ManualAddress,
    SelectedAddress,
    ShippingAddress,
    load_addresses,
    load_contact,
    resolve,
)
from cartflow.api import StorefrontClient

from conftest import FakeStorefront, respond

CONTACT = Contact("Nguyen Van A", "a@example.com", "0912345678")
RECORD = AddressRecord(5, "12 Ly Thuong Kiet", "Hanoi", "100000")


def _fields_of(result) -> set[str]:
    match result:
        case Error(ValidationError() as err):
            return set(err.fields)
        case other:
            pytest.fail(f"expected ValidationError, got {other!r}")


def test_selected_address_is_copied_verbatim() -> None:
    match resolve(SelectedAddress(RECORD), CONTACT):
        case Ok(shipping):
            assert shipping == ShippingAddress("12 Ly Thuong Kiet", "100000", "Hanoi", address_id=5)
            assert shipping.canonical == "12 Ly Thuong Kiet, 100000, Hanoi"
        case Error(err):
            pytest.fail(f"expected Ok, got {err}")


def test_selected_address_mismatch_names_the_stored_address() -> None:
    shown = AddressFields("99 Other Street", "100000", "Hanoi")
    match resolve(SelectedAddress(RECORD, shown=shown), CONTACT):
        case Error(ValidationError(violations=violations)):
            assert [v.field for v in violations] == ["address"]
            assert "12 Ly Thuong Kiet, 100000, Hanoi" in violations[0].message
        case other:
            pytest.fail(f"expected mismatch, got {other!r}")


def test_manual_address_requires_every_field() -> None:
    result = resolve(ManualAddress(AddressFields("  ", "", "Hanoi")), CONTACT)
    assert _fields_of(result) == {"address_line", "postal_code"}


def test_manual_address_is_trimmed() -> None:
    match resolve(ManualAddress(AddressFields(" 1 Main St ", "10000", " Hue ")), CONTACT):
        case Ok(shipping):
            assert shipping.canonical == "1 Main St, 10000, Hue"
            assert shipping.address_id is None
        case Error(err):
            pytest.fail(f"expected Ok, got {err}")


@pytest.mark.parametrize(
    ("contact", "field"),
    [
        (Contact("", "a@example.com", "0912345678"), "full_name"),
        (Contact("A", "not-an-email", "0912345678"), "email"),
        (Contact("A", "a@example", "0912345678"), "email"),
        (Contact("A", "a@example.com", "091234567"), "phone"),
        (Contact("A", "a@example.com", "09123456789"), "phone"),
        (Contact("A", "a@example.com", "09123-4567"), "phone"),
    ],
)
def test_contact_rules(contact: Contact, field: str) -> None:
    assert _fields_of(resolve(SelectedAddress(RECORD), contact)) == {field}


def test_all_violations_are_reported_together() -> None:
    result = resolve(ManualAddress(AddressFields()), Contact())
    assert _fields_of(result) == {
        "full_name", "email", "phone", "address_line", "postal_code", "city",
    }


def test_form_selection_populates_and_locks_fields() -> None:
    form = AddressForm()
    form.select(RECORD)

    assert form.locked
    assert form.fields == AddressFields("12 Ly Thuong Kiet", "100000", "Hanoi")

    match form.update(city="Da Nang"):
        case Error(ValidationError()):
            pass
        case other:
            pytest.fail(f"locked form accepted an edit: {other!r}")
    assert form.fields.city == "Hanoi"

    match resolve(form.to_input(), CONTACT):
        case Ok(shipping):
            assert shipping.address_id == 5
        case Error(err):
            pytest.fail(f"expected Ok, got {err}")


def test_form_manual_mode_unlocks_and_clears() -> None:
    form = AddressForm(RECORD)
    form.use_manual()

    assert not form.locked
    assert form.fields == AddressFields()
    assert _fields_of(resolve(form.to_input(), CONTACT)) == {"address_line", "postal_code", "city"}

    assert isinstance(form.update(address_line="1 Main St", postal_code="10000", city="Hue"), Ok)
    assert isinstance(form.to_input(), ManualAddress)
    assert isinstance(resolve(form.to_input(), CONTACT), Ok)


def test_form_rejects_unknown_fields() -> None:
    with pytest.raises(TypeError):
        AddressForm().update(street="x")


@pytest.mark.asyncio
async def test_load_addresses(server: FakeStorefront, client: StorefrontClient) -> None:
    server.addresses = [
        {"addressId": 5, "address": "12 Ly Thuong Kiet", "city": "Hanoi",
         "postalCode": "100000", "createdAt": "2024-05-01"},
        {"addressId": 6, "address": "3 Tran Phu", "city": "Hue", "postalCode": None},
    ]

    match await load_addresses(client):
        case Ok(records):
            assert [r.address_id for r in records] == [5, 6]
            assert records[0].canonical == "12 Ly Thuong Kiet, 100000, Hanoi"
            assert records[1].postal_code == ""
        case Error(err):
            pytest.fail(f"expected Ok, got {err}")


@pytest.mark.asyncio
async def test_load_contact(client: StorefrontClient) -> None:
    match await load_contact(client):
        case Ok(contact):
            assert contact == Contact("Nguyen Van A", "a@example.com", "0912345678")
        case Error(err):
            pytest.fail(f"expected Ok, got {err}")


@pytest.mark.asyncio
async def test_load_contact_auth_expired(server: FakeStorefront, client: StorefrontClient) -> None:
    server.overrides["/api/auth/me"] = respond(401, {"message": "token expired"})

    match await load_contact(client):
        case Error(AuthExpired()):
            pass
        case other:
            pytest.fail(f"expected AuthExpired, got {other!r}")
