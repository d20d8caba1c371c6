"""
Address types — saved records, form fields, resolved shipping address.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from cartflow.api._schemas import AddressOut, UserOut


def canonical(address_line: str, postal_code: str, city: str) -> str:
    """The single-line address form sent with an order."""
    return f"{address_line}, {postal_code}, {city}"


# ═══════════════════════════════════════════════════════════════════════════════
# Saved Address
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class AddressRecord:
    """A saved address from the user's address book."""

    address_id: int
    address_line: str
    city: str
    postal_code: str = ""
    created_at: str | None = None

    @classmethod
    def from_wire(cls, out: AddressOut) -> AddressRecord:
        return cls(
            address_id=out.address_id,
            address_line=out.address,
            city=out.city,
            postal_code=out.postal_code,
            created_at=out.created_at,
        )

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> AddressRecord:
        """Parse the stored camelCase form (see to_json)."""
        return cls.from_wire(AddressOut.model_validate(data))

    def to_json(self) -> dict[str, Any]:
        return {
            "addressId": self.address_id,
            "address": self.address_line,
            "city": self.city,
            "postalCode": self.postal_code,
            "createdAt": self.created_at,
        }

    @property
    def fields(self) -> AddressFields:
        return AddressFields(self.address_line, self.postal_code, self.city)

    @property
    def canonical(self) -> str:
        return canonical(self.address_line, self.postal_code, self.city)


# ═══════════════════════════════════════════════════════════════════════════════
# Form Fields / Contact
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class AddressFields:
    """Free-text address fields as typed by the user."""

    address_line: str = ""
    postal_code: str = ""
    city: str = ""

    @property
    def canonical(self) -> str:
        return canonical(self.address_line, self.postal_code, self.city)


@dataclass(frozen=True, slots=True)
class Contact:
    full_name: str = ""
    email: str = ""
    phone: str = ""

    @classmethod
    def from_wire(cls, out: UserOut) -> Contact:
        return cls(out.full_name, out.email, out.phone)


# ═══════════════════════════════════════════════════════════════════════════════
# Resolver Input — exactly one mode
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class SelectedAddress:
    """
    Mode "selected": ship to a saved address.

    shown: the address fields the UI displays, if the UI lets them drift
    from the record. None means the UI locked them to the record.
    """

    record: AddressRecord
    shown: AddressFields | None = None


@dataclass(frozen=True, slots=True)
class ManualAddress:
    """Mode "manual": ship to free-text fields."""

    fields: AddressFields


type AddressInput = SelectedAddress | ManualAddress


# ═══════════════════════════════════════════════════════════════════════════════
# Resolved
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ShippingAddress:
    """A validated shipping destination."""

    address_line: str
    postal_code: str
    city: str
    address_id: int | None = None

    @property
    def canonical(self) -> str:
        return canonical(self.address_line, self.postal_code, self.city)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "canonical",
    "AddressRecord",
    "AddressFields",
    "Contact",
    "SelectedAddress",
    "ManualAddress",
    "AddressInput",
    "ShippingAddress",
)
