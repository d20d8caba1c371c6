"""
Address form state — selection locks the fields.

Once a saved address is selected, the three address fields mirror the
record and cannot be edited; the only way out is use_manual().

    form = AddressForm()
    form.select(record)
    form.update(city="Elsewhere")   # Error(ValidationError) — locked
    form.use_manual()
    form.update(address_line="1 Main St", postal_code="10000", city="Hanoi")
    shipping = resolve(form.to_input(), contact)
"""

from __future__ import annotations

from dataclasses import replace

from kungfu import Error, Ok, Result

from cartflow._errors import ValidationError
from cartflow.address._types import (
    AddressFields,
    AddressInput,
    AddressRecord,
    ManualAddress,
    SelectedAddress,
)

_FIELD_NAMES = frozenset({"address_line", "postal_code", "city"})


class AddressForm:
    """Mutable UI-side address state. Produces an AddressInput."""

    def __init__(self, selected: AddressRecord | None = None) -> None:
        self._selected: AddressRecord | None = None
        self._fields = AddressFields()
        if selected is not None:
            self.select(selected)

    @property
    def selected(self) -> AddressRecord | None:
        return self._selected

    @property
    def locked(self) -> bool:
        return self._selected is not None

    @property
    def fields(self) -> AddressFields:
        return self._fields

    def select(self, record: AddressRecord) -> None:
        """Populate every address field from the record and lock them."""
        self._selected = record
        self._fields = record.fields

    def use_manual(self) -> None:
        """Drop the selection, unlock and clear the fields."""
        self._selected = None
        self._fields = AddressFields()

    def update(self, **changes: str) -> Result[AddressFields, ValidationError]:
        unknown = set(changes) - _FIELD_NAMES
        if unknown:
            raise TypeError(f"unknown address fields: {sorted(unknown)}")
        if self._selected is not None:
            return Error(ValidationError.of(
                "address",
                "address fields are locked to the selected address; "
                "switch to manual entry to edit them",
            ))
        self._fields = replace(self._fields, **changes)
        return Ok(self._fields)

    def to_input(self) -> AddressInput:
        if self._selected is not None:
            return SelectedAddress(self._selected, shown=self._fields)
        return ManualAddress(self._fields)


__all__ = ("AddressForm",)
