"""
Address resolution — validate input, produce a ShippingAddress.

Pure and synchronous. Every violation is collected:

    match resolve(ManualAddress(fields), contact):
        case Ok(shipping):
            ...
        case Error(ValidationError(violations=violations)):
            for v in violations:
                form.mark(v.field, v.message)
"""

from __future__ import annotations

import logging
import re

from kungfu import Error, LazyCoroResult, Ok, Result

from cartflow._errors import (
    AuthExpired,
    FieldViolation,
    NetworkError,
    ValidationError,
    from_api_error,
)
from cartflow.address._types import (
    AddressFields,
    AddressInput,
    AddressRecord,
    Contact,
    ManualAddress,
    SelectedAddress,
    ShippingAddress,
)
from cartflow.api import StorefrontClient

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")
PHONE_PATTERN = re.compile(r"\d{10}")


# ═══════════════════════════════════════════════════════════════════════════════
# Field Checks
# ═══════════════════════════════════════════════════════════════════════════════


def _blank(value: str) -> bool:
    return not value or not value.strip()


def contact_violations(contact: Contact) -> list[FieldViolation]:
    violations: list[FieldViolation] = []
    if _blank(contact.full_name):
        violations.append(FieldViolation("full_name", "full name is required"))
    if _blank(contact.email) or EMAIL_PATTERN.search(contact.email) is None:
        violations.append(FieldViolation("email", "a valid email address is required"))
    if PHONE_PATTERN.fullmatch(contact.phone or "") is None:
        violations.append(FieldViolation("phone", "phone number must be exactly 10 digits"))
    return violations


def field_violations(fields: AddressFields) -> list[FieldViolation]:
    violations: list[FieldViolation] = []
    if _blank(fields.address_line):
        violations.append(FieldViolation("address_line", "address is required"))
    if _blank(fields.postal_code):
        violations.append(FieldViolation("postal_code", "postal code is required"))
    if _blank(fields.city):
        violations.append(FieldViolation("city", "city is required"))
    return violations


def _mismatch(record: AddressRecord, shown: AddressFields) -> FieldViolation | None:
    if shown.canonical == record.canonical:
        return None
    return FieldViolation(
        "address",
        f"address does not match the selected address; use {record.canonical!r} "
        "or update it in your profile",
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Resolve
# ═══════════════════════════════════════════════════════════════════════════════


def resolve(
    address: AddressInput,
    contact: Contact,
) -> Result[ShippingAddress, ValidationError]:
    """
    Validate the address input and the contact details together.

    Selected mode copies the saved record verbatim; manual mode requires
    every address field. Contact rules apply in both modes.
    """
    violations = contact_violations(contact)

    match address:
        case SelectedAddress(record=record, shown=shown):
            violations.extend(field_violations(record.fields))
            if shown is not None and (mismatch := _mismatch(record, shown)):
                violations.append(mismatch)
            shipping = ShippingAddress(
                record.address_line,
                record.postal_code,
                record.city,
                address_id=record.address_id,
            )
        case ManualAddress(fields=fields):
            violations.extend(field_violations(fields))
            shipping = ShippingAddress(
                fields.address_line.strip(),
                fields.postal_code.strip(),
                fields.city.strip(),
            )
        case _:
            raise TypeError(f"unsupported address input: {type(address).__name__}")

    if violations:
        logger.debug("address rejected: %s", [v.field for v in violations])
        return Error(ValidationError(tuple(violations)))
    return Ok(shipping)


# ═══════════════════════════════════════════════════════════════════════════════
# Prefill
# ═══════════════════════════════════════════════════════════════════════════════


def load_addresses(
    client: StorefrontClient,
) -> LazyCoroResult[tuple[AddressRecord, ...], NetworkError | AuthExpired]:
    """The user's saved addresses (GET /address)."""

    async def impl() -> Result[tuple[AddressRecord, ...], NetworkError | AuthExpired]:
        match await client.list_addresses():
            case Ok(rows):
                return Ok(tuple(AddressRecord.from_wire(row) for row in rows))
            case Error(err):
                return Error(from_api_error(err, "list_addresses"))

    return LazyCoroResult(impl)


def load_contact(
    client: StorefrontClient,
) -> LazyCoroResult[Contact, NetworkError | AuthExpired]:
    """Contact prefill from the signed-in profile (GET /auth/me)."""

    async def impl() -> Result[Contact, NetworkError | AuthExpired]:
        match await client.get_me():
            case Ok(user):
                return Ok(Contact.from_wire(user))
            case Error(err):
                return Error(from_api_error(err, "get_me"))

    return LazyCoroResult(impl)


__all__ = (
    "EMAIL_PATTERN",
    "PHONE_PATTERN",
    "contact_violations",
    "field_violations",
    "resolve",
    "load_addresses",
    "load_contact",
)
