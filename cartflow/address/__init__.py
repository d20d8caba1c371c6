"""
Address — resolve the shipping destination for an order.

Two mutually exclusive modes:

    SelectedAddress(record)          # saved address, copied verbatim
    ManualAddress(AddressFields(...))  # free text, all fields required

    from cartflow import address

    match address.resolve(address.ManualAddress(fields), contact):
        case Ok(shipping):
            shipping.canonical     # "1 Main St, 10000, Hanoi"
        case Error(err):
            err.violations         # every problem, not just the first
"""

from cartflow.address._types import (
    canonical,
    AddressRecord,
    AddressFields,
    Contact,
    SelectedAddress,
    ManualAddress,
    AddressInput,
    ShippingAddress,
)
from cartflow.address._resolve import (
    EMAIL_PATTERN,
    PHONE_PATTERN,
    contact_violations,
    field_violations,
    resolve,
    load_addresses,
    load_contact,
)
from cartflow.address._form import AddressForm

__all__ = (
    # Types
    "canonical",
    "AddressRecord",
    "AddressFields",
    "Contact",
    "SelectedAddress",
    "ManualAddress",
    "AddressInput",
    "ShippingAddress",
    # Resolution
    "EMAIL_PATTERN",
    "PHONE_PATTERN",
    "contact_violations",
    "field_violations",
    "resolve",
    "load_addresses",
    "load_contact",
    # Form state
    "AddressForm",
)
