"""Retailers and their contacts, with input validation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from zanobia.validation import (
    raise_if_invalid,
    validate_alphanumeric_name,
    validate_string_length,
    validate_url,
)


@dataclass
class RetailerContact:
    name: str
    position: str
    phone: str
    email: str = ""
    website: str = ""
    id: int | None = None


@dataclass
class Retailer:
    name: str
    lat: float = 0.0
    lng: float = 0.0
    contacts: list[RetailerContact] = field(default_factory=list)
    id: int | None = None

    def get_cursor_value(self) -> list[str]:
        """Return the pagination cursor for this retailer."""
        if self.id is None:
            raise ValueError("retailer has no id")
        return [str(self.id)]


def validate_retailer(retailer: Retailer) -> None:
    raise_if_invalid(
        "invalid retailer input",
        [validate_string_length(retailer.name, "Name", 3, 50)],
    )
    validate_retailer_contacts(retailer.contacts)


def validate_retailer_contacts(contacts: Iterable[RetailerContact]) -> None:
    for contact in contacts:
        validate_retailer_contact(contact)


def validate_retailer_contact(contact: RetailerContact) -> None:
    results = [
        validate_string_length(contact.email, "Email", 0, 255),
        validate_alphanumeric_name(contact.name, "Name"),
        validate_string_length(contact.phone, "Phone", 8, 50),
        validate_alphanumeric_name(contact.position, "Position"),
        validate_string_length(contact.position, "Position", 1, 50),
    ]
    if contact.website:
        results.append(validate_url(contact.website, "Website"))
    raise_if_invalid("invalid retailer contact input", results)