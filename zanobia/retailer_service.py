"""Retailer operations over a storage repository and the retailer batch service."""

from __future__ import annotations

from typing import Any, Iterable

from zanobia.retailer import (
    Retailer,
    RetailerContact,
    validate_retailer,
    validate_retailer_contact,
    validate_retailer_contacts,
)


class RetailerService:
    """Validates retailer input and delegates storage to the repository.

    The repository must offer ``transaction()``, a context manager under which
    its operations commit together or roll back together.
    """

    def __init__(self, repo: Any, batch_service: Any) -> None:
        self.repo = repo
        self.batch_service = batch_service

    def create_retailer(self, retailer: Retailer) -> None:
        validate_retailer(retailer)
        self.repo.create_retailer(retailer)

    def add_retailer_contacts(
        self, retailer_id: int, contacts: Iterable[RetailerContact]
    ) -> None:
        contacts = list(contacts)
        validate_retailer_contacts(contacts)
        self.repo.add_retailer_contacts(retailer_id, contacts)

    def add_retailer_contact_info(self, retailer_id: int, contact: RetailerContact) -> None:
        validate_retailer_contact(contact)
        self.repo.add_retailer_contact_info(retailer_id, contact)

    def get_retailer(self, retailer_id: int) -> Retailer:
        return self.repo.get_retailer(retailer_id)

    def remove_retailer_contact_info(self, contact_id: int) -> None:
        self.repo.remove_retailer_contact_info(contact_id)

    def remove_retailer(self, retailer_id: int) -> None:
        """Delete a retailer with its batches, contacts and translations atomically."""
        with self.repo.transaction():
            self.batch_service.delete_batches_of_retailer(retailer_id)
            self.repo.remove_all_contacts_of_retailer(retailer_id)
            self.repo.remove_retailer_translations(retailer_id)
            self.repo.remove_retailer(retailer_id)

    def update_retailer(self, retailer: Retailer) -> None:
        validate_retailer(retailer)
        self.repo.update_retailer(retailer)