"""Transaction history: reasons, transaction records, validation and service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Iterable

from zanobia.errors import AppError
from zanobia.unit import Unit
from zanobia.user import get_user_from_context
from zanobia.validation import (
    raise_if_invalid,
    validate_amount_positive,
    validate_id,
    validate_string_length,
)
from zanobia.warehouse import get_warehouse_id

_log = logging.getLogger(__name__)


class TransactionReasonType(str, Enum):
    """Names of the standard reasons a stock quantity changes."""

    SOLD = "sold"
    BOUGHT = "bought"
    EXPIRED = "expired"
    DAMAGED = "damaged"
    LOST = "lost"
    FOUND = "found"
    RETURN = "return"
    AUDIT_INCREASE = "auditIncrease"
    AUDIT_DECREASE = "auditDecrease"
    RECIPE_USE = "recipeUse"
    PRODUCED = "produced"
    TRANSFER_IN = "transferIn"
    TRANSFER_OUT = "transferOut"


@dataclass
class TransactionReason:
    name: str = ""
    description: str = ""
    is_positive: bool = False
    id: int | None = None


@dataclass
class Transaction:
    quantity: float = 0.0
    reason: TransactionReason | None = None
    id: int | None = None
    user_id: int | None = None
    batch_id: int | None = None
    retailer_batch_id: int | None = None
    warehouse_id: int | None = None
    retailer_id: int | None = None
    unit: Unit | None = None
    amount: float = 0.0
    comment: str = ""
    sku: str = ""
    created_at: datetime | None = None


@dataclass
class TransactionInput:
    """A row of transaction history ready to be stored."""

    user_id: int | None = None
    batch_id: int | None = None
    retailer_batch_id: int | None = None
    warehouse_id: int | None = None
    retailer_id: int | None = None
    quantity: float = 0.0
    unit_id: int | None = None
    amount: float = 0.0
    reason: str = ""
    comment: str = ""
    sku: str = ""


@dataclass
class CreateWarehouseTransactionCommand:
    batch_id: int
    quantity: float
    unit_id: int
    reason: str
    cost: float
    sku: str
    comment: str = ""


@dataclass
class CreateRetailerTransactionCommand:
    retailer_id: int
    quantity: float
    unit_id: int
    reason: str
    cost: float
    sku: str
    comment: str = ""
    retailer_batch_id: int = 0


INITIAL_TRANSACTION_REASONS: tuple[TransactionReason, ...] = (
    TransactionReason(TransactionReasonType.SOLD.value, "Sold to customer", False),
    TransactionReason(TransactionReasonType.BOUGHT.value, "Bought from supplier", True),
    TransactionReason(TransactionReasonType.EXPIRED.value, "Expired", False),
    TransactionReason(TransactionReasonType.DAMAGED.value, "Damaged", False),
    TransactionReason(TransactionReasonType.LOST.value, "Lost", False),
    TransactionReason(TransactionReasonType.FOUND.value, "Found", True),
    TransactionReason(TransactionReasonType.RETURN.value, "Returned to supplier", False),
    TransactionReason(TransactionReasonType.AUDIT_INCREASE.value, "Audit increase", True),
    TransactionReason(TransactionReasonType.AUDIT_DECREASE.value, "Audit decrease", False),
    TransactionReason(TransactionReasonType.RECIPE_USE.value, "Recipe use", False),
    TransactionReason(TransactionReasonType.PRODUCED.value, "Produced", True),
)


def validate_transaction_reason(reason: TransactionReason) -> None:
    raise_if_invalid(
        "invalid transaction reason input",
        [
            validate_string_length(reason.name, "name", 3, 50),
            validate_string_length(reason.description, "description", 0, 255),
        ],
    )


def validate_warehouse_transaction_command(
    command: CreateWarehouseTransactionCommand,
) -> None:
    raise_if_invalid(
        "invalid transaction input",
        [
            validate_amount_positive(command.quantity, "quantity"),
            validate_id(command.unit_id, "unitId"),
            validate_string_length(command.reason, "reason", 3, 50),
            validate_amount_positive(command.cost, "costPerQty"),
            validate_string_length(command.comment, "comment", 0, 255),
            validate_string_length(command.sku, "sku", 10, 36),
        ],
    )


def validate_retailer_transaction_command(
    command: CreateRetailerTransactionCommand,
) -> None:
    raise_if_invalid(
        "invalid transaction input",
        [
            validate_id(command.retailer_id, "retailerId"),
            validate_amount_positive(command.quantity, "quantity"),
            validate_id(command.unit_id, "unitId"),
            validate_string_length(command.reason, "reason", 3, 50),
            validate_amount_positive(command.cost, "costPerQty"),
            validate_string_length(command.comment, "comment", 0, 255),
            validate_string_length(command.sku, "sku", 10, 36),
        ],
    )


def for_warehouse_transactions(
    command: CreateWarehouseTransactionCommand,
) -> TransactionInput:
    """Validate a warehouse command and bind it to the current user and warehouse."""
    validate_warehouse_transaction_command(command)
    return TransactionInput(
        user_id=get_user_from_context().id,
        batch_id=command.batch_id,
        warehouse_id=get_warehouse_id(),
        quantity=command.quantity,
        unit_id=command.unit_id,
        amount=command.cost,
        reason=command.reason,
        comment=command.comment,
        sku=command.sku,
    )


def for_retailer_transactions(
    command: CreateRetailerTransactionCommand,
) -> TransactionInput:
    """Validate a retailer command and bind it to the current user and warehouse."""
    validate_retailer_transaction_command(command)
    return TransactionInput(
        user_id=get_user_from_context().id,
        retailer_batch_id=command.retailer_batch_id,
        retailer_id=command.retailer_id,
        warehouse_id=get_warehouse_id(),
        quantity=command.quantity,
        unit_id=command.unit_id,
        amount=command.cost,
        reason=command.reason,
        comment=command.comment,
        sku=command.sku,
    )


class TransactionService:
    """Transaction history operations over a storage repository."""

    def __init__(self, repo: Any) -> None:
        self.repo = repo

    def create_transaction_reason(self, reason: TransactionReason) -> None:
        validate_transaction_reason(reason)
        self.repo.create_transaction_reason(reason)

    def get_transaction_reasons(self) -> list[TransactionReason]:
        return self.repo.get_transaction_reasons()

    def create_warehouse_transaction(
        self, command: CreateWarehouseTransactionCommand
    ) -> None:
        self.repo.insert_transaction(for_warehouse_transactions(command))

    def create_retailer_transaction(
        self, command: CreateRetailerTransactionCommand
    ) -> None:
        self.repo.insert_transaction(for_retailer_transactions(command))

    def get_transactions_of_retailer(self, retailer_id: int) -> list[Transaction]:
        return self.repo.get_transactions_of_retailer(retailer_id)

    def get_transactions_of_retailer_batch(
        self, retailer_id: int, retailer_batch_id: int
    ) -> list[Transaction]:
        return self.repo.get_transactions_of_retailer_batch(retailer_id, retailer_batch_id)

    def get_transactions_of_sku(self, sku: str) -> list[Transaction]:
        return self.repo.get_transactions_of_sku(sku)

    def get_transactions_of_batch(self, batch_id: int) -> list[Transaction]:
        return self.repo.get_transactions_of_batch(batch_id)

    def get_transactions_of_warehouse(self) -> list[Transaction]:
        return self.repo.get_transactions_of_warehouse()

    def create_transaction_history_batches(
        self, commands: Iterable[CreateWarehouseTransactionCommand]
    ) -> list[Any]:
        """Queue one history insert per warehouse command into a new batch."""
        batch: list[Any] = []
        for command in commands:
            self.repo.insert_transaction_to_batch(for_warehouse_transactions(command), batch)
        return batch

    def create_retailer_transaction_history_batches(
        self, commands: Iterable[CreateRetailerTransactionCommand]
    ) -> list[Any]:
        """Queue one history insert per retailer command into a new batch."""
        batch: list[Any] = []
        for command in commands:
            self.repo.insert_transaction_to_batch(for_retailer_transactions(command), batch)
        return batch

    def initiate_all_reasons(self) -> None:
        """Store the standard reasons, logging and skipping any that fail."""
        for reason in INITIAL_TRANSACTION_REASONS:
            try:
                self.repo.create_transaction_reason(reason)
            except AppError as err:
                _log.error("failed to initiate reason %s: %s", reason.name, err)