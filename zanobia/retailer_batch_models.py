"""Retailer stock batches: models, input validation, lock keys and input grouping."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, NamedTuple

from zanobia.errors import ErrorDetails, ValidationError
from zanobia.transactions import CreateRetailerTransactionCommand
from zanobia.unit import Unit
from zanobia.validation import (
    raise_if_invalid,
    validate_alphanumeric_name,
    validate_id_ptr,
    validate_not_zero,
    validate_string_length,
)

_INVALID_BATCH_INPUT = "invalid batch input"


@dataclass
class RetailerBatchInput:
    """A request to change the stock of one retailer batch."""

    sku: str = ""
    quantity: float = 0.0
    unit_id: int = 0
    reason: str = ""
    comment: str = ""
    retailer_id: int | None = None
    id: int | None = None


@dataclass
class RetailerBatchBase:
    sku: str = ""
    quantity: float = 0.0
    unit_id: int = 0
    expires_at: datetime | None = None
    retailer_id: int | None = None
    id: int | None = None


@dataclass
class RetailerBatch(RetailerBatchBase):
    """A retailer batch with its unit, product and retailer names."""

    product_variant: Any = None
    unit: Unit | None = None
    product_name: str = ""
    retailer_name: str = ""

    def get_cursor_value(self) -> list[str]:
        """Return the pagination cursor: UTC expiry date and batch id."""
        if self.id is None or self.expires_at is None:
            raise ValueError("retailer batch has no id or expiry date")
        return [_utc_date_only(self.expires_at), str(self.id)]


@dataclass
class BatchVariantMetaInfo:
    """Stock-keeping facts about a product variant needed to move its batches."""

    unit_id: int
    expires_in_days: int
    cost: float


@dataclass
class BulkRetailerBatchUpdateInfo:
    batch_bases_lookup: dict[str, RetailerBatchBase] = field(default_factory=dict)
    batch_variant_meta_info_lookup: dict[str, BatchVariantMetaInfo] = field(
        default_factory=dict
    )
    batch_input_map_to_update: dict[str, RetailerBatchInput] = field(default_factory=dict)
    batch_input_map_to_create: dict[str, RetailerBatchInput] = field(default_factory=dict)
    sku_list: list[str] = field(default_factory=list)
    ids: list[int] = field(default_factory=list)
    locks: list[Any] = field(default_factory=list)


@dataclass
class RetailerBatchUpdateRequest:
    batch_id: int | None
    retailer_id: int | None
    new_value: float
    reason: str
    sku: str
    modified_by: float


@dataclass
class RetailerBatchCreateRequest:
    batch_sku: str
    retailer_id: int
    quantity: float
    unit_id: int
    expiry_date: datetime


@dataclass
class BulkRetailerBatchUpdateUnitOfWork:
    batch_update_request_lookup: dict[str, RetailerBatchUpdateRequest] = field(
        default_factory=dict
    )
    batch_create_request_lookup: dict[str, RetailerBatchCreateRequest] = field(
        default_factory=dict
    )
    batch_transaction_history: list[CreateRetailerTransactionCommand] = field(
        default_factory=list
    )


def _utc_date_only(moment: datetime) -> str:
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%d")


def _require_inputs(inputs: list[RetailerBatchInput]) -> None:
    if not inputs:
        raise ValidationError(
            _INVALID_BATCH_INPUT,
            [ErrorDetails(message="batch input cannot be empty")],
        )


def validate_batch_input_increment(batch_input: RetailerBatchInput) -> None:
    raise_if_invalid(
        _INVALID_BATCH_INPUT,
        [
            validate_id_ptr(batch_input.retailer_id, "retailerId"),
            validate_id_ptr(batch_input.unit_id, "unitId"),
            validate_not_zero(batch_input.quantity, "quantity"),
            validate_string_length(batch_input.sku, "sku", 10, 36),
            validate_alphanumeric_name(batch_input.reason, "reason"),
        ],
    )


def validate_batch_inputs_increment(inputs: Iterable[RetailerBatchInput]) -> None:
    """Validate a non-empty list of increments; the first invalid one raises."""
    inputs = list(inputs)
    _require_inputs(inputs)
    for batch_input in inputs:
        validate_batch_input_increment(batch_input)


def validate_batch_input_decrement(batch_input: RetailerBatchInput) -> None:
    raise_if_invalid(
        _INVALID_BATCH_INPUT,
        [
            validate_id_ptr(batch_input.retailer_id, "retailerId"),
            validate_id_ptr(batch_input.unit_id, "unitId"),
            validate_not_zero(batch_input.quantity, "quantity"),
            validate_string_length(batch_input.sku, "sku", 10, 36),
            validate_id_ptr(batch_input.id, "id"),
            validate_alphanumeric_name(batch_input.reason, "reason"),
        ],
    )


def validate_batch_inputs_decrement(inputs: Iterable[RetailerBatchInput]) -> None:
    """Validate a non-empty list of decrements; the first invalid one raises."""
    inputs = list(inputs)
    _require_inputs(inputs)
    for batch_input in inputs:
        validate_batch_input_decrement(batch_input)


def create_batch_lock_key(id_or_sku: str) -> str:
    """Return the distributed lock key for a retailer batch id or sku."""
    return f"retailer-batch:{id_or_sku}:lock"


class _ExtractedBatchInfo(NamedTuple):
    ids: list[int]
    retailer_ids: list[int | None]
    skus: list[str]
    to_update: dict[str, RetailerBatchInput]
    to_create: dict[str, RetailerBatchInput]


def extract_batch_info(inputs: Iterable[RetailerBatchInput]) -> _ExtractedBatchInfo:
    """Split inputs into existing batches to update and new ones to create, by sku."""
    ids: list[int] = []
    retailer_ids: list[int | None] = []
    skus: list[str] = []
    to_update: dict[str, RetailerBatchInput] = {}
    to_create: dict[str, RetailerBatchInput] = {}
    for batch_input in inputs:
        if batch_input.id is None:
            to_create[batch_input.sku] = batch_input
        else:
            ids.append(batch_input.id)
            to_update[batch_input.sku] = batch_input
        skus.append(batch_input.sku)
        retailer_ids.append(batch_input.retailer_id)
    return _ExtractedBatchInfo(ids, retailer_ids, skus, to_update, to_create)