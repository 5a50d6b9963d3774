"""Stock movements on retailer batches: increments, decrements and deletion."""

from __future__ import annotations

from contextlib import ExitStack, contextmanager
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Iterator

from zanobia.errors import BadRequestError
from zanobia.retailer_batch_models import (
    BatchVariantMetaInfo,
    BulkRetailerBatchUpdateInfo,
    BulkRetailerBatchUpdateUnitOfWork,
    RetailerBatchCreateRequest,
    RetailerBatchInput,
    RetailerBatchUpdateRequest,
    create_batch_lock_key,
    validate_batch_inputs_decrement,
    validate_batch_inputs_increment,
)
from zanobia.transactions import CreateRetailerTransactionCommand
from zanobia.unit import ConvertUnitInput


class RetailerBatchService:
    """Changes retailer stock under distributed locks and records the history.

    ``repo`` must offer ``get_bulk_batch_update_info(inputs)``,
    ``transaction()`` (a context manager), ``process_bulk_batch_unit_of_work(
    unit_of_work, transactions_batch)`` and ``delete_batches_of_retailer(id)``.
    ``locker.lock(key)`` must be a context manager holding the named lock.
    """

    def __init__(
        self, repo: Any, unit_service: Any, transaction_service: Any, locker: Any
    ) -> None:
        self.repo = repo
        self.unit_service = unit_service
        self.transaction_service = transaction_service
        self.locker = locker

    def increment_batch(self, batch_input: RetailerBatchInput) -> None:
        self.bulk_increment_batch([batch_input])

    def decrement_batch(self, batch_input: RetailerBatchInput) -> None:
        self.bulk_decrement_batch([batch_input])

    def bulk_increment_batch(self, inputs: Iterable[RetailerBatchInput]) -> None:
        """Add stock to existing batches and create batches for inputs without an id."""
        inputs = list(inputs)
        validate_batch_inputs_increment(inputs)
        info = self._fetch_update_info(inputs, "failed to process batch increment")
        with self.repo.transaction(), self._locked(info):
            updates, history = self._update_requests(info, decrement=False)
            creates, created_history = self._create_requests(info)
            self._process_unit_of_work(
                BulkRetailerBatchUpdateUnitOfWork(
                    batch_update_request_lookup=updates,
                    batch_create_request_lookup=creates,
                    batch_transaction_history=history + created_history,
                )
            )

    def bulk_decrement_batch(self, inputs: Iterable[RetailerBatchInput]) -> None:
        """Remove stock from existing batches; no batch may go below zero."""
        inputs = list(inputs)
        validate_batch_inputs_decrement(inputs)
        info = self._fetch_update_info(inputs, "failed to process batch decrement")
        with self.repo.transaction(), self._locked(info):
            updates, history = self._update_requests(info, decrement=True)
            self._process_unit_of_work(
                BulkRetailerBatchUpdateUnitOfWork(
                    batch_update_request_lookup=updates,
                    batch_transaction_history=history,
                )
            )

    def delete_batches_of_retailer(self, retailer_id: int) -> None:
        with self.locker.lock(create_batch_lock_key(str(retailer_id))):
            self.repo.delete_batches_of_retailer(retailer_id)

    def _fetch_update_info(
        self, inputs: list[RetailerBatchInput], failure_message: str
    ) -> BulkRetailerBatchUpdateInfo:
        try:
            return self.repo.get_bulk_batch_update_info(inputs)
        except Exception as err:
            raise BadRequestError(failure_message) from err

    @contextmanager
    def _locked(self, info: BulkRetailerBatchUpdateInfo) -> Iterator[None]:
        keys = dict.fromkeys(
            create_batch_lock_key(str(value)) for value in [*info.ids, *info.sku_list]
        )
        with ExitStack() as stack:
            info.locks = [stack.enter_context(self.locker.lock(key)) for key in keys]
            try:
                yield
            finally:
                info.locks = []

    def _convert(
        self, batch_input: RetailerBatchInput, meta: BatchVariantMetaInfo
    ) -> RetailerBatchInput:
        output = self.unit_service.convert_unit(
            ConvertUnitInput(
                to_unit_id=meta.unit_id,
                from_unit_id=batch_input.unit_id,
                quantity=batch_input.quantity,
            )
        )
        return replace(batch_input, quantity=output.quantity, unit_id=output.unit.id)

    @staticmethod
    def _meta_for(info: BulkRetailerBatchUpdateInfo, sku: str) -> BatchVariantMetaInfo:
        meta = info.batch_variant_meta_info_lookup.get(sku)
        if meta is None:
            raise BadRequestError("variant meta info not found")
        return meta

    def _update_requests(
        self, info: BulkRetailerBatchUpdateInfo, *, decrement: bool
    ) -> tuple[dict[str, RetailerBatchUpdateRequest], list[CreateRetailerTransactionCommand]]:
        requests: dict[str, RetailerBatchUpdateRequest] = {}
        history: list[CreateRetailerTransactionCommand] = []
        for batch_input in info.batch_input_map_to_update.values():
            base = info.batch_bases_lookup.get(batch_input.sku)
            if base is None:
                raise BadRequestError("batch to update not found")
            meta = self._meta_for(info, batch_input.sku)
            converted = self._convert(batch_input, meta)
            if decrement:
                new_value = base.quantity - converted.quantity
                if new_value < 0:
                    raise BadRequestError("insufficient quantity")
            else:
                new_value = base.quantity + converted.quantity
            requests[converted.sku] = RetailerBatchUpdateRequest(
                batch_id=converted.id,
                retailer_id=converted.retailer_id,
                new_value=new_value,
                reason=converted.reason,
                sku=converted.sku,
                modified_by=converted.quantity,
            )
            history.append(
                CreateRetailerTransactionCommand(
                    retailer_batch_id=base.id,
                    retailer_id=converted.retailer_id,
                    quantity=converted.quantity,
                    unit_id=meta.unit_id,
                    reason=converted.reason,
                    comment=converted.comment,
                    cost=meta.cost * converted.quantity,
                    sku=converted.sku,
                )
            )
        return requests, history

    def _create_requests(
        self, info: BulkRetailerBatchUpdateInfo
    ) -> tuple[dict[str, RetailerBatchCreateRequest], list[CreateRetailerTransactionCommand]]:
        requests: dict[str, RetailerBatchCreateRequest] = {}
        history: list[CreateRetailerTransactionCommand] = []
        for batch_input in info.batch_input_map_to_create.values():
            meta = self._meta_for(info, batch_input.sku)
            converted = self._convert(batch_input, meta)
            requests[converted.sku] = RetailerBatchCreateRequest(
                batch_sku=converted.sku,
                retailer_id=converted.retailer_id,
                quantity=converted.quantity,
                unit_id=meta.unit_id,
                expiry_date=datetime.now(timezone.utc) + timedelta(days=meta.expires_in_days),
            )
            history.append(
                CreateRetailerTransactionCommand(
                    retailer_id=converted.retailer_id,
                    quantity=converted.quantity,
                    unit_id=meta.unit_id,
                    reason=converted.reason,
                    comment=converted.comment,
                    cost=meta.cost * converted.quantity,
                    sku=converted.sku,
                )
            )
        return requests, history

    def _process_unit_of_work(self, unit_of_work: BulkRetailerBatchUpdateUnitOfWork) -> None:
        transactions_batch = self.transaction_service.create_retailer_transaction_history_batches(
            unit_of_work.batch_transaction_history
        )
        self.repo.process_bulk_batch_unit_of_work(unit_of_work, transactions_batch)