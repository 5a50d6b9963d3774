from datetime import datetime, timedelta, timezone

import pytest

from zanobia.errors import ValidationError
from zanobia.retailer_batch_models import (
    RetailerBatch,
    RetailerBatchInput,
    create_batch_lock_key,
    extract_batch_info,
    validate_batch_input_decrement,
    validate_batch_input_increment,
    validate_batch_inputs_decrement,
    validate_batch_inputs_increment,
)


def make_input(**overrides):
    values = dict(
        sku="SKU-0000000001",
        quantity=2.0,
        unit_id=1,
        reason="sold",
        retailer_id=3,
        id=None,
    )
    values.update(overrides)
    return RetailerBatchInput(**values)


def fields_of(excinfo):
    return {detail.field for detail in excinfo.value.details}


def test_lock_key_wraps_value():
    assert create_batch_lock_key("abc") == "retailer-batch:abc:lock"


def test_cursor_value_uses_utc_date_and_id():
    batch = RetailerBatch(
        id=7, expires_at=datetime(2024, 1, 5, 23, 30, tzinfo=timezone(timedelta(hours=-2)))
    )
    assert batch.get_cursor_value() == ["2024-01-06", "7"]


def test_cursor_value_without_id_raises():
    with pytest.raises(ValueError):
        RetailerBatch(expires_at=datetime(2024, 1, 5)).get_cursor_value()


@pytest.mark.parametrize(
    "validator", [validate_batch_inputs_increment, validate_batch_inputs_decrement]
)
def test_empty_inputs_rejected(validator):
    with pytest.raises(ValidationError) as excinfo:
        validator([])
    assert excinfo.value.message == "invalid batch input"
    assert excinfo.value.details[0].message == "batch input cannot be empty"


def test_increment_allows_missing_id_but_decrement_does_not():
    batch_input = make_input()
    assert validate_batch_input_increment(batch_input) is None
    with pytest.raises(ValidationError) as excinfo:
        validate_batch_input_decrement(batch_input)
    assert fields_of(excinfo) == {"id"}


def test_increment_collects_every_failing_field():
    bad = make_input(retailer_id=None, unit_id=0, quantity=0, sku="short", reason="")
    with pytest.raises(ValidationError) as excinfo:
        validate_batch_input_increment(bad)
    assert fields_of(excinfo) == {"retailerId", "unitId", "quantity", "sku", "reason"}


def test_bulk_stops_at_invalid_entry():
    with pytest.raises(ValidationError) as excinfo:
        validate_batch_inputs_increment([make_input(), make_input(quantity=0)])
    assert fields_of(excinfo) == {"quantity"}


def test_decrement_negative_quantity_is_allowed_by_not_zero_rule():
    assert validate_batch_input_decrement(make_input(id=4, quantity=-1)) is None
    with pytest.raises(ValidationError):
        validate_batch_input_decrement(make_input(id=0))


def test_extract_batch_info_splits_by_id():
    existing = make_input(sku="SKU-EXISTING-1", id=9, retailer_id=2)
    new = make_input(sku="SKU-NEW-00001", retailer_id=5)
    info = extract_batch_info([existing, new])
    assert info.ids == [9]
    assert info.retailer_ids == [2, 5]
    assert info.skus == ["SKU-EXISTING-1", "SKU-NEW-00001"]
    assert info.to_update == {"SKU-EXISTING-1": existing}
    assert info.to_create == {"SKU-NEW-00001": new}


def test_extract_batch_info_later_sku_wins():
    first = make_input(quantity=1)
    second = make_input(quantity=4)
    info = extract_batch_info([first, second])
    assert info.to_create[first.sku] is second
    assert len(info.skus) == 2