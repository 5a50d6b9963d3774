"""Warehouses: model, request-scoped current warehouse, validation and service."""

from __future__ import annotations

import re
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Iterator, Mapping

from zanobia.errors import ErrorDetails
from zanobia.validation import raise_if_invalid

WAREHOUSE_ID_HEADER = "X-Warehouse-Id"

_current_warehouse_id: ContextVar[int] = ContextVar("warehouse_id", default=0)
_NAME = re.compile(r"[A-Za-z]+([-'][A-Za-z]+)*")
_INTEGER = re.compile(r"[+-]?[0-9]+")


@dataclass
class Warehouse:
    name: str
    lat: float | None = None
    lng: float | None = None
    id: int | None = None


@dataclass
class WarehouseUserInput:
    warehouse_id: int
    user_id: int


@contextmanager
def warehouse_scope(warehouse_id: int) -> Iterator[int]:
    """Make ``warehouse_id`` the current warehouse for the enclosed code."""
    token = _current_warehouse_id.set(warehouse_id)
    try:
        yield warehouse_id
    finally:
        _current_warehouse_id.reset(token)


def get_warehouse_id() -> int:
    """Return the current warehouse id, or 0 when none is set."""
    return _current_warehouse_id.get()


def warehouse_id_from_header(headers: Mapping[str, str]) -> int:
    """Read the warehouse id header; a missing or malformed value gives 0."""
    wanted = WAREHOUSE_ID_HEADER.lower()
    value = next(
        (v for k, v in headers.items() if k.lower() == wanted),
        "",
    )
    if not _INTEGER.fullmatch(value):
        return 0
    return int(value)


def validate_name(name: str) -> ErrorDetails:
    if _NAME.fullmatch(name):
        return ErrorDetails()
    return ErrorDetails(message="invalid first name", field="firstName")


def validate_lat_lng(lat: float | None, lng: float | None) -> ErrorDetails:
    if lat is None or lng is None:
        return ErrorDetails(message="invalid lat lng", field="latlng")
    return ErrorDetails()


def validate_warehouse(warehouse: Warehouse) -> None:
    raise_if_invalid(
        "invalid warehouse input",
        [validate_name(warehouse.name), validate_lat_lng(warehouse.lat, warehouse.lng)],
    )


class WarehouseService:
    """Warehouse operations over a storage repository."""

    def __init__(self, repo: Any) -> None:
        self.repo = repo

    def create_warehouse(self, warehouse: Warehouse) -> None:
        validate_warehouse(warehouse)
        self.repo.create_warehouse(warehouse)

    def get_warehouses(self, user_id: int) -> list[Warehouse]:
        return self.repo.get_warehouses(user_id)

    def add_user_to_warehouse(self, user_input: WarehouseUserInput) -> None:
        self.repo.add_user_to_warehouse(user_input)

    def get_my_current_warehouse(self, user_id: int) -> Warehouse:
        return self.get_warehouse_by_id(get_warehouse_id(), user_id)

    def get_warehouse_by_id(self, warehouse_id: int, user_id: int) -> Warehouse:
        return self.repo.get_warehouse_by_id(warehouse_id, user_id)

    def update_warehouse(self, warehouse: Warehouse) -> None:
        validate_warehouse(warehouse)
        self.repo.update_warehouse(warehouse)