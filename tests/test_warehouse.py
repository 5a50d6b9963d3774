import pytest

from zanobia.errors import ValidationError
from zanobia.warehouse import (
    Warehouse,
    WarehouseService,
    WarehouseUserInput,
    get_warehouse_id,
    validate_lat_lng,
    validate_name,
    validate_warehouse,
    warehouse_id_from_header,
    warehouse_scope,
)


class FakeRepo:
    def __init__(self):
        self.calls = []

    def create_warehouse(self, warehouse):
        self.calls.append(("create", warehouse))

    def update_warehouse(self, warehouse):
        self.calls.append(("update", warehouse))

    def get_warehouses(self, user_id):
        self.calls.append(("list", user_id))
        return [Warehouse(name="Central", lat=1.0, lng=2.0, id=user_id)]

    def add_user_to_warehouse(self, user_input):
        self.calls.append(("add_user", user_input))

    def get_warehouse_by_id(self, warehouse_id, user_id):
        self.calls.append(("get", warehouse_id, user_id))
        return Warehouse(name="Central", lat=1.0, lng=2.0, id=warehouse_id)


def test_header_parsing():
    assert warehouse_id_from_header({"X-Warehouse-Id": "12"}) == 12
    assert warehouse_id_from_header({"x-warehouse-id": "7"}) == 7
    assert warehouse_id_from_header({"X-Warehouse-Id": "abc"}) == 0
    assert warehouse_id_from_header({}) == 0


def test_scope_sets_and_restores():
    assert get_warehouse_id() == 0
    with warehouse_scope(9):
        assert get_warehouse_id() == 9
        with warehouse_scope(4):
            assert get_warehouse_id() == 4
        assert get_warehouse_id() == 9
    assert get_warehouse_id() == 0


def test_validate_name():
    assert not validate_name("Central")
    assert not validate_name("North-East")
    assert validate_name("Main 1").field == "firstName"


def test_validate_lat_lng():
    assert validate_lat_lng(None, 1.0).field == "latlng"
    assert not validate_lat_lng(0.0, 0.0)


def test_validate_warehouse_collects_errors():
    with pytest.raises(ValidationError) as info:
        validate_warehouse(Warehouse(name="1st"))
    assert {d.field for d in info.value.details} == {"firstName", "latlng"}


def test_create_warehouse_passes_valid_to_repo():
    repo = FakeRepo()
    warehouse = Warehouse(name="Central", lat=1.0, lng=2.0)
    WarehouseService(repo).create_warehouse(warehouse)
    assert repo.calls == [("create", warehouse)]


def test_update_warehouse_rejects_invalid():
    repo = FakeRepo()
    with pytest.raises(ValidationError):
        WarehouseService(repo).update_warehouse(Warehouse(name="Central"))
    assert repo.calls == []


def test_current_warehouse_uses_scope():
    repo = FakeRepo()
    service = WarehouseService(repo)
    with warehouse_scope(3):
        result = service.get_my_current_warehouse(5)
    assert result.id == 3
    assert repo.calls == [("get", 3, 5)]


def test_get_warehouses_and_add_user():
    repo = FakeRepo()
    service = WarehouseService(repo)
    assert service.get_warehouses(6)[0].id == 6
    link = WarehouseUserInput(warehouse_id=2, user_id=6)
    service.add_user_to_warehouse(link)
    assert repo.calls[-1] == ("add_user", link)