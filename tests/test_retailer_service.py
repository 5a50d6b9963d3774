from contextlib import contextmanager

import pytest

from zanobia.errors import BadRequestError, ValidationError
from zanobia.retailer import Retailer, RetailerContact
from zanobia.retailer_service import RetailerService


class FakeRepo:
    def __init__(self, failing=()):
        self.calls = []
        self.failing = set(failing)

    def _record(self, name, *args):
        if name in self.failing:
            raise BadRequestError(f"Failed to {name}")
        self.calls.append((name, *args))

    @contextmanager
    def transaction(self):
        self.calls.append(("begin",))
        try:
            yield
        except Exception:
            self.calls.append(("rollback",))
            raise
        self.calls.append(("commit",))

    def create_retailer(self, retailer):
        self._record("create_retailer", retailer)

    def add_retailer_contacts(self, retailer_id, contacts):
        self._record("add_retailer_contacts", retailer_id, contacts)

    def add_retailer_contact_info(self, retailer_id, contact):
        self._record("add_retailer_contact_info", retailer_id, contact)

    def get_retailer(self, retailer_id):
        return Retailer(name="Corner Shop", id=retailer_id)

    def remove_retailer_contact_info(self, contact_id):
        self._record("remove_retailer_contact_info", contact_id)

    def remove_all_contacts_of_retailer(self, retailer_id):
        self._record("remove_all_contacts_of_retailer", retailer_id)

    def remove_retailer_translations(self, retailer_id):
        self._record("remove_retailer_translations", retailer_id)

    def remove_retailer(self, retailer_id):
        self._record("remove_retailer", retailer_id)

    def update_retailer(self, retailer):
        self._record("update_retailer", retailer)


class FakeBatchService:
    def __init__(self, repo, fail=False):
        self.repo = repo
        self.fail = fail

    def delete_batches_of_retailer(self, retailer_id):
        if self.fail:
            raise BadRequestError("Failed to delete retailer batches")
        self.repo.calls.append(("delete_batches_of_retailer", retailer_id))


def make_contact(**overrides):
    values = dict(
        name="Jane Doe", position="Manager", phone="contact-phone", email="jane@example.com"
    )
    values.update(overrides)
    return RetailerContact(**values)


@pytest.fixture
def repo():
    return FakeRepo()


@pytest.fixture
def service(repo):
    return RetailerService(repo, FakeBatchService(repo))


def test_create_retailer_stores_valid_retailer(service, repo):
    retailer = Retailer(name="Corner Shop", contacts=[make_contact()])
    service.create_retailer(retailer)
    assert repo.calls == [("create_retailer", retailer)]


def test_create_retailer_rejects_short_name(service, repo):
    with pytest.raises(ValidationError) as excinfo:
        service.create_retailer(Retailer(name="ab"))
    assert excinfo.value.message == "invalid retailer input"
    assert repo.calls == []


def test_create_retailer_rejects_bad_contact(service, repo):
    retailer = Retailer(name="Corner Shop", contacts=[make_contact(website="not a url")])
    with pytest.raises(ValidationError) as excinfo:
        service.create_retailer(retailer)
    assert excinfo.value.message == "invalid retailer contact input"
    assert repo.calls == []


def test_add_contacts_passes_list(service, repo):
    contacts = (make_contact(), make_contact(name="John"))
    service.add_retailer_contacts(4, contacts)
    assert repo.calls == [("add_retailer_contacts", 4, list(contacts))]


def test_add_contact_info_validates(service, repo):
    with pytest.raises(ValidationError):
        service.add_retailer_contact_info(4, make_contact(phone="123"))
    contact = make_contact()
    service.add_retailer_contact_info(4, contact)
    assert repo.calls == [("add_retailer_contact_info", 4, contact)]


def test_get_retailer_delegates(service):
    assert service.get_retailer(11).id == 11


def test_remove_contact_info_delegates(service, repo):
    assert service.remove_retailer_contact_info(8) is None
    assert repo.calls == [("remove_retailer_contact_info", 8)]


def test_remove_contact_info_propagates_failure():
    repo = FakeRepo(failing={"remove_retailer_contact_info"})
    service = RetailerService(repo, FakeBatchService(repo))
    with pytest.raises(BadRequestError) as excinfo:
        service.remove_retailer_contact_info(8)
    assert excinfo.value.message == "Failed to remove_retailer_contact_info"


def test_remove_retailer_runs_steps_in_order_within_transaction(service, repo):
    assert service.remove_retailer(6) is None
    assert repo.calls == [
        ("begin",),
        ("delete_batches_of_retailer", 6),
        ("remove_all_contacts_of_retailer", 6),
        ("remove_retailer_translations", 6),
        ("remove_retailer", 6),
        ("commit",),
    ]


def test_remove_retailer_stops_and_rolls_back_at_failing_step():
    repo = FakeRepo(failing={"remove_retailer_translations"})
    service = RetailerService(repo, FakeBatchService(repo))
    with pytest.raises(BadRequestError):
        service.remove_retailer(6)
    assert repo.calls == [
        ("begin",),
        ("delete_batches_of_retailer", 6),
        ("remove_all_contacts_of_retailer", 6),
        ("rollback",),
    ]


def test_remove_retailer_rolls_back_when_batches_fail(repo):
    service = RetailerService(repo, FakeBatchService(repo, fail=True))
    with pytest.raises(BadRequestError):
        service.remove_retailer(6)
    assert repo.calls == [("begin",), ("rollback",)]


def test_update_retailer_validates_then_stores(service, repo):
    with pytest.raises(ValidationError):
        service.update_retailer(Retailer(name="x", id=2))
    retailer = Retailer(name="Corner Shop", id=2)
    service.update_retailer(retailer)
    assert repo.calls == [("update_retailer", retailer)]