"""
Tests for the SQLAlchemy tenant store.
"""
from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError

from rent_reminder.core.exceptions import ConflictError, StorageError, ValidationError
from rent_reminder.models.database import MAX_ROOM_NUMBER
from rent_reminder.schemas.tenant import TenantRecord
from rent_reminder.services.tenant_store import TenantStore


def _broken_session():
    raise OperationalError("SELECT 1", {}, Exception("database is down"))


@pytest.fixture
def unreachable_store(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'nested' / 'tenants.db'}")
    yield TenantStore(engine, startup_retry_attempts=1)
    engine.dispose()


class TestTenantStore:
    """Test cases for TenantStore."""

    def test_add_and_list(self, store):
        record = store.add_tenant("Ana", date(2026, 3, 15), 15, 4)

        assert isinstance(record, TenantRecord)
        assert record.id is not None
        assert record.name == "Ana"
        assert record.payment_day == 15
        assert store.list_tenants() == [record]

    def test_name_is_trimmed(self, store):
        record = store.add_tenant("  Luis  ", date(2026, 1, 2), 2, 8)

        assert record.name == "Luis"

    def test_ids_are_unique(self, store):
        first = store.add_tenant("Ana", date(2026, 3, 15), 15, 4)
        second = store.add_tenant("Luis", date(2026, 3, 16), 16, 5)

        assert first.id != second.id

    def test_room_occupied(self, store, march_tenant):
        assert store.is_room_occupied(4) is True
        assert store.is_room_occupied(5) is False

    def test_duplicate_room_rejected(self, store, march_tenant):
        with pytest.raises(ConflictError) as exc_info:
            store.add_tenant("Luis", date(2026, 4, 1), 1, 4)

        assert exc_info.value.room_number == 4
        assert len(store.list_tenants()) == 1

    def test_unique_constraint_rejects_when_check_is_bypassed(self, store, monkeypatch):
        monkeypatch.setattr(store, "is_room_occupied", lambda room_number, on_error=None: False)
        store.add_tenant("Ana", date(2026, 3, 15), 15, 4)

        with pytest.raises(ConflictError):
            store.add_tenant("Luis", date(2026, 4, 1), 1, 4)

        assert len(store.list_tenants()) == 1

    def test_concurrent_adds_for_same_room(self, store, monkeypatch):
        """Both callers pass the occupancy check; exactly one insert wins."""
        monkeypatch.setattr(store, "is_room_occupied", lambda room_number, on_error=None: False)

        def add(name):
            try:
                return store.add_tenant(name, date(2026, 3, 15), 15, 4)
            except ConflictError as e:
                return e

        with ThreadPoolExecutor(max_workers=2) as pool:
            outcomes = list(pool.map(add, ["Ana", "Luis"]))

        assert sum(isinstance(o, TenantRecord) for o in outcomes) == 1
        assert sum(isinstance(o, ConflictError) for o in outcomes) == 1
        assert len(store.list_tenants()) == 1

    def test_remove(self, store, march_tenant):
        assert store.remove_tenant(4) is True
        assert store.list_tenants() == []
        assert store.is_room_occupied(4) is False

    def test_remove_empty_room(self, store):
        assert store.remove_tenant(99) is False

    def test_room_reusable_after_remove(self, store, march_tenant):
        store.remove_tenant(4)
        record = store.add_tenant("Luis", date(2026, 5, 20), 20, 4)

        assert record.room_number == 4
        assert record.id != march_tenant.id

    @pytest.mark.parametrize(
        "name,move_in_date,payment_day,room_number,field",
        [
            ("", date(2026, 3, 15), 15, 4, "name"),
            ("   ", date(2026, 3, 15), 15, 4, "name"),
            ("Ana", None, 15, 4, "move_in_date"),
            ("Ana", date(2026, 3, 15), 0, 4, "payment_day"),
            ("Ana", date(2026, 3, 15), 32, 4, "payment_day"),
            ("Ana", date(2026, 3, 15), 15, 0, "room_number"),
            ("Ana", date(2026, 3, 15), 15, -2, "room_number"),
            ("Ana", date(2026, 3, 15), 15, MAX_ROOM_NUMBER + 1, "room_number"),
        ],
    )
    def test_validation(self, store, name, move_in_date, payment_day, room_number, field):
        with pytest.raises(ValidationError) as exc_info:
            store.add_tenant(name, move_in_date, payment_day, room_number)

        assert exc_info.value.field == field
        assert store.list_tenants() == []

    def test_create_tables_is_idempotent(self, store, march_tenant):
        store.create_tables()

        assert store.list_tenants() == [march_tenant]

    def test_ping(self, store):
        assert store.ping() is True


class TestTenantStoreFailures:
    """Storage failures surface as errors, never as silent success."""

    def test_occupancy_check_fails_closed(self, store, monkeypatch):
        monkeypatch.setattr(store, "_session_factory", _broken_session)
        errors = []

        assert store.is_room_occupied(4, on_error=errors.append) is True
        assert len(errors) == 1
        assert isinstance(errors[0], StorageError)
        assert errors[0].operation == "is_room_occupied"

    def test_occupancy_check_without_callback(self, store, monkeypatch):
        monkeypatch.setattr(store, "_session_factory", _broken_session)

        assert store.is_room_occupied(4) is True

    def test_add_reports_storage_error_when_check_fails(self, store, monkeypatch):
        original_factory = store._session_factory
        monkeypatch.setattr(store, "_session_factory", _broken_session)

        with pytest.raises(StorageError):
            store.add_tenant("Ana", date(2026, 3, 15), 15, 4)

        monkeypatch.setattr(store, "_session_factory", original_factory)
        assert store.list_tenants() == []

    def test_remove_raises_storage_error(self, store, monkeypatch):
        monkeypatch.setattr(store, "_session_factory", _broken_session)

        with pytest.raises(StorageError) as exc_info:
            store.remove_tenant(4)

        assert exc_info.value.operation == "remove_tenant"

    def test_occupancy_check_driver_overflow_fails_closed(self, store):
        errors = []

        assert store.is_room_occupied(10**20, on_error=errors.append) is True
        assert isinstance(errors[0], StorageError)

    def test_remove_driver_overflow_raises_storage_error(self, store, march_tenant):
        with pytest.raises(StorageError):
            store.remove_tenant(10**20)

        assert store.list_tenants() == [march_tenant]

    def test_list_returns_empty_on_failure(self, store, march_tenant, monkeypatch):
        monkeypatch.setattr(store, "_session_factory", _broken_session)

        assert store.list_tenants() == []

    def test_ping_unreachable(self, unreachable_store):
        assert unreachable_store.ping() is False

    def test_create_tables_unreachable(self, unreachable_store):
        with pytest.raises(StorageError) as exc_info:
            unreachable_store.create_tables()

        assert exc_info.value.operation == "create_tables"
