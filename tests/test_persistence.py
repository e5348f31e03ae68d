from datetime import datetime, timezone

import pytest

from src.placecast.errors import NotificationNotFound, UpstreamUnavailable, UserNotFound
from src.placecast.models.domain import Channel, NotificationStatus
from src.placecast.persistence.notifications import (
    SupabaseNotificationRepository,
    record_to_row,
    row_to_record,
)
from src.placecast.persistence.users import SupabaseUserDirectory, row_to_user
from tests.factories import make_record


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Chainable stand-in for the supabase query builder over an in-memory table."""

    def __init__(self, table: "FakeTable", action: str, payload=None):
        self.table = table
        self.action = action
        self.payload = payload
        self.filters = []
        self.order_by = None
        self.max_rows = None

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, count):
        self.max_rows = count
        return self

    def _matches(self, row):
        return all(row.get(column) == value for column, value in self.filters)

    def execute(self):
        if self.table.error:
            raise self.table.error
        if self.action == "insert":
            self.table.rows.append(dict(self.payload))
            return FakeResponse([dict(self.payload)])
        if self.action == "update":
            updated = []
            for row in self.table.rows:
                if self._matches(row):
                    row.update(self.payload)
                    updated.append(dict(row))
            return FakeResponse(updated)
        rows = [dict(row) for row in self.table.rows if self._matches(row)]
        if self.order_by:
            column, desc = self.order_by
            rows.sort(key=lambda row: row[column], reverse=desc)
        if self.max_rows is not None:
            rows = rows[: self.max_rows]
        return FakeResponse(rows)


class FakeTable:
    def __init__(self, rows=None, error=None):
        self.rows = rows or []
        self.error = error

    def select(self, columns="*"):
        return FakeQuery(self, "select")

    def insert(self, payload):
        return FakeQuery(self, "insert", payload)

    def update(self, payload):
        return FakeQuery(self, "update", payload)


class FakeSupabase:
    def __init__(self, **tables):
        self.tables = tables

    def table(self, name):
        return self.tables.setdefault(name, FakeTable())


def test_record_row_round_trip_keeps_metadata() -> None:
    record = make_record()

    restored = row_to_record(record_to_row(record))

    assert restored == record


def test_row_to_record_accepts_postgres_timestamps() -> None:
    row = record_to_row(make_record())
    row["created_at"] = "2024-05-01T12:00:00Z"

    assert row_to_record(row).created_at == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_update_merges_metadata_instead_of_replacing() -> None:
    client = FakeSupabase(notifications=FakeTable())
    repository = SupabaseNotificationRepository(client)
    record = repository.create(make_record())

    updated = repository.update(
        record.id,
        fields={"status": NotificationStatus.FAILED},
        metadata_patch={"error_message": "x", "retry_count": 1},
    )

    assert updated.status is NotificationStatus.FAILED
    assert updated.metadata["error_message"] == "x"
    assert updated.metadata["place_details"] == record.metadata["place_details"]
    assert client.tables["notifications"].rows[0]["status"] == "failed"


def test_get_missing_notification_raises_not_found() -> None:
    repository = SupabaseNotificationRepository(FakeSupabase())

    with pytest.raises(NotificationNotFound):
        repository.get("missing")


def test_storage_errors_become_upstream_unavailable() -> None:
    repository = SupabaseNotificationRepository(FakeSupabase(notifications=FakeTable(error=ConnectionError("down"))))

    with pytest.raises(UpstreamUnavailable):
        repository.create(make_record())


def test_list_for_user_is_newest_first() -> None:
    repository = SupabaseNotificationRepository(FakeSupabase())
    repository.create(make_record(record_id="old", created_at=datetime(2024, 1, 1, tzinfo=timezone.utc)))
    repository.create(make_record(record_id="new", created_at=datetime(2024, 6, 1, tzinfo=timezone.utc)))

    assert [record.id for record in repository.list_for_user("user-1")] == ["new", "old"]


def test_user_directory_distinguishes_missing_from_outage() -> None:
    users = FakeTable(rows=[{"id": "u1", "name": "Ana", "email": "ana@example.com", "phone": "", "preferred_channel": "SMS"}])
    directory = SupabaseUserDirectory(FakeSupabase(users=users))

    user = directory.find_by_id("u1")
    assert user.preferred_channel is Channel.SMS
    assert user.phone is None

    with pytest.raises(UserNotFound):
        directory.find_by_id("u2")
    with pytest.raises(UpstreamUnavailable):
        SupabaseUserDirectory(FakeSupabase(users=FakeTable(error=TimeoutError()))).find_by_id("u1")


def test_unknown_channel_defaults_to_email() -> None:
    assert row_to_user({"id": "u1", "preferred_channel": "pigeon"}).preferred_channel is Channel.EMAIL
