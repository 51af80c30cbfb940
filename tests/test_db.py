"""Tests for the SQLite storage layer."""

import pytest

from autosplit.db import Database
from autosplit.models import (
    Member,
    RecordedSettlement,
    SplitMode,
    StoredSplit,
    StoredTransaction,
    Trip,
)


@pytest.fixture
def db(tmp_path):
    """Create a temporary database."""
    database = Database(tmp_path / "test.db")
    yield database
    database.close()


@pytest.fixture
def trip_id(db):
    return db.save_trip(Trip(name="Goa"))


def make_txn(trip_id: int, title: str = "Dinner") -> StoredTransaction:
    return StoredTransaction(
        trip_id=trip_id,
        title=title,
        amount=300,
        payer_id="a",
        split_mode=SplitMode.CUSTOM,
        splits=[StoredSplit(user_id="b", amount=200), StoredSplit(user_id="a", amount=100)],
    )


def test_config_round_trip(db):
    """Config values are stored and overwritten."""
    assert db.get_active_trip_id() is None

    db.set_active_trip_id(3)
    db.set_active_trip_id(7)

    assert db.get_active_trip_id() == 7


def test_trips(db):
    first = db.save_trip(Trip(name="Goa"))
    second = db.save_trip(Trip(name="Manali", currency="INR"))

    assert db.get_trip(first).name == "Goa"
    assert db.get_trip(999) is None
    assert [t.id for t in db.list_trips()] == [second, first]


def test_members_keep_join_order_and_rename(db, trip_id):
    db.save_member(Member(trip_id=trip_id, user_id="b", name="Bala"))
    db.save_member(Member(trip_id=trip_id, user_id="a", name="Asha"))
    db.save_member(Member(trip_id=trip_id, user_id="b", name="Bala K"))

    members = db.list_members(trip_id)

    assert [(m.user_id, m.name) for m in members] == [("b", "Bala K"), ("a", "Asha")]


def test_transaction_with_splits(db, trip_id):
    txn_id = db.save_transaction(make_txn(trip_id))

    [stored] = db.list_active_transactions(trip_id)

    assert stored.id == txn_id
    assert stored.split_mode == SplitMode.CUSTOM
    assert [(s.user_id, s.amount) for s in stored.splits] == [("b", 200), ("a", 100)]


def test_soft_deleted_transactions_hidden(db, trip_id):
    kept = db.save_transaction(make_txn(trip_id, "Kept"))
    dropped = db.save_transaction(make_txn(trip_id, "Dropped"))

    assert db.soft_delete_transaction(dropped)
    assert not db.soft_delete_transaction(dropped)

    assert [t.id for t in db.list_active_transactions(trip_id)] == [kept]


def test_transactions_scoped_to_trip(db, trip_id):
    other = db.save_trip(Trip(name="Manali"))
    db.save_transaction(make_txn(trip_id))

    assert db.list_active_transactions(other) == []


def test_settlement_status_update(db, trip_id):
    settlement_id = db.save_settlement(
        RecordedSettlement(trip_id=trip_id, from_id="b", to_id="a", amount=200)
    )

    db.update_settlement_status(settlement_id, "completed")
    stored = db.get_settlement(settlement_id)

    assert stored.status == "completed"
    assert stored.is_completed
    assert db.get_settlement(999) is None
