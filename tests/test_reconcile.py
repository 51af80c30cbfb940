"""Tests for reconciling computed settlements with recorded payments."""

import pytest

from autosplit.models import RecordedSettlement, SplitShare, TransactionRecord
from autosplit.settle.engine import calculate_settlement
from autosplit.settle.reconcile import (
    apply_recorded_settlements,
    has_unsettled_balance,
    outstanding_transfers,
    pairwise_debts,
)

NAMES = {"a": "Asha", "b": "Bala", "c": "Chetan"}


def make_txn(payer: str, splits: dict[str, int]) -> TransactionRecord:
    return TransactionRecord(
        payer_id=payer,
        payer_name=NAMES[payer],
        splits=[
            SplitShare(user_id=user_id, user_name=NAMES[user_id], amount=amount)
            for user_id, amount in splits.items()
        ],
    )


def make_settlement(from_id: str, to_id: str, amount: int, status="completed"):
    return RecordedSettlement(
        trip_id=1, from_id=from_id, to_id=to_id, amount=amount, status=status
    )


@pytest.fixture
def dinner_result():
    """A pays 3000 split equally among A, B, C."""
    return calculate_settlement([make_txn("a", {"a": 1000, "b": 1000, "c": 1000})])


class TestApplyRecordedSettlements:
    """Completed payments shift balances."""

    def test_completed_payment_reduces_debt(self, dinner_result):
        adjusted = apply_recorded_settlements(
            dinner_result.balances, [make_settlement("b", "a", 1000)]
        )

        assert {b.user_id: b.balance for b in adjusted} == {"a": 1000, "b": 0, "c": -1000}
        assert sum(b.balance for b in adjusted) == 0

    def test_pending_payment_ignored(self, dinner_result):
        adjusted = apply_recorded_settlements(
            dinner_result.balances, [make_settlement("b", "a", 1000, status="pending")]
        )

        assert {b.user_id: b.balance for b in adjusted} == {
            "a": 2000,
            "b": -1000,
            "c": -1000,
        }

    def test_does_not_mutate_input(self, dinner_result):
        apply_recorded_settlements(
            dinner_result.balances, [make_settlement("b", "a", 1000)]
        )

        assert dinner_result.balances[0].balance == 2000

    def test_unknown_participant_added(self, dinner_result):
        adjusted = apply_recorded_settlements(
            dinner_result.balances,
            [make_settlement("b", "z", 100)],
            names={"z": "Zoya"},
        )

        zoya = next(b for b in adjusted if b.user_id == "z")
        assert zoya.name == "Zoya"
        assert zoya.balance == -100


class TestOutstandingTransfers:
    """What is left to pay after recorded payments."""

    def test_partial_settlement(self, dinner_result):
        outstanding = outstanding_transfers(
            dinner_result, [make_settlement("b", "a", 1000)]
        )

        assert [(t.from_id, t.to_id, t.amount) for t in outstanding] == [("c", "a", 1000)]

    def test_fully_settled(self, dinner_result):
        outstanding = outstanding_transfers(
            dinner_result,
            [make_settlement("b", "a", 1000), make_settlement("c", "a", 1000)],
        )

        assert outstanding == []

    def test_engine_result_untouched(self, dinner_result):
        outstanding_transfers(dinner_result, [make_settlement("b", "a", 1000)])

        assert len(dinner_result.transfers) == 2


class TestPairwiseDebts:
    """Raw pairwise debts without simplification."""

    @pytest.fixture
    def transactions(self):
        return [
            make_txn("a", {"a": 1000, "b": 1000, "c": 1000}),
            make_txn("b", {"a": 300, "c": 300}),
        ]

    def test_nets_each_pair(self, transactions):
        debts = pairwise_debts(transactions)

        assert [(d.from_id, d.to_id, d.amount) for d in debts] == [
            ("b", "a", 700),
            ("c", "a", 1000),
            ("c", "b", 300),
        ]
        assert debts[0].from_name == "Bala"

    def test_completed_settlement_clears_pair(self, transactions):
        debts = pairwise_debts(transactions, [make_settlement("c", "a", 1000)])

        assert [(d.from_id, d.to_id, d.amount) for d in debts] == [
            ("b", "a", 700),
            ("c", "b", 300),
        ]

    def test_empty(self):
        assert pairwise_debts([]) == []


class TestUnsettledBalance:
    """Tolerance check for leftover balances."""

    def test_within_tolerance(self):
        result = calculate_settlement([make_txn("a", {"b": 40})])

        assert not has_unsettled_balance(result.balances, "b", tolerance=50)

    def test_beyond_tolerance(self):
        result = calculate_settlement([make_txn("a", {"b": 60})])

        assert has_unsettled_balance(result.balances, "a", tolerance=50)
        assert has_unsettled_balance(result.balances, "b", tolerance=50)

    def test_unknown_user(self, dinner_result):
        assert not has_unsettled_balance(dinner_result.balances, "z")
