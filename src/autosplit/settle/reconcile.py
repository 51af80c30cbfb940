"""Reconcile computed settlements with payments users have recorded.

The engine never looks at recorded settlements. These helpers combine the
two views for callers that need to know what is still outstanding.
"""

from collections.abc import Iterable, Mapping, Sequence

from ..models import (
    Balance,
    RecordedSettlement,
    SettlementResult,
    Transfer,
    TransactionRecord,
)
from .engine import minimize_transfers

UNKNOWN_NAME = "Unknown"


def apply_recorded_settlements(
    balances: Sequence[Balance],
    settlements: Iterable[RecordedSettlement],
    names: Mapping[str, str] | None = None,
) -> list[Balance]:
    """
    Shift balances by every completed settlement.

    Paying raises the payer's balance and lowers the receiver's by the same
    amount, so the zero-sum property survives. Pending settlements are
    ignored. ``paid`` and ``owes`` are left as computed from transactions.

    Args:
        balances: Balances computed by the engine
        settlements: Recorded settlements for the same scope
        names: Display names for users that only appear in settlements

    Returns:
        New balances, largest creditor first
    """
    names = names or {}
    adjusted = {b.user_id: b.model_copy() for b in balances}

    for settlement in settlements:
        if not settlement.is_completed:
            continue
        for user_id, delta in (
            (settlement.from_id, settlement.amount),
            (settlement.to_id, -settlement.amount),
        ):
            if user_id not in adjusted:
                adjusted[user_id] = Balance(
                    user_id=user_id,
                    name=names.get(user_id, UNKNOWN_NAME),
                    paid=0,
                    owes=0,
                    balance=0,
                )
            adjusted[user_id].balance += delta

    return sorted(adjusted.values(), key=lambda b: b.balance, reverse=True)


def outstanding_transfers(
    result: SettlementResult,
    settlements: Iterable[RecordedSettlement],
    names: Mapping[str, str] | None = None,
) -> list[Transfer]:
    """Transfers still needed once completed payments are taken into account."""
    return minimize_transfers(
        apply_recorded_settlements(result.balances, settlements, names)
    )


def pairwise_debts(
    transactions: Iterable[TransactionRecord],
    settlements: Iterable[RecordedSettlement] = (),
    names: Mapping[str, str] | None = None,
) -> list[Transfer]:
    """
    Net debt between each pair of users, without simplification.

    Every split is a debt from the split user to the payer; completed
    settlements pay it down. Pairs that net to zero are dropped.
    """
    known = dict(names or {})
    # (low_id, high_id) -> amount low owes high; negative means high owes low
    pairs: dict[tuple[str, str], int] = {}

    def add_debt(from_id: str, to_id: str, amount: int) -> None:
        if from_id == to_id:
            return
        if from_id < to_id:
            key, signed = (from_id, to_id), amount
        else:
            key, signed = (to_id, from_id), -amount
        pairs[key] = pairs.get(key, 0) + signed

    for txn in transactions:
        known.setdefault(txn.payer_id, txn.payer_name)
        for split in txn.splits:
            known.setdefault(split.user_id, split.user_name)
            add_debt(split.user_id, txn.payer_id, split.amount)

    for settlement in settlements:
        if settlement.is_completed:
            add_debt(settlement.from_id, settlement.to_id, -settlement.amount)

    debts: list[Transfer] = []
    for (low, high), amount in pairs.items():
        if amount == 0:
            continue
        from_id, to_id = (low, high) if amount > 0 else (high, low)
        debts.append(
            Transfer(
                from_id=from_id,
                from_name=known.get(from_id, UNKNOWN_NAME),
                to_id=to_id,
                to_name=known.get(to_id, UNKNOWN_NAME),
                amount=abs(amount),
            )
        )

    return debts


def has_unsettled_balance(
    balances: Iterable[Balance], user_id: str, tolerance: int = 50
) -> bool:
    """Whether a user's balance is further from zero than ``tolerance``."""
    for b in balances:
        if b.user_id == user_id:
            return abs(b.balance) > tolerance
    return False
