"""Core settlement logic: net balances and a greedy transfer plan.

Every function here is pure. Amounts are integer minor units (paise) and
no floating point is involved anywhere.
"""

import logging
from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal

from ..exceptions import BalanceIntegrityError, InvalidAmountError
from ..models import (
    Balance,
    ParticipantTotals,
    SettlementResult,
    Transfer,
    TransactionRecord,
)

logger = logging.getLogger(__name__)


def accumulate(
    transactions: Iterable[TransactionRecord],
) -> dict[str, ParticipantTotals]:
    """
    Accumulate paid and owed totals per user.

    The payer is credited with the sum of the transaction's splits, not a
    separately stored total. Users are registered in the order they first
    appear, as payer or as split participant.

    Args:
        transactions: Transactions in the scope

    Returns:
        Mapping of user ID to running totals, in first-seen order

    Raises:
        InvalidAmountError: If any split amount is negative
    """
    totals: dict[str, ParticipantTotals] = {}

    for txn in transactions:
        for split in txn.splits:
            if split.amount < 0:
                raise InvalidAmountError(
                    f"Split amount for {split.user_id} is negative: {split.amount}"
                )

        payer = totals.setdefault(txn.payer_id, ParticipantTotals(name=txn.payer_name))
        payer.paid += sum(split.amount for split in txn.splits)

        for split in txn.splits:
            person = totals.setdefault(
                split.user_id, ParticipantTotals(name=split.user_name)
            )
            person.owes += split.amount

    return totals


def derive_balances(accumulated: dict[str, ParticipantTotals]) -> list[Balance]:
    """Turn accumulated totals into balances, largest creditor first."""
    balances = [
        Balance(
            user_id=user_id,
            name=data.name,
            paid=data.paid,
            owes=data.owes,
            balance=data.paid - data.owes,
        )
        for user_id, data in accumulated.items()
    ]
    # sorted() is stable, so ties keep first-seen order
    return sorted(balances, key=lambda b: b.balance, reverse=True)


def total_spent(balances: Iterable[Balance]) -> int:
    """Sum of everything paid, equal to the sum of all transaction totals."""
    return sum(b.paid for b in balances)


def per_person_average(total: int, participant_count: int) -> int:
    """Average spend per participant, rounded half up; 0 with nobody."""
    if participant_count <= 0:
        return 0
    average = Decimal(total) / Decimal(participant_count)
    return int(average.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def minimize_transfers(balances: Sequence[Balance]) -> list[Transfer]:
    """
    Produce transfers that zero out every balance.

    Greedy largest-first matching:
    1. Split into creditors (balance > 0) and debtors (balance < 0)
    2. Sort both by magnitude, largest first
    3. Match the current debtor with the current creditor for the smaller
       of the two amounts, then advance whichever side reached zero

    This is not guaranteed to find the fewest possible transfers.

    Args:
        balances: Participant balances; must sum to zero

    Returns:
        Transfers from debtors to creditors, each with amount > 0

    Raises:
        BalanceIntegrityError: If one side runs out while the other still
            has an amount left, i.e. the balances did not sum to zero
    """
    creditors = [[b, b.balance] for b in balances if b.balance > 0]
    debtors = [[b, -b.balance] for b in balances if b.balance < 0]

    creditors.sort(key=lambda entry: entry[1], reverse=True)
    debtors.sort(key=lambda entry: entry[1], reverse=True)

    transfers: list[Transfer] = []
    ci = 0
    di = 0

    while ci < len(creditors) and di < len(debtors):
        creditor, credit = creditors[ci]
        debtor, debt = debtors[di]
        amount = min(credit, debt)

        if amount > 0:
            transfers.append(
                Transfer(
                    from_id=debtor.user_id,
                    from_name=debtor.name,
                    to_id=creditor.user_id,
                    to_name=creditor.name,
                    amount=amount,
                )
            )

        creditors[ci][1] = credit - amount
        debtors[di][1] = debt - amount

        if creditors[ci][1] == 0:
            ci += 1
        if debtors[di][1] == 0:
            di += 1

    if ci < len(creditors) or di < len(debtors):
        # Positive when credit is left over, negative when debt is
        stranded = sum(entry[1] for entry in creditors[ci:]) - sum(
            entry[1] for entry in debtors[di:]
        )
        raise BalanceIntegrityError(stranded)

    logger.debug(f"Planned {len(transfers)} transfers for {len(balances)} balances")

    return transfers


def split_equally(total: int, num_people: int) -> list[int]:
    """
    Split a total into near-equal integer shares.

    The first ``total % num_people`` shares get one extra minor unit, so the
    shares always add back up to ``total`` and differ by at most one.

    Args:
        total: Amount to split, in minor units
        num_people: Number of shares

    Returns:
        List of shares; empty when num_people <= 0

    Raises:
        InvalidAmountError: If total is negative
    """
    if total < 0:
        raise InvalidAmountError(f"Cannot split a negative amount: {total}")
    if num_people <= 0:
        return []

    base = total // num_people
    remainder = total - base * num_people

    return [base + 1 if i < remainder else base for i in range(num_people)]


def calculate_settlement(
    transactions: Iterable[TransactionRecord],
) -> SettlementResult:
    """
    Calculate balances and transfers for a set of transactions.

    Always recomputes from the raw transactions; recorded payments are not
    considered here.
    """
    balances = derive_balances(accumulate(transactions))
    spent = total_spent(balances)

    return SettlementResult(
        balances=balances,
        transfers=minimize_transfers(balances),
        total_spent=spent,
        per_person_avg=per_person_average(spent, len(balances)),
    )
