"""Service layer that composes storage with the settlement engine.

The engine and the split/reconcile helpers stay pure; this module is the
only place that reads from or writes to the database.
"""

import logging
from collections.abc import Mapping, Sequence
from decimal import Decimal

from ..config import Settings
from ..db import Database
from ..exceptions import (
    InvalidAmountError,
    MemberNotFoundError,
    PermissionDeniedError,
    SettlementAlreadyCompletedError,
    SettlementNotFoundError,
    SplitValidationError,
    TransactionNotFoundError,
    TripNotFoundError,
)
from ..models import (
    Member,
    RecordedSettlement,
    SplitMode,
    SplitShare,
    StoredTransaction,
    TransactionRecord,
    Transfer,
    Trip,
    TripSettlement,
)
from .engine import calculate_settlement
from .reconcile import has_unsettled_balance, outstanding_transfers, pairwise_debts
from .splits import build_splits

logger = logging.getLogger(__name__)


class SettlementService:
    """Service for recording expenses and settling up trips."""

    def __init__(self, settings: Settings, database: Database):
        """Initialize the settlement service."""
        self.settings = settings
        self.db = database

    # ========================================================================
    # Trips and members
    # ========================================================================

    def create_trip(self, name: str, currency: str = "INR") -> Trip:
        """Create a trip and make it the active one."""
        trip = Trip(name=name, currency=currency)
        trip.id = self.db.save_trip(trip)
        self.db.set_active_trip_id(trip.id)

        logger.info(f"Created trip {trip.id} ({name})")
        return trip

    def get_trip(self, trip_id: int) -> Trip:
        """Get a trip or raise TripNotFoundError."""
        trip = self.db.get_trip(trip_id)
        if trip is None:
            raise TripNotFoundError(f"Trip {trip_id} not found")
        return trip

    def resolve_trip_id(self, trip_id: int | None) -> int:
        """Use the given trip, falling back to the active one."""
        if trip_id is None:
            trip_id = self.db.get_active_trip_id()
        if trip_id is None:
            raise TripNotFoundError(
                "No trip selected. Create one or pick one with 'trip use'."
            )
        self.get_trip(trip_id)
        return trip_id

    def add_member(self, trip_id: int, user_id: str, name: str) -> Member:
        """Add someone to a trip."""
        self.get_trip(trip_id)
        member = Member(trip_id=trip_id, user_id=user_id, name=name)
        self.db.save_member(member)

        logger.info(f"Added member {user_id} to trip {trip_id}")
        return member

    def get_members(self, trip_id: int) -> list[Member]:
        """Members of a trip in join order."""
        return self.db.list_members(trip_id)

    def _member_names(self, trip_id: int) -> dict[str, str]:
        return {m.user_id: m.name for m in self.db.list_members(trip_id)}

    def _require_member(self, names: Mapping[str, str], user_id: str, trip_id: int):
        if user_id not in names:
            raise MemberNotFoundError(f"{user_id} is not a member of trip {trip_id}")

    # ========================================================================
    # Expenses
    # ========================================================================

    def add_expense(
        self,
        trip_id: int,
        title: str,
        amount: int,
        payer_id: str,
        mode: SplitMode = SplitMode.EQUAL,
        split_among: Sequence[str] | None = None,
        percentages: Mapping[str, Decimal] | None = None,
        amounts: Mapping[str, int] | None = None,
    ) -> StoredTransaction:
        """
        Record an expense and its splits.

        Args:
            trip_id: Trip the expense belongs to
            title: Short description
            amount: Total in minor units, must be positive
            payer_id: Member who paid
            mode: How to split the total
            split_among: For equal splits, a subset of members (default: all)
            percentages: For percentage splits, member -> percent
            amounts: For custom splits, member -> minor units

        Returns:
            The stored transaction
        """
        self.get_trip(trip_id)
        if amount <= 0:
            raise InvalidAmountError(f"Expense amount must be positive, got {amount}")

        names = self._member_names(trip_id)
        self._require_member(names, payer_id, trip_id)

        member_ids = list(names)
        if split_among:
            strangers = [user_id for user_id in split_among if user_id not in names]
            if strangers:
                raise SplitValidationError(
                    f"Not members of trip {trip_id}: {', '.join(strangers)}"
                )
            member_ids = [user_id for user_id in member_ids if user_id in split_among]

        splits = build_splits(
            mode,
            amount,
            member_ids=member_ids,
            percentages=percentages,
            amounts=amounts,
        )

        unknown = [s.user_id for s in splits if s.user_id not in names]
        if unknown:
            raise SplitValidationError(
                f"Not members of trip {trip_id}: {', '.join(unknown)}"
            )

        txn = StoredTransaction(
            trip_id=trip_id,
            title=title,
            amount=amount,
            payer_id=payer_id,
            split_mode=mode,
            splits=splits,
        )
        txn.id = self.db.save_transaction(txn)

        logger.info(
            f"Recorded expense {txn.id} '{title}' for {amount} split {len(splits)} ways"
        )
        return txn

    def delete_expense(self, transaction_id: int):
        """Soft-delete an expense so it drops out of settlements."""
        if not self.db.soft_delete_transaction(transaction_id):
            raise TransactionNotFoundError(f"Transaction {transaction_id} not found")
        logger.info(f"Deleted expense {transaction_id}")

    def list_expenses(self, trip_id: int) -> list[StoredTransaction]:
        """Active expenses of a trip."""
        return self.db.list_active_transactions(trip_id)

    def load_transactions(self, trip_id: int) -> list[TransactionRecord]:
        """
        Load a trip's active transactions in the shape the engine expects.

        Names come from the member list; users who have left the trip keep
        their ID as a name.
        """
        names = self._member_names(trip_id)
        return [
            TransactionRecord(
                payer_id=txn.payer_id,
                payer_name=names.get(txn.payer_id, txn.payer_id),
                splits=[
                    SplitShare(
                        user_id=split.user_id,
                        user_name=names.get(split.user_id, split.user_id),
                        amount=split.amount,
                    )
                    for split in txn.splits
                ],
            )
            for txn in self.db.list_active_transactions(trip_id)
        ]

    # ========================================================================
    # Settlements
    # ========================================================================

    def compute(self, trip_id: int) -> TripSettlement:
        """
        Compute the settlement for a trip.

        Returns the engine's result from raw transactions, the recorded
        settlements (newest first), and the transfers still outstanding once
        completed settlements are counted.
        """
        trip = self.get_trip(trip_id)
        result = calculate_settlement(self.load_transactions(trip_id))
        recorded = self.db.list_settlements(trip_id)
        outstanding = outstanding_transfers(
            result, recorded, self._member_names(trip_id)
        )

        logger.info(
            f"Trip {trip_id}: {len(result.transfers)} computed transfers, "
            f"{len(outstanding)} outstanding, {len(recorded)} recorded"
        )

        return TripSettlement(
            trip=trip, result=result, recorded=recorded, outstanding=outstanding
        )

    def pairwise_debts(self, trip_id: int | None = None) -> list[Transfer]:
        """
        Raw pairwise debts for one trip, or across every trip when no trip
        is given.

        Members are matched by user ID across trips.
        """
        if trip_id is not None:
            trip_ids = [trip_id]
        else:
            trip_ids = [t.id for t in self.db.list_trips()]

        transactions: list[TransactionRecord] = []
        settlements: list[RecordedSettlement] = []
        names: dict[str, str] = {}
        for tid in trip_ids:
            self.get_trip(tid)
            transactions.extend(self.load_transactions(tid))
            settlements.extend(self.db.list_settlements(tid))
            for user_id, name in self._member_names(tid).items():
                names.setdefault(user_id, name)

        debts = pairwise_debts(transactions, settlements, names)
        logger.debug(f"{len(debts)} pairwise debts over {len(trip_ids)} trip(s)")
        return debts

    def record_settlement(
        self,
        trip_id: int,
        from_id: str,
        to_id: str,
        amount: int,
        method: str | None = None,
        note: str | None = None,
    ) -> RecordedSettlement:
        """Record a payment between two members as pending."""
        self.get_trip(trip_id)
        if amount <= 0:
            raise InvalidAmountError(
                f"Settlement amount must be positive, got {amount}"
            )
        if from_id == to_id:
            raise InvalidAmountError("Cannot record a settlement with yourself")

        names = self._member_names(trip_id)
        self._require_member(names, from_id, trip_id)
        self._require_member(names, to_id, trip_id)

        settlement = RecordedSettlement(
            trip_id=trip_id,
            from_id=from_id,
            to_id=to_id,
            amount=amount,
            method=method or self.settings.default_settlement_method,
            note=note,
        )
        settlement.id = self.db.save_settlement(settlement)

        logger.info(
            f"Recorded settlement {settlement.id}: {from_id} -> {to_id} ({amount})"
        )
        return settlement

    def confirm_settlement(self, settlement_id: int, user_id: str) -> RecordedSettlement:
        """
        Mark a recorded settlement as completed.

        Only the member who owes (the payer of the settlement) can confirm.
        """
        settlement = self.db.get_settlement(settlement_id)
        if settlement is None:
            raise SettlementNotFoundError(f"Settlement {settlement_id} not found")

        if settlement.from_id != user_id:
            raise PermissionDeniedError("Only the person who owes can confirm payment")

        if settlement.is_completed:
            raise SettlementAlreadyCompletedError(settlement_id)

        self.db.update_settlement_status(settlement_id, "completed")
        settlement.status = "completed"

        logger.info(f"Confirmed settlement {settlement_id}")
        return settlement

    def has_unsettled_balance(self, trip_id: int, user_id: str) -> bool:
        """Whether a member still owes or is owed more than the tolerance."""
        result = calculate_settlement(self.load_transactions(trip_id))
        return has_unsettled_balance(
            result.balances, user_id, tolerance=self.settings.unsettled_tolerance
        )
