"""Pydantic domain models for AutoSplit.

All monetary amounts are integers in minor currency units (paise).
"""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

# ============================================================================
# Engine Models
# ============================================================================


class SplitShare(BaseModel):
    """One person's owed share of a transaction."""

    user_id: str
    user_name: str
    amount: int  # minor units


class TransactionRecord(BaseModel):
    """A transaction as the settlement engine sees it."""

    payer_id: str
    payer_name: str
    splits: list[SplitShare] = Field(default_factory=list)


class ParticipantTotals(BaseModel):
    """Running paid/owed totals for one participant."""

    name: str
    paid: int = 0
    owes: int = 0


class Balance(BaseModel):
    """Net position of one participant."""

    user_id: str
    name: str
    paid: int
    owes: int
    balance: int  # paid - owes; positive = creditor, negative = debtor


class Transfer(BaseModel):
    """A directed payment instruction from a debtor to a creditor."""

    from_id: str
    from_name: str
    to_id: str
    to_name: str
    amount: int = Field(gt=0)


class SettlementResult(BaseModel):
    """Balances and transfer plan for one scope."""

    balances: list[Balance] = Field(default_factory=list)
    transfers: list[Transfer] = Field(default_factory=list)
    total_spent: int = 0
    per_person_avg: int = 0


# ============================================================================
# Storage Models
# ============================================================================


class SplitMode(str, Enum):
    """How a transaction total is divided among members."""

    EQUAL = "equal"
    PERCENTAGE = "percentage"
    CUSTOM = "custom"


SettlementStatus = Literal["pending", "completed", "confirmed"]


class Trip(BaseModel):
    """A trip: the scope settlements are computed over."""

    id: int | None = None
    name: str
    currency: str = "INR"
    created_at: datetime = Field(default_factory=datetime.now)


class Member(BaseModel):
    """A participant of a trip."""

    trip_id: int
    user_id: str
    name: str


class StoredSplit(BaseModel):
    """A persisted split line."""

    user_id: str
    amount: int = Field(ge=0)


class StoredTransaction(BaseModel):
    """A persisted expense with its splits."""

    id: int | None = None
    trip_id: int
    title: str
    amount: int = Field(gt=0)  # recorded total; the split sum is authoritative
    payer_id: str
    split_mode: SplitMode = SplitMode.EQUAL
    splits: list[StoredSplit] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    deleted_at: datetime | None = None


class RecordedSettlement(BaseModel):
    """A real payment a user entered, pending until the payer confirms it."""

    id: int | None = None
    trip_id: int
    from_id: str
    to_id: str
    amount: int = Field(gt=0)
    method: str = "upi"
    note: str | None = Field(default=None, max_length=200)
    status: SettlementStatus = "pending"
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def is_completed(self) -> bool:
        """Whether the payment has actually happened."""
        return self.status in ("completed", "confirmed")


# ============================================================================
# Service Models
# ============================================================================


class TripSettlement(BaseModel):
    """Computed settlement for a trip alongside its recorded payments."""

    trip: Trip
    result: SettlementResult
    recorded: list[RecordedSettlement] = Field(default_factory=list)
    outstanding: list[Transfer] = Field(default_factory=list)
