"""AutoSplit - Shared trip expenses and greedy settle-up."""

__version__ = "0.1.0"

from .config import Settings, load_settings
from .db import Database
from .models import (
    Balance,
    RecordedSettlement,
    SettlementResult,
    SplitShare,
    TransactionRecord,
    Transfer,
)
from .settle.engine import calculate_settlement, minimize_transfers, split_equally
from .settle.service import SettlementService

__all__ = [
    "Settings",
    "load_settings",
    "Database",
    "Balance",
    "RecordedSettlement",
    "SettlementResult",
    "SplitShare",
    "TransactionRecord",
    "Transfer",
    "calculate_settlement",
    "minimize_transfers",
    "split_equally",
    "SettlementService",
]
