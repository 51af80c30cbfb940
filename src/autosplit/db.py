"""SQLite database operations for AutoSplit."""

import sqlite3
from datetime import datetime
from pathlib import Path

from .models import (
    Member,
    RecordedSettlement,
    SettlementStatus,
    SplitMode,
    StoredSplit,
    StoredTransaction,
    Trip,
)


class Database:
    """SQLite database manager."""

    def __init__(self, db_path: Path):
        """Initialize database connection."""
        self.db_path = db_path
        self.conn = sqlite3.connect(str(db_path))
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")
        self._init_schema()

    def _init_schema(self):
        """Initialize database schema."""
        cursor = self.conn.cursor()

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS trips (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                currency TEXT NOT NULL DEFAULT 'INR',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS members (
                trip_id INTEGER NOT NULL REFERENCES trips(id),
                user_id TEXT NOT NULL,
                name TEXT NOT NULL,
                PRIMARY KEY (trip_id, user_id)
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS transactions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                trip_id INTEGER NOT NULL REFERENCES trips(id),
                title TEXT NOT NULL,
                amount INTEGER NOT NULL,
                payer_id TEXT NOT NULL,
                split_mode TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                deleted_at TIMESTAMP
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS splits (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                transaction_id INTEGER NOT NULL REFERENCES transactions(id),
                user_id TEXT NOT NULL,
                amount INTEGER NOT NULL
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS settlements (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                trip_id INTEGER NOT NULL REFERENCES trips(id),
                from_id TEXT NOT NULL,
                to_id TEXT NOT NULL,
                amount INTEGER NOT NULL,
                method TEXT NOT NULL,
                note TEXT,
                status TEXT NOT NULL DEFAULT 'pending',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """
        )

        # Config table
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS config (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """
        )

        self.conn.commit()

    def close(self):
        """Close database connection."""
        self.conn.close()

    # ========================================================================
    # Config operations
    # ========================================================================

    def get_config(self, key: str) -> str | None:
        """Get a config value by key."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT value FROM config WHERE key = ?", (key,))
        row = cursor.fetchone()
        return str(row["value"]) if row else None

    def set_config(self, key: str, value: str):
        """Set a config value."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO config (key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
            """,
            (key, value, datetime.now().isoformat()),
        )
        self.conn.commit()

    def get_active_trip_id(self) -> int | None:
        """Get the trip commands default to."""
        value = self.get_config("active_trip_id")
        return int(value) if value else None

    def set_active_trip_id(self, trip_id: int):
        """Set the trip commands default to."""
        self.set_config("active_trip_id", str(trip_id))

    # ========================================================================
    # Trip and member operations
    # ========================================================================

    def save_trip(self, trip: Trip) -> int:
        """Save a trip."""
        cursor = self.conn.cursor()
        cursor.execute(
            "INSERT INTO trips (name, currency, created_at) VALUES (?, ?, ?)",
            (trip.name, trip.currency, trip.created_at.isoformat()),
        )
        self.conn.commit()
        row_id = cursor.lastrowid
        if row_id is None:
            raise RuntimeError("Failed to insert trip")
        return row_id

    def get_trip(self, trip_id: int) -> Trip | None:
        """Get a trip by ID."""
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT id, name, currency, created_at FROM trips WHERE id = ?",
            (trip_id,),
        )
        row = cursor.fetchone()
        if not row:
            return None
        return self._row_to_trip(row)

    def list_trips(self) -> list[Trip]:
        """Get all trips, newest first."""
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT id, name, currency, created_at FROM trips ORDER BY id DESC"
        )
        return [self._row_to_trip(row) for row in cursor.fetchall()]

    def save_member(self, member: Member):
        """Add a member to a trip, or rename an existing one."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO members (trip_id, user_id, name) VALUES (?, ?, ?)
            ON CONFLICT(trip_id, user_id) DO UPDATE SET name = excluded.name
            """,
            (member.trip_id, member.user_id, member.name),
        )
        self.conn.commit()

    def list_members(self, trip_id: int) -> list[Member]:
        """Get all members of a trip in the order they joined."""
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT trip_id, user_id, name FROM members WHERE trip_id = ? ORDER BY rowid",
            (trip_id,),
        )
        return [
            Member(trip_id=row["trip_id"], user_id=row["user_id"], name=row["name"])
            for row in cursor.fetchall()
        ]

    # ========================================================================
    # Transaction operations
    # ========================================================================

    def save_transaction(self, txn: StoredTransaction) -> int:
        """Save a transaction and its splits atomically."""
        with self.conn:
            cursor = self.conn.execute(
                """
                INSERT INTO transactions (
                    trip_id, title, amount, payer_id, split_mode, created_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    txn.trip_id,
                    txn.title,
                    txn.amount,
                    txn.payer_id,
                    txn.split_mode.value,
                    txn.created_at.isoformat(),
                ),
            )
            row_id = cursor.lastrowid
            if row_id is None:
                raise RuntimeError("Failed to insert transaction")
            self.conn.executemany(
                "INSERT INTO splits (transaction_id, user_id, amount) VALUES (?, ?, ?)",
                [(row_id, split.user_id, split.amount) for split in txn.splits],
            )
        return row_id

    def soft_delete_transaction(self, transaction_id: int) -> bool:
        """Mark a transaction deleted. Returns False if it was not active."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            UPDATE transactions SET deleted_at = ?
            WHERE id = ? AND deleted_at IS NULL
            """,
            (datetime.now().isoformat(), transaction_id),
        )
        self.conn.commit()
        return cursor.rowcount > 0

    def list_active_transactions(self, trip_id: int) -> list[StoredTransaction]:
        """Get a trip's non-deleted transactions in the order they were added."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT id, trip_id, title, amount, payer_id, split_mode,
                   created_at, deleted_at
            FROM transactions
            WHERE trip_id = ? AND deleted_at IS NULL
            ORDER BY id
            """,
            (trip_id,),
        )
        rows = cursor.fetchall()

        splits: dict[int, list[StoredSplit]] = {row["id"]: [] for row in rows}
        if splits:
            placeholders = ",".join("?" for _ in splits)
            cursor.execute(
                f"""
                SELECT transaction_id, user_id, amount FROM splits
                WHERE transaction_id IN ({placeholders})
                ORDER BY id
                """,
                list(splits),
            )
            for split_row in cursor.fetchall():
                splits[split_row["transaction_id"]].append(
                    StoredSplit(user_id=split_row["user_id"], amount=split_row["amount"])
                )

        return [
            StoredTransaction(
                id=row["id"],
                trip_id=row["trip_id"],
                title=row["title"],
                amount=row["amount"],
                payer_id=row["payer_id"],
                split_mode=SplitMode(row["split_mode"]),
                splits=splits[row["id"]],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]

    # ========================================================================
    # Settlement operations
    # ========================================================================

    def save_settlement(self, settlement: RecordedSettlement) -> int:
        """Save a recorded settlement."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO settlements (
                trip_id, from_id, to_id, amount, method, note, status, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                settlement.trip_id,
                settlement.from_id,
                settlement.to_id,
                settlement.amount,
                settlement.method,
                settlement.note,
                settlement.status,
                settlement.created_at.isoformat(),
            ),
        )
        self.conn.commit()
        row_id = cursor.lastrowid
        if row_id is None:
            raise RuntimeError("Failed to insert settlement record")
        return row_id

    def get_settlement(self, settlement_id: int) -> RecordedSettlement | None:
        """Get a recorded settlement by ID."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT id, trip_id, from_id, to_id, amount, method, note,
                   status, created_at
            FROM settlements
            WHERE id = ?
            """,
            (settlement_id,),
        )
        row = cursor.fetchone()
        if not row:
            return None
        return self._row_to_settlement(row)

    def list_settlements(self, trip_id: int) -> list[RecordedSettlement]:
        """Get a trip's recorded settlements, newest first."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT id, trip_id, from_id, to_id, amount, method, note,
                   status, created_at
            FROM settlements
            WHERE trip_id = ?
            ORDER BY created_at DESC, id DESC
            """,
            (trip_id,),
        )
        return [self._row_to_settlement(row) for row in cursor.fetchall()]

    def update_settlement_status(self, settlement_id: int, status: SettlementStatus):
        """Set the status of a recorded settlement."""
        cursor = self.conn.cursor()
        cursor.execute(
            "UPDATE settlements SET status = ? WHERE id = ?",
            (status, settlement_id),
        )
        self.conn.commit()

    # ========================================================================
    # Row mapping
    # ========================================================================

    @staticmethod
    def _row_to_trip(row: sqlite3.Row) -> Trip:
        return Trip(
            id=row["id"],
            name=row["name"],
            currency=row["currency"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    @staticmethod
    def _row_to_settlement(row: sqlite3.Row) -> RecordedSettlement:
        return RecordedSettlement(
            id=row["id"],
            trip_id=row["trip_id"],
            from_id=row["from_id"],
            to_id=row["to_id"],
            amount=row["amount"],
            method=row["method"],
            note=row["note"],
            status=row["status"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
