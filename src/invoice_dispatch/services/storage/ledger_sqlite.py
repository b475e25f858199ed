"""
SQLite-backed ledger.

One table per ledger with the key as primary key. Inserts are
insert-if-absent, so concurrent runs against the same file can only ever
add rows.
"""

import re
import sqlite3

from .ledger_base import LedgerBase

_TABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SQLiteLedger(LedgerBase):
    """
    Persistent key set in a single SQLite table.

    Features:
    - Survives restarts
    - Several ledgers can share one database file (one table each)
    """

    def __init__(self, db_path: str = "suppliers.db", table: str = "suppliers"):
        """
        Initialize ledger with database path and table name.

        Args:
            db_path: Path to SQLite database file (default: suppliers.db)
            table: Table holding the keys (default: suppliers)
        """
        if not _TABLE_NAME.match(table):
            raise ValueError(f"Invalid table name: {table}")
        self.db_path = db_path
        self.table = table
        self._init_database()

    def _init_database(self):
        """Create the ledger table if it doesn't exist"""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        cursor.execute(f"CREATE TABLE IF NOT EXISTS {self.table} (name TEXT PRIMARY KEY)")

        conn.commit()
        conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def contains(self, key: str) -> bool:
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute(f"SELECT name FROM {self.table} WHERE name = ?", (key,))

        row = cursor.fetchone()
        conn.close()

        return row is not None

    def add(self, key: str) -> None:
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute(f"INSERT OR IGNORE INTO {self.table} (name) VALUES (?)", (key,))

        conn.commit()
        conn.close()

    def keys(self) -> set[str]:
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute(f"SELECT name FROM {self.table}")

        rows = cursor.fetchall()
        conn.close()

        return {row[0] for row in rows}
