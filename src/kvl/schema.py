"""TableSchema — column names and roles of the entries table.

Every statement the SQLite store issues is rendered here, so the store
itself never spells out a column name.
"""

from __future__ import annotations

from dataclasses import dataclass

from kvl.config import DEFAULT_TABLE


@dataclass(frozen=True)
class TableSchema:
    """Names of the entries table and its three columns.

    Attributes:
        table: Table name.
        token: Engine-assigned ordering token.  Never exposed to callers.
        key:   Unique byte key.
        value: Serialized value bytes.
    """

    table: str = DEFAULT_TABLE
    token: str = "id"
    key: str = "key"
    value: str = "value"

    @property
    def create_table(self) -> str:
        return (
            f"CREATE TABLE IF NOT EXISTS {self.table} (\n"
            f"    {self.token} INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            f"    {self.key}   BLOB NOT NULL UNIQUE,\n"
            f"    {self.value} BLOB NOT NULL\n"
            ")"
        )

    # ── writes ───────────────────────────────────────────────

    @property
    def insert_or_ignore(self) -> str:
        return f"INSERT OR IGNORE INTO {self.table} ({self.key}, {self.value}) VALUES (?, ?)"

    @property
    def upsert(self) -> str:
        # ON CONFLICT keeps the row (and its ordering token) in place
        return (
            f"INSERT INTO {self.table} ({self.key}, {self.value}) VALUES (?, ?) "
            f"ON CONFLICT({self.key}) DO UPDATE SET {self.value} = excluded.{self.value}"
        )

    @property
    def update(self) -> str:
        return f"UPDATE {self.table} SET {self.value} = ? WHERE {self.key} = ?"

    @property
    def delete(self) -> str:
        return f"DELETE FROM {self.table} WHERE {self.key} = ?"

    # ── reads ────────────────────────────────────────────────

    @property
    def select_value(self) -> str:
        return f"SELECT {self.value} FROM {self.table} WHERE {self.key} = ?"

    @property
    def select_exists(self) -> str:
        return f"SELECT 1 FROM {self.table} WHERE {self.key} = ?"

    @property
    def select_page(self) -> str:
        """Keyset page: rows after the cursor token, ascending, bounded."""
        return (
            f"SELECT {self.token}, {self.key}, {self.value} FROM {self.table} "
            f"WHERE {self.token} > ? ORDER BY {self.token} ASC LIMIT ?"
        )

    @property
    def count(self) -> str:
        return f"SELECT COUNT(*) FROM {self.table}"
