"""
Sheet-shaped record storage.

Records are kept in named sheets: tables with a fixed header row where
every record is a positional row of cells.  Services only talk to the
``SheetStore`` interface:

* ``get_all_rows(table)`` returns every row as a header-keyed dict,
  in insertion order;
* ``append_row(table, row)`` adds a positional row;
* ``update_row(table, match, row)`` replaces rows whose cells equal
  every ``match`` item and returns how many were replaced;
* ``delete_row(table, match)`` removes matching rows and returns the
  count.

Two implementations are provided.  ``SQLiteSheetStore`` keeps each
sheet as an SQLite table of TEXT columns and opens a fresh connection
per call.  ``MemorySheetStore`` keeps rows in process memory and is
used for tests and local experiments.  Any storage failure is raised
as ``StoreError``.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

from .config import settings
from .errors import StoreError
from ..schemas.article import ARTICLE_COLUMNS
from ..schemas.editor import EDITOR_COLUMNS

logger = logging.getLogger(__name__)

ARTICLE_SHEET = "Database"
EDITOR_SHEET = "Logins"
KEY_SHEET = "Keys"
TOKEN_SHEET = "AuthTokens"

KEY_COLUMNS = ("email", "key", "expires")
TOKEN_COLUMNS = ("email", "authToken", "expires")

SHEETS: Dict[str, Sequence[str]] = {
    ARTICLE_SHEET: ARTICLE_COLUMNS,
    EDITOR_SHEET: EDITOR_COLUMNS,
    KEY_SHEET: KEY_COLUMNS,
    TOKEN_SHEET: TOKEN_COLUMNS,
}


class SheetStore:
    """Common header handling for sheet stores."""

    def __init__(self, sheets: Optional[Mapping[str, Sequence[str]]] = None) -> None:
        self.sheets = {name: tuple(headers) for name, headers in (sheets or SHEETS).items()}

    def headers(self, table: str) -> Sequence[str]:
        try:
            return self.sheets[table]
        except KeyError:
            raise StoreError(f"Unknown sheet {table!r}") from None

    def _check_row(self, table: str, row: Sequence[Any]) -> Sequence[str]:
        headers = self.headers(table)
        if len(row) != len(headers):
            raise StoreError(
                f"Row for {table!r} has {len(row)} cells, expected {len(headers)}"
            )
        return headers

    def _check_match(self, table: str, match: Mapping[str, Any]) -> Sequence[str]:
        headers = self.headers(table)
        if not match:
            raise StoreError("Refusing to match every row: empty match")
        unknown = [key for key in match if key not in headers]
        if unknown:
            raise StoreError(f"Unknown columns for {table!r}: {', '.join(unknown)}")
        return headers

    def get_all_rows(self, table: str) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def append_row(self, table: str, row: Sequence[Any]) -> None:
        raise NotImplementedError

    def update_row(self, table: str, match: Mapping[str, Any], row: Sequence[Any]) -> int:
        raise NotImplementedError

    def delete_row(self, table: str, match: Mapping[str, Any]) -> int:
        raise NotImplementedError


class MemorySheetStore(SheetStore):
    """Keeps every sheet as a list of positional rows in memory."""

    def __init__(self, sheets: Optional[Mapping[str, Sequence[str]]] = None) -> None:
        super().__init__(sheets)
        self.rows: Dict[str, List[List[Any]]] = {name: [] for name in self.sheets}

    def _matches(self, headers: Sequence[str], row: Sequence[Any], match: Mapping[str, Any]) -> bool:
        return all(row[headers.index(key)] == value for key, value in match.items())

    def get_all_rows(self, table: str) -> List[Dict[str, Any]]:
        headers = self.headers(table)
        return [dict(zip(headers, row)) for row in self.rows[table]]

    def append_row(self, table: str, row: Sequence[Any]) -> None:
        self._check_row(table, row)
        self.rows[table].append(list(row))

    def update_row(self, table: str, match: Mapping[str, Any], row: Sequence[Any]) -> int:
        headers = self._check_match(table, match)
        self._check_row(table, row)
        updated = 0
        for index, existing in enumerate(self.rows[table]):
            if self._matches(headers, existing, match):
                self.rows[table][index] = list(row)
                updated += 1
        return updated

    def delete_row(self, table: str, match: Mapping[str, Any]) -> int:
        headers = self._check_match(table, match)
        kept = [r for r in self.rows[table] if not self._matches(headers, r, match)]
        removed = len(self.rows[table]) - len(kept)
        self.rows[table] = kept
        return removed


def get_database_path(database_url: Optional[str] = None) -> str:
    """Compute the path to the SQLite database file.

    Absolute paths are used as is; relative paths are resolved against
    the project root.
    """
    db_url = database_url or settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / db_url).resolve())


def _quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


class SQLiteSheetStore(SheetStore):
    """Stores each sheet as an SQLite table of TEXT columns.

    Row order is the table's ``rowid`` order, which matches insertion
    order as long as rows are only appended, updated in place or
    deleted.
    """

    def __init__(self, path: Optional[str] = None, sheets: Optional[Mapping[str, Sequence[str]]] = None) -> None:
        super().__init__(sheets)
        self.path = path or get_database_path()

    def get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def get_cursor(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor, commit on success and always close the connection."""
        try:
            conn = self.get_connection()
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot open database {self.path}: {exc}") from exc
        try:
            yield conn.cursor()
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StoreError(str(exc)) from exc
        finally:
            conn.close()

    def init_db(self) -> None:
        """Create any missing sheet tables."""
        with self.get_cursor() as cursor:
            for table, headers in self.sheets.items():
                columns = ", ".join(f"{_quote(h)} TEXT" for h in headers)
                cursor.execute(f"CREATE TABLE IF NOT EXISTS {_quote(table)} ({columns})")
        logger.info("Initialised sheets in %s", self.path)

    @staticmethod
    def _where(match: Mapping[str, Any]) -> str:
        return " AND ".join(f"{_quote(key)} IS ?" for key in match)

    def get_all_rows(self, table: str) -> List[Dict[str, Any]]:
        headers = self.headers(table)
        columns = ", ".join(_quote(h) for h in headers)
        with self.get_cursor() as cursor:
            rows = cursor.execute(
                f"SELECT {columns} FROM {_quote(table)} ORDER BY rowid"
            ).fetchall()
        return [{h: row[h] for h in headers} for row in rows]

    def append_row(self, table: str, row: Sequence[Any]) -> None:
        headers = self._check_row(table, row)
        columns = ", ".join(_quote(h) for h in headers)
        placeholders = ", ".join("?" for _ in headers)
        with self.get_cursor() as cursor:
            cursor.execute(
                f"INSERT INTO {_quote(table)} ({columns}) VALUES ({placeholders})",
                tuple(row),
            )

    def update_row(self, table: str, match: Mapping[str, Any], row: Sequence[Any]) -> int:
        self._check_match(table, match)
        headers = self._check_row(table, row)
        assignments = ", ".join(f"{_quote(h)} = ?" for h in headers)
        with self.get_cursor() as cursor:
            cursor.execute(
                f"UPDATE {_quote(table)} SET {assignments} WHERE {self._where(match)}",
                tuple(row) + tuple(match.values()),
            )
            return cursor.rowcount

    def delete_row(self, table: str, match: Mapping[str, Any]) -> int:
        self._check_match(table, match)
        with self.get_cursor() as cursor:
            cursor.execute(
                f"DELETE FROM {_quote(table)} WHERE {self._where(match)}",
                tuple(match.values()),
            )
            return cursor.rowcount
