"""
Persistence Gateway Module

Key/value persistence of complete per-user ledger snapshots. Provides the
abstract gateway plus in-memory (testing) and SQLite (persistence)
implementations. Snapshots are plain JSON-serialisable dictionaries with
monetary values stored as Decimal strings.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union
from datetime import datetime, timezone
from pathlib import Path
import sqlite3
import json
import threading

from .errors import PersistenceFailure


class PersistenceGateway(ABC):
    """Abstract interface for snapshot storage backends"""

    @abstractmethod
    def load(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Load a user's snapshot, None if never saved"""
        pass

    @abstractmethod
    def save(self, user_id: str, snapshot: Dict[str, Any]) -> None:
        """Replace a user's snapshot; raises PersistenceFailure on error"""
        pass

    @abstractmethod
    def delete(self, user_id: str) -> bool:
        """Delete a user's snapshot"""
        pass

    @abstractmethod
    def user_ids(self) -> List[str]:
        """All users with a stored snapshot"""
        pass

    def close(self) -> None:
        """Close storage connection (default no-op)"""
        pass


class InMemoryGateway(PersistenceGateway):
    """In-memory gateway implementation for testing"""

    def __init__(self):
        self._data: Dict[str, str] = {}
        self._lock = threading.RLock()

    def load(self, user_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            raw = self._data.get(user_id)
            # Stored as JSON text so callers never share state with the store
            return json.loads(raw) if raw is not None else None

    def save(self, user_id: str, snapshot: Dict[str, Any]) -> None:
        try:
            raw = json.dumps(snapshot)
        except (TypeError, ValueError) as e:
            raise PersistenceFailure(f"Snapshot for {user_id} is not serialisable: {e}",
                                     user_id=user_id)
        with self._lock:
            self._data[user_id] = raw

    def delete(self, user_id: str) -> bool:
        with self._lock:
            return self._data.pop(user_id, None) is not None

    def user_ids(self) -> List[str]:
        with self._lock:
            return list(self._data)


class SQLiteGateway(PersistenceGateway):
    """SQLite gateway implementation, one row per user"""

    table_name = "user_ledgers"

    def __init__(self, db_path: Union[str, Path] = ":memory:"):
        self.db_path = str(db_path)
        self._lock = threading.RLock()
        try:
            self._connection = sqlite3.connect(self.db_path, check_same_thread=False)
            self._connection.row_factory = sqlite3.Row

            # Enable WAL mode for better concurrent access
            if self.db_path != ":memory:":
                self._connection.execute("PRAGMA journal_mode = WAL")
                self._connection.execute("PRAGMA synchronous = NORMAL")

            self._connection.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.table_name} (
                    user_id TEXT PRIMARY KEY,
                    data TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            self._connection.commit()
        except sqlite3.Error as e:
            raise PersistenceFailure(f"Cannot open ledger database {self.db_path}: {e}")

    def load(self, user_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            connection = self._connected()
            try:
                cursor = connection.execute(f"""
                    SELECT data FROM {self.table_name} WHERE user_id = ?
                """, (user_id,))
                row = cursor.fetchone()
            except sqlite3.Error as e:
                raise PersistenceFailure(f"Cannot load ledger for {user_id}: {e}", user_id=user_id)

            if row:
                return json.loads(row['data'])
            return None

    def save(self, user_id: str, snapshot: Dict[str, Any]) -> None:
        now = datetime.now(timezone.utc).isoformat()
        try:
            data_json = json.dumps(snapshot)
        except (TypeError, ValueError) as e:
            raise PersistenceFailure(f"Snapshot for {user_id} is not serialisable: {e}",
                                     user_id=user_id)

        with self._lock:
            connection = self._connected()
            try:
                # Single statement, so a snapshot is either fully written or not at all
                connection.execute(f"""
                    INSERT OR REPLACE INTO {self.table_name} (user_id, data, created_at, updated_at)
                    VALUES (?, ?,
                        COALESCE((SELECT created_at FROM {self.table_name} WHERE user_id = ?), ?),
                        ?)
                """, (user_id, data_json, user_id, now, now))
                connection.commit()
            except sqlite3.Error as e:
                connection.rollback()
                raise PersistenceFailure(f"Cannot save ledger for {user_id}: {e}", user_id=user_id)

    def delete(self, user_id: str) -> bool:
        with self._lock:
            connection = self._connected()
            try:
                cursor = connection.execute(f"""
                    DELETE FROM {self.table_name} WHERE user_id = ?
                """, (user_id,))
                connection.commit()
            except sqlite3.Error as e:
                raise PersistenceFailure(f"Cannot delete ledger for {user_id}: {e}", user_id=user_id)
            return cursor.rowcount > 0

    def user_ids(self) -> List[str]:
        with self._lock:
            connection = self._connected()
            cursor = connection.execute(f"""
                SELECT user_id FROM {self.table_name} ORDER BY created_at
            """)
            return [row['user_id'] for row in cursor.fetchall()]

    def _connected(self) -> sqlite3.Connection:
        if self._connection is None:
            raise PersistenceFailure(f"Ledger database {self.db_path} is closed")
        return self._connection

    def close(self) -> None:
        """Close SQLite connection"""
        with self._lock:
            if self._connection:
                self._connection.close()
                self._connection = None
