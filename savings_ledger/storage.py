"""
Storage Backend Module

Provides the abstract storage interface and the in-memory implementation the
ledger runs on. Records are JSON-compatible dicts keyed by integer id; all
monetary values are stored as Decimal strings.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any, Tuple
from contextlib import contextmanager
import json
import threading


class StorageInterface(ABC):
    """Abstract interface for storage backends"""

    @abstractmethod
    def save(self, table: str, record_id: int, data: Dict[str, Any]) -> None:
        """Save a record to storage"""
        pass

    @abstractmethod
    def load(self, table: str, record_id: int) -> Optional[Dict[str, Any]]:
        """Load a record from storage"""
        pass

    @abstractmethod
    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table in insertion order"""
        pass

    @abstractmethod
    def exists(self, table: str, record_id: int) -> bool:
        """Check if a record exists"""
        pass

    @abstractmethod
    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find records matching filters"""
        pass

    @abstractmethod
    def count(self, table: str) -> int:
        """Count records in table"""
        pass

    @abstractmethod
    def next_id(self, sequence: str) -> int:
        """Allocate the next integer id of a sequence, starting at 1"""
        pass

    @abstractmethod
    def clear_table(self, table: str) -> None:
        """Clear all records from a table"""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release any resources held by the backend"""
        pass

    def begin_transaction(self) -> None:
        """Start a transaction (default no-op)"""
        pass

    def commit(self) -> None:
        """Commit current transaction (default no-op)"""
        pass

    def rollback(self) -> None:
        """Rollback current transaction (default no-op)"""
        pass

    @contextmanager
    def atomic(self):
        """Context manager for atomic operations"""
        self.begin_transaction()
        try:
            yield
            self.commit()
        except Exception:
            self.rollback()
            raise


_MISSING = object()


class InMemoryStorage(StorageInterface):
    """
    In-memory storage. State lives only as long as the instance.

    atomic() holds a re-entrant lock for the whole block. Writes made inside
    the block record the value they replace in an undo log; if the block
    raises, only those entries are restored, so rollback cost depends on what
    the block touched rather than on table size. Nested atomic() calls join
    the outermost one.
    """

    def __init__(self):
        self._data: Dict[str, Dict[int, Dict[str, Any]]] = {}
        self._sequences: Dict[str, int] = {}
        self._lock = threading.RLock()
        self._depth = 0
        self._undo: List[Tuple] = []

    def _ensure_table(self, table: str) -> None:
        if table not in self._data:
            self._data[table] = {}

    @staticmethod
    def _copy(record: Dict[str, Any]) -> Dict[str, Any]:
        # Deep copy to prevent external mutation
        return json.loads(json.dumps(record, default=str))

    def _remember(self, entry: Tuple) -> None:
        if self._depth > 0:
            self._undo.append(entry)

    def save(self, table: str, record_id: int, data: Dict[str, Any]) -> None:
        with self._lock:
            self._ensure_table(table)
            rows = self._data[table]
            self._remember(("record", table, record_id, rows.get(record_id, _MISSING)))
            rows[record_id] = self._copy(data)

    def load(self, table: str, record_id: int) -> Optional[Dict[str, Any]]:
        with self._lock:
            self._ensure_table(table)
            record = self._data[table].get(record_id)
            if record is not None:
                return self._copy(record)
            return None

    def load_all(self, table: str) -> List[Dict[str, Any]]:
        with self._lock:
            self._ensure_table(table)
            return [self._copy(record) for record in self._data[table].values()]

    def exists(self, table: str, record_id: int) -> bool:
        with self._lock:
            self._ensure_table(table)
            return record_id in self._data[table]

    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        with self._lock:
            self._ensure_table(table)
            results = []
            for record in self._data[table].values():
                if all(key in record and record[key] == value for key, value in filters.items()):
                    results.append(self._copy(record))
            return results

    def count(self, table: str) -> int:
        with self._lock:
            self._ensure_table(table)
            return len(self._data[table])

    def next_id(self, sequence: str) -> int:
        with self._lock:
            previous = self._sequences.get(sequence, _MISSING)
            self._remember(("sequence", sequence, previous))
            value = (0 if previous is _MISSING else previous) + 1
            self._sequences[sequence] = value
            return value

    def clear_table(self, table: str) -> None:
        with self._lock:
            self._remember(("table", table, self._data.get(table, _MISSING)))
            self._data[table] = {}

    def close(self) -> None:
        """Drop all tables and sequences"""
        with self._lock:
            self._remember(("all", self._data, self._sequences))
            self._data = {}
            self._sequences = {}

    def begin_transaction(self) -> None:
        self._lock.acquire()
        self._depth += 1

    def commit(self) -> None:
        self._depth -= 1
        if self._depth == 0:
            self._undo = []
        self._lock.release()

    def rollback(self) -> None:
        self._depth -= 1
        if self._depth == 0:
            undo, self._undo = self._undo, []
            for entry in reversed(undo):
                self._restore(entry)
        self._lock.release()

    def _restore(self, entry: Tuple) -> None:
        kind = entry[0]
        if kind == "record":
            _, table, record_id, previous = entry
            rows = self._data.setdefault(table, {})
            if previous is _MISSING:
                rows.pop(record_id, None)
            else:
                rows[record_id] = previous
        elif kind == "sequence":
            _, sequence, previous = entry
            if previous is _MISSING:
                self._sequences.pop(sequence, None)
            else:
                self._sequences[sequence] = previous
        elif kind == "table":
            _, table, previous = entry
            if previous is _MISSING:
                self._data.pop(table, None)
            else:
                self._data[table] = previous
        else:
            _, self._data, self._sequences = entry

    def undo_log_size(self) -> int:
        """Number of pending undo entries in the open atomic block"""
        with self._lock:
            return len(self._undo)
