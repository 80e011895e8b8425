"""
In-memory registry storage and locking.

Each registry is a set of named tables guarded by one shared/exclusive
lock. Callers group a whole logical operation (lookup, validate, write)
inside a single ``read()`` or ``transaction()`` block.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Generator, Iterable

logger = logging.getLogger(__name__)


class ReadWriteLock:
    """
    Shared/exclusive lock.

    Any number of readers may hold the lock together; a writer holds it
    alone. Once a writer is waiting, new readers queue behind it so a
    steady stream of reads cannot starve writes. The lock is not
    re-entrant.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("release_read() called without a reader")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write() called without a writer")
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Generator[None, None, None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Generator[None, None, None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class Registry:
    """
    A lock-guarded group of in-memory tables.

    Tables are plain dicts keyed by id; insertion order is preserved.

    Usage:
        with registry.read() as tables:
            state = tables["states"].get("draft")

        with registry.transaction() as tables:
            tables["states"]["draft"] = state
    """

    def __init__(self, name: str, tables: Iterable[str]):
        self.name = name
        self._tables: Dict[str, Dict[str, Any]] = {t: {} for t in tables}
        self._lock = ReadWriteLock()
        logger.debug(f"Registry '{name}' initialized with tables {list(self._tables)}")

    @property
    def tables(self) -> Dict[str, Dict[str, Any]]:
        """The raw tables; only touch them while holding the lock."""
        return self._tables

    @contextmanager
    def read(self) -> Generator[Dict[str, Dict[str, Any]], None, None]:
        """Hold the shared lock; the tables must not be modified."""
        with self._lock.read_locked():
            yield self._tables

    @contextmanager
    def transaction(self) -> Generator[Dict[str, Dict[str, Any]], None, None]:
        """Hold the exclusive lock for a read-validate-write sequence."""
        with self._lock.write_locked():
            yield self._tables

    def counts(self) -> Dict[str, int]:
        """Number of rows per table."""
        with self.read() as tables:
            return {name: len(rows) for name, rows in tables.items()}
