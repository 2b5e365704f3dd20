"""
Stake book storage.

The ledger depends only on the ``StakeStore`` protocol. Implementations
must give per-user mutual exclusion through ``user_lock`` so that two
stake/unstake calls for the same user never interleave, while calls for
different users proceed in parallel.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Protocol, Union, runtime_checkable

from gamerewards.core.economics_exceptions import StakeStoreError
from gamerewards.core.staking_models import UserStakeBook

logger = logging.getLogger(__name__)


@runtime_checkable
class StakeStore(Protocol):
    """Key-value storage of stake books keyed by user id."""

    def get(self, user: str) -> Optional[UserStakeBook]:
        """Return a private copy of the user's book, or None if they never staked."""
        ...

    def upsert(self, book: UserStakeBook) -> None:
        """Insert or replace the book for ``book.user``."""
        ...

    def remove(self, user: str) -> None:
        ...

    def books(self) -> List[UserStakeBook]:
        """Snapshot of every stored book."""
        ...

    def user_lock(self, user: str):
        """Context manager serializing mutations of one user's book."""
        ...


class InMemoryStakeStore:
    """Dictionary-backed store with one re-entrant lock per user."""

    def __init__(self) -> None:
        self._books: Dict[str, UserStakeBook] = {}
        self._user_locks: Dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def get(self, user: str) -> Optional[UserStakeBook]:
        with self._guard:
            book = self._books.get(user)
            return book.copy() if book is not None else None

    def upsert(self, book: UserStakeBook) -> None:
        with self._guard:
            previous = self._books.get(book.user)
            self._books[book.user] = book.copy()
            self._commit_locked(book.user, previous)

    def remove(self, user: str) -> None:
        with self._guard:
            previous = self._books.pop(user, None)
            self._commit_locked(user, previous)

    def books(self) -> List[UserStakeBook]:
        with self._guard:
            return [book.copy() for book in self._books.values()]

    @contextmanager
    def user_lock(self, user: str) -> Iterator[None]:
        with self._guard:
            lock = self._user_locks.setdefault(user, threading.RLock())
        with lock:
            yield

    def _commit_locked(self, user: str, previous: Optional[UserStakeBook]) -> None:
        """Persist the change, restoring ``previous`` for ``user`` if the write fails."""
        try:
            self._persist_locked()
        except StakeStoreError:
            if previous is None:
                self._books.pop(user, None)
            else:
                self._books[user] = previous
            raise

    def _persist_locked(self) -> None:
        """Hook for durable subclasses; called with the guard held."""


class JsonFileStakeStore(InMemoryStakeStore):
    """
    In-memory store mirrored to ``<data_dir>/stake_books.json``.

    The file is rewritten atomically after every mutation. A corrupted file
    is moved aside to ``stake_books.json.corrupted`` and the store starts
    empty.
    """

    FILE_NAME = "stake_books.json"

    def __init__(self, data_dir: Union[str, Path]) -> None:
        super().__init__()
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.books_file = self.data_dir / self.FILE_NAME
        self._books = self._load_books()

    def _load_books(self) -> Dict[str, UserStakeBook]:
        if not self.books_file.exists():
            return {}
        try:
            with open(self.books_file, "r", encoding="utf-8") as f:
                raw = json.load(f)
            return {user: UserStakeBook.from_dict(data) for user, data in raw.get("books", {}).items()}
        except (json.JSONDecodeError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(
                "Corrupted stake book file, resetting",
                extra={"event": "stake_store.file_corrupted", "error": str(e)},
            )
            backup_path = str(self.books_file) + ".corrupted"
            os.replace(self.books_file, backup_path)
            return {}

    def _persist_locked(self) -> None:
        payload = {"books": {user: book.to_dict() for user, book in self._books.items()}}
        tmp_path = self.books_file.with_suffix(".json.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_path, self.books_file)
        except OSError as e:
            logger.error(
                "Failed to persist stake books, keeping previous state",
                extra={"event": "stake_store.persist_failed", "error": str(e)},
            )
            tmp_path.unlink(missing_ok=True)
            raise StakeStoreError(
                f"Failed to write stake books to {self.books_file}",
                details={"error": str(e)},
            ) from e


def create_stake_store(data_dir: Optional[str] = None) -> StakeStore:
    """Return a JSON-backed store when ``data_dir`` is set, else an in-memory one."""
    if data_dir:
        return JsonFileStakeStore(data_dir)
    return InMemoryStakeStore()


__all__ = ["InMemoryStakeStore", "JsonFileStakeStore", "StakeStore", "create_stake_store"]
