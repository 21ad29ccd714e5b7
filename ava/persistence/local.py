"""Single-process store guarded by one lock, optionally mirrored to a JSON file."""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_result,
    stop_after_attempt,
)

from ava.persistence.base import (
    COLLECTIONS,
    UNIQUE_FIELDS,
    PersistenceAdapter,
    Record,
    T,
    TransactionContext,
    categories_for,
    check_collection,
    order_records,
)
from ava.services.notifier import ChangeNotifier
from ava.utils.errors import DuplicateKeyError, PersistenceUnavailableError

logger = logging.getLogger(__name__)


class LocalAdapter(PersistenceAdapter):
    """In-memory store where a mutex stands in for the transaction primitive.

    Transactions run with the lock held, so ``fn`` must only use the
    transaction context it is given, never the adapter itself.
    """

    name = "local"

    def __init__(
        self,
        notifier: ChangeNotifier | None = None,
        path: str | Path | None = None,
        max_attempts: int = 5,
        lock_timeout_seconds: float = 2.0,
    ) -> None:
        self._notifier = notifier
        self._path = Path(path) if path else None
        self._max_attempts = max(1, max_attempts)
        self._lock_timeout = max(0.01, lock_timeout_seconds)
        self._lock = threading.Lock()
        self._data: dict[str, dict[str, Record]] = {collection: {} for collection in COLLECTIONS}
        if self._path is not None and self._path.exists():
            self._data = self._load(self._path)
            logger.info("Loaded local election store from %s", self._path)

    @staticmethod
    def _load(path: Path) -> dict[str, dict[str, Record]]:
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise PersistenceUnavailableError(f"Could not read local store {path}") from exc
        stored = payload.get("collections", {})
        return {collection: dict(stored.get(collection, {})) for collection in COLLECTIONS}

    def _save(self, data: dict[str, dict[str, Record]]) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".ava-", suffix=".json", dir=self._path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump({"collections": data}, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise PersistenceUnavailableError(f"Could not write local store {self._path}") from exc

    def _log_busy(self, state: RetryCallState) -> None:
        logger.warning(
            "Local store lock busy (attempt %s/%s)", state.attempt_number, self._max_attempts
        )

    @contextmanager
    def _locked(self) -> Iterator[None]:
        retrying = Retrying(
            retry=retry_if_result(lambda acquired: not acquired),
            stop=stop_after_attempt(self._max_attempts),
            before_sleep=self._log_busy,
        )
        try:
            retrying(self._lock.acquire, timeout=self._lock_timeout)
        except RetryError as exc:
            raise PersistenceUnavailableError(
                "Local election store is busy, please retry"
            ) from exc
        try:
            yield
        finally:
            self._lock.release()

    def _read_one(self, collection: str, key: str) -> tuple[Record | None, int | None]:
        return self._data[collection].get(key), None

    def _read_all(self, collection: str) -> list[tuple[str, Record, int | None]]:
        return [(key, record, None) for key, record in self._data[collection].items()]

    def _publish(self, collections: list[str]) -> None:
        if self._notifier is not None and collections:
            self._notifier.publish_many(categories_for(collections))

    @staticmethod
    def _check_unique(
        collection: str,
        records: dict[str, Record],
        written: list[str],
    ) -> None:
        for field in UNIQUE_FIELDS.get(collection, ()):
            for key in written:
                value = records.get(key, {}).get(field)
                if value is None:
                    continue
                for other_key, other in records.items():
                    if other_key != key and other.get(field) == value:
                        raise DuplicateKeyError(collection, field)

    def get(self, collection: str, key: str) -> Record | None:
        check_collection(collection)
        with self._locked():
            return copy.deepcopy(self._data[collection].get(key))

    def list(self, collection: str) -> list[Record]:
        check_collection(collection)
        with self._locked():
            items = [(key, copy.deepcopy(record)) for key, record in self._data[collection].items()]
        return order_records(collection, items)

    def transact(self, fn: Callable[[TransactionContext], T]) -> T:
        with self._locked():
            tx = TransactionContext(self._read_one, self._read_all)
            result = fn(tx)
            touched = tx.touched
            if touched:
                staged = {collection: dict(self._data[collection]) for collection in COLLECTIONS}
                written: dict[str, list[str]] = {collection: [] for collection in touched}
                for (collection, key), record in tx.writes.items():
                    if record is None:
                        staged[collection].pop(key, None)
                    else:
                        staged[collection][key] = record
                        written[collection].append(key)
                for collection, keys in written.items():
                    self._check_unique(collection, staged[collection], keys)
                self._save(staged)
                self._data = staged
        self._publish(touched)
        return result

    def reset(self, seed: dict[str, dict[str, Record]]) -> None:
        with self._locked():
            staged = {
                collection: copy.deepcopy(seed.get(collection, {})) for collection in COLLECTIONS
            }
            self._save(staged)
            self._data = staged
        logger.info("Local election store reset")
        self._publish(list(COLLECTIONS))
