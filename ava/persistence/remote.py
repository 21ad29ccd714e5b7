"""Supabase-backed store with optimistic, version-checked transactions."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx
from postgrest import APIError
from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

from ava.persistence.base import (
    COLLECTIONS,
    PersistenceAdapter,
    Record,
    T,
    TransactionContext,
    check_collection,
    order_records,
)
from ava.utils.errors import DuplicateKeyError, PersistenceUnavailableError
from supabase import Client

logger = logging.getLogger(__name__)

# Postgres serialization failure and deadlock: safe to retry the whole transaction.
RETRYABLE_SQLSTATES = frozenset({"40001", "40P01"})


class _Conflict(Exception):
    """A commit lost a race with another writer."""


class SupabaseAdapter(PersistenceAdapter):
    """Remote document store on Postgres via PostgREST.

    Every record carries a version. A transaction remembers the versions it
    read and hands reads and writes to the ``commit_documents`` database
    function, which locks the read rows, rejects the commit if any version
    moved, and applies the writes in one database transaction. Rejected
    commits rerun ``fn`` from scratch.
    """

    name = "remote"
    has_change_feed = True

    def __init__(
        self,
        client: Client,
        max_attempts: int = 5,
        backoff_seconds: float = 0.05,
    ) -> None:
        self.client = client
        self._max_attempts = max(1, max_attempts)
        self._backoff_seconds = max(0.0, backoff_seconds)

    def _execute(self, query, default: Any = None, conflicts: bool = False) -> Any:
        """Execute a PostgREST query, normalizing transport and API errors."""
        try:
            response = query.execute()
        except APIError as exc:
            code = str(getattr(exc, "code", "") or "")
            if conflicts and code in RETRYABLE_SQLSTATES:
                raise _Conflict(code) from exc
            message = getattr(exc, "message", "Database request failed")
            logger.error("Supabase request failed (%s): %s", code or "unknown", message)
            raise PersistenceUnavailableError(str(message)) from exc
        except httpx.HTTPError as exc:
            logger.error("Supabase unreachable: %s", exc)
            raise PersistenceUnavailableError("Could not reach the election data store") from exc
        data = response.data
        return default if data is None and default is not None else data

    def _read_one(self, collection: str, key: str) -> tuple[Record | None, int | None]:
        rows = self._execute(
            self.client.table(collection).select("key,data,version").eq("key", key).limit(1),
            default=[],
        )
        if not rows:
            return None, None
        return rows[0]["data"], int(rows[0]["version"])

    def _read_all(self, collection: str) -> list[tuple[str, Record, int | None]]:
        rows = self._execute(
            self.client.table(collection).select("key,data,version").order("key"),
            default=[],
        )
        return [(str(row["key"]), row["data"], int(row["version"])) for row in rows]

    def get(self, collection: str, key: str) -> Record | None:
        check_collection(collection)
        rows = self._execute(
            self.client.table(collection).select("data").eq("key", key).limit(1),
            default=[],
        )
        return rows[0]["data"] if rows else None

    def list(self, collection: str) -> list[Record]:
        check_collection(collection)
        rows = self._execute(
            self.client.table(collection).select("key,data").order("key"),
            default=[],
        )
        return order_records(collection, [(str(row["key"]), row["data"]) for row in rows])

    @staticmethod
    def _commit_payload(tx: TransactionContext) -> dict[str, list[dict[str, Any]]]:
        reads = [
            {
                "collection": collection,
                "key": key,
                "version": version,
                "lock": "update" if (collection, key) in tx.writes else "share",
            }
            for (collection, key), version in tx.reads.items()
        ]
        writes: list[dict[str, Any]] = []
        for (collection, key), record in tx.writes.items():
            absent = tx.read_as_absent(collection, key)
            if record is None:
                if not absent:
                    writes.append({"collection": collection, "key": key, "op": "delete"})
                continue
            writes.append(
                {
                    "collection": collection,
                    "key": key,
                    "op": "insert" if absent else "upsert",
                    "data": record,
                }
            )
        return {"p_reads": reads, "p_writes": writes}

    def _commit(self, tx: TransactionContext) -> None:
        rows = self._execute(
            self.client.rpc("commit_documents", self._commit_payload(tx)),
            default=[],
            conflicts=True,
        )
        if not rows:
            raise PersistenceUnavailableError("Commit returned no result")
        outcome = rows[0]
        if outcome.get("success"):
            return
        reason = str(outcome.get("reason") or "")
        detail = str(outcome.get("detail") or "")
        if reason == "duplicate":
            collection = next((name for name in COLLECTIONS if detail.startswith(name)), "voters")
            raise DuplicateKeyError(collection, detail or "key")
        raise _Conflict(detail)

    def _log_conflict(self, state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        logger.info(
            "Transaction conflict on %s (attempt %s/%s)",
            exc.args[0] if exc is not None and exc.args else "unknown",
            state.attempt_number,
            self._max_attempts,
        )

    def _retrying(self) -> Retrying:
        return Retrying(
            retry=retry_if_exception_type(_Conflict),
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_random_exponential(
                multiplier=self._backoff_seconds,
                max=self._backoff_seconds * self._max_attempts,
            ),
            before_sleep=self._log_conflict,
        )

    def transact(self, fn: Callable[[TransactionContext], T]) -> T:
        try:
            for attempt in self._retrying():
                with attempt:
                    tx = TransactionContext(self._read_one, self._read_all)
                    result = fn(tx)
                    if tx.reads or tx.writes:
                        self._commit(tx)
        except RetryError as exc:
            raise PersistenceUnavailableError("Election data is busy, please retry") from exc
        return result

    def reset(self, seed: dict[str, dict[str, Record]]) -> None:
        payload = {
            collection: [
                {"key": key, "data": record} for key, record in seed.get(collection, {}).items()
            ]
            for collection in COLLECTIONS
        }
        try:
            self._execute(
                self.client.rpc("reset_collections", {"p_seed": payload}),
                conflicts=True,
            )
        except _Conflict as exc:
            raise PersistenceUnavailableError("Election data is busy, please retry") from exc
        logger.info("Remote election store reset")

    def revisions(self) -> dict[str, int]:
        rows = self._execute(
            self.client.table("change_log").select("collection,revision"),
            default=[],
        )
        return {str(row["collection"]): int(row["revision"]) for row in rows}
