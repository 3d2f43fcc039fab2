# src/seoscan/database.py
"""Audit storage abstraction with durable SQLite and ephemeral in-memory backends."""

import asyncio
import dataclasses
import json
import logging
import random
import sqlite3
import string
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from seoscan.config import settings
from seoscan.exceptions import PreconditionError, StorageError, ValidationError
from seoscan.models import Audit, AuditStatus, AuditTier, audit_from_dict, to_dict, utcnow

logger = logging.getLogger(__name__)

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS audits (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    website_url TEXT NOT NULL,
    status TEXT NOT NULL,
    created_at TEXT NOT NULL,
    payload TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_audits_user_id ON audits (user_id);
"""

AUDIT_FIELDS = frozenset(f.name for f in dataclasses.fields(Audit))
IMMUTABLE_FIELDS = frozenset({"id", "created_at"})


def generate_audit_id() -> str:
    """aud_<epoch ms>_<7 random base36 chars>"""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=7))
    return f"aud_{int(time.time() * 1000)}_{suffix}"


def apply_updates(audit: Audit, updates: Dict[str, Any]) -> Audit:
    """Return a validated copy of ``audit`` with ``updates`` merged in.

    Raises:
        ValueError: For unknown or immutable fields
    """
    unknown = set(updates) - AUDIT_FIELDS
    if unknown:
        raise ValueError(f"Unknown audit fields: {', '.join(sorted(unknown))}")
    immutable = set(updates) & IMMUTABLE_FIELDS
    if immutable:
        raise ValueError(f"Audit fields cannot be changed: {', '.join(sorted(immutable))}")

    # Round-trip through the dict form so nested values are validated and copied
    return audit_from_dict(to_dict(dataclasses.replace(audit, **updates)))


def _check_expected_status(audit: Audit, expected_status: Optional[AuditStatus]) -> None:
    if expected_status is not None and audit.status != AuditStatus(expected_status):
        raise PreconditionError(
            f"Audit {audit.id} status changed concurrently "
            f"(expected {AuditStatus(expected_status).value}, found {AuditStatus(audit.status).value})"
        )


class AbstractAuditStore(ABC):
    """Interface every audit storage backend implements.

    "Not found" is reported as ``None`` / ``False``; backend failures raise
    StorageError.
    """

    @abstractmethod
    async def create_audit(
        self,
        website_url: str,
        display_name: str,
        tier: AuditTier,
        user_id: Optional[str] = None,
    ) -> Audit:
        """Create a pending audit and return it."""

    @abstractmethod
    async def get_audit(self, audit_id: str) -> Optional[Audit]:
        """Return the audit, or None if it does not exist."""

    @abstractmethod
    async def update_audit(
        self,
        audit_id: str,
        updates: Dict[str, Any],
        expected_status: Optional[AuditStatus] = None,
    ) -> Optional[Audit]:
        """Merge ``updates`` into the stored audit.

        Args:
            audit_id: Audit to update
            updates: Field name -> new value
            expected_status: When given, the update only applies if the stored
                status still equals it (compare-and-set)

        Returns:
            The updated audit, or None if it does not exist

        Raises:
            PreconditionError: If ``expected_status`` does not match
        """

    @abstractmethod
    async def list_audits(self, user_id: Optional[str] = None) -> List[Audit]:
        """All audits (optionally one user's), newest first."""

    @abstractmethod
    async def delete_audit(self, audit_id: str) -> bool:
        """Delete an audit; False if it did not exist."""

    @abstractmethod
    def close(self) -> None:
        """Release backend resources."""

    @staticmethod
    def _new_audit(
        website_url: str,
        display_name: str,
        tier: AuditTier,
        user_id: Optional[str],
    ) -> Audit:
        return Audit(
            id=generate_audit_id(),
            user_id=user_id or "anonymous",
            website_url=website_url,
            display_name=display_name,
            tier=AuditTier(tier),
            status=AuditStatus.PENDING,
            created_at=utcnow(),
        )


class SqliteAuditStore(AbstractAuditStore):
    """SQLite implementation; each audit is one row with a JSON payload.

    Every operation runs in the event loop's default executor. The
    connection is shared across executor threads behind a lock.
    """

    def __init__(self, db_url: Optional[str] = None):
        """Initialize the SQLite store.

        Args:
            db_url: Database URL (sqlite:///path/to/db.db). Defaults to settings.DATABASE_URL.
        """
        self.db_url = db_url or settings.DATABASE_URL
        self.db_path = self.db_url.replace("sqlite:///", "")
        self.conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()
        self.connect()
        self.create_schema()

    def connect(self) -> None:
        try:
            self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open audit database {self.db_path}: {e}") from e
        self.conn.row_factory = sqlite3.Row
        logger.debug(f"Connected to SQLite audit store: {self.db_path}")

    def close(self) -> None:
        with self._lock:
            if self.conn:
                self.conn.close()
                self.conn = None
                logger.debug("Closed SQLite audit store")

    def create_schema(self) -> None:
        """Create the audits table if it doesn't exist."""
        try:
            with self.conn:
                self.conn.executescript(CREATE_TABLE_SQL)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot create audit schema: {e}") from e
        logger.debug("Schema verified/created for SQLite audit store")

    def _connection(self) -> sqlite3.Connection:
        if self.conn is None:
            raise StorageError("Audit store is closed")
        return self.conn

    async def _run(self, func, *args):
        def locked():
            with self._lock:
                return func(*args)

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, locked)

    @staticmethod
    def _row_to_audit(row: sqlite3.Row) -> Audit:
        return audit_from_dict(json.loads(row["payload"]))

    async def create_audit(
        self,
        website_url: str,
        display_name: str,
        tier: AuditTier,
        user_id: Optional[str] = None,
    ) -> Audit:
        audit = self._new_audit(website_url, display_name, tier, user_id)
        await self._run(self._insert, audit)
        logger.debug(f"Created audit {audit.id} for {website_url}")
        return audit

    def _insert(self, audit: Audit) -> None:
        payload = to_dict(audit)
        try:
            with self._connection() as conn:
                conn.execute(
                    "INSERT INTO audits (id, user_id, website_url, status, created_at, payload) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    (
                        audit.id,
                        audit.user_id,
                        audit.website_url,
                        payload["status"],
                        payload["created_at"],
                        json.dumps(payload),
                    ),
                )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to create audit: {e}") from e

    async def get_audit(self, audit_id: str) -> Optional[Audit]:
        return await self._run(self._select, audit_id)

    def _select(self, audit_id: str) -> Optional[Audit]:
        try:
            row = self._connection().execute(
                "SELECT payload FROM audits WHERE id = ?", (audit_id,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read audit {audit_id}: {e}") from e
        return self._row_to_audit(row) if row else None

    async def update_audit(
        self,
        audit_id: str,
        updates: Dict[str, Any],
        expected_status: Optional[AuditStatus] = None,
    ) -> Optional[Audit]:
        return await self._run(self._update, audit_id, updates, expected_status)

    def _update(
        self,
        audit_id: str,
        updates: Dict[str, Any],
        expected_status: Optional[AuditStatus],
    ) -> Optional[Audit]:
        conn = self._connection()
        try:
            with conn:
                row = conn.execute(
                    "SELECT payload FROM audits WHERE id = ?", (audit_id,)
                ).fetchone()
                if row is None:
                    return None

                current = self._row_to_audit(row)
                _check_expected_status(current, expected_status)
                updated = apply_updates(current, updates)
                payload = to_dict(updated)

                cursor = conn.execute(
                    "UPDATE audits SET status = ?, payload = ? WHERE id = ? AND status = ?",
                    (
                        payload["status"],
                        json.dumps(payload),
                        audit_id,
                        AuditStatus(current.status).value,
                    ),
                )
                if cursor.rowcount == 0:
                    raise PreconditionError(f"Audit {audit_id} status changed concurrently")
        except sqlite3.Error as e:
            raise StorageError(f"Failed to update audit {audit_id}: {e}") from e

        return updated

    async def list_audits(self, user_id: Optional[str] = None) -> List[Audit]:
        return await self._run(self._select_all, user_id)

    def _select_all(self, user_id: Optional[str]) -> List[Audit]:
        query = "SELECT payload FROM audits"
        params: tuple = ()
        if user_id:
            query += " WHERE user_id = ?"
            params = (user_id,)
        query += " ORDER BY created_at DESC, rowid DESC"

        try:
            rows = self._connection().execute(query, params).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list audits: {e}") from e
        return [self._row_to_audit(row) for row in rows]

    async def delete_audit(self, audit_id: str) -> bool:
        return await self._run(self._delete, audit_id)

    def _delete(self, audit_id: str) -> bool:
        try:
            with self._connection() as conn:
                cursor = conn.execute("DELETE FROM audits WHERE id = ?", (audit_id,))
        except sqlite3.Error as e:
            raise StorageError(f"Failed to delete audit {audit_id}: {e}") from e
        return cursor.rowcount > 0


class InMemoryAuditStore(AbstractAuditStore):
    """Ephemeral store for tests and one-shot CLI runs.

    Audits are kept in their serialized form, so callers never share
    mutable objects with the store.
    """

    def __init__(self):
        self._audits: Dict[str, Dict[str, Any]] = {}

    async def create_audit(
        self,
        website_url: str,
        display_name: str,
        tier: AuditTier,
        user_id: Optional[str] = None,
    ) -> Audit:
        audit = self._new_audit(website_url, display_name, tier, user_id)
        self._audits[audit.id] = to_dict(audit)
        return audit_from_dict(self._audits[audit.id])

    async def get_audit(self, audit_id: str) -> Optional[Audit]:
        payload = self._audits.get(audit_id)
        return audit_from_dict(payload) if payload is not None else None

    async def update_audit(
        self,
        audit_id: str,
        updates: Dict[str, Any],
        expected_status: Optional[AuditStatus] = None,
    ) -> Optional[Audit]:
        payload = self._audits.get(audit_id)
        if payload is None:
            return None

        current = audit_from_dict(payload)
        _check_expected_status(current, expected_status)
        updated = apply_updates(current, updates)
        self._audits[audit_id] = to_dict(updated)
        return updated

    async def list_audits(self, user_id: Optional[str] = None) -> List[Audit]:
        # Reverse insertion order first so equal timestamps stay newest-first
        audits = [audit_from_dict(payload) for payload in reversed(list(self._audits.values()))]
        if user_id:
            audits = [audit for audit in audits if audit.user_id == user_id]
        audits.sort(key=lambda audit: audit.created_at, reverse=True)
        return audits

    async def delete_audit(self, audit_id: str) -> bool:
        return self._audits.pop(audit_id, None) is not None

    def close(self) -> None:
        self._audits.clear()


def get_audit_store(
    backend: Optional[str] = None,
    **kwargs,
) -> AbstractAuditStore:
    """Factory function to create the configured audit store.

    Args:
        backend: 'sqlite' or 'memory'. Defaults to settings.STORE_BACKEND.
        **kwargs: Additional arguments passed to the store constructor.

    Raises:
        ValidationError: If an unknown backend is specified.
    """
    backend = backend or settings.STORE_BACKEND

    if backend == "sqlite":
        logger.info("Using SQLite audit store")
        return SqliteAuditStore(**kwargs)
    elif backend == "memory":
        logger.info("Using in-memory audit store")
        return InMemoryAuditStore()
    else:
        raise ValidationError(
            f"Unknown audit store backend: '{backend}'. "
            "Supported backends: 'sqlite', 'memory'",
            field="store_backend",
        )
