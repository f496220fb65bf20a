"""SQLite-backed entity store for the engagement and settlement pipeline.

Accepts a sqlite3.Connection and uses parameterized queries exclusively.  Table
and column identifiers come from the ``TABLE_COLUMNS`` whitelist, never from
callers.  Multi-write operations run inside :meth:`PartnersStore.transaction`,
which opens ``BEGIN IMMEDIATE`` so concurrent writers are serialized by SQLite
itself.
"""

from __future__ import annotations

import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel

from partners.domain.errors import ConflictError, NotFoundError, TransientError
from partners.domain.models import (
    Brand,
    Campaign,
    CampaignApplication,
    Influencer,
    Payment,
    RevenueShare,
    Task,
    TaskApplication,
    VideoSubmission,
)
from partners.store.schema import TABLE_COLUMNS
from partners.store.serializers import entity_to_row, row_to_entity, to_db_value

logger = structlog.get_logger()

M = TypeVar("M", bound=BaseModel)

# sqlite3.OperationalError messages that indicate a busy or unavailable
# database rather than a malformed statement.
_TRANSIENT_MARKERS = ("locked", "busy", "disk i/o", "unable to open")


@dataclass(frozen=True)
class _Binding:
    table: str
    entity: str
    order_by: str = "created_at"


_BINDINGS: dict[type[BaseModel], _Binding] = {
    Influencer: _Binding("influencers", "influencer"),
    Brand: _Binding("brands", "brand"),
    Campaign: _Binding("campaigns", "campaign"),
    CampaignApplication: _Binding("campaign_applications", "campaign_application"),
    Task: _Binding("tasks", "task"),
    TaskApplication: _Binding("task_assignments", "task_assignment"),
    VideoSubmission: _Binding("video_submissions", "video_submission", "submitted_at"),
    Payment: _Binding("payments", "payment"),
    RevenueShare: _Binding("revenue_shares", "revenue_share"),
}


def _is_transient(exc: sqlite3.OperationalError) -> bool:
    message = str(exc).lower()
    return any(marker in message for marker in _TRANSIENT_MARKERS)


@contextmanager
def translate_errors() -> Iterator[None]:
    """Map sqlite3 errors onto the domain error taxonomy.

    ``IntegrityError`` (unique or check constraint) becomes ``ConflictError``;
    a locked or unavailable database becomes ``TransientError``.  Any other
    ``OperationalError`` is a programming error and propagates unchanged.
    """
    try:
        yield
    except sqlite3.IntegrityError as exc:
        raise ConflictError(str(exc)) from exc
    except sqlite3.OperationalError as exc:
        if _is_transient(exc):
            logger.warning("store_unavailable", error=str(exc))
            raise TransientError(str(exc)) from exc
        raise


class PartnersStore:
    """Persist and query domain entities in SQLite.

    Every read and write holds an internal re-entrant lock so one connection
    can be shared across request threads.  Writes outside a transaction are
    committed immediately (autocommit); writes inside one commit together or
    not at all.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialize with an open database connection.

        Args:
            conn: An open sqlite3.Connection whose database already has the
                  partners schema (see ``init_schema``).
        """
        conn.isolation_level = None
        conn.row_factory = sqlite3.Row
        self._conn = conn
        self._lock = threading.RLock()
        self._depth = 0

    @property
    def conn(self) -> sqlite3.Connection:
        """Return the underlying connection."""
        return self._conn

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[PartnersStore]:
        """Run the enclosed writes as one atomic unit.

        Nested calls join the outermost transaction.  Any exception raised in
        the block rolls back every write made since ``BEGIN``.
        """
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            self.execute("BEGIN IMMEDIATE")
            self._depth = 1
            try:
                yield self
                self.execute("COMMIT")
            except BaseException:
                if self._conn.in_transaction:
                    self._conn.execute("ROLLBACK")
                raise
            finally:
                self._depth = 0

    def execute(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> sqlite3.Cursor:
        """Execute a single parameterized statement with error translation."""
        with self._lock, translate_errors():
            return self._conn.execute(sql, params)

    def fetch_all(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> list[sqlite3.Row]:
        """Execute a query and return every row while holding the lock."""
        with self._lock, translate_errors():
            return self._conn.execute(sql, params).fetchall()

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    def add(self, entity: BaseModel) -> None:
        """Insert a new entity row.

        Raises:
            ConflictError: If the row violates a unique or check constraint.
        """
        binding = _binding(type(entity))
        row = entity_to_row(entity)
        columns = _checked_columns(binding.table, row)
        placeholders = ", ".join("?" for _ in columns)
        self.execute(
            f"INSERT INTO {binding.table} ({', '.join(columns)}) VALUES ({placeholders})",
            [row[column] for column in columns],
        )

    def update(
        self,
        model: type[BaseModel],
        entity_id: str,
        changes: dict[str, Any],
        *,
        expected: dict[str, Any] | None = None,
    ) -> bool:
        """Apply *changes* to one row, optionally conditioned on current values.

        Args:
            model: The entity class whose table is updated.
            entity_id: Primary key of the row.
            changes: Column -> new value.
            expected: Column -> value the row must still hold for the update
                to apply (compare-and-swap).

        Returns:
            True if exactly one row was updated.
        """
        binding = _binding(model)
        set_columns = _checked_columns(binding.table, changes)
        assignments = ", ".join(f"{column} = ?" for column in set_columns)
        params: list[Any] = [to_db_value(changes[column]) for column in set_columns]

        where, where_params = _where(binding.table, {"id": entity_id, **(expected or {})})
        cursor = self.execute(
            f"UPDATE {binding.table} SET {assignments} {where}",
            params + where_params,
        )
        return cursor.rowcount == 1

    def set_rate_if_unset(self, influencer_id: str, rate: Decimal) -> bool:
        """Assign a video rate only if the influencer still has none.

        A rate of zero counts as unset.  Two concurrent first approvals can
        both attempt this write; exactly one of them succeeds.

        Returns:
            True if this call assigned the rate.
        """
        cursor = self.execute(
            """
            UPDATE influencers SET video_rate = ?
            WHERE id = ? AND (video_rate IS NULL OR CAST(video_rate AS REAL) = 0)
            """,
            (str(rate), influencer_id),
        )
        return cursor.rowcount == 1

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def get(self, model: type[M], entity_id: str) -> M | None:
        """Return the entity with primary key *entity_id*, or None."""
        return self.find_one(model, id=entity_id)

    def require(self, model: type[M], entity_id: str) -> M:
        """Return the entity with primary key *entity_id*.

        Raises:
            NotFoundError: If no such row exists.
        """
        entity = self.get(model, entity_id)
        if entity is None:
            raise NotFoundError(_binding(model).entity, entity_id)
        return entity

    def find(
        self,
        model: type[M],
        *,
        descending: bool = True,
        limit: int | None = None,
        **filters: Any,
    ) -> list[M]:
        """Return entities matching every equality filter, newest first.

        A filter value of None matches NULL.

        Args:
            model: The entity class to load.
            descending: Order newest first (default) or oldest first.
            limit: Maximum number of rows to return.
            **filters: Column -> value equality filters.
        """
        binding = _binding(model)
        where, params = _where(binding.table, filters)
        direction = "DESC" if descending else "ASC"
        query = (
            f"SELECT * FROM {binding.table} {where} "
            f"ORDER BY {binding.order_by} {direction}, rowid {direction}"
        )
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        rows = self.fetch_all(query, params)
        return [row_to_entity(model, row) for row in rows]

    def find_one(self, model: type[M], **filters: Any) -> M | None:
        """Return the newest entity matching *filters*, or None."""
        found = self.find(model, limit=1, **filters)
        return found[0] if found else None

    def count(self, model: type[BaseModel], **filters: Any) -> int:
        """Return the number of rows matching every equality filter."""
        binding = _binding(model)
        where, params = _where(binding.table, filters)
        rows = self.fetch_all(f"SELECT COUNT(*) FROM {binding.table} {where}", params)
        return int(rows[0][0])

    def search_influencers(
        self,
        *,
        name: str | None = None,
        state: str | None = None,
        min_followers: int | None = None,
        approval_status: str | None = None,
    ) -> list[Influencer]:
        """Return influencers matching a name substring, state and follower floor.

        *name* matches ``full_name`` case-insensitively; ``%`` and ``_`` in it
        are literal.  Results are ordered by follower count, largest first.
        """
        conditions: list[str] = []
        params: list[Any] = []
        if approval_status is not None:
            conditions.append("approval_status = ?")
            params.append(to_db_value(approval_status))
        if name:
            escaped = name.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            conditions.append("full_name LIKE ? ESCAPE '\\'")
            params.append(f"%{escaped}%")
        if state:
            conditions.append("state = ?")
            params.append(state)
        if min_followers is not None:
            conditions.append("follower_count >= ?")
            params.append(min_followers)

        where = "WHERE " + " AND ".join(conditions) if conditions else ""
        rows = self.fetch_all(
            f"SELECT * FROM influencers {where} "
            "ORDER BY follower_count DESC, created_at DESC, rowid DESC",
            params,
        )
        return [row_to_entity(Influencer, row) for row in rows]

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            self.fetch_all("SELECT 1")
        except (TransientError, sqlite3.Error):
            return False
        return True

    def close(self) -> None:
        """Close the underlying connection."""
        with self._lock:
            self._conn.close()


def _binding(model: type[BaseModel]) -> _Binding:
    try:
        return _BINDINGS[model]
    except KeyError:
        raise TypeError(f"{model.__name__} is not a stored entity") from None


def _checked_columns(table: str, values: dict[str, Any]) -> list[str]:
    allowed = TABLE_COLUMNS[table]
    unknown = [column for column in values if column not in allowed]
    if unknown:
        raise ValueError(f"Unknown columns for {table}: {', '.join(unknown)}")
    return list(values)


def _where(table: str, filters: dict[str, Any]) -> tuple[str, list[Any]]:
    """Build a parameterized WHERE clause from equality filters."""
    columns = _checked_columns(table, filters)
    conditions: list[str] = []
    params: list[Any] = []
    for column in columns:
        value = filters[column]
        if value is None:
            conditions.append(f"{column} IS NULL")
        else:
            conditions.append(f"{column} = ?")
            params.append(to_db_value(value))

    if not conditions:
        return "", params
    return "WHERE " + " AND ".join(conditions), params
