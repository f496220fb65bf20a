"""Entity persistence package.

Provides the SQLite schema, the ``PartnersStore`` entity store and the
serialization helpers between domain models and rows.
"""

from __future__ import annotations

from pathlib import Path

from partners.store.schema import TABLE_COLUMNS, connect, init_schema
from partners.store.serializers import entity_to_row, row_to_entity, serialize_payload
from partners.store.store import PartnersStore, translate_errors


def open_store(db_path: Path | str, timeout: float = 30.0) -> PartnersStore:
    """Open (creating if needed) the database at *db_path* and return a store.

    Args:
        db_path: Path to the SQLite database file, or ``":memory:"``.
        timeout: Busy timeout in seconds.
    """
    if str(db_path) != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = connect(db_path, timeout=timeout)
    init_schema(conn)
    return PartnersStore(conn)


__all__ = [
    "TABLE_COLUMNS",
    "PartnersStore",
    "connect",
    "entity_to_row",
    "init_schema",
    "open_store",
    "row_to_entity",
    "serialize_payload",
    "translate_errors",
]
