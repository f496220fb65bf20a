"""Tests for the partners schema constraints."""

from __future__ import annotations

import sqlite3

import pytest

from partners.store import TABLE_COLUMNS, connect, init_schema


@pytest.fixture
def conn() -> sqlite3.Connection:
    connection = connect(":memory:")
    init_schema(connection)
    yield connection
    connection.close()


def _tables(conn: sqlite3.Connection) -> set[str]:
    rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
    return {row[0] for row in rows}


def test_all_tables_created(conn: sqlite3.Connection) -> None:
    assert set(TABLE_COLUMNS) | {"audit_log", "notifications"} <= _tables(conn)


def test_init_schema_is_idempotent(conn: sqlite3.Connection) -> None:
    init_schema(conn)
    assert "payments" in _tables(conn)


def test_whitelist_matches_table_columns(conn: sqlite3.Connection) -> None:
    for table, columns in TABLE_COLUMNS.items():
        actual = {row[1] for row in conn.execute(f"PRAGMA table_info({table})")}
        assert set(columns) == actual, table


def test_foreign_keys_enabled(conn: sqlite3.Connection) -> None:
    assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
