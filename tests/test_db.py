from __future__ import annotations

import pytest

from confusion_api.db import _detect_dialect, _qmark_to_pct, connect, init_db
from confusion_api.errors import StoreError


def test_qmark_to_pct_skips_string_literals() -> None:
    assert _qmark_to_pct("SELECT * FROM t WHERE a=? AND b='?'") == "SELECT * FROM t WHERE a=%s AND b='?'"


@pytest.mark.parametrize(
    "dsn, dialect",
    [("postgresql://u@h/db", "postgres"), ("postgres://u@h/db", "postgres"), ("./x.sqlite", "sqlite"), ("", "sqlite")],
)
def test_detect_dialect(dsn: str, dialect: str) -> None:
    assert _detect_dialect(dsn) == dialect


def test_block_failure_rolls_back(tmp_path) -> None:
    dsn = str(tmp_path / "t.sqlite")
    init_db(dsn)

    with pytest.raises(RuntimeError):
        with connect(dsn) as conn:
            conn.execute(
                "INSERT INTO leaders (name, featured, created_at, updated_at) VALUES (?,?,?,?)",
                ("x", 0, "2024-01-01T00:00:00Z", "2024-01-01T00:00:00Z"),
            )
            raise RuntimeError("abort")

    with connect(dsn) as conn:
        assert conn.execute("SELECT COUNT(*) AS n FROM leaders").fetchone()["n"] == 0


def test_driver_errors_become_store_errors(tmp_path) -> None:
    dsn = str(tmp_path / "t.sqlite")
    init_db(dsn)
    with pytest.raises(StoreError):
        with connect(dsn) as conn:
            conn.execute("SELECT * FROM no_such_table")


def test_username_uniqueness_is_enforced_by_the_store(tmp_path) -> None:
    dsn = str(tmp_path / "t.sqlite")
    init_db(dsn)
    insert = (
        "INSERT INTO users (firstname, lastname, username, password_hash, is_admin, created_at, updated_at) "
        "VALUES ('', '', 'alice', 'h', 0, '2024-01-01T00:00:00Z', '2024-01-01T00:00:00Z')"
    )
    with connect(dsn) as conn:
        conn.execute(insert)
    with pytest.raises(StoreError):
        with connect(dsn) as conn:
            conn.execute(insert)
