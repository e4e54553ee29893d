from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Sequence, Tuple, Type
from urllib.parse import urlparse

from confusion_api.errors import StoreError
from confusion_api.schema import get_schema_sql


DEFAULT_TIMEOUT_SECONDS = 15


def _debug(msg: str) -> None:
    print(f"[db] {msg}")


def _detect_dialect(dsn: str) -> str:
    """Return 'postgres' or 'sqlite'."""
    s = (dsn or "").strip()
    if not s:
        return "sqlite"
    try:
        scheme = urlparse(s).scheme.lower()
    except ValueError:
        scheme = ""
    if scheme in ("postgres", "postgresql"):
        return "postgres"
    return "sqlite"


def _qmark_to_pct(sql: str) -> str:
    """Convert SQLite qmark placeholders (?) to psycopg2 placeholders (%s).

    This is a lightweight conversion that avoids replacing '?' inside single/double-quoted
    string literals. It's not a full SQL parser, but it is sufficient for this codebase.
    """
    out: List[str] = []
    in_single = False
    in_double = False
    i = 0
    while i < len(sql):
        ch = sql[i]

        if ch == "'" and not in_double:
            out.append(ch)
            if in_single:
                # Escaped single quote: ''
                if i + 1 < len(sql) and sql[i + 1] == "'":
                    out.append("'")
                    i += 2
                    continue
                in_single = False
            else:
                in_single = True
            i += 1
            continue

        if ch == '"' and not in_single:
            out.append(ch)
            in_double = not in_double
            i += 1
            continue

        if ch == "?" and not in_single and not in_double:
            out.append("%s")
            i += 1
            continue

        out.append(ch)
        i += 1

    return "".join(out)


class PGCursor:
    def __init__(self, cur: Any):
        self._cur = cur

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> "PGCursor":
        self._cur.execute(_qmark_to_pct(sql), tuple(params or ()))
        return self

    def fetchone(self) -> Any:
        return self._cur.fetchone()

    def fetchall(self) -> Any:
        return self._cur.fetchall()

    @property
    def rowcount(self) -> int:
        return int(self._cur.rowcount or 0)

    def close(self) -> None:
        self._cur.close()


class PGConnection:
    """A tiny adapter that makes psycopg2 connections look like sqlite3 connections."""

    dialect = "postgres"

    def __init__(self, conn: Any):
        self._conn = conn

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> PGCursor:
        wrapper = PGCursor(self._conn.cursor())
        wrapper.execute(sql, params)
        return wrapper

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    def close(self) -> None:
        self._conn.close()


def _postgres_errors() -> Tuple[Type[BaseException], ...]:
    try:
        import psycopg2
    except ImportError as e:
        raise RuntimeError(
            "Postgres selected but psycopg2 is not installed. "
            "Install psycopg2-binary and try again."
        ) from e
    return (psycopg2.Error,)


def _open_postgres(dsn: str, timeout: int) -> PGConnection:
    import psycopg2
    import psycopg2.extras

    # RealDictCursor makes fetchone()/fetchall() rows act like dicts.
    # statement_timeout bounds every call made on this connection.
    raw = psycopg2.connect(
        dsn,
        cursor_factory=psycopg2.extras.RealDictCursor,
        connect_timeout=timeout,
        options=f"-c statement_timeout={int(timeout) * 1000}",
    )
    return PGConnection(raw)


def _open_sqlite(dsn: str, timeout: int) -> sqlite3.Connection:
    # Support sqlite:///path style
    if dsn.lower().startswith("sqlite:///"):
        dsn = dsn[len("sqlite:///") :]

    Path(dsn).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(dsn, timeout=timeout, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    conn.execute(f"PRAGMA busy_timeout={int(timeout) * 1000};")
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


@contextmanager
def connect(db_dsn: str, *, timeout: int = DEFAULT_TIMEOUT_SECONDS) -> Iterator[Any]:
    """Connect to SQLite or Postgres; one connection is one transaction.

    - Commits when the block exits cleanly, rolls back otherwise.
    - Driver errors (including lock/statement timeouts) surface as `StoreError`.
    - Any other exception raised inside the block propagates unchanged.
    """
    dsn = (db_dsn or "").strip()
    dialect = _detect_dialect(dsn)

    driver_errors: Tuple[Type[BaseException], ...]
    if dialect == "postgres":
        driver_errors = _postgres_errors()
    else:
        driver_errors = (sqlite3.Error,)

    try:
        conn = _open_postgres(dsn, timeout) if dialect == "postgres" else _open_sqlite(dsn, timeout)
    except driver_errors + (OSError,) as e:
        _debug(f"Store unavailable ({dialect}): {e}")
        raise StoreError("store_unavailable") from e

    try:
        yield conn
        conn.commit()
    except driver_errors as e:
        conn.rollback()
        _debug(f"Store call failed ({dialect}): {e}")
        raise StoreError("store_error") from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(db_dsn: str) -> None:
    """Create all tables if missing."""
    dialect = _detect_dialect(db_dsn)
    _debug(f"Initializing DB ({dialect}) at {db_dsn}")
    with connect(db_dsn) as conn:
        ddl = get_schema_sql(dialect)
        if dialect == "postgres":
            # Execute multi-statement DDL (naive split is OK for our schema)
            for stmt in [s.strip() for s in ddl.split(";") if s.strip()]:
                conn.execute(stmt)
            return

        # SQLite can run it in one go
        conn.executescript(ddl)


def open_store(cfg: Any) -> Any:
    """`connect` with the configured DSN and per-call timeout."""
    return connect(cfg.DB_DSN, timeout=cfg.DB_TIMEOUT_SECONDS)
