from __future__ import annotations

from typing import Any, Dict, List, Optional

from confusion_api.config import Config
from confusion_api.db import open_store
from confusion_api.errors import CreationError
from confusion_api.util.time import utcnow_iso

from .security import PasswordHasher


def _debug(msg: str) -> None:
    print(f"[auth] {msg}")


def normalize_username(username: str) -> str:
    return (username or "").strip()


def public_user(row: Any | Dict[str, Any]) -> Dict[str, Any]:
    """Wire shape of a user. Never includes the password hash or facebook id."""
    d = dict(row)
    return {
        "_id": int(d["id"]),
        "firstname": d.get("firstname") or "",
        "lastname": d.get("lastname") or "",
        "admin": bool(d.get("is_admin")),
        "username": d.get("username") or "",
        "createdAt": d.get("created_at"),
        "updatedAt": d.get("updated_at"),
    }


def get_user_by_username(conn: Any, username: str) -> Optional[Any]:
    u = normalize_username(username)
    if not u:
        return None
    return conn.execute(
        "SELECT * FROM users WHERE username=?",
        (u,),
    ).fetchone()


def get_user_by_id(conn: Any, user_id: int) -> Optional[Any]:
    return conn.execute(
        "SELECT * FROM users WHERE id=?",
        (int(user_id),),
    ).fetchone()


def find_login_user(conn: Any, username: str) -> Optional[Any]:
    """Just what login needs: id, password hash and admin flag."""
    u = normalize_username(username)
    if not u:
        return None
    return conn.execute(
        "SELECT id, password_hash, is_admin FROM users WHERE username=?",
        (u,),
    ).fetchone()


def verify_user_credentials(
    conn: Any,
    hasher: PasswordHasher,
    username: str,
    password: str,
) -> Optional[Any]:
    """Return the user row when the password matches, else None.

    Unknown username and wrong password both come back as None.
    """
    row = find_login_user(conn, username)
    if row is None:
        return None
    if not hasher.verify(row["password_hash"], password):
        return None
    return row


def create_user(
    conn: Any,
    hasher: PasswordHasher,
    *,
    username: str,
    password: str,
    firstname: str = "",
    lastname: str = "",
    is_admin: bool = False,
) -> int:
    u = normalize_username(username)
    if not u:
        raise CreationError("username_blank")
    if not password:
        raise CreationError("password_blank")

    # Early, friendlier failure only; the UNIQUE constraint on users.username is the real guard.
    existing = conn.execute("SELECT 1 FROM users WHERE username=?", (u,)).fetchone()
    if existing is not None:
        raise CreationError("username_exists")

    password_hash = hasher.hash(password)
    now = utcnow_iso()
    # fetchall() drains the RETURNING cursor before the caller commits.
    rows = conn.execute(
        """
        INSERT INTO users (firstname, lastname, username, password_hash, is_admin, created_at, updated_at)
        VALUES (?,?,?,?,?,?,?)
        RETURNING id
        """,
        (firstname or "", lastname or "", u, password_hash, 1 if is_admin else 0, now, now),
    ).fetchall()
    return int(rows[0]["id"])


def list_users(conn: Any) -> List[Dict[str, Any]]:
    rows = conn.execute("SELECT * FROM users ORDER BY id").fetchall()
    return [public_user(r) for r in rows]


def get_user_by_facebook_id(conn: Any, facebook_id: str) -> Optional[Any]:
    fid = (facebook_id or "").strip()
    if not fid:
        return None
    return conn.execute(
        "SELECT * FROM users WHERE facebook_id=?",
        (fid,),
    ).fetchone()


def create_facebook_user(
    conn: Any,
    *,
    facebook_id: str,
    username: str,
    firstname: str = "",
    lastname: str = "",
) -> int:
    """Insert a remote-identity account (no local password)."""
    now = utcnow_iso()
    rows = conn.execute(
        """
        INSERT INTO users (facebook_id, firstname, lastname, username, password_hash, is_admin, created_at, updated_at)
        VALUES (?,?,?,?,NULL,0,?,?)
        RETURNING id
        """,
        (facebook_id, firstname or "", lastname or "", normalize_username(username), now, now),
    ).fetchall()
    return int(rows[0]["id"])


def bootstrap_admin_if_needed(cfg: Config, hasher: PasswordHasher) -> Optional[Dict[str, Any]]:
    """Create the first admin user if the users table is empty.

    Controlled via environment variables so a new clone has a deterministic way to log in.

    - AUTH_BOOTSTRAP_ADMIN_USERNAME (default: admin)
    - AUTH_BOOTSTRAP_ADMIN_PASSWORD (default: admin)

    This only runs when there are 0 rows in `users`.
    """

    username = normalize_username(cfg.AUTH_BOOTSTRAP_ADMIN_USERNAME)
    password = cfg.AUTH_BOOTSTRAP_ADMIN_PASSWORD
    # If env explicitly clears these, don't create anything.
    if not username or not password:
        return None

    with open_store(cfg) as conn:
        n = conn.execute("SELECT COUNT(*) AS n FROM users").fetchone()["n"]
        if int(n) > 0:
            return None

        user_id = create_user(conn, hasher, username=username, password=password, is_admin=True)
        row = get_user_by_id(conn, user_id)
        assert row is not None
        _debug(f"Bootstrapped initial admin user: username={username}")
        return public_user(row)
