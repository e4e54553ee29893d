from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

from confusion_api.errors import MalformedRequest
from confusion_api.util.time import utcnow_iso

from .store import status


_SELECT = """
    SELECT c.id, c.dish_id, c.rating, c.comment, c.created_at,
           u.id AS author_id, u.firstname, u.lastname
    FROM comments c
    JOIN users u ON u.id = c.author_id
"""


def comment_to_wire(row: Any) -> Dict[str, Any]:
    d = dict(row)
    return {
        "_id": int(d["id"]),
        "rating": int(d["rating"]),
        "comment": d.get("comment"),
        "author": {
            "_id": int(d["author_id"]),
            "firstname": d.get("firstname") or "",
            "lastname": d.get("lastname") or "",
        },
        "date": d.get("created_at"),
    }


def dish_exists(conn: Any, dish_id: int) -> bool:
    return conn.execute("SELECT 1 FROM dishes WHERE id=?", (int(dish_id),)).fetchone() is not None


def list_comments(conn: Any, dish_id: int) -> List[Dict[str, Any]]:
    rows = conn.execute(f"{_SELECT} WHERE c.dish_id=? ORDER BY c.id", (int(dish_id),)).fetchall()
    return [comment_to_wire(r) for r in rows]


def get_comment(conn: Any, dish_id: int, comment_id: int) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        f"{_SELECT} WHERE c.dish_id=? AND c.id=?",
        (int(dish_id), int(comment_id)),
    ).fetchone()
    if row is None:
        return None
    return comment_to_wire(row)


def is_comment_author(conn: Any, dish_id: int, comment_id: int, user_id: int) -> bool:
    comment = get_comment(conn, dish_id, comment_id)
    return comment is not None and comment["author"]["_id"] == int(user_id)


def create_comment(conn: Any, dish_id: int, author_id: int, *, rating: int, comment: str) -> Dict[str, int]:
    now = utcnow_iso()
    cur = conn.execute(
        """
        INSERT INTO comments (dish_id, author_id, rating, comment, created_at, updated_at)
        VALUES (?,?,?,?,?,?)
        """,
        (int(dish_id), int(author_id), int(rating), comment, now, now),
    )
    return status(cur.rowcount)


def update_comment(
    conn: Any,
    dish_id: int,
    comment_id: int,
    author_id: int,
    values: Mapping[str, Any],
) -> Optional[Dict[str, Any]]:
    """Only rating and comment text are editable, and only by the author."""
    fields: List[Tuple[str, Any]] = []
    if values.get("rating") is not None:
        fields.append(("rating", int(values["rating"])))
    if values.get("comment") is not None:
        fields.append(("comment", values["comment"]))
    if not fields:
        raise MalformedRequest("nothing_to_update")

    fields.append(("updated_at", utcnow_iso()))
    sets = ", ".join([f"{k}=?" for k, _ in fields])
    params = [v for _, v in fields] + [int(dish_id), int(comment_id), int(author_id)]
    cur = conn.execute(
        f"UPDATE comments SET {sets} WHERE dish_id=? AND id=? AND author_id=?",
        params,
    )
    if cur.rowcount == 0:
        return None
    return get_comment(conn, dish_id, comment_id)


def delete_comment(conn: Any, dish_id: int, comment_id: int, author_id: int) -> Dict[str, int]:
    cur = conn.execute(
        "DELETE FROM comments WHERE dish_id=? AND id=? AND author_id=?",
        (int(dish_id), int(comment_id), int(author_id)),
    )
    return status(cur.rowcount)


def delete_comments(conn: Any, dish_id: int) -> Dict[str, int]:
    cur = conn.execute("DELETE FROM comments WHERE dish_id=?", (int(dish_id),))
    return status(cur.rowcount)
