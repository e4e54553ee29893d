from __future__ import annotations

from typing import Any, Dict, Iterable, List

from confusion_api.util.time import utcnow_iso

from .store import DISHES, status, to_wire


_SELECT_FAVORITE_DISHES = """
    SELECT d.id, d.name, d.image, d.category, d.label, d.price, d.featured,
           d.description, d.created_at, d.updated_at
    FROM dishes d
    JOIN favorite_dishes fd ON fd.dish_id = d.id
    WHERE fd.user_id = ?
"""


def list_favorites(conn: Any, user_id: int) -> Dict[str, List[Dict[str, Any]]]:
    rows = conn.execute(f"{_SELECT_FAVORITE_DISHES} ORDER BY d.id", (int(user_id),)).fetchall()
    return {"dishes": [to_wire(DISHES, r) for r in rows]}


def get_favorite(conn: Any, user_id: int, dish_id: int) -> Dict[str, Any]:
    row = conn.execute(
        f"{_SELECT_FAVORITE_DISHES} AND fd.dish_id = ?",
        (int(user_id), int(dish_id)),
    ).fetchone()
    if row is None:
        return {"exists": False, "favorites": None}
    return {"exists": True, "favorites": to_wire(DISHES, row)}


def add_favorites(conn: Any, user_id: int, dish_ids: Iterable[int]) -> Dict[str, int]:
    """Link every dish to the user. Already-linked dishes are skipped.

    Runs inside the caller's transaction: an unknown dish id fails the whole batch.
    """
    now = utcnow_iso()
    n = 0
    for dish_id in dish_ids:
        cur = conn.execute(
            """
            INSERT INTO favorite_dishes (user_id, dish_id, created_at)
            VALUES (?,?,?)
            ON CONFLICT(user_id, dish_id) DO NOTHING
            """,
            (int(user_id), int(dish_id), now),
        )
        n += max(cur.rowcount, 0)
    return status(n)


def remove_favorite(conn: Any, user_id: int, dish_id: int) -> Dict[str, int]:
    cur = conn.execute(
        "DELETE FROM favorite_dishes WHERE user_id=? AND dish_id=?",
        (int(user_id), int(dish_id)),
    )
    return status(cur.rowcount)


def remove_favorites(conn: Any, user_id: int) -> Dict[str, int]:
    cur = conn.execute("DELETE FROM favorite_dishes WHERE user_id=?", (int(user_id),))
    return status(cur.rowcount)
