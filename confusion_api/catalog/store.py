"""Dishes, promotions and leaders.

The three tables share one shape (a handful of text columns plus `featured`), so
they share one set of parameterized queries driven by a `Collection` descriptor.
Column names in SQL always come from the descriptor, never from a request.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from confusion_api.errors import MalformedRequest
from confusion_api.util.time import utcnow_iso


@dataclass(frozen=True)
class Collection:
    name: str  # table name and URL segment
    fields: Tuple[str, ...]

    @property
    def singular(self) -> str:
        return self.name[:-1]


DISHES = Collection("dishes", ("name", "image", "category", "label", "price", "featured", "description"))
PROMOTIONS = Collection("promotions", ("name", "image", "label", "price", "featured", "description"))
LEADERS = Collection("leaders", ("name", "image", "designation", "abbr", "featured", "description"))


def status(n: int, ok: int = 1) -> Dict[str, int]:
    """Write acknowledgement: rows affected + ok flag."""
    return {"n": int(n), "ok": int(ok)}


def _to_db(field: str, value: Any) -> Any:
    if field == "featured":
        return 1 if value else 0
    return value


def to_wire(coll: Collection, row: Any) -> Dict[str, Any]:
    d = dict(row)
    out: Dict[str, Any] = {"_id": int(d["id"])}
    for f in coll.fields:
        out[f] = bool(d.get(f)) if f == "featured" else d.get(f)
    out["createdAt"] = d.get("created_at")
    out["updatedAt"] = d.get("updated_at")
    return out


def _select_sql(coll: Collection) -> str:
    cols = ", ".join(("id",) + coll.fields + ("created_at", "updated_at"))
    return f"SELECT {cols} FROM {coll.name}"


def list_items(conn: Any, coll: Collection, *, featured_only: bool = False) -> List[Dict[str, Any]]:
    sql = _select_sql(coll)
    if featured_only:
        sql += " WHERE featured = 1"
    sql += " ORDER BY id"
    return [to_wire(coll, r) for r in conn.execute(sql).fetchall()]


def get_item(conn: Any, coll: Collection, item_id: int) -> Optional[Dict[str, Any]]:
    row = conn.execute(f"{_select_sql(coll)} WHERE id=?", (int(item_id),)).fetchone()
    if row is None:
        return None
    return to_wire(coll, row)


def create_item(conn: Any, coll: Collection, values: Mapping[str, Any]) -> Dict[str, int]:
    now = utcnow_iso()
    cols = coll.fields + ("created_at", "updated_at")
    params = [_to_db(f, values.get(f)) for f in coll.fields] + [now, now]
    placeholders = ",".join("?" for _ in cols)
    cur = conn.execute(
        f"INSERT INTO {coll.name} ({', '.join(cols)}) VALUES ({placeholders})",
        params,
    )
    return status(cur.rowcount)


def update_item(
    conn: Any,
    coll: Collection,
    item_id: int,
    values: Mapping[str, Any],
) -> Optional[Dict[str, Any]]:
    """Update only the provided fields. Returns the fresh item, or None if no row matched."""
    # Build dynamic SQL so we only touch provided fields.
    fields: List[Tuple[str, Any]] = [
        (f, _to_db(f, values[f])) for f in coll.fields if values.get(f) is not None
    ]
    if not fields:
        raise MalformedRequest("nothing_to_update")

    fields.append(("updated_at", utcnow_iso()))
    sets = ", ".join([f"{k}=?" for k, _ in fields])
    params = [v for _, v in fields] + [int(item_id)]
    cur = conn.execute(f"UPDATE {coll.name} SET {sets} WHERE id=?", params)
    if cur.rowcount == 0:
        return None
    return get_item(conn, coll, item_id)


def delete_item(conn: Any, coll: Collection, item_id: int) -> Dict[str, int]:
    cur = conn.execute(f"DELETE FROM {coll.name} WHERE id=?", (int(item_id),))
    return status(cur.rowcount)


def delete_items(conn: Any, coll: Collection) -> Dict[str, int]:
    cur = conn.execute(f"DELETE FROM {coll.name}")
    return status(cur.rowcount)
