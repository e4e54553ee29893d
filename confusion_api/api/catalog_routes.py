from typing import Any, Dict, List, Optional, Type

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, field_validator

from confusion_api.auth.deps import get_cfg, require_admin
from confusion_api.auth.security import Claims
from confusion_api.catalog.comments import list_comments
from confusion_api.catalog.store import (
    DISHES,
    LEADERS,
    PROMOTIONS,
    Collection,
    create_item,
    delete_item,
    delete_items,
    get_item,
    list_items,
    update_item,
)
from confusion_api.config import Config
from confusion_api.db import open_store
from confusion_api.errors import Forbidden, MalformedRequest


_TRUE_STRINGS = ("1", "t", "true")


def parse_featured(raw: Optional[str]) -> bool:
    """`?featured=` flag; anything unrecognised means false."""
    return (raw or "").strip().lower() in _TRUE_STRINGS


class _CatalogItem(BaseModel):
    name: Optional[str] = None
    image: Optional[str] = None
    featured: Optional[bool] = None
    description: Optional[str] = None


class _PricedItem(_CatalogItem):
    label: Optional[str] = None
    price: Optional[str] = None

    @field_validator("price", mode="before")
    @classmethod
    def _price_as_text(cls, v: Any) -> Any:
        # Clients send "4.99" or 4.99; stored as text either way.
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class DishIn(_PricedItem):
    category: Optional[str] = None


class PromotionIn(_PricedItem):
    pass


class LeaderIn(_CatalogItem):
    designation: Optional[str] = None
    abbr: Optional[str] = None


def catalog_router(coll: Collection, model: Type[_CatalogItem], *, with_comments: bool = False) -> APIRouter:
    """Routes for one catalog collection: public reads, admin writes."""
    router = APIRouter(prefix=f"/{coll.name}", tags=[coll.name])

    @router.get("")
    def list_all(
        featured: Optional[str] = Query(default=None),
        cfg: Config = Depends(get_cfg),
    ) -> List[Dict[str, Any]]:
        with open_store(cfg) as conn:
            return list_items(conn, coll, featured_only=parse_featured(featured))

    @router.post("")
    def create(
        payload: model,  # type: ignore[valid-type]
        cfg: Config = Depends(get_cfg),
        _admin: Claims = Depends(require_admin),
    ) -> Dict[str, int]:
        values = payload.model_dump()
        if not (values.get("name") or "").strip():
            raise MalformedRequest("name_required")
        with open_store(cfg) as conn:
            return create_item(conn, coll, values)

    @router.put("")
    def replace_all(_admin: Claims = Depends(require_admin)) -> None:
        raise Forbidden(f"PUT operation not supported on /{coll.name}")

    @router.delete("")
    def delete_all(
        cfg: Config = Depends(get_cfg),
        _admin: Claims = Depends(require_admin),
    ) -> Dict[str, int]:
        with open_store(cfg) as conn:
            return delete_items(conn, coll)

    @router.get("/{item_id}")
    def get_one(item_id: int, cfg: Config = Depends(get_cfg)) -> Dict[str, Any]:
        with open_store(cfg) as conn:
            item = get_item(conn, coll, item_id)
            if item is None:
                return {}
            if with_comments:
                item["comments"] = list_comments(conn, item_id)
        return item

    @router.put("/{item_id}")
    def update_one(
        item_id: int,
        payload: model,  # type: ignore[valid-type]
        cfg: Config = Depends(get_cfg),
        _admin: Claims = Depends(require_admin),
    ) -> Dict[str, Any]:
        with open_store(cfg) as conn:
            updated = update_item(conn, coll, item_id, payload.model_dump(exclude_unset=True))
        return updated or {}

    @router.post("/{item_id}")
    def create_one(item_id: int, _admin: Claims = Depends(require_admin)) -> None:
        raise Forbidden(f"POST operation not supported on /{coll.name}/{item_id}")

    @router.delete("/{item_id}")
    def delete_one(
        item_id: int,
        cfg: Config = Depends(get_cfg),
        _admin: Claims = Depends(require_admin),
    ) -> Dict[str, int]:
        with open_store(cfg) as conn:
            return delete_item(conn, coll, item_id)

    return router


dishes_router = catalog_router(DISHES, DishIn, with_comments=True)
promotions_router = catalog_router(PROMOTIONS, PromotionIn)
leaders_router = catalog_router(LEADERS, LeaderIn)
