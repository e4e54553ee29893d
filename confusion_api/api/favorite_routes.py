from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from confusion_api.auth.deps import claims_user_id, get_cfg, require_user
from confusion_api.auth.security import Claims
from confusion_api.catalog.favorites import (
    add_favorites,
    get_favorite,
    list_favorites,
    remove_favorite,
    remove_favorites,
)
from confusion_api.config import Config
from confusion_api.db import open_store


router = APIRouter(prefix="/favorites", tags=["favorites"])


class DishRef(BaseModel):
    dish_id: int = Field(alias="_id")


@router.get("")
def get_favorites(
    cfg: Config = Depends(get_cfg),
    claims: Claims = Depends(require_user),
) -> Dict[str, List[Dict[str, Any]]]:
    with open_store(cfg) as conn:
        return list_favorites(conn, claims_user_id(claims))


@router.post("")
def post_favorites(
    payload: List[DishRef],
    cfg: Config = Depends(get_cfg),
    claims: Claims = Depends(require_user),
) -> Dict[str, List[Dict[str, Any]]]:
    user_id = claims_user_id(claims)
    with open_store(cfg) as conn:
        add_favorites(conn, user_id, [ref.dish_id for ref in payload])
        return list_favorites(conn, user_id)


@router.delete("")
def delete_favorites(
    cfg: Config = Depends(get_cfg),
    claims: Claims = Depends(require_user),
) -> Dict[str, List[Dict[str, Any]]]:
    user_id = claims_user_id(claims)
    with open_store(cfg) as conn:
        remove_favorites(conn, user_id)
        return list_favorites(conn, user_id)


@router.get("/{dish_id}")
def get_one_favorite(
    dish_id: int,
    cfg: Config = Depends(get_cfg),
    claims: Claims = Depends(require_user),
) -> Dict[str, Any]:
    with open_store(cfg) as conn:
        return get_favorite(conn, claims_user_id(claims), dish_id)


@router.post("/{dish_id}")
def post_one_favorite(
    dish_id: int,
    cfg: Config = Depends(get_cfg),
    claims: Claims = Depends(require_user),
) -> Dict[str, List[Dict[str, Any]]]:
    user_id = claims_user_id(claims)
    with open_store(cfg) as conn:
        add_favorites(conn, user_id, [dish_id])
        return list_favorites(conn, user_id)


@router.delete("/{dish_id}")
def delete_one_favorite(
    dish_id: int,
    cfg: Config = Depends(get_cfg),
    claims: Claims = Depends(require_user),
) -> Dict[str, List[Dict[str, Any]]]:
    user_id = claims_user_id(claims)
    with open_store(cfg) as conn:
        remove_favorite(conn, user_id, dish_id)
        return list_favorites(conn, user_id)
