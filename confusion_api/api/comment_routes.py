from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from confusion_api.auth.deps import MSG_NOT_ADMIN, claims_user_id, get_cfg, require_admin, require_user
from confusion_api.auth.security import Claims
from confusion_api.catalog.comments import (
    create_comment,
    delete_comment,
    delete_comments,
    dish_exists,
    get_comment,
    is_comment_author,
    list_comments,
    update_comment,
)
from confusion_api.config import Config
from confusion_api.db import open_store
from confusion_api.errors import Forbidden, MalformedRequest, Unauthorized


router = APIRouter(prefix="/dishes/{dish_id}/comments", tags=["comments"])


class CommentIn(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: str


class CommentUpdate(BaseModel):
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    comment: Optional[str] = None


@router.get("")
def get_comments(dish_id: int, cfg: Config = Depends(get_cfg)) -> List[Dict[str, Any]]:
    with open_store(cfg) as conn:
        return list_comments(conn, dish_id)


@router.post("")
def post_comment(
    dish_id: int,
    payload: CommentIn,
    cfg: Config = Depends(get_cfg),
    claims: Claims = Depends(require_user),
) -> Dict[str, int]:
    author_id = claims_user_id(claims)
    with open_store(cfg) as conn:
        if not dish_exists(conn, dish_id):
            raise MalformedRequest("dish_not_found")
        return create_comment(conn, dish_id, author_id, rating=payload.rating, comment=payload.comment)


@router.put("")
def put_comments(dish_id: int, _claims: Claims = Depends(require_user)) -> None:
    raise Forbidden(f"PUT operation not supported on /dishes/{dish_id}/comments")


@router.delete("")
def delete_all_comments(
    dish_id: int,
    cfg: Config = Depends(get_cfg),
    _admin: Claims = Depends(require_admin),
) -> Dict[str, int]:
    with open_store(cfg) as conn:
        return delete_comments(conn, dish_id)


@router.get("/{comment_id}")
def get_one_comment(dish_id: int, comment_id: int, cfg: Config = Depends(get_cfg)) -> Dict[str, Any]:
    with open_store(cfg) as conn:
        return get_comment(conn, dish_id, comment_id) or {}


@router.put("/{comment_id}")
def put_comment(
    dish_id: int,
    comment_id: int,
    payload: CommentUpdate,
    cfg: Config = Depends(get_cfg),
    claims: Claims = Depends(require_user),
) -> Dict[str, Any]:
    user_id = claims_user_id(claims)
    with open_store(cfg) as conn:
        if not is_comment_author(conn, dish_id, comment_id, user_id):
            raise Unauthorized(MSG_NOT_ADMIN)
        return update_comment(conn, dish_id, comment_id, user_id, payload.model_dump(exclude_unset=True)) or {}


@router.post("/{comment_id}")
def post_to_comment(dish_id: int, comment_id: int, _claims: Claims = Depends(require_user)) -> None:
    raise Forbidden(f"POST operation not supported on /dishes/{dish_id}/comments/{comment_id}")


@router.delete("/{comment_id}")
def delete_one_comment(
    dish_id: int,
    comment_id: int,
    cfg: Config = Depends(get_cfg),
    claims: Claims = Depends(require_user),
) -> Dict[str, int]:
    user_id = claims_user_id(claims)
    with open_store(cfg) as conn:
        if not is_comment_author(conn, dish_id, comment_id, user_id):
            raise Unauthorized(MSG_NOT_ADMIN)
        return delete_comment(conn, dish_id, comment_id, user_id)
