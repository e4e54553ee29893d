from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

from fastapi import APIRouter, Depends, Header, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from starlette.concurrency import run_in_threadpool

from confusion_api.auth.crud import create_user, list_users, verify_user_credentials
from confusion_api.auth.deps import (
    extract_bearer_token,
    get_cfg,
    get_hasher,
    get_tokens,
    require_admin,
)
from confusion_api.auth.facebook import fetch_profile, find_or_create_user
from confusion_api.auth.security import Claims, PasswordHasher, TokenService
from confusion_api.config import Config
from confusion_api.db import open_store
from confusion_api.errors import CreationError, HashingError, StoreError, Unauthorized


MSG_LOGIN_FAILED = "Login failed!"
MSG_LOGIN_OK = "You are successfully logged in!"
MSG_SIGNUP_OK = "Registration Successful!"
MSG_JWT_VALID = "JWT valid!"
MSG_JWT_INVALID = "JWT invalid!"


def _debug(msg: str) -> None:
    print(f"[api.auth] {msg}")


router = APIRouter(tags=["auth"])

M = TypeVar("M", bound=BaseModel)


class Credentials(BaseModel):
    username: str
    password: str


class SignupRequest(BaseModel):
    firstname: str = ""
    lastname: str = ""
    username: str
    password: str


async def _read_body(request: Request, model: Type[M]) -> M:
    """Decode a JSON body; anything undecodable on the auth routes is a 401."""
    try:
        raw = await request.json()
    except ValueError:
        raise Unauthorized()
    try:
        return model.model_validate(raw)
    except ValidationError:
        raise Unauthorized()


def login_result(tokens: TokenService, user_id: Optional[int], is_admin: bool) -> Dict[str, Any]:
    """Login reply; a failed login carries an empty token and the generic message."""
    if user_id is None:
        return {"success": False, "token": "", "status": MSG_LOGIN_FAILED}
    return {"success": True, "token": tokens.issue(user_id, is_admin), "status": MSG_LOGIN_OK}


def _login(cfg: Config, hasher: PasswordHasher, tokens: TokenService, creds: Credentials) -> Tuple[Dict[str, Any], bool]:
    with open_store(cfg) as conn:
        row = verify_user_credentials(conn, hasher, creds.username, creds.password)

    if row is None:
        # Unknown user and wrong password are reported identically.
        _debug(f"Login failed: username={creds.username!r}")
        return login_result(tokens, None, False), False

    return login_result(tokens, int(row["id"]), bool(row["is_admin"])), True


def _signup(cfg: Config, hasher: PasswordHasher, payload: SignupRequest) -> None:
    try:
        with open_store(cfg) as conn:
            create_user(
                conn,
                hasher,
                username=payload.username,
                password=payload.password,
                firstname=payload.firstname,
                lastname=payload.lastname,
            )
    except (CreationError, HashingError, StoreError) as e:
        # The reason (duplicate username, oversized password, store failure) is not surfaced to the caller.
        _debug(f"Signup failed: username={payload.username!r} reason={e}")
        raise CreationError() from e


@router.post("/login")
@router.post("/users/login")
async def login(
    request: Request,
    cfg: Config = Depends(get_cfg),
    hasher: PasswordHasher = Depends(get_hasher),
    tokens: TokenService = Depends(get_tokens),
) -> JSONResponse:
    creds = await _read_body(request, Credentials)
    result, ok = await run_in_threadpool(_login, cfg, hasher, tokens, creds)
    return JSONResponse(status_code=200 if ok else 401, content=result)


@router.post("/signup")
@router.post("/users/signup")
async def signup(
    request: Request,
    cfg: Config = Depends(get_cfg),
    hasher: PasswordHasher = Depends(get_hasher),
) -> Dict[str, Any]:
    payload = await _read_body(request, SignupRequest)
    if not payload.username.strip() or not payload.password:
        raise Unauthorized()
    await run_in_threadpool(_signup, cfg, hasher, payload)
    return {"status": MSG_SIGNUP_OK, "user": payload.username.strip()}


@router.get("/users")
def get_users(
    cfg: Config = Depends(get_cfg),
    _admin: Claims = Depends(require_admin),
) -> List[Dict[str, Any]]:
    with open_store(cfg) as conn:
        return list_users(conn)


@router.get("/checkToken")
@router.get("/users/checkJWTtoken")
def check_token(
    authorization: Optional[str] = Header(default=None),
    tokens: TokenService = Depends(get_tokens),
) -> JSONResponse:
    token = extract_bearer_token(authorization)
    if token is None or tokens.verify(token) is None:
        return JSONResponse(
            status_code=401,
            content={"status": MSG_JWT_INVALID, "success": False, "err": MSG_JWT_INVALID},
        )
    return JSONResponse(
        status_code=200,
        content={"status": MSG_JWT_VALID, "success": True, "err": MSG_JWT_VALID},
    )


# -----------------------------
# Facebook token login
# -----------------------------


def _facebook_access_token(request: Request, query_token: Optional[str]) -> str:
    """Like passport-facebook-token: query param, then `access_token` header, then Bearer."""
    if query_token:
        return query_token
    header_token = request.headers.get("access_token")
    if header_token:
        return header_token
    bearer = extract_bearer_token(request.headers.get("authorization"))
    if bearer:
        return bearer
    raise Unauthorized()


@router.get("/facebook/token")
def facebook_token(
    request: Request,
    access_token: Optional[str] = Query(default=None),
    cfg: Config = Depends(get_cfg),
    tokens: TokenService = Depends(get_tokens),
) -> Dict[str, Any]:
    token = _facebook_access_token(request, access_token)
    profile = fetch_profile(cfg.FACEBOOK_GRAPH_URL, token, timeout=cfg.FACEBOOK_TIMEOUT_SECONDS)

    with open_store(cfg) as conn:
        row = find_or_create_user(conn, profile)

    return login_result(tokens, int(row["id"]), bool(row["is_admin"]))
