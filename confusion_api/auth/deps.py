"""Request gates.

Routes compose these as FastAPI dependencies, so the order is fixed where the
route is registered:

    require_user   -> Authorization header -> token -> Claims on request.state
    require_admin  -> require_user -> Claims.is_admin

Handlers read identity through the Claims the gate returns, or via `get_claims`.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Request

from confusion_api.config import Config
from confusion_api.errors import ServerFailure, Unauthorized

from .security import EMPTY_CLAIMS, Claims, PasswordHasher, TokenService


BEARER_PREFIX = "Bearer "
MSG_NOT_ADMIN = "You are not authorized to perform this operation!"


def get_cfg(request: Request) -> Config:
    cfg = getattr(request.app.state, "cfg", None)
    if cfg is None:
        raise ServerFailure("server_config_missing")
    return cfg


def get_tokens(request: Request) -> TokenService:
    tokens = getattr(request.app.state, "tokens", None)
    if tokens is None:
        raise ServerFailure("server_config_missing")
    return tokens


def get_hasher(request: Request) -> PasswordHasher:
    hasher = getattr(request.app.state, "hasher", None)
    if hasher is None:
        raise ServerFailure("server_config_missing")
    return hasher


def extract_bearer_token(header_value: Optional[str]) -> Optional[str]:
    """Return the token from `Bearer <token>`, or None when the header is malformed.

    The scheme is matched literally and exactly one non-empty segment must follow.
    """
    if not header_value or not header_value.startswith(BEARER_PREFIX):
        return None
    segments = header_value[len(BEARER_PREFIX) :].split(" ")
    if len(segments) != 1 or not segments[0]:
        return None
    return segments[0]


def get_claims(request: Request) -> Claims:
    """Claims attached by `require_user`, or EMPTY_CLAIMS when none were attached.

    EMPTY_CLAIMS is not a verified anonymous identity; routes that need identity
    must be gated.
    """
    claims = getattr(request.state, "claims", None)
    if isinstance(claims, Claims):
        return claims
    return EMPTY_CLAIMS


def require_user(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    tokens: TokenService = Depends(get_tokens),
) -> Claims:
    token = extract_bearer_token(authorization)
    if token is None:
        raise Unauthorized()

    claims = tokens.verify(token)
    if claims is None:
        raise Unauthorized()

    request.state.claims = claims
    return claims


def require_admin(claims: Claims = Depends(require_user)) -> Claims:
    if not claims.is_admin:
        raise Unauthorized(MSG_NOT_ADMIN)
    return claims


def claims_user_id(claims: Claims) -> int:
    """The caller's numeric id; a token whose `_id` is not an integer is unauthorized."""
    try:
        return int(claims.user_id)
    except ValueError:
        raise Unauthorized() from None
