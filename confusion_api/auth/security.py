from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from passlib.context import CryptContext
from passlib.exc import PasswordSizeError

from confusion_api.errors import HashingError, SigningError
from confusion_api.util.time import utcnow


_JWT_ALG = "HS256"


class PasswordHasher:
    """Salted, adaptive one-way hashing (passlib pbkdf2_sha256).

    The round count is fixed when the hasher is built from config.
    """

    def __init__(self, rounds: int) -> None:
        self._ctx = CryptContext(
            schemes=["pbkdf2_sha256"],
            deprecated="auto",
            pbkdf2_sha256__default_rounds=int(rounds),
        )

    def hash(self, password: str) -> str:
        try:
            return self._ctx.hash(password)
        except (ValueError, TypeError) as e:
            # PasswordSizeError is a ValueError: over passlib's size limit.
            raise HashingError("password_hash_failed") from e

    def verify(self, password_hash: Optional[str], password: str) -> bool:
        # Accounts without a hash (social logins) never match a password.
        if not password_hash:
            return False
        try:
            return bool(self._ctx.verify(password, password_hash))
        except PasswordSizeError:
            return False
        except (ValueError, TypeError) as e:
            # Unidentifiable or corrupt stored hash.
            raise HashingError("stored_hash_malformed") from e


@dataclass(frozen=True)
class Claims:
    user_id: str
    is_admin: bool
    expires_at: Optional[datetime] = None


# What a handler sees when no verified token was attached to the request.
EMPTY_CLAIMS = Claims(user_id="", is_admin=False, expires_at=None)


class TokenService:
    """Issues and verifies HS256 JWTs carrying `_id`, `admin` and `exp`."""

    def __init__(self, secret: str, ttl: timedelta = timedelta(hours=24)) -> None:
        if not secret:
            raise ValueError("jwt_secret_blank")
        self._secret = secret
        self._ttl = ttl

    def issue(self, user_id: int | str, is_admin: bool, *, now: Optional[datetime] = None) -> str:
        issued = now or utcnow()
        payload: Dict[str, Any] = {
            "_id": str(user_id),
            "admin": bool(is_admin),
            "exp": int((issued + self._ttl).timestamp()),
        }
        try:
            return jwt.encode(payload, self._secret, algorithm=_JWT_ALG)
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            raise SigningError("token_signing_failed") from e

    def verify(self, token: str, *, now: Optional[datetime] = None) -> Optional[Claims]:
        """Return the token's Claims, or None for any structural, signature or expiry failure."""
        if not token:
            return None
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[_JWT_ALG],
                options={"require": ["exp"], "verify_exp": now is None},
            )
        except jwt.InvalidTokenError:
            return None

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)):
            return None
        expires_at = datetime.fromtimestamp(exp, tz=timezone.utc)
        # Explicit clock (tests / replays): same rule as PyJWT, exp must be in the future.
        if now is not None and expires_at <= now:
            return None

        user_id = payload.get("_id")
        is_admin = payload.get("admin", False)
        if not isinstance(user_id, str) or not isinstance(is_admin, bool):
            return None
        return Claims(user_id=user_id, is_admin=is_admin, expires_at=expires_at)
