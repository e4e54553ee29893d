"""Authentication / authorization.

Auth is deliberately small:

- Users table (username + password hash + admin flag, or a Facebook id)
- Stateless HS256 JWT access tokens (`_id`, `admin`, `exp`), no server-side sessions

Clients send `Authorization: Bearer <token>`. Write routes are gated by
`require_user` and, for catalog administration, `require_admin`.
"""

from .deps import get_claims, require_admin, require_user
from .security import EMPTY_CLAIMS, Claims, PasswordHasher, TokenService

__all__ = [
    "Claims",
    "EMPTY_CLAIMS",
    "PasswordHasher",
    "TokenService",
    "get_claims",
    "require_admin",
    "require_user",
]
