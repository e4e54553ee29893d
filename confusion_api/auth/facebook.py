"""Facebook access-token login.

The client already holds a Facebook user access token (obtained in the browser);
we ask the Graph API who it belongs to and map that to a local account, creating
one on first login. The browser redirect flow is not handled here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import requests

from confusion_api.errors import Unauthorized

from .crud import create_facebook_user, get_user_by_facebook_id, get_user_by_username


PROFILE_FIELDS = "id,name,first_name,last_name,email"


def _debug(msg: str) -> None:
    print(f"[facebook] {msg}")


@dataclass(frozen=True)
class FacebookProfile:
    id: str
    name: str
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None


def fetch_profile(graph_url: str, access_token: str, *, timeout: int = 15) -> FacebookProfile:
    """Resolve an access token to its Facebook profile.

    Any transport failure, non-2xx answer or unusable payload is an Unauthorized.
    """
    url = f"{graph_url.rstrip('/')}/me"
    params = {"fields": PROFILE_FIELDS, "access_token": access_token}
    try:
        r = requests.get(url, params=params, timeout=timeout)
    except requests.RequestException as e:
        _debug(f"Graph API error: {e}")
        raise Unauthorized() from e

    if r.status_code >= 400:
        _debug(f"Unable to login to Facebook: status={r.status_code}")
        raise Unauthorized()

    try:
        data = r.json()
    except ValueError as e:
        raise Unauthorized() from e
    if not isinstance(data, dict) or not str(data.get("id") or "").strip():
        raise Unauthorized()

    return FacebookProfile(
        id=str(data["id"]).strip(),
        name=str(data.get("name") or "").strip(),
        first_name=str(data.get("first_name") or ""),
        last_name=str(data.get("last_name") or ""),
        email=data.get("email"),
    )


def find_or_create_user(conn: Any, profile: FacebookProfile) -> Any:
    row = get_user_by_facebook_id(conn, profile.id)
    if row is not None:
        return row

    # Display names are not unique; fall back to a name derived from the id.
    username = profile.name or f"facebook_{profile.id}"
    if get_user_by_username(conn, username) is not None:
        username = f"{username} ({profile.id})"

    create_facebook_user(
        conn,
        facebook_id=profile.id,
        username=username,
        firstname=profile.first_name,
        lastname=profile.last_name,
    )
    _debug(f"Created user for facebook_id={profile.id}")
    row = get_user_by_facebook_id(conn, profile.id)
    assert row is not None
    return row
