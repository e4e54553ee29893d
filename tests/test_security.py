from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from confusion_api.auth.security import PasswordHasher, TokenService
from confusion_api.errors import HashingError


SECRET = "unit-test-secret-0123456789-abcdef"


@pytest.fixture()
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=1000)


@pytest.fixture()
def tokens() -> TokenService:
    return TokenService(SECRET, ttl=timedelta(hours=24))


def test_hash_verifies_only_the_hashed_password(hasher: PasswordHasher) -> None:
    h = hasher.hash("correct horse")
    assert h != "correct horse"
    assert hasher.verify(h, "correct horse") is True
    assert hasher.verify(h, "wrong horse") is False


def test_hash_is_salted(hasher: PasswordHasher) -> None:
    assert hasher.hash("same") != hasher.hash("same")


def test_account_without_hash_never_matches(hasher: PasswordHasher) -> None:
    assert hasher.verify(None, "anything") is False
    assert hasher.verify("", "") is False


def test_oversized_password(hasher: PasswordHasher) -> None:
    huge = "x" * 5000
    with pytest.raises(HashingError):
        hasher.hash(huge)

    h = hasher.hash("short")
    assert hasher.verify(h, huge) is False


def test_malformed_stored_hash_is_an_error(hasher: PasswordHasher) -> None:
    with pytest.raises(HashingError):
        hasher.verify("not-a-real-hash", "pw")


def test_token_round_trip(tokens: TokenService) -> None:
    token = tokens.issue(7, True)
    claims = tokens.verify(token)
    assert claims is not None
    assert claims.user_id == "7"
    assert claims.is_admin is True
    assert claims.expires_at is not None


def test_expired_token_is_rejected(tokens: TokenService) -> None:
    issued = datetime.now(timezone.utc) - timedelta(hours=25)
    assert tokens.verify(tokens.issue(1, False, now=issued)) is None


def test_explicit_clock(tokens: TokenService) -> None:
    issued = datetime(2024, 1, 1, tzinfo=timezone.utc)
    token = tokens.issue(1, False, now=issued)
    assert tokens.verify(token, now=issued + timedelta(hours=1)) is not None
    assert tokens.verify(token, now=issued + timedelta(hours=24)) is None


def test_token_signed_with_another_secret_is_rejected(tokens: TokenService) -> None:
    other = TokenService("some-other-secret-0123456789-abcdef")
    assert tokens.verify(other.issue(1, True)) is None


def test_token_without_expiry_is_rejected(tokens: TokenService) -> None:
    token = jwt.encode({"_id": "1", "admin": False}, SECRET, algorithm="HS256")
    assert tokens.verify(token) is None


def test_token_with_wrong_claim_types_is_rejected(tokens: TokenService) -> None:
    exp = int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp())
    token = jwt.encode({"_id": "1", "admin": "yes", "exp": exp}, SECRET, algorithm="HS256")
    assert tokens.verify(token) is None


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_garbage_tokens_are_rejected(tokens: TokenService, token: str) -> None:
    assert tokens.verify(token) is None


def test_blank_secret_is_refused() -> None:
    with pytest.raises(ValueError):
        TokenService("")
