import jwt
import pytest

from app.config import settings
from app.utils.security import (
    create_access_token,
    decode_token,
    hash_password,
    hash_password_async,
    verify_password,
    verify_password_async,
)


def test_hash_and_verify_password():
    hashed = hash_password("0123456789")

    assert hashed != "0123456789"
    assert verify_password("0123456789", hashed)
    assert not verify_password("0123456788", hashed)
    assert not verify_password("", hashed)
    assert not verify_password("0123456789", "not-a-hash")


def test_long_passwords_are_not_truncated():
    base = "p" * 100
    hashed = hash_password(base + "a")

    assert not verify_password(base + "b", hashed)


def test_access_token_round_trip():
    payload = decode_token(create_access_token(42))

    assert payload is not None
    assert payload["sub"] == "42"
    assert payload["type"] == "access"


def test_expired_token_is_rejected():
    assert decode_token(create_access_token(1, lifetime_seconds=-10)) is None


def test_token_with_wrong_type_or_secret_is_rejected():
    refresh = jwt.encode(
        {"sub": "1", "type": "refresh", "exp": 4102444800},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    forged = jwt.encode(
        {"sub": "1", "type": "access", "exp": 4102444800},
        "some-other-secret-of-sufficient-length",
        algorithm="HS256",
    )

    assert decode_token(refresh) is None
    assert decode_token(forged) is None
    assert decode_token("garbage") is None


@pytest.mark.asyncio
async def test_async_password_helpers_match_sync_ones():
    hashed = await hash_password_async("0123456789")

    assert verify_password("0123456789", hashed)
    assert await verify_password_async("0123456789", hashed)
    assert not await verify_password_async("9876543210", hashed)
