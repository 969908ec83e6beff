"""Bearer tokens for the authentication boundary. Only ``sub`` (the user id) is relied on."""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from scoped_rbac.infrastructure.config.settings import get_settings


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    settings = get_settings()
    issued_at = datetime.now(UTC)
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)

    claims = {**data, "iat": issued_at, "exp": issued_at + lifetime}
    token = jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)
    assert isinstance(token, str)
    return token


def verify_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a token.

    Raises:
        ValueError: bad signature, expired, or no ``sub`` claim
    """
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        raise ValueError(f"Invalid token: {e}") from e

    if not isinstance(payload, dict) or not payload.get("sub"):
        raise ValueError("Invalid token: missing subject")
    return payload
