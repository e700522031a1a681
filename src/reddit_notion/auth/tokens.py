"""Signed session tokens (JWT, HS256) identifying a local user."""

from datetime import datetime, timedelta, timezone

import jwt
from pydantic import BaseModel

from reddit_notion.config import get_settings
from reddit_notion.errors import UnauthenticatedError

ISSUER = "reddit-notion"
_ALGORITHM = "HS256"


class TokenClaims(BaseModel):
    user_id: int
    email: str = ""


def _secret() -> str:
    secret = get_settings().jwt_secret
    if not secret:
        raise RuntimeError("JWT_SECRET is not configured")
    return secret


def issue_token(user_id: int, email: str, now: datetime | None = None) -> str:
    """Return a signed token for ``user_id`` valid for jwt_ttl_hours."""
    now = now or datetime.now(timezone.utc)
    payload = {
        "user_id": user_id,
        "email": email,
        "iat": now,
        "exp": now + timedelta(hours=get_settings().jwt_ttl_hours),
        "iss": ISSUER,
    }
    return jwt.encode(payload, _secret(), algorithm=_ALGORITHM)


def decode_token(token: str) -> TokenClaims:
    """Verify signature, expiry and issuer of ``token``.

    Raises UnauthenticatedError for any invalid or expired token.
    """
    try:
        payload = jwt.decode(token, _secret(), algorithms=[_ALGORITHM], issuer=ISSUER)
    except jwt.ExpiredSignatureError as exc:
        raise UnauthenticatedError("Token expired") from exc
    except jwt.PyJWTError as exc:
        raise UnauthenticatedError("Invalid token") from exc
    return TokenClaims.model_validate(payload)
