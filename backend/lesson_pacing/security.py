from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from .config import settings

REQUIRED_CLAIMS = ("sub", "role", "school_id", "academic_year_id")


class AuthError(Exception):
    pass


def create_access_token(
    subject: str,
    role: str,
    *,
    school_id: int,
    academic_year_id: int,
    expires_minutes: int | None = None,
) -> str:
    exp_minutes = expires_minutes or settings.jwt_exp_minutes
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": subject,
        "role": role,
        "school_id": school_id,
        "academic_year_id": academic_year_id,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=exp_minutes)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as exc:
        raise AuthError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthError("Invalid token") from exc

    if any(claim not in payload for claim in REQUIRED_CLAIMS):
        raise AuthError("Invalid token payload")
    return payload
