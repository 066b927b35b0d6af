import enum
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, status

from .security import AuthError, decode_access_token


class UserRole(str, enum.Enum):
    SCHOOL_ADMIN = "school_admin"
    TEACHER = "teacher"


ROLE_ACCESS = {
    UserRole.SCHOOL_ADMIN: {UserRole.SCHOOL_ADMIN, UserRole.TEACHER},
    UserRole.TEACHER: {UserRole.TEACHER},
}


@dataclass(frozen=True)
class RequestContext:
    user_id: int
    role: UserRole
    school_id: int
    academic_year_id: int


def _parse_token(auth_header: str | None) -> str:
    if not auth_header:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing Authorization header")
    parts = auth_header.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid auth scheme")
    return parts[1].strip()


def get_request_context(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> RequestContext:
    token = _parse_token(authorization)
    try:
        payload = decode_access_token(token)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc

    try:
        return RequestContext(
            user_id=int(payload["sub"]),
            role=UserRole(payload["role"]),
            school_id=int(payload["school_id"]),
            academic_year_id=int(payload["academic_year_id"]),
        )
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload") from exc


def require_roles(*allowed_roles: UserRole) -> Callable:
    def dependency(context: RequestContext = Depends(get_request_context)) -> RequestContext:
        reachable = ROLE_ACCESS.get(context.role, {context.role})
        if not set(allowed_roles).intersection(reachable):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role privileges")
        return context

    return dependency
