from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from storefront.config import settings
from storefront.errors import ForbiddenError, UnauthorizedError
from storefront.models.user import Role

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def create_access_token(
    user_id: int, role: Role = Role.CUSTOMER, expires_minutes: Optional[int] = None
) -> str:
    """Mint a token the way the identity provider does. Used by tests and tooling."""
    expires = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    claims = {"sub": str(user_id), "role": Role(role).value, "exp": expires}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Principal:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise UnauthorizedError("Token expired, please login again")
    except JWTError:
        raise UnauthorizedError("Invalid token, authorization denied")

    try:
        return Principal(id=int(payload["sub"]), role=Role(payload.get("role", Role.CUSTOMER.value)))
    except (KeyError, ValueError):
        raise UnauthorizedError("Invalid token, authorization denied")


def get_optional_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Principal]:
    # anonymous callers are allowed through; a bad token is still rejected
    if credentials is None:
        return None
    return decode_token(credentials.credentials)


def get_current_principal(
    principal: Optional[Principal] = Depends(get_optional_principal),
) -> Principal:
    if principal is None:
        raise UnauthorizedError("Not authorized")
    return principal


def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if not principal.is_admin:
        raise ForbiddenError("Not authorized as admin")
    return principal
