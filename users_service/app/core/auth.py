from typing import Optional, Dict, Any, List
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from .config import get_settings

settings = get_settings()

security = HTTPBearer(scheme_name="Bearer Token", auto_error=False)

credentials_exception = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)


class CurrentUser:
    """Principal taken from a verified access token."""

    def __init__(self, user_id: str, username: Optional[str] = None, roles: Optional[List[str]] = None):
        self.user_id = user_id
        self.username = username
        self.roles = roles or []

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def __repr__(self):
        return f"User(id={self.user_id}, roles={self.roles})"


def decode_token(token: str) -> Dict[str, Any]:
    key = settings.jwt_verification_key
    if not key:
        raise credentials_exception
    try:
        return jwt.decode(
            token,
            key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options={"verify_aud": settings.jwt_audience is not None},
        )
    except JWTError:
        raise credentials_exception


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> CurrentUser:
    if credentials is None:
        raise credentials_exception
    claims = decode_token(credentials.credentials)
    realm_access = claims.get("realm_access") or {}
    return CurrentUser(
        user_id=claims.get("sub") or "",
        username=claims.get("preferred_username"),
        roles=list(realm_access.get("roles", [])),
    )


async def require_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Only users holding the admin realm role may manage accounts"""
    if not current_user.has_role(settings.admin_role):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions"
        )
    return current_user
