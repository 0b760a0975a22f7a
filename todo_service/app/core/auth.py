"""
Authentication module for Todo Service.
Verifies bearer tokens issued by the identity provider (Keycloak).
"""
import logging
from typing import Optional, Dict, Any, List
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from .config import get_settings

# Configure logging
logger = logging.getLogger(__name__)

# Security scheme
security = HTTPBearer(
    scheme_name="Bearer Token",
    description="JWT access token issued by Keycloak",
    auto_error=False
)

# Get settings
settings = get_settings()

credentials_exception = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)


class CurrentUser:
    """Represents the current authenticated user."""

    def __init__(self, user_id: str, email: Optional[str] = None, username: Optional[str] = None,
                 roles: Optional[List[str]] = None, token: Optional[str] = None):
        self.user_id = user_id
        self.email = email
        self.username = username
        self.roles = roles or []
        self.token = token

    def __str__(self):
        return f"User(id={self.user_id}, username={self.username})"

    def __repr__(self):
        return self.__str__()

    @classmethod
    def from_claims(cls, claims: Dict[str, Any], token: Optional[str] = None) -> "CurrentUser":
        """Create CurrentUser from decoded token claims."""
        realm_access = claims.get("realm_access") or {}
        return cls(
            user_id=claims.get("sub") or "",
            email=claims.get("email"),
            username=claims.get("preferred_username"),
            roles=list(realm_access.get("roles", [])),
            token=token,
        )


def decode_token(token: str) -> Dict[str, Any]:
    """
    Verify the token signature and expiry and return its claims.

    Raises:
        HTTPException: 401 if the token cannot be verified
    """
    key = settings.jwt_verification_key
    if not key:
        logger.error("No key configured for bearer token verification")
        raise credentials_exception

    options = {"verify_aud": settings.jwt_audience is not None}
    try:
        return jwt.decode(
            token,
            key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options=options,
        )
    except JWTError as e:
        logger.warning(f"Token verification failed: {e}")
        raise credentials_exception


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> CurrentUser:
    """
    Dependency to get current authenticated user.

    Raises:
        HTTPException: If the bearer token is missing or invalid
    """
    if credentials is None:
        raise credentials_exception

    claims = decode_token(credentials.credentials)
    current_user = CurrentUser.from_claims(claims, token=credentials.credentials)
    logger.debug(f"Authenticated user: {current_user}")
    return current_user
