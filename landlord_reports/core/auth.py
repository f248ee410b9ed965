"""
Authentication utilities for the landlord portal JWT.

The frontend logs in against the portal and sends the JWT in the
Authorization header. This module verifies the JWT, loads the user row and
normalizes the role once, so nothing downstream compares role strings.
"""
import logging
from enum import Enum
from typing import Optional

import requests
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlalchemy.orm import Session

from landlord_reports.api.deps import get_db
from landlord_reports.core.config import settings
from landlord_reports.models.user import User

logger = logging.getLogger(__name__)

# Security scheme for Bearer token
security = HTTPBearer()


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"

    @classmethod
    def from_claim(cls, value: Optional[str]) -> "Role":
        """Map a stored role ("Admin", " manager ", None...) to a Role. Unknown roles are USER."""
        normalized = str(value or "").strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            return cls.USER


class CurrentUser:
    """Authenticated caller, passed explicitly into every report."""
    def __init__(self, user_id, email: Optional[str] = None, username: Optional[str] = None,
                 role: Role = Role.USER):
        self.id = str(user_id)
        self.email = email
        self.username = username or email or "unknown"
        self.role = role

    @property
    def is_manager(self) -> bool:
        return self.role is Role.MANAGER

    def __repr__(self):
        return f"<CurrentUser(id={self.id}, role={self.role.value})>"


# Cache for JWKS keys (to avoid fetching on every request)
_jwks_cache = None


def get_jwks():
    """
    Fetch the identity provider's JSON Web Key Set.

    Only used when JWT_JWKS_URL is configured; the default deployment signs
    tokens with the shared JWT_SECRET instead.
    """
    global _jwks_cache

    if _jwks_cache is not None:
        return _jwks_cache

    try:
        response = requests.get(settings.JWT_JWKS_URL, timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        return _jwks_cache
    except requests.RequestException as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch JWKS: {str(e)}",
        )


def verify_token(token: str) -> dict:
    """
    Verify a JWT and return its decoded payload.

    Raises:
        HTTPException: 401 if the token is invalid or expired
    """
    if settings.JWT_JWKS_URL:
        key = get_jwks()
        algorithms = ["ES256", "RS256"]
    else:
        key = settings.JWT_SECRET
        algorithms = [settings.JWT_ALGORITHM]

    try:
        return jwt.decode(token, key, algorithms=algorithms, options={"verify_aud": False})
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except JWTError as e:
        logger.info("Token verification failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """
    FastAPI dependency: resolve the caller from the bearer token.

    The portal puts the user id in the `id` claim; tokens from an external
    provider use `sub`.
    """
    payload = verify_token(credentials.credentials)

    user_id = payload.get("id") or payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate user",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.get(User, str(user_id))
    if user is None or user.is_active is False:
        logger.info("Rejected token for missing or inactive user %s", user_id)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or removed",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return CurrentUser(
        user_id=user.id,
        email=user.email,
        username=user.username,
        role=Role.from_claim(user.role),
    )


def require_roles(*roles: Role):
    """
    Dependency factory for role-based access control.

    Usage:
        router = APIRouter(dependencies=[Depends(require_roles(Role.ADMIN))])
    """
    allowed = set(roles)
    label = " or ".join(f"{r.value}s" for r in roles)

    def role_checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed:
            logger.warning("User %s with role %s denied (requires %s)",
                           current_user.id, current_user.role.value, label)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied: {label} only",
            )
        return current_user
    return role_checker
