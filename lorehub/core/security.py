"""
Identity-provider token handling and the per-request viewer
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import uuid

from jose import JWTError, jwt
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from lorehub.core.config import settings
from lorehub.core.database import get_db
from lorehub.services.profile_service import ensure_profile


security = HTTPBearer(auto_error=False)

MODERATOR_ROLES = ("moderator", "admin")


@dataclass(frozen=True)
class Viewer:
    """The authenticated user of a request: identity claims plus profile row."""
    id: uuid.UUID
    username: str
    role: str = "user"
    email: Optional[str] = None
    avatar_url: Optional[str] = None

    @property
    def is_moderator(self) -> bool:
        return self.role in MODERATOR_ROLES


def build_viewer(claims: Dict[str, Any], profile) -> Viewer:
    """Build the request viewer from verified token claims and the profile row."""
    return Viewer(
        id=profile.id,
        username=profile.username,
        role=profile.role or "user",
        email=claims.get("email"),
        avatar_url=profile.avatar_url,
    )


def create_access_token(user_id: uuid.UUID, email: Optional[str] = None, username: Optional[str] = None,
                        expires_delta: Optional[timedelta] = None) -> str:
    """Issue a token shaped like the identity provider's (used by tooling and tests)"""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=30))
    to_encode: Dict[str, Any] = {"sub": str(user_id), "exp": expire}
    if settings.JWT_AUDIENCE:
        to_encode["aud"] = settings.JWT_AUDIENCE
    if email:
        to_encode["email"] = email
    if username:
        to_encode["user_metadata"] = {"username": username}
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> Optional[dict]:
    """Verify a bearer token; returns the claims or None"""
    try:
        if settings.JWT_AUDIENCE:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET_KEY,
                algorithms=[settings.JWT_ALGORITHM],
                audience=settings.JWT_AUDIENCE,
            )
        else:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET_KEY,
                algorithms=[settings.JWT_ALGORITHM],
                options={"verify_aud": False},
            )
    except JWTError:
        return None
    try:
        uuid.UUID(str(payload.get("sub")))
    except (TypeError, ValueError):
        return None
    return payload


async def _viewer_from_claims(db: AsyncSession, claims: dict) -> Viewer:
    profile = await ensure_profile(db, claims)
    return build_viewer(claims, profile)


async def get_current_viewer(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Viewer:
    """Current viewer; 401 without a valid token"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid authentication credentials.",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception

    claims = verify_token(credentials.credentials)
    if claims is None:
        raise credentials_exception

    return await _viewer_from_claims(db, claims)


async def get_current_viewer_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Optional[Viewer]:
    """
    Current viewer if a valid token was sent, otherwise None.
    """
    if credentials is None:
        return None

    claims = verify_token(credentials.credentials)
    if claims is None:
        return None

    return await _viewer_from_claims(db, claims)


async def require_moderator(viewer: Viewer = Depends(get_current_viewer)) -> Viewer:
    """Viewer with a moderation role"""
    if not viewer.is_moderator:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Moderator role required."
        )
    return viewer
