"""
Profile service
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, List, Tuple
import logging
import re
import uuid

from lorehub.core.errors import NotFoundError, ValidationError
from lorehub.models import FanTheory, LoreEntry, Profile
from lorehub.schemas.profile import ProfileUpdate
from lorehub.services import repository

logger = logging.getLogger(__name__)

_USERNAME_RE = re.compile(r"[^A-Za-z0-9_.-]+")


def _username_from_claims(claims: Dict[str, Any], user_id: uuid.UUID) -> str:
    metadata = claims.get("user_metadata") or {}
    candidate = metadata.get("username") or (claims.get("email") or "").split("@")[0]
    candidate = _USERNAME_RE.sub("", str(candidate or ""))[:40]
    return candidate or f"user-{user_id.hex[:8]}"


async def ensure_profile(db: AsyncSession, claims: Dict[str, Any]) -> Profile:
    """Return the profile for the token subject, creating it on first sight"""
    user_id = uuid.UUID(str(claims["sub"]))
    profile = await repository.get_profile(db, user_id)
    if profile is not None:
        return profile

    username = _username_from_claims(claims, user_id)
    if await repository.username_taken(db, username):
        username = f"{username[:40]}-{user_id.hex[:6]}"

    async with repository.transaction(db, "Profile already exists."):
        profile = await repository.add(db, Profile(id=user_id, username=username, role="user"))
    await db.refresh(profile)
    logger.info(f"Created profile {profile.username} for {user_id}")
    return profile


async def get_profile(db: AsyncSession, user_id: uuid.UUID) -> Profile:
    profile = await repository.get_profile(db, user_id)
    if profile is None:
        raise NotFoundError("Profile not found.")
    return profile


async def update_profile(db: AsyncSession, user_id: uuid.UUID, data: ProfileUpdate) -> Profile:
    """Update the editable profile fields"""
    profile = await get_profile(db, user_id)
    update_data = data.model_dump(exclude_unset=True)

    username = update_data.get("username")
    if username is not None:
        username = username.strip()
        if not username or _USERNAME_RE.search(username):
            raise ValidationError("Usernames may only contain letters, digits, '.', '_' and '-'.")
        if await repository.username_taken(db, username, exclude_id=user_id):
            raise ValidationError("That username is already taken.")
        update_data["username"] = username

    if update_data:
        async with repository.transaction(db, "That username is already taken."):
            for key, value in update_data.items():
                setattr(profile, key, value)
            await db.flush()
        await db.refresh(profile)
    return profile


async def get_user_contributions(db: AsyncSession, user_id: uuid.UUID) -> Tuple[List[LoreEntry], List[FanTheory]]:
    """The user's own lore entries and theories, approved or pending (newest first)"""
    lore_entries = await repository.list_lore_entries(db, approved_only=False, creator_id=user_id)
    theories = await repository.list_theories(db, approved_only=False, creator_id=user_id)
    theories.sort(key=lambda t: (t.created_at is not None, t.created_at, t.id), reverse=True)
    return lore_entries, theories
