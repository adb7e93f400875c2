from __future__ import annotations

import asyncio
import os
import tempfile
import uuid
from pathlib import Path
from types import SimpleNamespace

import pytest

# Settings are read at import time; point them at a throwaway database first
_TMP_DIR = Path(tempfile.mkdtemp(prefix="lorehub-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR / 'default.db'}"
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from lorehub.core.database import build_engine, build_sessionmaker, init_db  # noqa: E402
from lorehub.models import Character, FanTheory, LoreEntry, Profile, Series, Timeline  # noqa: E402


def database_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "lorehub.db"


@pytest.fixture
def run_db(db_path: Path):
    """Run ``scenario(session)`` on a fresh engine inside one event loop."""

    def _run(scenario):
        async def _main():
            engine = build_engine(database_url(db_path))
            try:
                await init_db(bind=engine)
                async with build_sessionmaker(engine)() as session:
                    return await scenario(session)
            finally:
                await engine.dispose()

        return asyncio.run(_main())

    return _run


@pytest.fixture
def run_sessions(db_path: Path):
    """Run ``scenario(session_factory)`` so it can open independent sessions."""

    def _run(scenario):
        async def _main():
            engine = build_engine(database_url(db_path))
            try:
                await init_db(bind=engine)
                return await scenario(build_sessionmaker(engine))
            finally:
                await engine.dispose()

        return asyncio.run(_main())

    return _run


async def make_profile(db, username: str | None = None, role: str = "user") -> Profile:
    user_id = uuid.uuid4()
    profile = Profile(id=user_id, username=username or f"user-{user_id.hex[:8]}", role=role)
    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    return profile


async def make_series(db, name: str = "Classic", color_code: str = "#0088FF") -> Series:
    series = Series(name=name, color_code=color_code)
    db.add(series)
    await db.commit()
    await db.refresh(series)
    return series


async def make_character(db, name: str, series: Series, **flags) -> Character:
    character = Character(name=name, series_id=series.id, **flags)
    db.add(character)
    await db.commit()
    await db.refresh(character)
    return character


async def make_lore_entry(db, creator: Profile, title: str = "Dr. Wily's origins",
                          approved: bool = False, tags=None, series: Series | None = None) -> LoreEntry:
    entry = LoreEntry(
        title=title,
        content="Wily and Light studied robotics together.",
        tags=list(tags or []),
        sources=[],
        creator_id=creator.id,
        is_approved=approved,
        series_id=series.id if series is not None else None,
    )
    db.add(entry)
    await db.commit()
    await db.refresh(entry)
    return entry


async def make_theory(db, creator: Profile, title: str = "What if X never sealed himself?",
                      approved: bool = False) -> FanTheory:
    theory = FanTheory(
        title=title,
        description="Zero stays awake through the Elf Wars.",
        branching_point="End of X8",
        alternate_timeline="The Zero series never happens.",
        creator_id=creator.id,
        is_approved=approved,
        upvotes=0,
    )
    db.add(theory)
    await db.commit()
    await db.refresh(theory)
    return theory


async def make_timeline(db, creator: Profile | None = None, official: bool = False) -> Timeline:
    timeline = Timeline(
        title="Official chronology" if official else "My chronology",
        is_official=official,
        creator_id=creator.id if creator is not None else None,
    )
    db.add(timeline)
    await db.commit()
    await db.refresh(timeline)
    return timeline


@pytest.fixture
def factory():
    return SimpleNamespace(
        profile=make_profile,
        series=make_series,
        character=make_character,
        lore_entry=make_lore_entry,
        theory=make_theory,
        timeline=make_timeline,
    )
