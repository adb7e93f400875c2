from __future__ import annotations

import asyncio
import uuid

import pytest
from fastapi.testclient import TestClient

from lorehub.core.database import build_engine, build_sessionmaker, get_db, init_db
from lorehub.core.security import create_access_token
from lorehub.main import app
from lorehub.models import Profile

from conftest import database_url


@pytest.fixture
def client(db_path):
    async def _prepare():
        engine = build_engine(database_url(db_path))
        await init_db(bind=engine)
        await engine.dispose()

    asyncio.run(_prepare())

    # Connections are opened lazily, inside the client's event loop
    engine = build_engine(database_url(db_path))
    session_factory = build_sessionmaker(engine)

    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _auth(user_id: uuid.UUID, username: str | None = None) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id, username=username)}"}


def _make_moderator(db_path, username: str = "mod") -> uuid.UUID:
    user_id = uuid.uuid4()

    async def _insert():
        engine = build_engine(database_url(db_path))
        try:
            async with build_sessionmaker(engine)() as session:
                session.add(Profile(id=user_id, username=username, role="moderator"))
                await session.commit()
        finally:
            await engine.dispose()

    asyncio.run(_insert())
    return user_id


def _seed_characters(client, moderator_headers) -> tuple[int, int]:
    series = client.get("/series/").json()
    x_series = next(s for s in series if s["name"] == "X")
    a = client.post("/characters/", json={"name": "X", "series_id": x_series["id"], "is_reploid": True},
                    headers=moderator_headers)
    b = client.post("/characters/", json={"name": "Zero", "series_id": x_series["id"], "is_reploid": True},
                    headers=moderator_headers)
    assert a.status_code == 201 and b.status_code == 201
    return a.json()["id"], b.json()["id"]


def test_health_and_root(client) -> None:
    assert client.get("/").json()["message"] == "LoreHub API"
    assert client.get("/health").status_code == 200


def test_writes_require_a_valid_token(client) -> None:
    response = client.post("/theories/", json={
        "title": "t", "description": "d", "branching_point": "b", "alternate_timeline": "a"})
    assert response.status_code == 401

    response = client.post("/theories/", json={
        "title": "t", "description": "d", "branching_point": "b", "alternate_timeline": "a"},
        headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_first_request_creates_profile(client) -> None:
    user_id = uuid.uuid4()

    response = client.get("/profiles/me", headers=_auth(user_id, username="axl"))

    assert response.status_code == 200
    assert response.json()["username"] == "axl"
    assert response.json()["role"] == "user"


def test_relationship_endpoints(client, db_path) -> None:
    mod_headers = _auth(_make_moderator(db_path))
    fan_headers = _auth(uuid.uuid4(), username="fan")
    a_id, b_id = _seed_characters(client, mod_headers)

    created = client.post(f"/characters/{a_id}/relationships",
                          json={"target_character_id": b_id, "relationship_type": "ally"}, headers=fan_headers)
    assert created.status_code == 201

    duplicate = client.post(f"/characters/{a_id}/relationships",
                            json={"target_character_id": b_id, "relationship_type": "ally"}, headers=fan_headers)
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "conflict"

    self_edge = client.post(f"/characters/{a_id}/relationships",
                            json={"target_character_id": a_id, "relationship_type": "ally"}, headers=fan_headers)
    assert self_edge.status_code == 422
    assert self_edge.json()["error"] == "validation_error"

    detail = client.get(f"/characters/{b_id}").json()
    assert [(r["other_character_id"], r["relationship_type"], r["direction"]) for r in detail["relationships"]] == [
        (a_id, "ally", "incoming")
    ]
    grouped = client.get(f"/characters/{a_id}/relationships/grouped").json()
    assert list(grouped) == ["ally"]

    edge_id = created.json()["id"]
    assert client.delete(f"/characters/relationships/{edge_id}", headers=fan_headers).status_code == 403
    assert client.delete(f"/characters/relationships/{edge_id}", headers=mod_headers).status_code == 204
    assert client.delete(f"/characters/relationships/{edge_id}", headers=mod_headers).status_code == 404


def test_theory_gate_and_votes(client, db_path) -> None:
    mod_headers = _auth(_make_moderator(db_path))
    creator_headers = _auth(uuid.uuid4(), username="theorist")
    voter_headers = _auth(uuid.uuid4(), username="voter")

    created = client.post("/theories/", json={
        "title": "What if Zero stayed sealed?",
        "description": "No Zero series.",
        "branching_point": "X5 ending",
        "alternate_timeline": "Neo Arcadia never forms.",
    }, headers=creator_headers)
    assert created.status_code == 201
    theory_id = created.json()["id"]

    assert client.get(f"/theories/{theory_id}", headers=creator_headers).status_code == 200
    hidden = client.get(f"/theories/{theory_id}", headers=voter_headers)
    assert hidden.status_code == 404
    assert hidden.json()["error"] == "not_found"
    assert client.get("/theories/").json() == []
    assert client.post(f"/theories/{theory_id}/vote", headers=voter_headers).status_code == 404

    assert client.post(f"/moderation/theories/{theory_id}/approve", headers=creator_headers).status_code == 403
    approved = client.post(f"/moderation/theories/{theory_id}/approve", headers=mod_headers)
    assert approved.json()["is_approved"] is True

    first = client.post(f"/theories/{theory_id}/vote", headers=voter_headers).json()
    assert first == {"upvoted": True, "upvotes": 1}
    detail = client.get(f"/theories/{theory_id}", headers=voter_headers).json()
    assert detail["has_voted"] is True
    assert client.get(f"/theories/{theory_id}").json()["has_voted"] is False
    second = client.post(f"/theories/{theory_id}/vote", headers=voter_headers).json()
    assert second == {"upvoted": False, "upvotes": 0}


def test_lore_flow_with_comments(client, db_path) -> None:
    mod_headers = _auth(_make_moderator(db_path))
    author_headers = _auth(uuid.uuid4(), username="archivist")
    a_id, _ = _seed_characters(client, mod_headers)

    bad = client.post("/lore/", json={"title": "t", "content": "c", "tags": ["Fanon"]}, headers=author_headers)
    assert bad.status_code == 422
    assert bad.json()["details"]["unknown"] == ["Fanon"]

    created = client.post("/lore/", json={
        "title": "Maverick Virus",
        "content": "Originates from Zero.",
        "tags": ["Canon"],
        "character_ids": [a_id],
    }, headers=author_headers)
    assert created.status_code == 201
    entry_id = created.json()["id"]

    comment = client.post(f"/lore/{entry_id}/comments", json={"content": "<b>Source?</b>"}, headers=author_headers)
    assert comment.status_code == 201
    assert comment.json()["content"] == "Source?"
    assert client.post(f"/lore/{entry_id}/comments", json={"content": "hi"}, headers=mod_headers).status_code == 404

    stranger_link = client.post(f"/lore/{entry_id}/characters", json={"character_id": a_id},
                                headers=_auth(uuid.uuid4(), username="stranger"))
    assert stranger_link.status_code == 404
    link = client.post(f"/lore/{entry_id}/characters", json={"character_id": a_id}, headers=author_headers).json()
    assert link["already_linked"] is True

    client.post(f"/moderation/lore/{entry_id}/approve", headers=mod_headers)
    detail = client.get(f"/lore/{entry_id}").json()
    assert detail["creator"]["username"] == "archivist"
    assert [c["id"] for c in detail["related_characters"]] == [a_id]
    assert [c["content"] for c in detail["comments"]] == ["Source?"]
    assert [e["title"] for e in client.get("/lore/", params={"tag": "Canon"}).json()] == ["Maverick Virus"]
    assert client.get("/lore/tags").json() == ["Canon", "Disputed", "Theory", "Game Only", "Manga Only"]


def test_timeline_permissions(client) -> None:
    owner_headers = _auth(uuid.uuid4(), username="owner")
    other_headers = _auth(uuid.uuid4(), username="other")

    timeline = client.post("/timelines/", json={"title": "My Elf Wars"}, headers=owner_headers).json()
    event = {"title": "Sigma revolts", "year": "21XX"}

    assert client.post(f"/timelines/{timeline['id']}/events", json=event, headers=other_headers).status_code == 403
    assert client.post(f"/timelines/{timeline['id']}/events", json=event, headers=owner_headers).status_code == 201
    years = client.get(f"/timelines/{timeline['id']}/years").json()
    assert [g["year"] for g in years] == ["21XX"]
