from __future__ import annotations

import pytest
from sqlalchemy import func, select

from lorehub.core.errors import ConflictError, NotFoundError, ValidationError
from lorehub.models import Relationship
from lorehub.services import relationship_service


async def _edge_count(db) -> int:
    return (await db.execute(select(func.count(Relationship.id)))).scalar()


async def _collect(db, character_id):
    return [edge async for edge in relationship_service.edges_for_character(db, character_id)]


def test_edge_is_reported_from_both_ends(run_db, factory) -> None:
    async def scenario(db):
        classic = await factory.series(db)
        rock = await factory.character(db, "Mega Man", classic)
        roll = await factory.character(db, "Roll", classic)

        edge = await relationship_service.add_edge(db, rock.id, roll.id, "ally")
        return edge, rock, roll, await _collect(db, rock.id), await _collect(db, roll.id)

    edge, rock, roll, from_rock, from_roll = run_db(scenario)

    assert [(e.edge_id, e.other_character_id, e.relationship_type, e.direction) for e in from_rock] == [
        (edge.id, roll.id, "ally", "outgoing")
    ]
    assert [(e.edge_id, e.other_character_id, e.relationship_type, e.direction) for e in from_roll] == [
        (edge.id, rock.id, "ally", "incoming")
    ]
    assert from_rock[0].other_character.name == "Roll"
    assert from_rock[0].other_character.series.name == "Classic"


def test_every_touching_edge_has_exactly_one_direction(run_db, factory) -> None:
    async def scenario(db):
        classic = await factory.series(db)
        wily = await factory.character(db, "Dr. Wily", classic)
        others = [await factory.character(db, name, classic) for name in ("Bass", "Treble", "Dr. Light")]

        await relationship_service.add_edge(db, wily.id, others[0].id, "creator")
        await relationship_service.add_edge(db, others[1].id, wily.id, "serves")
        await relationship_service.add_edge(db, wily.id, others[2].id, "rival")
        return wily, await _collect(db, wily.id)

    wily, edges = run_db(scenario)

    assert [e.direction for e in edges] == ["outgoing", "incoming", "outgoing"]
    assert [e.edge_id for e in edges] == sorted(e.edge_id for e in edges)
    assert all(e.other_character_id != wily.id for e in edges)


def test_self_edge_is_rejected_without_writing(run_db, factory) -> None:
    async def scenario(db):
        classic = await factory.series(db)
        rock = await factory.character(db, "Mega Man", classic)
        with pytest.raises(ValidationError):
            await relationship_service.add_edge(db, rock.id, rock.id, "ally")
        return await _edge_count(db)

    assert run_db(scenario) == 0


def test_blank_type_and_unknown_character_are_rejected(run_db, factory) -> None:
    async def scenario(db):
        classic = await factory.series(db)
        rock = await factory.character(db, "Mega Man", classic)
        roll = await factory.character(db, "Roll", classic)

        with pytest.raises(ValidationError):
            await relationship_service.add_edge(db, rock.id, roll.id, "   ")
        with pytest.raises(ValidationError) as exc_info:
            await relationship_service.add_edge(db, rock.id, 9999, "ally")
        return exc_info.value, await _edge_count(db)

    error, count = run_db(scenario)
    assert error.details == {"missing_character_ids": [9999]}
    assert count == 0


def test_duplicate_and_reciprocal_edges(run_db, factory) -> None:
    async def scenario(db):
        x_series = await factory.series(db, "X", "#00AA88")
        x = await factory.character(db, "X", x_series)
        zero = await factory.character(db, "Zero", x_series)

        await relationship_service.add_edge(db, x.id, zero.id, "ally")
        with pytest.raises(ConflictError):
            await relationship_service.add_edge(db, x.id, zero.id, "Ally")
        with pytest.raises(ConflictError):
            await relationship_service.add_edge(db, zero.id, x.id, "ally")

        reverse = await relationship_service.add_edge(
            db, zero.id, x.id, "ally", description="From Zero's side", allow_reciprocal=True
        )
        # A different type between the same pair is a different fact
        await relationship_service.add_edge(db, zero.id, x.id, "rival")
        return reverse, await _collect(db, x.id)

    reverse, edges = run_db(scenario)

    assert reverse.description == "From Zero's side"
    assert [(e.relationship_type, e.direction) for e in edges] == [
        ("ally", "outgoing"),
        ("ally", "incoming"),
        ("rival", "incoming"),
    ]


def test_remove_edge_twice_fails_the_second_time(run_db, factory) -> None:
    async def scenario(db):
        classic = await factory.series(db)
        rock = await factory.character(db, "Mega Man", classic)
        proto = await factory.character(db, "Proto Man", classic)
        edge = await relationship_service.add_edge(db, rock.id, proto.id, "brother")

        await relationship_service.remove_edge(db, edge.id)
        with pytest.raises(NotFoundError):
            await relationship_service.remove_edge(db, edge.id)
        return await _collect(db, rock.id)

    assert run_db(scenario) == []


def test_group_edges_by_type_keeps_first_seen_order() -> None:
    edges = [
        relationship_service.EdgeView(1, 2, None, "rival", None, "outgoing"),
        relationship_service.EdgeView(2, 3, None, "ally", None, "incoming"),
        relationship_service.EdgeView(3, 4, None, "rival", None, "incoming"),
    ]

    groups = relationship_service.group_edges_by_type(edges)

    assert list(groups) == ["rival", "ally"]
    assert [e.edge_id for e in groups["rival"]] == [1, 3]
