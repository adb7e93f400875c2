from __future__ import annotations

import pytest

from lorehub.core.errors import NotFoundError
from lorehub.services import association_service, moderation_service, query_service, relationship_service
from lorehub.services.engagement_service import CommentParent, add_comment, toggle_vote


def test_example_scenario(run_db, factory) -> None:
    async def scenario(db):
        x_series = await factory.series(db, "X", "#00AA88")
        a = await factory.character(db, "X", x_series, is_reploid=True)
        b = await factory.character(db, "Zero", x_series, is_reploid=True)
        creator = await factory.profile(db, "theorist")
        other = await factory.profile(db, "skeptic")
        moderator = await factory.profile(db, "mod", role="moderator")

        await relationship_service.add_edge(db, a.id, b.id, "ally")
        a_detail = await query_service.get_character_detail(db, a.id)
        b_detail = await query_service.get_character_detail(db, b.id)

        theory = await factory.theory(db, creator)
        creator_view = await query_service.get_theory_detail(db, theory.id, viewer_id=creator.id)
        with pytest.raises(NotFoundError):
            await query_service.get_theory_detail(db, theory.id, viewer_id=other.id)

        await moderation_service.approve_theory(db, theory.id, moderator.id)
        await query_service.get_theory_detail(db, theory.id, viewer_id=creator.id)
        await query_service.get_theory_detail(db, theory.id, viewer_id=other.id)

        first = await toggle_vote(db, other.id, theory.id)
        after_vote = await query_service.get_theory_detail(db, theory.id, viewer_id=other.id)
        second = await toggle_vote(db, other.id, theory.id)
        return a, b, a_detail, b_detail, creator_view, first, after_vote, second

    a, b, a_detail, b_detail, creator_view, first, after_vote, second = run_db(scenario)

    [a_edge] = a_detail.relationships
    assert (a_edge.other_character_id, a_edge.relationship_type, a_edge.direction) == (b.id, "ally", "outgoing")
    assert a_edge.other_character.name == "Zero"
    [b_edge] = b_detail.relationships
    assert (b_edge.other_character_id, b_edge.relationship_type, b_edge.direction) == (a.id, "ally", "incoming")

    assert creator_view.theory.is_approved is False
    assert (first.upvoted, first.upvotes) == (True, 1)
    assert after_vote.has_voted is True
    assert after_vote.theory.upvotes == 1
    assert (second.upvoted, second.upvotes) == (False, 0)


def test_character_detail_lists_only_approved_lore(run_db, factory) -> None:
    async def scenario(db):
        author = await factory.profile(db)
        classic = await factory.series(db)
        rock = await factory.character(db, "Mega Man", classic, is_robot_master=True)
        approved = await factory.lore_entry(db, author, title="DLN-001", approved=True)
        pending = await factory.lore_entry(db, author, title="Unverified rumor")
        await association_service.associate(db, rock.id, approved.id)
        await association_service.associate(db, rock.id, pending.id)
        return await query_service.get_character_detail(db, rock.id)

    detail = run_db(scenario)

    assert detail.character.name == "Mega Man"
    assert detail.character.series.name == "Classic"
    assert [e.title for e in detail.lore_entries] == ["DLN-001"]
    assert detail.relationships == []


def test_character_detail_unknown_id(run_db) -> None:
    async def scenario(db):
        with pytest.raises(NotFoundError):
            await query_service.get_character_detail(db, 1)

    run_db(scenario)


def test_lore_entry_detail_gate(run_db, factory) -> None:
    async def scenario(db):
        author = await factory.profile(db, "archivist")
        stranger = await factory.profile(db)
        moderator = await factory.profile(db, role="admin")
        classic = await factory.series(db)
        light = await factory.character(db, "Dr. Light", classic)
        entry = await factory.lore_entry(db, author, tags=["Canon"])
        await association_service.associate(db, light.id, entry.id)
        await add_comment(db, "Needs a source", author.id, CommentParent(lore_entry_id=entry.id))

        own = await query_service.get_lore_entry_detail(db, entry.id, viewer_id=author.id)
        for viewer_id in (None, stranger.id):
            with pytest.raises(NotFoundError):
                await query_service.get_lore_entry_detail(db, entry.id, viewer_id=viewer_id)

        await moderation_service.approve_lore_entry(db, entry.id, moderator.id)
        public = await query_service.get_lore_entry_detail(db, entry.id)
        return own, public

    own, public = run_db(scenario)

    assert own.entry.is_approved is False
    assert own.creator.username == "archivist"
    assert [c.name for c in own.related_characters] == ["Dr. Light"]
    assert [c.content for c in own.comments] == ["Needs a source"]
    assert public.entry.is_approved is True
    assert public.entry.tags == ["Canon"]


def test_approval_is_one_way_and_repeatable(run_db, factory) -> None:
    async def scenario(db):
        author = await factory.profile(db)
        moderator = await factory.profile(db, role="moderator")
        theory = await factory.theory(db, author)
        first = await moderation_service.approve_theory(db, theory.id, moderator.id)
        again = await moderation_service.approve_theory(db, theory.id, moderator.id)
        with pytest.raises(NotFoundError):
            await moderation_service.approve_lore_entry(db, 77, moderator.id)
        return first.is_approved, again.is_approved

    assert run_db(scenario) == (True, True)
