"""Integration tests for the membership edge store."""

import uuid

import pytest

from teamhub.errors import DuplicateMembership, DuplicateTeam, ValidationError
from teamhub.kernel.membership.edge_store import EdgeStore
from teamhub.kernel.models.membership import EdgeKind, EdgePair


class TestPairedWrites:
    """Tests for add_membership / remove_membership."""

    async def test_add_membership_writes_both_directions(self, session_factory):
        project_id, user_id = uuid.uuid4(), uuid.uuid4()
        async with session_factory() as session:
            edges = EdgeStore(session)
            await edges.add_membership(EdgePair.PROJECT_USER, project_id, user_id, "leader")
            await session.commit()

        async with session_factory() as session:
            edges = EdgeStore(session)
            assert await edges.get_role(EdgeKind.PROJECT_MEMBER, project_id, user_id) == "leader"
            assert await edges.get_role(EdgeKind.USER_PROJECT, user_id, project_id) == "leader"

    async def test_add_is_strict(self, session_factory):
        project_id, user_id = uuid.uuid4(), uuid.uuid4()
        async with session_factory() as session:
            edges = EdgeStore(session)
            await edges.add_membership(EdgePair.PROJECT_USER, project_id, user_id)
            with pytest.raises(DuplicateMembership):
                await edges.add_membership(EdgePair.PROJECT_USER, project_id, user_id, "admin")
            # The existing role is untouched
            assert await edges.get_role(EdgeKind.PROJECT_MEMBER, project_id, user_id) == "member"

    async def test_duplicate_team_link(self, session_factory):
        project_id, team_id = uuid.uuid4(), uuid.uuid4()
        async with session_factory() as session:
            edges = EdgeStore(session)
            await edges.add_membership(EdgePair.PROJECT_TEAM, project_id, team_id)
            with pytest.raises(DuplicateTeam):
                await edges.add_membership(EdgePair.PROJECT_TEAM, project_id, team_id)

    async def test_team_links_carry_no_role(self, session_factory):
        project_id, team_id = uuid.uuid4(), uuid.uuid4()
        async with session_factory() as session:
            edge = await EdgeStore(session).add_membership(EdgePair.PROJECT_TEAM, project_id, team_id, "admin")
            assert edge.role is None

    async def test_invalid_role_is_rejected(self, session_factory):
        async with session_factory() as session:
            with pytest.raises(ValidationError):
                await EdgeStore(session).add_membership(EdgePair.ORG_USER, uuid.uuid4(), uuid.uuid4(), "root")

    async def test_remove_missing_is_noop(self, session_factory):
        async with session_factory() as session:
            removed = await EdgeStore(session).remove_membership(EdgePair.PROJECT_USER, uuid.uuid4(), uuid.uuid4())
            assert removed is False

    async def test_remove_membership_removes_both_directions(self, session_factory):
        team_id, user_id = uuid.uuid4(), uuid.uuid4()
        async with session_factory() as session:
            edges = EdgeStore(session)
            await edges.add_membership(EdgePair.TEAM_USER, team_id, user_id)
            assert await edges.remove_membership(EdgePair.TEAM_USER, team_id, user_id) is True
            assert not await edges.has_edge(EdgeKind.TEAM_MEMBER, team_id, user_id)
            assert not await edges.has_edge(EdgeKind.USER_TEAM, user_id, team_id)

    async def test_set_role_updates_both_directions(self, session_factory):
        org_id, user_id = uuid.uuid4(), uuid.uuid4()
        async with session_factory() as session:
            edges = EdgeStore(session)
            await edges.add_membership(EdgePair.ORG_USER, org_id, user_id)
            await edges.set_role(EdgePair.ORG_USER, org_id, user_id, "moderator")
            await session.commit()

        async with session_factory() as session:
            edges = EdgeStore(session)
            assert await edges.get_role(EdgeKind.ORG_MEMBER, org_id, user_id) == "moderator"
            assert await edges.get_role(EdgeKind.USER_ORG, user_id, org_id) == "moderator"

    async def test_set_role_on_team_link_is_rejected(self, session_factory):
        async with session_factory() as session:
            with pytest.raises(ValidationError):
                await EdgeStore(session).set_role(EdgePair.PROJECT_TEAM, uuid.uuid4(), uuid.uuid4(), "admin")


class TestOrderingAndBulkRemoval:
    """Tests for sequence order and peer/owner removal."""

    async def test_peers_keep_insertion_order(self, session_factory):
        team_id = uuid.uuid4()
        users = [uuid.uuid4() for _ in range(4)]
        async with session_factory() as session:
            edges = EdgeStore(session)
            for user_id in users:
                await edges.add_edge(EdgeKind.TEAM_MEMBER, team_id, user_id)
            assert await edges.peers(EdgeKind.TEAM_MEMBER, team_id) == users

    async def test_remove_peer_from_every_owner(self, session_factory):
        project_id = uuid.uuid4()
        holders = [uuid.uuid4() for _ in range(3)]
        async with session_factory() as session:
            edges = EdgeStore(session)
            for user_id in holders:
                await edges.add_edge(EdgeKind.USER_PROJECT, user_id, project_id)
            assert sorted(await edges.owners(EdgeKind.USER_PROJECT, project_id)) == sorted(holders)

            assert await edges.remove_peer(EdgeKind.USER_PROJECT, project_id) == 3
            assert await edges.owners(EdgeKind.USER_PROJECT, project_id) == []

    async def test_remove_peer_limited_to_owners(self, session_factory):
        project_id = uuid.uuid4()
        keep, drop = uuid.uuid4(), uuid.uuid4()
        async with session_factory() as session:
            edges = EdgeStore(session)
            await edges.add_edge(EdgeKind.USER_PROJECT, keep, project_id)
            await edges.add_edge(EdgeKind.USER_PROJECT, drop, project_id)

            assert await edges.remove_peer(EdgeKind.USER_PROJECT, project_id, owner_ids=[drop]) == 1
            assert await edges.remove_peer(EdgeKind.USER_PROJECT, project_id, owner_ids=[]) == 0
            assert await edges.owners(EdgeKind.USER_PROJECT, project_id) == [keep]

    async def test_remove_owner(self, session_factory):
        project_id = uuid.uuid4()
        async with session_factory() as session:
            edges = EdgeStore(session)
            await edges.add_edge(EdgeKind.PROJECT_MEMBER, project_id, uuid.uuid4())
            await edges.add_edge(EdgeKind.PROJECT_MEMBER, project_id, uuid.uuid4())
            assert await edges.remove_owner(EdgeKind.PROJECT_MEMBER, project_id) == 2
            assert await edges.peers(EdgeKind.PROJECT_MEMBER, project_id) == []

    async def test_kind_reads_back_as_stored_value(self, session_factory):
        project_id, user_id = uuid.uuid4(), uuid.uuid4()
        async with session_factory() as session:
            await EdgeStore(session).add_membership(EdgePair.PROJECT_USER, project_id, user_id)
            await session.commit()

        async with session_factory() as session:
            edge = await EdgeStore(session).get_edge(EdgeKind.USER_PROJECT, user_id, project_id)
            assert edge is not None
            assert edge.kind == "user.project"
            assert edge.kind == EdgeKind.USER_PROJECT.value
