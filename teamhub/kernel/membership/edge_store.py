"""
Edge store: the only code that writes membership_edges.

Adds are strict (an existing edge is a DuplicateMembership/DuplicateTeam),
removes are filters (removing a missing edge is a silent no-op). Role
changes go through set_role; add and remove never touch a role.
"""

import uuid
from typing import Iterable, List, Optional

from sqlalchemy import select, delete, update, and_, func
from sqlalchemy.ext.asyncio import AsyncSession

from teamhub.errors import DuplicateMembership, DuplicateTeam, TeamHubError, ValidationError
from teamhub.kernel.models.membership import EdgeKind, EdgePair, MembershipEdge, Role


_DUPLICATE_MESSAGES = {
    EdgeKind.ORG_MEMBER: "Member is already part of this organization",
    EdgeKind.USER_ORG: "Member is already part of this organization",
    EdgeKind.TEAM_MEMBER: "Member is already part of this team",
    EdgeKind.USER_TEAM: "Member is already part of this team",
    EdgeKind.PROJECT_MEMBER: "Member is already part of this project",
    EdgeKind.USER_PROJECT: "Member is already part of this project",
    EdgeKind.ORG_TEAM: "Team is already part of this organization",
    EdgeKind.ORG_PROJECT: "Project is already part of this organization",
}


def duplicate_error(kind: EdgeKind) -> TeamHubError:
    """Error raised when adding an edge that already exists."""
    if kind in (EdgeKind.PROJECT_TEAM, EdgeKind.TEAM_PROJECT):
        return DuplicateTeam()
    return DuplicateMembership(_DUPLICATE_MESSAGES[kind])


def normalize_role(role: Optional[str]) -> str:
    """Validate a role string, defaulting to member."""
    if not role:
        return Role.MEMBER.value
    try:
        return Role(role).value
    except ValueError:
        raise ValidationError(f"Invalid role: {role}")


class EdgeStore:
    """
    Read and write membership edges through one session.

    Usage:
        edges = EdgeStore(session)
        await edges.add_membership(EdgePair.PROJECT_USER, project.id, user.id, "member")
        await edges.remove_peer(EdgeKind.TEAM_PROJECT, project.id)
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # Reads

    async def get_edge(
        self,
        kind: EdgeKind,
        owner_id: uuid.UUID,
        peer_id: uuid.UUID,
    ) -> Optional[MembershipEdge]:
        query = select(MembershipEdge).where(
            and_(
                MembershipEdge.kind == kind.value,
                MembershipEdge.owner_id == owner_id,
                MembershipEdge.peer_id == peer_id,
            )
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def has_edge(self, kind: EdgeKind, owner_id: uuid.UUID, peer_id: uuid.UUID) -> bool:
        return await self.get_edge(kind, owner_id, peer_id) is not None

    async def get_role(self, kind: EdgeKind, owner_id: uuid.UUID, peer_id: uuid.UUID) -> Optional[str]:
        edge = await self.get_edge(kind, owner_id, peer_id)
        return edge.role if edge else None

    async def edges(self, kind: EdgeKind, owner_id: uuid.UUID) -> List[MembershipEdge]:
        """All edges of a kind owned by ``owner_id``, in stored order."""
        query = select(MembershipEdge).where(
            and_(
                MembershipEdge.kind == kind.value,
                MembershipEdge.owner_id == owner_id,
            )
        ).order_by(MembershipEdge.position, MembershipEdge.created_at)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def peers(self, kind: EdgeKind, owner_id: uuid.UUID) -> List[uuid.UUID]:
        return [edge.peer_id for edge in await self.edges(kind, owner_id)]

    async def owners(self, kind: EdgeKind, peer_id: uuid.UUID) -> List[uuid.UUID]:
        """Owners holding an edge of ``kind`` to ``peer_id``."""
        query = select(MembershipEdge.owner_id).where(
            and_(
                MembershipEdge.kind == kind.value,
                MembershipEdge.peer_id == peer_id,
            )
        )
        result = await self.session.execute(query)
        return [row[0] for row in result.all()]

    async def _next_position(self, kind: EdgeKind, owner_id: uuid.UUID) -> int:
        query = select(func.max(MembershipEdge.position)).where(
            and_(
                MembershipEdge.kind == kind.value,
                MembershipEdge.owner_id == owner_id,
            )
        )
        result = await self.session.execute(query)
        current = result.scalar()
        return 0 if current is None else current + 1

    # Single-direction writes

    async def add_edge(
        self,
        kind: EdgeKind,
        owner_id: uuid.UUID,
        peer_id: uuid.UUID,
        role: Optional[str] = None,
    ) -> MembershipEdge:
        """
        Append an edge to the end of the owner's sequence.

        Raises:
            DuplicateMembership / DuplicateTeam: If the edge already exists
            ValidationError: If the role is invalid
        """
        if kind.carries_role:
            role = normalize_role(role)
        else:
            role = None

        if await self.has_edge(kind, owner_id, peer_id):
            raise duplicate_error(kind)

        edge = MembershipEdge(
            kind=kind.value,
            owner_id=owner_id,
            peer_id=peer_id,
            role=role,
            position=await self._next_position(kind, owner_id),
        )
        self.session.add(edge)
        # Session runs without autoflush; later reads in the cascade must see it
        await self.session.flush()
        return edge

    async def remove_edge(self, kind: EdgeKind, owner_id: uuid.UUID, peer_id: uuid.UUID) -> int:
        """Remove one edge if present. Returns the number of rows removed."""
        result = await self.session.execute(
            delete(MembershipEdge).where(
                and_(
                    MembershipEdge.kind == kind.value,
                    MembershipEdge.owner_id == owner_id,
                    MembershipEdge.peer_id == peer_id,
                )
            )
        )
        return result.rowcount or 0

    async def remove_peer(
        self,
        kind: EdgeKind,
        peer_id: uuid.UUID,
        owner_ids: Optional[Iterable[uuid.UUID]] = None,
    ) -> int:
        """Pull ``peer_id`` out of every owner's sequence (optionally only the given owners)."""
        conditions = [
            MembershipEdge.kind == kind.value,
            MembershipEdge.peer_id == peer_id,
        ]
        if owner_ids is not None:
            owner_ids = list(owner_ids)
            if not owner_ids:
                return 0
            conditions.append(MembershipEdge.owner_id.in_(owner_ids))

        result = await self.session.execute(delete(MembershipEdge).where(and_(*conditions)))
        return result.rowcount or 0

    async def remove_owner(self, kind: EdgeKind, owner_id: uuid.UUID) -> int:
        """Drop every edge of ``kind`` owned by ``owner_id``."""
        result = await self.session.execute(
            delete(MembershipEdge).where(
                and_(
                    MembershipEdge.kind == kind.value,
                    MembershipEdge.owner_id == owner_id,
                )
            )
        )
        return result.rowcount or 0

    # Paired writes

    async def add_membership(
        self,
        pair: EdgePair,
        a_id: uuid.UUID,
        b_id: uuid.UUID,
        role: Optional[str] = None,
    ) -> MembershipEdge:
        """Write both directions of a relationship. Returns the forward edge."""
        forward = await self.add_edge(pair.forward, a_id, b_id, role)
        await self.add_edge(pair.reverse, b_id, a_id, role)
        return forward

    async def remove_membership(self, pair: EdgePair, a_id: uuid.UUID, b_id: uuid.UUID) -> bool:
        """Remove both directions. Returns True if anything was removed."""
        removed = await self.remove_edge(pair.forward, a_id, b_id)
        removed += await self.remove_edge(pair.reverse, b_id, a_id)
        return removed > 0

    async def set_role(self, pair: EdgePair, a_id: uuid.UUID, b_id: uuid.UUID, role: str) -> None:
        """Change the role on both directions of an existing relationship."""
        if not pair.forward.carries_role:
            raise ValidationError("This relationship does not carry a role")
        role = normalize_role(role)
        for kind, owner_id, peer_id in (
            (pair.forward, a_id, b_id),
            (pair.reverse, b_id, a_id),
        ):
            await self.session.execute(
                update(MembershipEdge)
                .where(
                    and_(
                        MembershipEdge.kind == kind.value,
                        MembershipEdge.owner_id == owner_id,
                        MembershipEdge.peer_id == peer_id,
                    )
                )
                .values(role=role)
            )
