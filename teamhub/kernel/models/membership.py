"""
Membership edge model.

Every membership set and reference list in the system is stored as a row
in ``membership_edges``. A bidirectional relationship (a user in a project)
is two rows of two different kinds, one owned by each side. Edges carry ids
and a role only, never object references.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, UniqueConstraint, func, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from teamhub.kernel.models.base import Base, UUIDPrimaryKeyMixin


class Role(str, Enum):
    """Roles within an organization, team or project, highest first."""
    ADMIN = "admin"
    MODERATOR = "moderator"
    LEADER = "leader"
    MEMBER = "member"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]


_ROLE_RANK = {
    Role.ADMIN: 4,
    Role.MODERATOR: 3,
    Role.LEADER: 2,
    Role.MEMBER: 1,
}


def roles_at_least(minimum: Role) -> frozenset[Role]:
    """All roles ranked at or above ``minimum``."""
    return frozenset(r for r in Role if r.rank >= minimum.rank)


class EdgeKind(str, Enum):
    """Direction-specific edge kinds, named owner.peer."""
    ORG_MEMBER = "org.member"
    USER_ORG = "user.org"
    TEAM_MEMBER = "team.member"
    USER_TEAM = "user.team"
    PROJECT_MEMBER = "project.member"
    USER_PROJECT = "user.project"
    PROJECT_TEAM = "project.team"
    TEAM_PROJECT = "team.project"
    ORG_TEAM = "org.team"
    ORG_PROJECT = "org.project"

    @property
    def carries_role(self) -> bool:
        return self in ROLE_KINDS


ROLE_KINDS = frozenset({
    EdgeKind.ORG_MEMBER,
    EdgeKind.USER_ORG,
    EdgeKind.TEAM_MEMBER,
    EdgeKind.USER_TEAM,
    EdgeKind.PROJECT_MEMBER,
    EdgeKind.USER_PROJECT,
})


class EdgePair(Enum):
    """
    Bidirectional relationships as (forward kind, reverse kind).

    The forward kind is owned by the first entity named in the pair, e.g.
    PROJECT_USER = (project.member owned by the project, user.project owned
    by the user).
    """
    ORG_USER = (EdgeKind.ORG_MEMBER, EdgeKind.USER_ORG)
    TEAM_USER = (EdgeKind.TEAM_MEMBER, EdgeKind.USER_TEAM)
    PROJECT_USER = (EdgeKind.PROJECT_MEMBER, EdgeKind.USER_PROJECT)
    PROJECT_TEAM = (EdgeKind.PROJECT_TEAM, EdgeKind.TEAM_PROJECT)

    @property
    def forward(self) -> EdgeKind:
        return self.value[0]

    @property
    def reverse(self) -> EdgeKind:
        return self.value[1]


class MembershipEdge(Base, UUIDPrimaryKeyMixin):
    """One directed membership or reference entry."""

    __tablename__ = "membership_edges"

    # EdgeKind value
    kind: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
    )
    peer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
    )
    role: Mapped[Optional[str]] = mapped_column(
        String(32),
        nullable=True,
    )
    # Stored order within (kind, owner)
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("kind", "owner_id", "peer_id", name="uq_membership_edges_kind_owner_peer"),
        Index("ix_membership_edges_owner", "kind", "owner_id", "position"),
        Index("ix_membership_edges_peer", "kind", "peer_id"),
    )

    def __repr__(self) -> str:
        return f"<MembershipEdge {self.kind} {self.owner_id}->{self.peer_id} role={self.role}>"
