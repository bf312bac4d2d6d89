"""
Role authorization gate.

Each operation declares the scope its role is resolved in and an explicit
allow-set of roles. The check is set membership, not a hierarchy
comparison; roles_at_least() is only a convenience for building sets.
Checks read pre-mutation state and must run before any cascade write.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from teamhub.errors import Forbidden, NotAMember
from teamhub.kernel.membership.edge_store import EdgeStore
from teamhub.kernel.models.membership import EdgeKind, Role, roles_at_least
from teamhub.kernel.models.project import Project


class Scope(str, Enum):
    """Context an actor's role is resolved in."""
    ORG = "org"
    PROJECT = "project"


class Operation(str, Enum):
    """Mutations guarded by the gate."""
    CREATE_PROJECT = "project.create"
    UPDATE_PROJECT = "project.update"
    DELETE_PROJECT = "project.delete"
    ADD_PROJECT_MEMBER = "project.add_member"
    REMOVE_PROJECT_MEMBER = "project.remove_member"
    ADD_PROJECT_TEAM = "project.add_team"
    REMOVE_PROJECT_TEAM = "project.remove_team"
    ADD_ORG_MEMBER = "org.add_member"
    CREATE_TEAM = "team.create"
    ADD_TEAM_MEMBER = "team.add_member"


@dataclass(frozen=True)
class OperationPolicy:
    scope: Scope
    allowed_roles: FrozenSet[Role]
    # Actor must also be the project's creator
    owner_only: bool = False


_MANAGERS = roles_at_least(Role.LEADER)  # admin, moderator, leader

OPERATION_POLICIES: Dict[Operation, OperationPolicy] = {
    Operation.CREATE_PROJECT: OperationPolicy(Scope.ORG, _MANAGERS),
    Operation.UPDATE_PROJECT: OperationPolicy(Scope.PROJECT, _MANAGERS),
    Operation.DELETE_PROJECT: OperationPolicy(Scope.PROJECT, frozenset({Role.ADMIN}), owner_only=True),
    Operation.ADD_PROJECT_MEMBER: OperationPolicy(Scope.PROJECT, _MANAGERS),
    Operation.REMOVE_PROJECT_MEMBER: OperationPolicy(Scope.PROJECT, _MANAGERS),
    Operation.ADD_PROJECT_TEAM: OperationPolicy(Scope.PROJECT, _MANAGERS),
    Operation.REMOVE_PROJECT_TEAM: OperationPolicy(Scope.PROJECT, _MANAGERS),
    Operation.ADD_ORG_MEMBER: OperationPolicy(Scope.ORG, roles_at_least(Role.MODERATOR)),
    Operation.CREATE_TEAM: OperationPolicy(Scope.ORG, roles_at_least(Role.MODERATOR)),
    Operation.ADD_TEAM_MEMBER: OperationPolicy(Scope.ORG, _MANAGERS),
}


def is_allowed(operation: Operation, role: Optional[str]) -> bool:
    """True if ``role`` is in the operation's allow-set."""
    if role is None:
        return False
    try:
        return Role(role) in OPERATION_POLICIES[operation].allowed_roles
    except ValueError:
        return False


def authorize(operation: Operation, role: Optional[str]) -> None:
    """
    Raise Forbidden unless ``role`` may perform ``operation``.

    Args:
        operation: The guarded operation
        role: Actor's role in the operation's scope
    """
    if not is_allowed(operation, role):
        allowed = ", ".join(sorted(r.value for r in OPERATION_POLICIES[operation].allowed_roles))
        raise Forbidden(f"Insufficient role. Required one of: {allowed}")


def require_owner(project: Project, actor_id: uuid.UUID) -> None:
    """Strict identity check against the project's creator."""
    if project.created_by != actor_id:
        raise Forbidden("Only project owner can delete the project.")


class RoleResolver:
    """Resolve an actor's role in an organization or project from the edge table."""

    def __init__(self, session: AsyncSession):
        self.edges = EdgeStore(session)

    async def org_role(self, actor_id: uuid.UUID, org_id: uuid.UUID) -> str:
        role = await self.edges.get_role(EdgeKind.ORG_MEMBER, org_id, actor_id)
        if role is None:
            raise NotAMember("You are not a member of this organization")
        return role

    async def project_role(self, actor_id: uuid.UUID, project_id: uuid.UUID) -> str:
        role = await self.edges.get_role(EdgeKind.PROJECT_MEMBER, project_id, actor_id)
        if role is None:
            raise NotAMember("You are not a member of this project")
        return role

    async def check(
        self,
        operation: Operation,
        actor_id: uuid.UUID,
        org_id: uuid.UUID,
        project: Optional[Project] = None,
    ) -> str:
        """
        Resolve the actor's role in the operation's scope and authorize it.

        Organization membership is always required; project-scoped
        operations additionally require a project role. Owner-only
        operations check identity before role.

        Returns:
            The actor's role in the operation's scope
        """
        policy = OPERATION_POLICIES[operation]
        org_role = await self.org_role(actor_id, org_id)

        if policy.scope == Scope.ORG:
            authorize(operation, org_role)
            return org_role

        if project is None:
            raise ValueError(f"{operation.value} requires a project")
        if policy.owner_only:
            require_owner(project, actor_id)
        project_role = await self.project_role(actor_id, project.id)
        authorize(operation, project_role)
        return project_role
