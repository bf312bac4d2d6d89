"""
Cascade engine.

Each public method is one structural mutation. It performs every write the
mutation implies across users, organizations, teams and projects through
the session it was given, and never commits. Authorization is not checked
here; callers run the role gate first.
"""

import uuid
from typing import List, Optional, Type, TypeVar

from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from teamhub.errors import (
    DuplicateMembership,
    DuplicateTeam,
    Forbidden,
    NotFound,
    NotFoundInOrg,
    ValidationError,
)
from teamhub.kernel.cascade.results import (
    CascadeResult,
    MemberEntry,
    OrganizationDetail,
    ProjectDetail,
    TeamDetail,
)
from teamhub.kernel.events.timeline_store import TimelineStore
from teamhub.kernel.membership.edge_store import EdgeStore, normalize_role
from teamhub.kernel.models.base import Base
from teamhub.kernel.models.membership import EdgeKind, EdgePair, MembershipEdge, Role
from teamhub.kernel.models.organization import Organization
from teamhub.kernel.models.project import Project
from teamhub.kernel.models.team import Team
from teamhub.kernel.models.timeline import TimelineEventType
from teamhub.kernel.models.user import User
from teamhub.logging_config import get_logger
from teamhub.notifications.messages import (
    Notification,
    org_added_notification,
    project_added_notification,
)

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


def _required_name(value: Optional[str], label: str) -> str:
    name = (value or "").strip()
    if not name:
        raise ValidationError(f"{label} is required")
    return name


class CascadeEngine:
    """
    Compute and apply the writes of one mutation.

    Usage:
        engine = CascadeEngine(session)
        org = await engine.load_org(org_id, lock=True)
        result = await engine.create_project(actor, org, "Alpha", "")
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.edges = EdgeStore(session)
        self.timeline = TimelineStore(session)

    # Loaders

    async def _load(
        self,
        model: Type[ModelT],
        conditions: list,
        lock: bool,
        message: str,
    ) -> ModelT:
        query = select(model).where(and_(*conditions))
        if lock:
            # Row lock for the rest of the transaction (not rendered on SQLite)
            query = query.with_for_update()
        result = await self.session.execute(query)
        instance = result.scalar_one_or_none()
        if instance is None:
            raise NotFound(message)
        return instance

    async def load_user(self, user_id: uuid.UUID) -> User:
        return await self._load(User, [User.id == user_id], False, "User not found")

    async def load_org(self, org_id: uuid.UUID, lock: bool = False) -> Organization:
        return await self._load(Organization, [Organization.id == org_id], lock, "Organization not found")

    async def load_project(self, org_id: uuid.UUID, project_id: uuid.UUID, lock: bool = False) -> Project:
        return await self._load(
            Project,
            [Project.id == project_id, Project.org_id == org_id],
            lock,
            "Project not found in this organization",
        )

    async def load_team(self, org_id: uuid.UUID, team_id: uuid.UUID, lock: bool = False) -> Team:
        return await self._load(
            Team,
            [Team.id == team_id, Team.org_id == org_id],
            lock,
            "Team not found in this organization",
        )

    # Snapshots

    async def _member_entries(self, kind: EdgeKind, owner_id: uuid.UUID) -> List[MemberEntry]:
        query = (
            select(MembershipEdge, User)
            .outerjoin(User, User.id == MembershipEdge.peer_id)
            .where(
                and_(
                    MembershipEdge.kind == kind.value,
                    MembershipEdge.owner_id == owner_id,
                )
            )
            .order_by(MembershipEdge.position, MembershipEdge.created_at)
        )
        result = await self.session.execute(query)
        return [
            MemberEntry(
                user_id=edge.peer_id,
                role=edge.role,
                user_name=user.user_name if user else None,
                email=user.email if user else None,
            )
            for edge, user in result.all()
        ]

    async def project_detail(self, project: Project) -> ProjectDetail:
        return ProjectDetail(
            id=project.id,
            project_name=project.project_name,
            description=project.description,
            org_id=project.org_id,
            created_by=project.created_by,
            members=await self._member_entries(EdgeKind.PROJECT_MEMBER, project.id),
            teams=await self.edges.peers(EdgeKind.PROJECT_TEAM, project.id),
        )

    async def team_detail(self, team: Team) -> TeamDetail:
        return TeamDetail(
            id=team.id,
            team_name=team.team_name,
            org_id=team.org_id,
            members=await self._member_entries(EdgeKind.TEAM_MEMBER, team.id),
            projects=await self.edges.peers(EdgeKind.TEAM_PROJECT, team.id),
        )

    async def organization_detail(self, org: Organization) -> OrganizationDetail:
        return OrganizationDetail(
            id=org.id,
            org_name=org.org_name,
            created_by=org.created_by,
            members=await self._member_entries(EdgeKind.ORG_MEMBER, org.id),
            teams=await self.edges.peers(EdgeKind.ORG_TEAM, org.id),
            projects=await self.edges.peers(EdgeKind.ORG_PROJECT, org.id),
        )

    # Organizations

    async def create_organization(self, actor: User, org_name: str) -> CascadeResult:
        name = _required_name(org_name, "Organization name")
        org = Organization(org_name=name, created_by=actor.id)
        self.session.add(org)
        await self.session.flush()

        await self.edges.add_membership(EdgePair.ORG_USER, org.id, actor.id, Role.ADMIN.value)
        await self.timeline.append(
            org_id=org.id,
            event_type=TimelineEventType.ORG_CREATED,
            text=f"<b>{actor.user_name}</b> created the organization - <i>{name}</i>.",
            actor_id=actor.id,
            subject_id=org.id,
        )
        return CascadeResult(
            message="Organization created successfully",
            payload=await self.organization_detail(org),
            status_code=201,
        )

    async def add_member_to_org(
        self,
        actor: User,
        org: Organization,
        member_id: uuid.UUID,
        as_role_of: Optional[str] = None,
    ) -> CascadeResult:
        member = await self.load_user(member_id)
        role = normalize_role(as_role_of)
        await self.edges.add_membership(EdgePair.ORG_USER, org.id, member.id, role)
        await self.timeline.append(
            org_id=org.id,
            event_type=TimelineEventType.ORG_MEMBER_ADDED,
            text=f"<b>{actor.user_name}</b> added <b>{member.user_name}</b> as {role}.",
            actor_id=actor.id,
            subject_id=member.id,
            payload={"role": role},
        )
        return CascadeResult(
            message="Member successfully added to organization",
            payload=await self.organization_detail(org),
            notifications=[
                org_added_notification(
                    recipient=member.email,
                    user_id=member.id,
                    user_name=member.user_name,
                    org_name=org.org_name,
                    added_by=actor.user_name,
                )
            ],
        )

    # Teams

    async def create_team(self, actor: User, org: Organization, team_name: str) -> CascadeResult:
        name = _required_name(team_name, "Team name")
        team = Team(team_name=name, org_id=org.id, created_by=actor.id)
        self.session.add(team)
        await self.session.flush()

        await self.edges.add_edge(EdgeKind.ORG_TEAM, org.id, team.id)
        await self.edges.add_membership(EdgePair.TEAM_USER, team.id, actor.id, Role.LEADER.value)
        await self.timeline.append(
            org_id=org.id,
            event_type=TimelineEventType.TEAM_CREATED,
            text=f"<b>{actor.user_name}</b> created a team - <i>{name}</i>.",
            actor_id=actor.id,
            subject_id=team.id,
        )
        return CascadeResult(
            message="Team created successfully",
            payload=await self.team_detail(team),
            status_code=201,
        )

    async def add_member_to_team(
        self,
        actor: User,
        org: Organization,
        team: Team,
        member_id: uuid.UUID,
        as_role_of: Optional[str] = None,
    ) -> CascadeResult:
        """
        Add an organization member to a team.

        Projects the team was already added to are not updated; team
        membership propagates into a project only when the team is added
        or explicitly re-synced.
        """
        if not await self.edges.has_edge(EdgeKind.ORG_MEMBER, org.id, member_id):
            raise NotFoundInOrg()
        member = await self.load_user(member_id)
        role = normalize_role(as_role_of)
        await self.edges.add_membership(EdgePair.TEAM_USER, team.id, member.id, role)
        await self.timeline.append(
            org_id=org.id,
            event_type=TimelineEventType.TEAM_MEMBER_ADDED,
            text=f"<b>{actor.user_name}</b> added <b>{member.user_name}</b> to the team - <i>{team.team_name}</i>.",
            actor_id=actor.id,
            subject_id=team.id,
            payload={"member_id": member.id, "role": role},
        )
        return CascadeResult(
            message="Member successfully added to team",
            payload=await self.team_detail(team),
        )

    # Projects

    async def create_project(
        self,
        actor: User,
        org: Organization,
        project_name: Optional[str],
        description: Optional[str] = None,
    ) -> CascadeResult:
        """
        Create a project owned by ``actor``.

        Writes the project, the creator's admin edge in both directions,
        the timeline entry and the organization's project list.
        """
        name = _required_name(project_name, "project Name")
        project = Project(
            project_name=name,
            description=description or "",
            org_id=org.id,
            created_by=actor.id,
        )
        self.session.add(project)
        await self.session.flush()

        await self.edges.add_membership(EdgePair.PROJECT_USER, project.id, actor.id, Role.ADMIN.value)
        await self.timeline.append(
            org_id=org.id,
            event_type=TimelineEventType.PROJECT_CREATED,
            text=f"<b>{actor.user_name}</b> created a project - <i>{name}</i>.",
            actor_id=actor.id,
            subject_id=project.id,
            payload={"project_name": name},
        )
        await self.edges.add_edge(EdgeKind.ORG_PROJECT, org.id, project.id)

        return CascadeResult(
            message="project created successfully",
            payload=await self.project_detail(project),
            status_code=201,
        )

    async def update_project(
        self,
        project: Project,
        project_name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> CascadeResult:
        """Set name/description when supplied and non-empty. No cascade."""
        if project_name and project_name.strip():
            project.project_name = project_name.strip()
        if description:
            project.description = description
        await self.session.flush()
        return CascadeResult(
            message="project details updated successfully",
            payload=await self.project_detail(project),
        )

    async def delete_project(self, actor: User, org: Organization, project: Project) -> CascadeResult:
        """
        Delete a project and every edge that references it.

        The deletion timeline entry is written even though its subject is
        about to disappear.
        """
        member_ids = await self.edges.peers(EdgeKind.PROJECT_MEMBER, project.id)
        team_ids = await self.edges.peers(EdgeKind.PROJECT_TEAM, project.id)

        await self.edges.remove_edge(EdgeKind.ORG_PROJECT, org.id, project.id)
        await self.timeline.append(
            org_id=org.id,
            event_type=TimelineEventType.PROJECT_DELETED,
            text=f"<b>{actor.user_name}</b> deleted the project - <i>{project.project_name}</i>",
            actor_id=actor.id,
            subject_id=project.id,
            payload={"project_name": project.project_name},
        )
        # Pull from every holder, not just the recorded members, so no
        # dangling inProject/projects entry can survive the project.
        await self.edges.remove_peer(EdgeKind.USER_PROJECT, project.id)
        await self.edges.remove_peer(EdgeKind.TEAM_PROJECT, project.id)
        await self.edges.remove_owner(EdgeKind.PROJECT_MEMBER, project.id)
        await self.edges.remove_owner(EdgeKind.PROJECT_TEAM, project.id)

        await self.session.delete(project)
        await self.session.flush()

        logger.info(
            "Project deleted",
            extra={
                "project_id": str(project.id),
                "members_detached": len(member_ids),
                "teams_detached": len(team_ids),
            },
        )
        return CascadeResult(message="Project deleted successfully")

    async def add_member_to_project(
        self,
        actor: User,
        org: Organization,
        project: Project,
        member_id: uuid.UUID,
        as_role_of: Optional[str] = None,
    ) -> CascadeResult:
        if not await self.edges.has_edge(EdgeKind.ORG_MEMBER, org.id, member_id):
            raise NotFoundInOrg()
        if await self.edges.has_edge(EdgeKind.PROJECT_MEMBER, project.id, member_id):
            raise DuplicateMembership()
        member = await self.load_user(member_id)
        role = normalize_role(as_role_of)

        # Project side first, then the member's inProject
        await self.edges.add_membership(EdgePair.PROJECT_USER, project.id, member.id, role)

        return CascadeResult(
            message="Member successfully added in to project",
            payload=await self.project_detail(project),
            notifications=[self._project_notification(member, project, org, actor)],
        )

    async def remove_member_from_project(self, project: Project, member_id: uuid.UUID) -> CascadeResult:
        """Remove a member. Removing a non-member succeeds without changes."""
        if member_id == project.created_by:
            raise Forbidden("Project owner cannot be removed from the project")
        removed = await self.edges.remove_membership(EdgePair.PROJECT_USER, project.id, member_id)
        message = "Member removed from project" if removed else "Member is not part of this project"
        return CascadeResult(message=message, payload=await self.project_detail(project))

    async def add_team_to_project(
        self,
        actor: User,
        org: Organization,
        project: Project,
        team_id: uuid.UUID,
        as_role_of: Optional[str] = None,
    ) -> CascadeResult:
        """
        Link a team and union its members into the project.

        Team members already in the project keep their existing role.
        """
        team = await self.load_team(org.id, team_id)
        if await self.edges.has_edge(EdgeKind.PROJECT_TEAM, project.id, team.id):
            raise DuplicateTeam()
        role = normalize_role(as_role_of)

        await self.edges.add_membership(EdgePair.PROJECT_TEAM, project.id, team.id)
        added = await self._merge_team_members(project, team, role)

        return CascadeResult(
            message=f"Team '{team.team_name}' and its members added to the project",
            payload=await self.project_detail(project),
            notifications=[self._project_notification(user, project, org, actor) for user in added],
        )

    async def sync_team_into_project(
        self,
        actor: User,
        org: Organization,
        project: Project,
        team_id: uuid.UUID,
        as_role_of: Optional[str] = None,
    ) -> CascadeResult:
        """Re-run the member union for a team that is already linked."""
        team = await self.load_team(org.id, team_id)
        if not await self.edges.has_edge(EdgeKind.PROJECT_TEAM, project.id, team.id):
            raise NotFound("Team is not part of this project")
        added = await self._merge_team_members(project, team, normalize_role(as_role_of))
        return CascadeResult(
            message=f"Team '{team.team_name}' synced into the project ({len(added)} new members)",
            payload=await self.project_detail(project),
            notifications=[self._project_notification(user, project, org, actor) for user in added],
        )

    async def remove_team_from_project(self, project: Project, team_id: uuid.UUID) -> CascadeResult:
        """Unlink a team. Members it brought in stay in the project."""
        removed = await self.edges.remove_membership(EdgePair.PROJECT_TEAM, project.id, team_id)
        message = "Team removed from project" if removed else "Team is not part of this project"
        return CascadeResult(message=message, payload=await self.project_detail(project))

    async def _merge_team_members(self, project: Project, team: Team, role: str) -> List[User]:
        """
        Add team members missing from the project, in team roster order.

        Returns the users that were added.
        """
        present = set(await self.edges.peers(EdgeKind.PROJECT_MEMBER, project.id))
        added: List[User] = []
        for user_id in await self.edges.peers(EdgeKind.TEAM_MEMBER, team.id):
            if user_id in present:
                continue
            user = await self.session.get(User, user_id)
            if user is None:
                # Weak reference to a user that no longer exists
                logger.warning("Skipping missing team member", extra={"team_id": str(team.id), "user_id": str(user_id)})
                continue
            await self.edges.add_membership(EdgePair.PROJECT_USER, project.id, user_id, role)
            present.add(user_id)
            added.append(user)
        return added

    @staticmethod
    def _project_notification(member: User, project: Project, org: Organization, actor: User) -> Notification:
        return project_added_notification(
            recipient=member.email,
            user_id=member.id,
            user_name=member.user_name,
            project_name=project.project_name,
            org_name=org.org_name,
            added_by=actor.user_name,
        )
