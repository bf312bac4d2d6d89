"""
Workspace service.

Every mutation follows the same protocol inside one transaction:
load and lock the documents it touches, resolve the actor's role and run
the role gate against that pre-mutation state, then hand off to the
cascade engine. Reads go through the coordinator without committing.
"""

import uuid
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from teamhub.config import get_settings
from teamhub.database import async_session_maker
from teamhub.kernel.cascade.coordinator import TransactionCoordinator
from teamhub.kernel.cascade.engine import CascadeEngine
from teamhub.kernel.cascade.results import CascadeResult, OrganizationDetail, ProjectDetail
from teamhub.kernel.events.timeline_store import TimelineStore
from teamhub.kernel.identity.identity_service import IdentityService
from teamhub.kernel.models.timeline import TimelineEvent
from teamhub.kernel.models.user import User
from teamhub.kernel.permissions.role_gate import Operation, RoleResolver
from teamhub.notifications.dispatcher import get_dispatcher


def build_coordinator() -> TransactionCoordinator:
    """Coordinator wired to the application database and dispatcher."""
    settings = get_settings()
    return TransactionCoordinator(
        async_session_maker,
        dispatcher=get_dispatcher(),
        max_attempts=settings.cascade_max_attempts,
        timeout_seconds=settings.cascade_timeout_seconds,
        retry_backoff_seconds=settings.cascade_retry_backoff_seconds,
    )


class WorkspaceService:
    """
    Membership operations for organizations, teams and projects.

    Usage:
        service = WorkspaceService(coordinator)
        result = await service.create_project(actor_id, org_id, "Alpha")
    """

    def __init__(self, coordinator: TransactionCoordinator):
        self.coordinator = coordinator

    # Users

    async def register_user(self, user_name: str, email: str) -> CascadeResult:
        async def work(session: AsyncSession) -> CascadeResult:
            user = await IdentityService(session).register_user(user_name=user_name, email=email)
            return CascadeResult(message="User registered successfully", payload=user, status_code=201)

        return await self.coordinator.execute("user.register", work)

    async def get_user(self, user_id: uuid.UUID) -> Optional[User]:
        async def work(session: AsyncSession) -> Optional[User]:
            return await IdentityService(session).get_user_by_id(user_id)

        return await self.coordinator.read(work)

    # Organizations

    async def create_organization(self, actor_id: uuid.UUID, org_name: str) -> CascadeResult:
        async def work(session: AsyncSession) -> CascadeResult:
            engine = CascadeEngine(session)
            actor = await engine.load_user(actor_id)
            return await engine.create_organization(actor, org_name)

        return await self.coordinator.execute("org.create", work)

    async def add_member_to_org(
        self,
        actor_id: uuid.UUID,
        org_id: uuid.UUID,
        member_id: uuid.UUID,
        as_role_of: Optional[str] = None,
    ) -> CascadeResult:
        async def work(session: AsyncSession) -> CascadeResult:
            engine = CascadeEngine(session)
            org = await engine.load_org(org_id, lock=True)
            await RoleResolver(session).check(Operation.ADD_ORG_MEMBER, actor_id, org.id)
            actor = await engine.load_user(actor_id)
            return await engine.add_member_to_org(actor, org, member_id, as_role_of)

        return await self.coordinator.execute("org.add_member", work)

    async def get_organization(self, actor_id: uuid.UUID, org_id: uuid.UUID) -> OrganizationDetail:
        async def work(session: AsyncSession) -> OrganizationDetail:
            engine = CascadeEngine(session)
            org = await engine.load_org(org_id)
            await RoleResolver(session).org_role(actor_id, org.id)
            return await engine.organization_detail(org)

        return await self.coordinator.read(work)

    async def get_timeline(
        self,
        actor_id: uuid.UUID,
        org_id: uuid.UUID,
        limit: int = 100,
        offset: int = 0,
    ) -> List[TimelineEvent]:
        async def work(session: AsyncSession) -> List[TimelineEvent]:
            org = await CascadeEngine(session).load_org(org_id)
            await RoleResolver(session).org_role(actor_id, org.id)
            return await TimelineStore(session).history(org.id, limit=limit, offset=offset)

        return await self.coordinator.read(work)

    # Teams

    async def create_team(self, actor_id: uuid.UUID, org_id: uuid.UUID, team_name: str) -> CascadeResult:
        async def work(session: AsyncSession) -> CascadeResult:
            engine = CascadeEngine(session)
            org = await engine.load_org(org_id, lock=True)
            await RoleResolver(session).check(Operation.CREATE_TEAM, actor_id, org.id)
            actor = await engine.load_user(actor_id)
            return await engine.create_team(actor, org, team_name)

        return await self.coordinator.execute("team.create", work)

    async def add_member_to_team(
        self,
        actor_id: uuid.UUID,
        org_id: uuid.UUID,
        team_id: uuid.UUID,
        member_id: uuid.UUID,
        as_role_of: Optional[str] = None,
    ) -> CascadeResult:
        async def work(session: AsyncSession) -> CascadeResult:
            engine = CascadeEngine(session)
            org = await engine.load_org(org_id, lock=True)
            team = await engine.load_team(org.id, team_id, lock=True)
            await RoleResolver(session).check(Operation.ADD_TEAM_MEMBER, actor_id, org.id)
            actor = await engine.load_user(actor_id)
            return await engine.add_member_to_team(actor, org, team, member_id, as_role_of)

        return await self.coordinator.execute("team.add_member", work)

    # Projects

    async def create_project(
        self,
        actor_id: uuid.UUID,
        org_id: uuid.UUID,
        project_name: Optional[str],
        description: Optional[str] = None,
    ) -> CascadeResult:
        async def work(session: AsyncSession) -> CascadeResult:
            engine = CascadeEngine(session)
            org = await engine.load_org(org_id, lock=True)
            await RoleResolver(session).check(Operation.CREATE_PROJECT, actor_id, org.id)
            actor = await engine.load_user(actor_id)
            return await engine.create_project(actor, org, project_name, description)

        return await self.coordinator.execute("project.create", work)

    async def get_project(self, actor_id: uuid.UUID, org_id: uuid.UUID, project_id: uuid.UUID) -> ProjectDetail:
        async def work(session: AsyncSession) -> ProjectDetail:
            engine = CascadeEngine(session)
            project = await engine.load_project(org_id, project_id)
            await RoleResolver(session).org_role(actor_id, org_id)
            return await engine.project_detail(project)

        return await self.coordinator.read(work)

    async def update_project(
        self,
        actor_id: uuid.UUID,
        org_id: uuid.UUID,
        project_id: uuid.UUID,
        project_name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> CascadeResult:
        async def work(session: AsyncSession) -> CascadeResult:
            engine = CascadeEngine(session)
            org = await engine.load_org(org_id)
            project = await engine.load_project(org.id, project_id, lock=True)
            await RoleResolver(session).check(Operation.UPDATE_PROJECT, actor_id, org.id, project)
            return await engine.update_project(project, project_name, description)

        return await self.coordinator.execute("project.update", work)

    async def delete_project(self, actor_id: uuid.UUID, org_id: uuid.UUID, project_id: uuid.UUID) -> CascadeResult:
        async def work(session: AsyncSession) -> CascadeResult:
            engine = CascadeEngine(session)
            org = await engine.load_org(org_id, lock=True)
            project = await engine.load_project(org.id, project_id, lock=True)
            await RoleResolver(session).check(Operation.DELETE_PROJECT, actor_id, org.id, project)
            actor = await engine.load_user(actor_id)
            return await engine.delete_project(actor, org, project)

        return await self.coordinator.execute("project.delete", work)

    async def add_member_to_project(
        self,
        actor_id: uuid.UUID,
        org_id: uuid.UUID,
        project_id: uuid.UUID,
        member_id: uuid.UUID,
        as_role_of: Optional[str] = None,
    ) -> CascadeResult:
        async def work(session: AsyncSession) -> CascadeResult:
            engine = CascadeEngine(session)
            org = await engine.load_org(org_id)
            project = await engine.load_project(org.id, project_id, lock=True)
            await RoleResolver(session).check(Operation.ADD_PROJECT_MEMBER, actor_id, org.id, project)
            actor = await engine.load_user(actor_id)
            return await engine.add_member_to_project(actor, org, project, member_id, as_role_of)

        return await self.coordinator.execute("project.add_member", work)

    async def remove_member_from_project(
        self,
        actor_id: uuid.UUID,
        org_id: uuid.UUID,
        project_id: uuid.UUID,
        member_id: uuid.UUID,
    ) -> CascadeResult:
        async def work(session: AsyncSession) -> CascadeResult:
            engine = CascadeEngine(session)
            project = await engine.load_project(org_id, project_id, lock=True)
            await RoleResolver(session).check(Operation.REMOVE_PROJECT_MEMBER, actor_id, org_id, project)
            return await engine.remove_member_from_project(project, member_id)

        return await self.coordinator.execute("project.remove_member", work)

    async def add_team_to_project(
        self,
        actor_id: uuid.UUID,
        org_id: uuid.UUID,
        project_id: uuid.UUID,
        team_id: uuid.UUID,
        as_role_of: Optional[str] = None,
    ) -> CascadeResult:
        async def work(session: AsyncSession) -> CascadeResult:
            engine = CascadeEngine(session)
            org = await engine.load_org(org_id)
            project = await engine.load_project(org.id, project_id, lock=True)
            await RoleResolver(session).check(Operation.ADD_PROJECT_TEAM, actor_id, org.id, project)
            actor = await engine.load_user(actor_id)
            return await engine.add_team_to_project(actor, org, project, team_id, as_role_of)

        return await self.coordinator.execute("project.add_team", work)

    async def sync_team_into_project(
        self,
        actor_id: uuid.UUID,
        org_id: uuid.UUID,
        project_id: uuid.UUID,
        team_id: uuid.UUID,
        as_role_of: Optional[str] = None,
    ) -> CascadeResult:
        async def work(session: AsyncSession) -> CascadeResult:
            engine = CascadeEngine(session)
            org = await engine.load_org(org_id)
            project = await engine.load_project(org.id, project_id, lock=True)
            await RoleResolver(session).check(Operation.ADD_PROJECT_TEAM, actor_id, org.id, project)
            actor = await engine.load_user(actor_id)
            return await engine.sync_team_into_project(actor, org, project, team_id, as_role_of)

        return await self.coordinator.execute("project.sync_team", work)

    async def remove_team_from_project(
        self,
        actor_id: uuid.UUID,
        org_id: uuid.UUID,
        project_id: uuid.UUID,
        team_id: uuid.UUID,
    ) -> CascadeResult:
        async def work(session: AsyncSession) -> CascadeResult:
            engine = CascadeEngine(session)
            project = await engine.load_project(org_id, project_id, lock=True)
            await RoleResolver(session).check(Operation.REMOVE_PROJECT_TEAM, actor_id, org_id, project)
            return await engine.remove_team_from_project(project, team_id)

        return await self.coordinator.execute("project.remove_team", work)
