"""
API v1 routes.
"""

from fastapi import APIRouter

from teamhub.api.v1 import users, orgs, teams, projects

router = APIRouter()

router.include_router(users.router, prefix="/users", tags=["Users"])
# Nested routers before the org router so /orgs/{id}/teams/... is matched first
router.include_router(teams.router, prefix="/orgs/{org_id}/teams", tags=["Teams"])
router.include_router(projects.router, prefix="/orgs/{org_id}/projects", tags=["Projects"])
router.include_router(orgs.router, prefix="/orgs", tags=["Organizations"])
