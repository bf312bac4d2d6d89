"""
Workspace service - the entry point for membership mutations.
"""

from teamhub.kernel.workspace.workspace_service import WorkspaceService, build_coordinator

__all__ = [
    "WorkspaceService",
    "build_coordinator",
]
