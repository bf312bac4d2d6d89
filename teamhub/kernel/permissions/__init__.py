"""
Role Authorization Gate - data-driven role checks per operation.
"""

from teamhub.kernel.permissions.role_gate import (
    Operation,
    OperationPolicy,
    OPERATION_POLICIES,
    RoleResolver,
    Scope,
    authorize,
    is_allowed,
    require_owner,
)

__all__ = [
    "Operation",
    "OperationPolicy",
    "OPERATION_POLICIES",
    "RoleResolver",
    "Scope",
    "authorize",
    "is_allowed",
    "require_owner",
]
