"""
Cascade Engine and Transaction Coordinator.

The engine turns one structural mutation into every edge write needed to
keep the denormalized membership consistent; the coordinator runs those
writes as one atomic unit.
"""

from teamhub.kernel.cascade.results import (
    CascadeResult,
    MemberEntry,
    OrganizationDetail,
    ProjectDetail,
    TeamDetail,
)
from teamhub.kernel.cascade.engine import CascadeEngine
from teamhub.kernel.cascade.coordinator import (
    CascadeRun,
    CascadeState,
    TransactionCoordinator,
    is_retryable,
)

__all__ = [
    "CascadeResult",
    "MemberEntry",
    "OrganizationDetail",
    "ProjectDetail",
    "TeamDetail",
    "CascadeEngine",
    "CascadeRun",
    "CascadeState",
    "TransactionCoordinator",
    "is_retryable",
]
