"""
Organization timeline infrastructure.

Append-only history of organization-level events.
"""

from teamhub.kernel.events.timeline_store import TimelineStore

__all__ = [
    "TimelineStore",
]
