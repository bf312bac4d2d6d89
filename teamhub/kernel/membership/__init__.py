"""
Membership Edge Model - paired add/remove primitives over membership_edges.
"""

from teamhub.kernel.membership.edge_store import EdgeStore

__all__ = [
    "EdgeStore",
]
