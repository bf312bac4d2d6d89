"""
Organization model.
"""

import uuid

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from teamhub.kernel.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Organization(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Tenant root.

    Owns the canonical ordered lists of its teams and projects (ORG_TEAM and
    ORG_PROJECT edges) and an append-only timeline.
    """

    __tablename__ = "organizations"

    org_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    created_by: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Organization {self.org_name}>"
