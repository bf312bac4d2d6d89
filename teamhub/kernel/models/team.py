"""
Team model.
"""

import uuid

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from teamhub.kernel.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Team(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A group of organization members with a single parent organization."""

    __tablename__ = "teams"

    team_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    org_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_by: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Team {self.team_name} org={self.org_id}>"
