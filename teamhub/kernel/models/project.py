"""
Project model.
"""

import uuid

from sqlalchemy import ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, validates

from teamhub.kernel.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Project(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Project inside an organization. The creator is its permanent owner."""

    __tablename__ = "projects"

    project_name: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(
        Text,
        default="",
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
        index=True,
    )

    @validates("created_by")
    def _freeze_owner(self, key: str, value: uuid.UUID) -> uuid.UUID:
        current = self.__dict__.get(key)
        if current is not None and current != value:
            raise ValueError("Project owner cannot be changed")
        return value

    def __repr__(self) -> str:
        return f"<Project {self.project_name[:50]}>"
