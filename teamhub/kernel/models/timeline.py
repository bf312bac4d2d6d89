"""
Organization timeline.

Append-only audit log of organization-level events. Entries may name
subjects that no longer exist (a deleted project); they are historical
records, not live references.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text, func, Index, JSON, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from teamhub.kernel.models.base import Base, UUIDPrimaryKeyMixin


class TimelineEventType(str, Enum):
    """Event types recorded on an organization timeline."""

    ORG_CREATED = "org.created"
    ORG_MEMBER_ADDED = "org.member_added"

    TEAM_CREATED = "team.created"
    TEAM_MEMBER_ADDED = "team.member_added"

    PROJECT_CREATED = "project.created"
    PROJECT_DELETED = "project.deleted"


class TimelineEvent(Base, UUIDPrimaryKeyMixin):
    """
    Immutable timeline entry.

    This table is append-only - no updates or deletes.
    """

    __tablename__ = "timeline_events"

    org_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
    )
    # Strictly increasing per organization
    sequence: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    event_type: Mapped[TimelineEventType] = mapped_column(
        String(64),
        nullable=False,
    )
    text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    # Actor
    actor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        nullable=True,
    )
    # Subject (project, team or user the event is about)
    subject_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        nullable=True,
    )

    payload: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("org_id", "sequence", name="uq_timeline_events_org_sequence"),
        Index("ix_timeline_events_subject", "subject_id"),
    )

    def __repr__(self) -> str:
        return f"<TimelineEvent {self.event_type} org={self.org_id} #{self.sequence}>"
