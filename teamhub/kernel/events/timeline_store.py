"""
Timeline store for the append-only organization timeline.

Entries are appended inside the cascade that produced them so they commit
or roll back together with the mutation they describe.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from teamhub.kernel.models.timeline import TimelineEvent, TimelineEventType


class TimelineStore:
    """
    Service for appending to and reading organization timelines.

    Usage:
        timeline = TimelineStore(session)
        await timeline.append(
            org_id=org.id,
            event_type=TimelineEventType.PROJECT_CREATED,
            text=f"<b>{user.user_name}</b> created a project - <i>{name}</i>.",
            actor_id=user.id,
            subject_id=project.id,
        )
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(
        self,
        org_id: uuid.UUID,
        event_type: TimelineEventType,
        text: str,
        actor_id: Optional[uuid.UUID] = None,
        subject_id: Optional[uuid.UUID] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> TimelineEvent:
        """
        Append an entry to the end of an organization's timeline.

        Args:
            org_id: The organization
            event_type: The type of event
            text: Human-readable entry
            actor_id: User who triggered the event
            subject_id: Entity the event is about; may later cease to exist
            payload: Additional event data

        Returns:
            The created TimelineEvent
        """
        event = TimelineEvent(
            org_id=org_id,
            sequence=await self._next_sequence(org_id),
            event_type=event_type.value,
            text=text,
            actor_id=actor_id,
            subject_id=subject_id,
            payload=self._serialize_payload(payload or {}),
        )
        self.session.add(event)
        await self.session.flush()
        return event

    async def history(
        self,
        org_id: uuid.UUID,
        limit: int = 100,
        offset: int = 0,
    ) -> List[TimelineEvent]:
        """Timeline entries for an organization, oldest first."""
        query = (
            select(TimelineEvent)
            .where(TimelineEvent.org_id == org_id)
            .order_by(TimelineEvent.sequence)
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def _next_sequence(self, org_id: uuid.UUID) -> int:
        query = select(func.max(TimelineEvent.sequence)).where(TimelineEvent.org_id == org_id)
        result = await self.session.execute(query)
        current = result.scalar()
        return 1 if current is None else current + 1

    def _serialize_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Convert payload values to JSON-serializable types."""
        result = {}
        for key, value in payload.items():
            if isinstance(value, uuid.UUID):
                result[key] = str(value)
            elif isinstance(value, datetime):
                result[key] = value.isoformat()
            elif isinstance(value, dict):
                result[key] = self._serialize_payload(value)
            elif isinstance(value, list):
                result[key] = [str(v) if isinstance(v, uuid.UUID) else v for v in value]
            else:
                result[key] = value
        return result
