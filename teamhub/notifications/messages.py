"""
Notification records produced by cascades.
"""

import html
import uuid
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Notification:
    """One message to deliver after a cascade commits."""

    recipient: str
    subject: str
    body: str
    user_id: Optional[uuid.UUID] = None


def project_added_notification(
    *,
    recipient: str,
    user_id: uuid.UUID,
    user_name: str,
    project_name: str,
    org_name: str,
    added_by: str,
) -> Notification:
    return Notification(
        recipient=recipient,
        user_id=user_id,
        subject=f"You've been added to project: {project_name}",
        body=(
            f"<p>Hello {html.escape(user_name)},</p>"
            f"<p>You have been added to the project <strong>{html.escape(project_name)}</strong> "
            f"in the organization {html.escape(org_name)}.</p>"
            f"<p><strong>Added by:</strong> {html.escape(added_by)}</p>"
        ),
    )


def org_added_notification(
    *,
    recipient: str,
    user_id: uuid.UUID,
    user_name: str,
    org_name: str,
    added_by: str,
) -> Notification:
    return Notification(
        recipient=recipient,
        user_id=user_id,
        subject=f"You've been added to organization: {org_name}",
        body=(
            f"<p>Hello {html.escape(user_name)},</p>"
            f"<p>You have been added to the organization <strong>{html.escape(org_name)}</strong>.</p>"
            f"<p><strong>Added by:</strong> {html.escape(added_by)}</p>"
        ),
    )
