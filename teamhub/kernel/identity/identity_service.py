"""
Identity service for user records.
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from teamhub.errors import ValidationError
from teamhub.kernel.models.user import User
from teamhub.logging_config import get_logger

logger = get_logger(__name__)


class IdentityService:
    """
    Service for user identity operations.

    Membership state is not kept on the user row; see EdgeStore.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def register_user(self, user_name: str, email: str) -> User:
        """
        Register a new user.

        Raises:
            ValidationError: If the name is blank or the email already exists
        """
        name = (user_name or "").strip()
        if not name:
            raise ValidationError("User name is required")

        existing = await self.get_user_by_email(email)
        if existing:
            raise ValidationError("Email already registered")

        user = User(user_name=name, email=email.lower().strip())
        self.session.add(user)
        await self.session.flush()  # Get the ID

        logger.info("User registered", extra={"user_id": str(user.id)})
        return user

    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Get a user by ID."""
        query = select(User).where(User.id == user_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email."""
        query = select(User).where(User.email == email.lower().strip())
        result = await self.session.execute(query)
        return result.scalar_one_or_none()
