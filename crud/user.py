"""
UserRepository for database operations on User model
"""

from datetime import datetime
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import event, select
from sqlalchemy.orm import Session
from database_models import User, ROLE_STUDENT
from utils.shared_utils import invalidate_cached

PENDING_CACHE_KEYS = "pending_cache_invalidations"


@event.listens_for(Session, "after_commit")
def _invalidate_after_commit(session):
    for key in session.info.pop(PENDING_CACHE_KEYS, ()):
        invalidate_cached(key)


@event.listens_for(Session, "after_rollback")
def _discard_after_rollback(session):
    session.info.pop(PENDING_CACHE_KEYS, None)


class UserRepository:
    """
    Repository class for User database operations.
    Encapsulates all database logic for the User model.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize the repository with a database session.

        Args:
            db: AsyncSession instance for database operations
        """
        self.db = db

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """
        Retrieve a user by email address.

        Args:
            email: User's email address (case-insensitive search)

        Returns:
            User object if found, None otherwise
        """
        result = await self.db.execute(
            select(User).where(User.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        """
        Retrieve a user by ID.

        Args:
            user_id: User's ID

        Returns:
            User object if found, None otherwise
        """
        result = await self.db.execute(
            select(User).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def create_user(self, user_data: dict) -> User:
        """
        Create a new user in the database.

        Args:
            user_data: Dictionary containing user data. Must include:
                - email: str
                - hashed_password: str
                Optional:
                - first_name, last_name, profile_image_url: str
                - role: str (defaults to "student")
                - is_active: bool (defaults to True)

        Returns:
            Created User object
        """
        user = User(
            email=user_data["email"].lower(),
            hashed_password=user_data["hashed_password"],
            first_name=user_data.get("first_name"),
            last_name=user_data.get("last_name"),
            profile_image_url=user_data.get("profile_image_url"),
            role=user_data.get("role", ROLE_STUDENT),
            is_active=user_data.get("is_active", True),
        )
        self.db.add(user)
        await self.db.flush()  # Flush to get the ID without committing
        await self.db.refresh(user)
        return user

    async def update_user(self, user: User, updates: dict) -> User:
        """
        Update user fields.

        Args:
            user: User object to update
            updates: Dictionary of fields to update (e.g., {"role": "trainer"})

        Returns:
            Updated User object
        """
        for key, value in updates.items():
            if hasattr(user, key):
                setattr(user, key, value)
        user.updated_at = datetime.utcnow()

        await self.db.flush()
        await self.db.refresh(user)
        # Dropped from the cache once the transaction commits
        self.db.info.setdefault(PENDING_CACHE_KEYS, set()).add(f"user:{user.id}")
        return user

    async def update_user_stripe_info(
        self,
        user: User,
        stripe_customer_id: str,
        stripe_subscription_id: Optional[str] = None
    ) -> User:
        """Store the billing customer and, once created, the subscription reference."""
        updates = {"stripe_customer_id": stripe_customer_id}
        if stripe_subscription_id:
            updates["stripe_subscription_id"] = stripe_subscription_id
        return await self.update_user(user, updates)
