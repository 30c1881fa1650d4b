"""
Repositories for class bookings and personal training sessions
"""

from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc, update

from crud.catalog import apply_updates
from database_models import (
    ClassBooking,
    PersonalTrainingSession,
    BOOKING_CANCELLED,
    BOOKING_COMPLETED,
)

# Bookings in these states can no longer be cancelled
CLOSED_BOOKING_STATUSES = (BOOKING_CANCELLED, BOOKING_COMPLETED)


class BookingRepository:
    """Database operations for ClassBooking rows. Rows are never deleted."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_user(self, user_id: str) -> List[ClassBooking]:
        result = await self.db.execute(
            select(ClassBooking)
            .where(ClassBooking.user_id == user_id)
            .order_by(desc(ClassBooking.created_at))
        )
        return list(result.scalars().all())

    async def get(self, booking_id: str) -> Optional[ClassBooking]:
        # populate_existing so status changes issued as bulk UPDATEs are visible
        result = await self.db.execute(
            select(ClassBooking)
            .where(ClassBooking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create(self, data: dict) -> ClassBooking:
        booking = ClassBooking(**data)
        self.db.add(booking)
        await self.db.flush()
        await self.db.refresh(booking)
        return booking

    async def set_status(self, booking_id: str, status: str) -> bool:
        """Unconditional status change in a single UPDATE."""
        result = await self.db.execute(
            update(ClassBooking)
            .where(ClassBooking.id == booking_id)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def cancel_if_open(self, booking_id: str) -> bool:
        """
        Cancel only while the booking is neither cancelled nor completed.
        The status check and the write are the same statement.

        Returns:
            True if the booking was cancelled by this call
        """
        result = await self.db.execute(
            update(ClassBooking)
            .where(
                ClassBooking.id == booking_id,
                ClassBooking.status.not_in(CLOSED_BOOKING_STATUSES),
            )
            .values(status=BOOKING_CANCELLED)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0


class PersonalTrainingRepository:
    """Database operations for PersonalTrainingSession rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_student(self, student_id: str) -> List[PersonalTrainingSession]:
        result = await self.db.execute(
            select(PersonalTrainingSession)
            .where(PersonalTrainingSession.student_id == student_id)
            .order_by(desc(PersonalTrainingSession.start_time))
        )
        return list(result.scalars().all())

    async def list_for_trainer(self, trainer_id: str) -> List[PersonalTrainingSession]:
        result = await self.db.execute(
            select(PersonalTrainingSession)
            .where(PersonalTrainingSession.trainer_id == trainer_id)
            .order_by(desc(PersonalTrainingSession.start_time))
        )
        return list(result.scalars().all())

    async def get(self, session_id: str) -> Optional[PersonalTrainingSession]:
        result = await self.db.execute(
            select(PersonalTrainingSession).where(PersonalTrainingSession.id == session_id)
        )
        return result.scalar_one_or_none()

    async def create(self, data: dict) -> PersonalTrainingSession:
        session = PersonalTrainingSession(**data)
        self.db.add(session)
        await self.db.flush()
        await self.db.refresh(session)
        return session

    async def update(self, session: PersonalTrainingSession, updates: dict) -> PersonalTrainingSession:
        apply_updates(session, updates)
        await self.db.flush()
        await self.db.refresh(session)
        return session
