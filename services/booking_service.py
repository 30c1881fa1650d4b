"""
Booking Service - class bookings, the available_spots counter and
personal training sessions
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from backend.utils.errors import (
    BookingAlreadyCancelled,
    BookingNotCancellable,
    CapacityExceeded,
    Forbidden,
    NotFound,
)
from config.settings import CAPACITY_GUARDED, CAPACITY_UNGUARDED
from crud.booking import BookingRepository, PersonalTrainingRepository
from crud.catalog import ScheduleRepository, TrainerRepository
from database_models import (
    ClassBooking,
    PersonalTrainingSession,
    BOOKING_PENDING,
    BOOKING_CONFIRMED,
    BOOKING_CANCELLED,
    ROLE_ADMIN,
)
from utils.time_utils import to_utc_naive

logger = logging.getLogger(__name__)


class CapacityPolicy:
    """
    Strategy deciding how bookings and cancellations move a schedule's
    available_spots counter.
    """

    name = None

    async def reserve(self, schedules: ScheduleRepository, schedule_id: str) -> None:
        raise NotImplementedError

    async def cancel(self, bookings: BookingRepository, booking: ClassBooking) -> None:
        raise NotImplementedError


class UnguardedCapacityPolicy(CapacityPolicy):
    """
    Unconditional decrement on booking and increment on cancel.
    The counter can go negative and repeated cancels keep incrementing.
    """

    name = CAPACITY_UNGUARDED

    async def reserve(self, schedules: ScheduleRepository, schedule_id: str) -> None:
        await schedules.adjust_available_spots(schedule_id, -1)

    async def cancel(self, bookings: BookingRepository, booking: ClassBooking) -> None:
        await bookings.set_status(booking.id, BOOKING_CANCELLED)


class GuardedCapacityPolicy(CapacityPolicy):
    """
    Conditional decrement (refuses a full schedule) and single-shot cancel
    of bookings that are still open.
    """

    name = CAPACITY_GUARDED

    async def reserve(self, schedules: ScheduleRepository, schedule_id: str) -> None:
        if not await schedules.take_spot_if_available(schedule_id):
            raise CapacityExceeded("No spots left for this class")

    async def cancel(self, bookings: BookingRepository, booking: ClassBooking) -> None:
        if await bookings.cancel_if_open(booking.id):
            return
        current = await bookings.get(booking.id)
        if current is not None and current.status == BOOKING_CANCELLED:
            raise BookingAlreadyCancelled("Booking is already cancelled")
        raise BookingNotCancellable("Completed bookings cannot be cancelled")


CAPACITY_POLICIES = {
    CAPACITY_GUARDED: GuardedCapacityPolicy,
    CAPACITY_UNGUARDED: UnguardedCapacityPolicy,
}


def get_capacity_policy(name: Optional[str] = None) -> CapacityPolicy:
    """Resolve a policy by name; unknown or empty names fall back to guarded."""
    policy_cls = CAPACITY_POLICIES.get((name or "").lower())
    if policy_cls is None:
        if name:
            logger.warning(f"Unknown booking capacity policy '{name}', using '{CAPACITY_GUARDED}'")
        policy_cls = GuardedCapacityPolicy
    return policy_cls()


class BookingService:
    """Service class for class bookings and personal training sessions"""

    def __init__(self, db: AsyncSession, policy: Optional[CapacityPolicy] = None, tz_name: Optional[str] = None):
        """
        Args:
            db: AsyncSession instance for database operations
            policy: Capacity strategy, guarded when omitted
            tz_name: Zone used to interpret naive timestamps
        """
        self.db = db
        self.policy = policy or GuardedCapacityPolicy()
        self.tz_name = tz_name
        self.bookings = BookingRepository(db)
        self.schedules = ScheduleRepository(db)
        self.trainers = TrainerRepository(db)
        self.pt_sessions = PersonalTrainingRepository(db)

    # ------------------------------------------------------------------
    # Class bookings
    # ------------------------------------------------------------------

    async def list_user_bookings(self, user_id: str) -> List[ClassBooking]:
        return await self.bookings.list_for_user(user_id)

    async def create_class_booking(
        self,
        user_id: str,
        schedule_id: str,
        payment_id: Optional[str] = None
    ) -> ClassBooking:
        """
        Book a spot on a schedule and take one from its counter.

        A booking that carries a payment reference starts as confirmed,
        otherwise as pending.

        Raises:
            NotFound: unknown schedule
            CapacityExceeded: schedule is full (guarded policy only)
        """
        schedule = await self.schedules.get(schedule_id)
        if not schedule:
            raise NotFound("Class schedule not found", code="schedule_not_found")

        await self.policy.reserve(self.schedules, schedule_id)
        booking = await self.bookings.create({
            "user_id": user_id,
            "class_schedule_id": schedule_id,
            "status": BOOKING_CONFIRMED if payment_id else BOOKING_PENDING,
            "payment_id": payment_id,
        })
        logger.info(f"Booking {booking.id} created for user {user_id} on schedule {schedule_id} ({self.policy.name})")
        return booking

    async def cancel_class_booking(self, booking_id: str, user_id: str, role: Optional[str] = None) -> ClassBooking:
        """
        Mark a booking cancelled and give its spot back.

        Raises:
            NotFound: unknown booking
            Forbidden: booking belongs to another user and caller is not admin
            BookingAlreadyCancelled: repeated cancel (guarded policy only)
            BookingNotCancellable: booking already completed (guarded policy only)
        """
        booking = await self.bookings.get(booking_id)
        if not booking:
            raise NotFound("Booking not found", code="booking_not_found")
        if booking.user_id != user_id and role != ROLE_ADMIN:
            raise Forbidden("Cannot cancel another user's booking")

        await self.policy.cancel(self.bookings, booking)
        await self.schedules.adjust_available_spots(booking.class_schedule_id, 1)
        booking = await self.bookings.get(booking_id)
        logger.info(f"Booking {booking.id} cancelled by user {user_id}")
        return booking

    # ------------------------------------------------------------------
    # Personal training
    # ------------------------------------------------------------------

    async def create_personal_training_session(
        self,
        trainer_id: str,
        student_id: str,
        start_time: datetime,
        end_time: datetime,
        price: Decimal,
        notes: Optional[str] = None
    ) -> PersonalTrainingSession:
        """Record a pending one-on-one session. Trainer availability is not checked."""
        trainer = await self.trainers.get(trainer_id)
        if not trainer:
            raise NotFound("Trainer not found", code="trainer_not_found")

        session = await self.pt_sessions.create({
            "trainer_id": trainer.id,
            "student_id": student_id,
            "start_time": to_utc_naive(start_time, self.tz_name),
            "end_time": to_utc_naive(end_time, self.tz_name),
            "price": price,
            "status": BOOKING_PENDING,
            "notes": notes,
        })
        logger.info(f"PT session {session.id} created: trainer={trainer.id} student={student_id}")
        return session

    async def list_personal_training_sessions(self, user_id: str) -> List[PersonalTrainingSession]:
        """
        Sessions the user teaches when they have a trainer profile,
        otherwise the sessions they attend.
        """
        trainer = await self.trainers.get_by_user_id(user_id)
        if trainer:
            return await self.pt_sessions.list_for_trainer(trainer.id)
        return await self.pt_sessions.list_for_student(user_id)

    async def update_personal_training_status(
        self,
        session_id: str,
        status: str,
        user_id: str,
        role: Optional[str] = None
    ) -> PersonalTrainingSession:
        """
        Patch a PT session status. The trainer and admins may set any
        status; the student may only cancel.
        """
        session = await self.pt_sessions.get(session_id)
        if not session:
            raise NotFound("Personal training session not found", code="session_not_found")

        trainer = await self.trainers.get_by_user_id(user_id)
        is_trainer = trainer is not None and trainer.id == session.trainer_id
        is_student = session.student_id == user_id
        if not (role == ROLE_ADMIN or is_trainer or (is_student and status == BOOKING_CANCELLED)):
            raise Forbidden("Not allowed to change this session")

        return await self.pt_sessions.update(session, {"status": status})
