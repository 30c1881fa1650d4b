"""
Repositories for the class catalogue: trainers, classes and class schedules
"""

from datetime import datetime
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from database_models import Trainer, GymClass, ClassSchedule


def apply_updates(obj, updates: dict):
    """Partial field patch: only attributes the model knows about are set."""
    for key, value in updates.items():
        if hasattr(obj, key):
            setattr(obj, key, value)
    return obj


class TrainerRepository:
    """Database operations for Trainer rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_active(self) -> List[Trainer]:
        result = await self.db.execute(
            select(Trainer).where(Trainer.is_active.is_(True)).order_by(Trainer.created_at)
        )
        return list(result.scalars().all())

    async def get(self, trainer_id: str) -> Optional[Trainer]:
        result = await self.db.execute(select(Trainer).where(Trainer.id == trainer_id))
        return result.scalar_one_or_none()

    async def get_by_user_id(self, user_id: str) -> Optional[Trainer]:
        result = await self.db.execute(select(Trainer).where(Trainer.user_id == user_id))
        return result.scalar_one_or_none()

    async def create(self, data: dict) -> Trainer:
        trainer = Trainer(**data)
        self.db.add(trainer)
        await self.db.flush()
        await self.db.refresh(trainer)
        return trainer

    async def update(self, trainer: Trainer, updates: dict) -> Trainer:
        apply_updates(trainer, updates)
        await self.db.flush()
        await self.db.refresh(trainer)
        return trainer


class ClassRepository:
    """Database operations for GymClass rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_active(self) -> List[GymClass]:
        result = await self.db.execute(
            select(GymClass).where(GymClass.is_active.is_(True)).order_by(GymClass.name)
        )
        return list(result.scalars().all())

    async def get(self, class_id: str) -> Optional[GymClass]:
        result = await self.db.execute(select(GymClass).where(GymClass.id == class_id))
        return result.scalar_one_or_none()

    async def create(self, data: dict) -> GymClass:
        gym_class = GymClass(**data)
        self.db.add(gym_class)
        await self.db.flush()
        await self.db.refresh(gym_class)
        return gym_class

    async def update(self, gym_class: GymClass, updates: dict) -> GymClass:
        apply_updates(gym_class, updates)
        await self.db.flush()
        await self.db.refresh(gym_class)
        return gym_class


class ScheduleRepository:
    """
    Database operations for ClassSchedule rows, including the
    available_spots counter.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_schedules(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> List[ClassSchedule]:
        """
        List schedules ordered by start time.

        Args:
            start: Inclusive lower bound on start_time (naive UTC)
            end: Exclusive upper bound on start_time (naive UTC)
        """
        stmt = select(ClassSchedule)
        if start is not None:
            stmt = stmt.where(ClassSchedule.start_time >= start)
        if end is not None:
            stmt = stmt.where(ClassSchedule.start_time < end)
        result = await self.db.execute(stmt.order_by(ClassSchedule.start_time))
        return list(result.scalars().all())

    async def get(self, schedule_id: str) -> Optional[ClassSchedule]:
        # populate_existing so counter updates issued as bulk UPDATEs are visible
        result = await self.db.execute(
            select(ClassSchedule)
            .where(ClassSchedule.id == schedule_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create(self, data: dict) -> ClassSchedule:
        schedule = ClassSchedule(**data)
        self.db.add(schedule)
        await self.db.flush()
        await self.db.refresh(schedule)
        return schedule

    async def update(self, schedule: ClassSchedule, updates: dict) -> ClassSchedule:
        apply_updates(schedule, updates)
        await self.db.flush()
        await self.db.refresh(schedule)
        return schedule

    async def adjust_available_spots(self, schedule_id: str, delta: int) -> bool:
        """
        Move the counter by delta in a single UPDATE, with no bounds check.

        Returns:
            True if the schedule row exists and was updated
        """
        result = await self.db.execute(
            update(ClassSchedule)
            .where(ClassSchedule.id == schedule_id)
            .values(available_spots=ClassSchedule.available_spots + delta)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def take_spot_if_available(self, schedule_id: str) -> bool:
        """
        Decrement the counter only while it is positive. The check and the
        decrement are the same statement.

        Returns:
            True if a spot was taken, False if the schedule is full or unknown
        """
        result = await self.db.execute(
            update(ClassSchedule)
            .where(ClassSchedule.id == schedule_id, ClassSchedule.available_spots > 0)
            .values(available_spots=ClassSchedule.available_spots - 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0
