"""
Catalog Service - classes, trainers and class schedules
"""

import logging
from datetime import date
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from backend.utils.errors import NotFound, ValidationFailed
from crud.catalog import TrainerRepository, ClassRepository, ScheduleRepository
from crud.user import UserRepository
from database_models import Trainer, GymClass, ClassSchedule, ROLE_TRAINER, ROLE_ADMIN
from utils.time_utils import day_bounds_utc, to_utc_naive

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Read side of the gym catalogue plus the admin provisioning actions
    that create trainers, classes and schedules.
    """

    def __init__(self, db: AsyncSession, tz_name: Optional[str] = None):
        """
        Args:
            db: AsyncSession instance for database operations
            tz_name: Zone used to interpret calendar days and naive timestamps
        """
        self.db = db
        self.tz_name = tz_name
        self.trainers = TrainerRepository(db)
        self.classes = ClassRepository(db)
        self.schedules = ScheduleRepository(db)

    async def list_classes(self) -> List[GymClass]:
        return await self.classes.list_active()

    async def get_class(self, class_id: str) -> GymClass:
        gym_class = await self.classes.get(class_id)
        if not gym_class:
            raise NotFound("Class not found", code="class_not_found")
        return gym_class

    async def list_trainers(self) -> List[Trainer]:
        return await self.trainers.list_active()

    async def get_trainer(self, trainer_id: str) -> Trainer:
        trainer = await self.trainers.get(trainer_id)
        if not trainer:
            raise NotFound("Trainer not found", code="trainer_not_found")
        return trainer

    async def list_schedules(self, day: Optional[date] = None) -> List[ClassSchedule]:
        """
        List schedules ordered by start time, optionally restricted to the
        schedules starting on one calendar day in the configured zone.
        """
        if day is None:
            return await self.schedules.list_schedules()
        start, end = day_bounds_utc(day, self.tz_name)
        return await self.schedules.list_schedules(start=start, end=end)

    async def get_schedule(self, schedule_id: str) -> ClassSchedule:
        schedule = await self.schedules.get(schedule_id)
        if not schedule:
            raise NotFound("Class schedule not found", code="schedule_not_found")
        return schedule

    # ------------------------------------------------------------------
    # Admin provisioning
    # ------------------------------------------------------------------

    async def create_trainer(self, data: dict) -> Trainer:
        """
        Promote an existing user to trainer and create the trainer profile.
        Admin accounts keep their admin role.
        """
        user_repo = UserRepository(self.db)
        user = await user_repo.get_user_by_id(data["user_id"])
        if not user:
            raise NotFound("User not found", code="user_not_found")
        existing = await self.trainers.get_by_user_id(user.id)
        if existing:
            raise ValidationFailed("User already has a trainer profile", code="trainer_exists")

        trainer = await self.trainers.create(data)
        if user.role != ROLE_ADMIN:
            await user_repo.update_user(user, {"role": ROLE_TRAINER})
        logger.info(f"Created trainer {trainer.id} for user {user.id}")
        return trainer

    async def update_trainer(self, trainer_id: str, updates: dict) -> Trainer:
        trainer = await self.get_trainer(trainer_id)
        return await self.trainers.update(trainer, updates)

    async def create_class(self, data: dict) -> GymClass:
        await self.get_trainer(data["trainer_id"])
        gym_class = await self.classes.create(data)
        logger.info(f"Created class {gym_class.id} ({gym_class.name})")
        return gym_class

    async def update_class(self, class_id: str, updates: dict) -> GymClass:
        gym_class = await self.get_class(class_id)
        if updates.get("trainer_id"):
            await self.get_trainer(updates["trainer_id"])
        return await self.classes.update(gym_class, updates)

    async def create_schedule(self, data: dict) -> ClassSchedule:
        """
        Create an occurrence of a class. The spot counter starts at the
        class capacity unless an explicit value is supplied.
        """
        gym_class = await self.get_class(data["class_id"])
        spots = data.get("available_spots")
        schedule = await self.schedules.create({
            "class_id": gym_class.id,
            "start_time": to_utc_naive(data["start_time"], self.tz_name),
            "end_time": to_utc_naive(data["end_time"], self.tz_name),
            "available_spots": gym_class.capacity if spots is None else spots,
        })
        logger.info(f"Scheduled class {gym_class.id} at {schedule.start_time} ({schedule.available_spots} spots)")
        return schedule

    async def update_schedule(self, schedule_id: str, updates: dict) -> ClassSchedule:
        schedule = await self.get_schedule(schedule_id)
        for key in ("start_time", "end_time"):
            if updates.get(key) is not None:
                updates[key] = to_utc_naive(updates[key], self.tz_name)
        start = updates.get("start_time") or schedule.start_time
        end = updates.get("end_time") or schedule.end_time
        if end <= start:
            raise ValidationFailed("endTime must be after startTime")
        return await self.schedules.update(schedule, updates)
