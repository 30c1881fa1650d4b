"""
Seed the database with an admin account and a small demo timetable.

    ADMIN_EMAIL=admin@example.com ADMIN_PASSWORD='...' python seed_db.py
"""
import asyncio
import logging
import os
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from auth_utils import hash_password
from config.settings import settings
from crud.user import UserRepository
from database import AsyncSessionLocal, init_db
from database_models import ROLE_ADMIN
from services.catalog_service import CatalogService

logger = logging.getLogger("seed_db")

DEMO_TRAINER_EMAIL = "coach@example.com"

# (name, level, capacity, minutes, price, local start hour)
DEMO_CLASSES = [
    ("Morning HIIT", "intermediate", 16, 45, Decimal("12.00"), 7),
    ("Beginner Boxing", "beginner", 12, 60, Decimal("15.00"), 12),
    ("Strength & Conditioning", "advanced", 10, 60, Decimal("18.00"), 18),
]


async def _get_or_create_user(user_repo: UserRepository, email: str, password: str, **extra):
    user = await user_repo.get_user_by_email(email)
    if user:
        return user, False
    user = await user_repo.create_user({"email": email, "hashed_password": hash_password(password), **extra})
    return user, True


async def seed_demo_timetable(db, days: int = 7, tz_name: str = None) -> bool:
    """
    Create a demo trainer with DEMO_CLASSES scheduled daily for `days` days.
    Does nothing while any active class exists; an existing demo coach and
    trainer profile are reused. Returns True when classes were created.
    """
    user_repo = UserRepository(db)
    catalog = CatalogService(db, tz_name=tz_name)

    if await catalog.list_classes():
        logger.info("Classes already present, skipping demo timetable")
        return False

    coach, _ = await _get_or_create_user(
        user_repo, DEMO_TRAINER_EMAIL, os.urandom(16).hex(),
        first_name="Demo", last_name="Coach",
    )
    trainer = await catalog.trainers.get_by_user_id(coach.id)
    if trainer is None:
        trainer = await catalog.create_trainer({
            "user_id": coach.id,
            "bio": "Demo trainer",
            "specialty": "Conditioning",
            "hourly_rate": Decimal("45.00"),
        })

    today = date.today()
    for name, level, capacity, minutes, price, hour in DEMO_CLASSES:
        gym_class = await catalog.create_class({
            "name": name,
            "trainer_id": trainer.id,
            "capacity": capacity,
            "duration": minutes,
            "price": price,
            "level": level,
        })
        for offset in range(days):
            start = datetime.combine(today + timedelta(days=offset), time(hour=hour))
            await catalog.create_schedule({
                "class_id": gym_class.id,
                "start_time": start,
                "end_time": start + timedelta(minutes=minutes),
            })

    logger.info(f"Seeded {len(DEMO_CLASSES)} classes over {days} days")
    return True


async def seed(days: int = 7):
    await init_db()
    async with AsyncSessionLocal() as db:
        user_repo = UserRepository(db)

        admin_email = os.getenv("ADMIN_EMAIL")
        admin_password = os.getenv("ADMIN_PASSWORD")
        if admin_email and admin_password:
            admin, created = await _get_or_create_user(user_repo, admin_email, admin_password, role=ROLE_ADMIN)
            if not created and admin.role != ROLE_ADMIN:
                await user_repo.update_user(admin, {"role": ROLE_ADMIN})
            logger.info(f"Admin account ready: {admin.email}")
        else:
            logger.warning("ADMIN_EMAIL / ADMIN_PASSWORD not set, skipping admin account")

        await seed_demo_timetable(db, days, tz_name=settings.app_timezone)
        await db.commit()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    asyncio.run(seed())
