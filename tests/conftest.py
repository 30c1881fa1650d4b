"""
Pytest configuration and fixtures for testing
"""
import asyncio
import os

# Settings are read at import time, so the test environment is fixed first
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-jwt-signing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("APP_TIMEZONE", "Europe/London")
os.environ["RATE_LIMIT_PER_MINUTE"] = "0"
os.environ.pop("STRIPE_SECRET_KEY", None)
os.environ.pop("REDIS_URL", None)

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from database import Base
import database_models  # noqa: F401
from database_models import User, Trainer, GymClass, ClassSchedule, ROLE_STUDENT


def make_engine(db_path):
    """File-backed SQLite engine; NullPool keeps connections out of shared event loops."""
    return create_async_engine(
        f"sqlite+aiosqlite:///{db_path}",
        echo=False,
        poolclass=NullPool,
    )


def make_session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


async def create_tables(engine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
async def test_db(tmp_path):
    """
    Fixture that provides an isolated SQLite database session for each test.

    This fixture:
    - Creates all tables before the test runs
    - Yields a clean AsyncSession for the test
    - Disposes of the engine after the test completes
    """
    engine = make_engine(tmp_path / "test.db")
    await create_tables(engine)

    async with make_session_factory(engine)() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    await engine.dispose()


# ----------------------------------------------------------------------------
# Data builders
# ----------------------------------------------------------------------------

async def add_user(db, email="member@example.com", role=ROLE_STUDENT, **extra) -> User:
    user = User(email=email, role=role, first_name=extra.pop("first_name", "Test"),
                last_name=extra.pop("last_name", "Member"), **extra)
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


async def add_trainer(db, email="coach@example.com") -> Trainer:
    user = await add_user(db, email=email, role="trainer")
    trainer = Trainer(user_id=user.id, bio="Coach", specialty="HIIT", hourly_rate=Decimal("40.00"))
    db.add(trainer)
    await db.flush()
    return trainer


async def add_class(db, trainer: Trainer, name="Spin", capacity=10, is_active=True) -> GymClass:
    gym_class = GymClass(
        name=name,
        trainer_id=trainer.id,
        capacity=capacity,
        duration=45,
        price=Decimal("10.00"),
        level="beginner",
        is_active=is_active,
    )
    db.add(gym_class)
    await db.flush()
    return gym_class


async def add_schedule(db, gym_class: GymClass, start: datetime = None, spots: int = None) -> ClassSchedule:
    start = start or datetime(2026, 11, 2, 9, 0)
    schedule = ClassSchedule(
        class_id=gym_class.id,
        start_time=start,
        end_time=start + timedelta(minutes=gym_class.duration),
        available_spots=gym_class.capacity if spots is None else spots,
    )
    db.add(schedule)
    await db.flush()
    return schedule


# ----------------------------------------------------------------------------
# Tokens
# ----------------------------------------------------------------------------

def expired_jwt(user_id, seconds_ago=1):
    """Session token for user_id that expired seconds_ago seconds in the past."""
    from auth_utils import create_jwt
    return create_jwt(user_id, ttl=timedelta(seconds=-seconds_ago))


# ----------------------------------------------------------------------------
# Payment gateway double
# ----------------------------------------------------------------------------

class FakeGateway:
    """In-memory stand-in for StripeGateway with the same call surface."""

    def __init__(self, currency="gbp", fail=False):
        self.currency = currency
        self.fail = fail
        self.intents = []
        self.customers = []
        self.subscriptions = {}
        self.prices = {}
        self.price_creations = 0
        # method names that raise on their next call only
        self.fail_once = set()

    def _check(self, method=None):
        if self.fail or method in self.fail_once:
            self.fail_once.discard(method)
            from backend.utils.errors import PaymentGatewayError
            raise PaymentGatewayError("Error talking to the payment processor")

    def create_payment_intent(self, amount_minor, metadata):
        self._check("create_payment_intent")
        intent_id = f"pi_{len(self.intents) + 1}"
        self.intents.append({"id": intent_id, "amount": amount_minor, "metadata": metadata})
        return {"id": intent_id, "client_secret": f"{intent_id}_secret"}

    def create_customer(self, email, name=None, metadata=None):
        self._check("create_customer")
        customer_id = f"cus_{len(self.customers) + 1}"
        self.customers.append({"id": customer_id, "email": email, "name": name})
        return customer_id

    def ensure_membership_price(self, tier):
        self._check("ensure_membership_price")
        if tier not in self.prices:
            self.price_creations += 1
            self.prices[tier] = f"price_{tier}"
        return self.prices[tier]

    def create_subscription(self, customer_id, price_id):
        self._check("create_subscription")
        subscription_id = f"sub_{len(self.subscriptions) + 1}"
        self.subscriptions[subscription_id] = {"customer": customer_id, "price": price_id}
        return {"id": subscription_id, "client_secret": f"{subscription_id}_secret"}

    def retrieve_subscription(self, subscription_id):
        self._check("retrieve_subscription")
        return {"id": subscription_id, "client_secret": f"{subscription_id}_secret"}


# ----------------------------------------------------------------------------
# HTTP client
# ----------------------------------------------------------------------------

class ApiHarness:
    """
    TestClient wired to a throwaway database, a fake payment gateway and a
    switchable authenticated user.
    """

    def __init__(self, client, session_factory, gateway):
        self.client = client
        self.session_factory = session_factory
        self.gateway = gateway
        self.user = None

    def login_as(self, user):
        self.user = {
            "user_id": user.id,
            "email": user.email,
            "role": user.role,
            "is_active": True,
            "membership_type": user.membership_type,
        }

    def run(self, coro_func):
        """Run an async callable with its own session and commit."""
        async def _runner():
            async with self.session_factory() as session:
                result = await coro_func(session)
                await session.commit()
                return result
        return asyncio.run(_runner())


@pytest.fixture
def api(tmp_path):
    from fastapi.testclient import TestClient
    from main import app
    from auth import get_current_user
    from database import get_db
    from routers.dependencies import get_payment_gateway

    engine = make_engine(tmp_path / "api.db")
    asyncio.run(create_tables(engine))
    session_factory = make_session_factory(engine)

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    gateway = FakeGateway()
    harness = ApiHarness(None, session_factory, gateway)

    async def override_get_current_user():
        if harness.user is None:
            from fastapi import HTTPException
            raise HTTPException(status_code=401, detail="Missing authentication token")
        return harness.user

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user
    app.dependency_overrides[get_payment_gateway] = lambda: harness.gateway

    harness.client = TestClient(app)
    yield harness

    app.dependency_overrides.clear()
    asyncio.run(engine.dispose())


@pytest.fixture
def client(tmp_path):
    """FastAPI TestClient with only the database overridden; auth runs for real."""
    from fastapi.testclient import TestClient
    from main import app
    from database import get_db

    engine = make_engine(tmp_path / "auth.db")
    asyncio.run(create_tables(engine))
    session_factory = make_session_factory(engine)

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)

    app.dependency_overrides.clear()
    asyncio.run(engine.dispose())
