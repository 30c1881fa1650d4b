import uuid
from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Numeric, ForeignKey, Index

from database import Base

# Stored enumerations
ROLE_STUDENT = "student"
ROLE_TRAINER = "trainer"
ROLE_ADMIN = "admin"

BOOKING_PENDING = "pending"
BOOKING_CONFIRMED = "confirmed"
BOOKING_CANCELLED = "cancelled"
BOOKING_COMPLETED = "completed"

PAYMENT_PENDING = "pending"
PAYMENT_COMPLETED = "completed"
PAYMENT_FAILED = "failed"
PAYMENT_REFUNDED = "refunded"


def _uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    """
    Gym member, trainer or admin account.
    Never hard-deleted; deactivated through is_active instead.
    """
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=_uuid)
    email = Column(String, unique=True, nullable=True, index=True)
    hashed_password = Column(String, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    profile_image_url = Column(String, nullable=True)
    role = Column(String, default=ROLE_STUDENT, nullable=False)
    membership_type = Column(String, nullable=True)
    membership_expiry = Column(DateTime, nullable=True)
    stripe_customer_id = Column(String, nullable=True)
    stripe_subscription_id = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class Trainer(Base):
    __tablename__ = "trainers"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    bio = Column(Text, nullable=True)
    specialty = Column(String, nullable=True)
    experience = Column(Text, nullable=True)
    hourly_rate = Column(Numeric(10, 2), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class GymClass(Base):
    """A class offering; concrete occurrences live in ClassSchedule."""
    __tablename__ = "classes"

    id = Column(String, primary_key=True, default=_uuid)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    trainer_id = Column(String, ForeignKey("trainers.id"), nullable=False, index=True)
    capacity = Column(Integer, nullable=False)
    duration = Column(Integer, nullable=False)  # minutes
    price = Column(Numeric(10, 2), nullable=False)
    level = Column(String, nullable=False)
    image_url = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class ClassSchedule(Base):
    """
    A time-boxed occurrence of a class.

    available_spots is a denormalized counter seeded from the class capacity
    and moved by one on every booking and cancellation.
    """
    __tablename__ = "class_schedules"

    id = Column(String, primary_key=True, default=_uuid)
    class_id = Column(String, ForeignKey("classes.id"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False, index=True)  # naive UTC
    end_time = Column(DateTime, nullable=False)
    available_spots = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class ClassBooking(Base):
    __tablename__ = "class_bookings"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    class_schedule_id = Column(String, ForeignKey("class_schedules.id"), nullable=False)
    status = Column(String, default=BOOKING_PENDING, nullable=False)
    payment_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_class_bookings_user_created", "user_id", "created_at"),
        Index("ix_class_bookings_status", "status"),
    )


class PersonalTrainingSession(Base):
    __tablename__ = "personal_training_sessions"

    id = Column(String, primary_key=True, default=_uuid)
    trainer_id = Column(String, ForeignKey("trainers.id"), nullable=False, index=True)
    student_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    status = Column(String, default=BOOKING_PENDING, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Payment(Base):
    """Local mirror of a payment intent created at the gateway."""
    __tablename__ = "payments"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String, default="gbp", nullable=False)
    description = Column(String, nullable=False)
    stripe_payment_intent_id = Column(String, nullable=True, index=True)
    status = Column(String, default=PAYMENT_PENDING, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
