"""
Request and response models for the gym API
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

BookingStatus = Literal["pending", "confirmed", "cancelled", "completed"]
ClassLevel = Literal["beginner", "intermediate", "advanced"]
MembershipTier = Literal["basic", "premium", "unlimited"]


def _as_utc(value):
    # Stored timestamps are naive UTC
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _check_window(start: datetime, end: datetime):
    if (start.tzinfo is None) != (end.tzinfo is None):
        raise ValueError("startTime and endTime must both carry a UTC offset or neither")
    if end <= start:
        raise ValueError("endTime must be after startTime")


class ApiModel(BaseModel):
    """Response models read straight from ORM rows and serialize camelCase."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


# ----------------------------------------------------------------------------
# Responses
# ----------------------------------------------------------------------------

class UserOut(ApiModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = Field(default=None, serialization_alias="firstName")
    last_name: Optional[str] = Field(default=None, serialization_alias="lastName")
    profile_image_url: Optional[str] = Field(default=None, serialization_alias="profileImageUrl")
    role: str
    membership_type: Optional[str] = Field(default=None, serialization_alias="membershipType")
    membership_expiry: Optional[datetime] = Field(default=None, serialization_alias="membershipExpiry")
    stripe_customer_id: Optional[str] = Field(default=None, serialization_alias="stripeCustomerId")
    stripe_subscription_id: Optional[str] = Field(default=None, serialization_alias="stripeSubscriptionId")
    created_at: Optional[datetime] = Field(default=None, serialization_alias="createdAt")

    utc_times = field_validator("membership_expiry", "created_at")(_as_utc)


class TrainerOut(ApiModel):
    id: str
    user_id: str = Field(serialization_alias="userId")
    bio: Optional[str] = None
    specialty: Optional[str] = None
    experience: Optional[str] = None
    hourly_rate: Optional[Decimal] = Field(default=None, serialization_alias="hourlyRate")
    is_active: bool = Field(serialization_alias="isActive")
    created_at: Optional[datetime] = Field(default=None, serialization_alias="createdAt")

    utc_times = field_validator("created_at")(_as_utc)


class ClassOut(ApiModel):
    id: str
    name: str
    description: Optional[str] = None
    trainer_id: str = Field(serialization_alias="trainerId")
    capacity: int
    duration: int
    price: Decimal
    level: str
    image_url: Optional[str] = Field(default=None, serialization_alias="imageUrl")
    is_active: bool = Field(serialization_alias="isActive")
    created_at: Optional[datetime] = Field(default=None, serialization_alias="createdAt")

    utc_times = field_validator("created_at")(_as_utc)


class ScheduleOut(ApiModel):
    id: str
    class_id: str = Field(serialization_alias="classId")
    start_time: datetime = Field(serialization_alias="startTime")
    end_time: datetime = Field(serialization_alias="endTime")
    available_spots: int = Field(serialization_alias="availableSpots")
    created_at: Optional[datetime] = Field(default=None, serialization_alias="createdAt")

    utc_times = field_validator("start_time", "end_time", "created_at")(_as_utc)


class BookingOut(ApiModel):
    id: str
    user_id: str = Field(serialization_alias="userId")
    class_schedule_id: str = Field(serialization_alias="classScheduleId")
    status: str
    payment_id: Optional[str] = Field(default=None, serialization_alias="paymentId")
    created_at: Optional[datetime] = Field(default=None, serialization_alias="createdAt")

    utc_times = field_validator("created_at")(_as_utc)


class PersonalTrainingOut(ApiModel):
    id: str
    trainer_id: str = Field(serialization_alias="trainerId")
    student_id: str = Field(serialization_alias="studentId")
    start_time: datetime = Field(serialization_alias="startTime")
    end_time: datetime = Field(serialization_alias="endTime")
    price: Decimal
    status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = Field(default=None, serialization_alias="createdAt")

    utc_times = field_validator("start_time", "end_time", "created_at")(_as_utc)


class PaymentOut(ApiModel):
    id: str
    user_id: str = Field(serialization_alias="userId")
    amount: Decimal
    currency: str
    description: str
    stripe_payment_intent_id: Optional[str] = Field(default=None, serialization_alias="stripePaymentIntentId")
    status: str
    created_at: Optional[datetime] = Field(default=None, serialization_alias="createdAt")

    utc_times = field_validator("created_at")(_as_utc)


def dump(model_cls, obj):
    """Serialize an ORM row (or a list of rows) to JSON-ready data."""
    if isinstance(obj, list):
        return [model_cls.model_validate(item).model_dump(mode="json", by_alias=True) for item in obj]
    return model_cls.model_validate(obj).model_dump(mode="json", by_alias=True)


# ----------------------------------------------------------------------------
# Requests
# ----------------------------------------------------------------------------

class BookingCreateRequest(BaseModel):
    class_schedule_id: str = Field(alias="classScheduleId", min_length=1)
    payment_id: Optional[str] = Field(default=None, alias="paymentId")

    model_config = ConfigDict(populate_by_name=True)


class PersonalTrainingCreateRequest(BaseModel):
    trainer_id: str = Field(alias="trainerId", min_length=1)
    start_time: datetime = Field(alias="startTime")
    end_time: datetime = Field(alias="endTime")
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    notes: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def check_times(self):
        _check_window(self.start_time, self.end_time)
        return self


class PersonalTrainingStatusRequest(BaseModel):
    status: BookingStatus


class PaymentIntentRequest(BaseModel):
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    description: str = Field(min_length=1, max_length=500)


class SubscriptionRequest(BaseModel):
    tier: MembershipTier = "premium"


class TrainerCreateRequest(BaseModel):
    user_id: str = Field(alias="userId", min_length=1)
    bio: Optional[str] = None
    specialty: Optional[str] = None
    experience: Optional[str] = None
    hourly_rate: Optional[Decimal] = Field(default=None, alias="hourlyRate", ge=0)
    is_active: bool = Field(default=True, alias="isActive")

    model_config = ConfigDict(populate_by_name=True)


class TrainerUpdateRequest(BaseModel):
    bio: Optional[str] = None
    specialty: Optional[str] = None
    experience: Optional[str] = None
    hourly_rate: Optional[Decimal] = Field(default=None, alias="hourlyRate", ge=0)
    is_active: Optional[bool] = Field(default=None, alias="isActive")

    model_config = ConfigDict(populate_by_name=True)


class ClassCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    trainer_id: str = Field(alias="trainerId", min_length=1)
    capacity: int = Field(gt=0)
    duration: int = Field(gt=0, description="Length in minutes")
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    level: ClassLevel
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    is_active: bool = Field(default=True, alias="isActive")

    model_config = ConfigDict(populate_by_name=True)


class ClassUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    trainer_id: Optional[str] = Field(default=None, alias="trainerId")
    capacity: Optional[int] = Field(default=None, gt=0)
    duration: Optional[int] = Field(default=None, gt=0)
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    level: Optional[ClassLevel] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    is_active: Optional[bool] = Field(default=None, alias="isActive")

    model_config = ConfigDict(populate_by_name=True)


class ScheduleCreateRequest(BaseModel):
    class_id: str = Field(alias="classId", min_length=1)
    start_time: datetime = Field(alias="startTime")
    end_time: datetime = Field(alias="endTime")
    available_spots: Optional[int] = Field(default=None, alias="availableSpots", ge=0)

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def check_times(self):
        _check_window(self.start_time, self.end_time)
        return self


class ScheduleUpdateRequest(BaseModel):
    start_time: Optional[datetime] = Field(default=None, alias="startTime")
    end_time: Optional[datetime] = Field(default=None, alias="endTime")
    available_spots: Optional[int] = Field(default=None, alias="availableSpots")

    model_config = ConfigDict(populate_by_name=True)
