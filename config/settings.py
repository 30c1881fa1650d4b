"""
Configuration settings for the application
"""
from decimal import Decimal
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

# Normalized booking capacity policies
CAPACITY_GUARDED = "guarded"
CAPACITY_UNGUARDED = "unguarded"

# Membership tiers sold as monthly subscriptions
MEMBERSHIP_TIERS = {
    "basic": {
        "name": "Basic Membership",
        "description": "Gym floor access and up to 8 classes per month",
        "amount": Decimal("39.99"),
        "lookup_key": "gym_basic_monthly",
    },
    "premium": {
        "name": "Premium Membership",
        "description": "Unlimited classes, 2 PT sessions/month, priority booking",
        "amount": Decimal("89.99"),
        "lookup_key": "gym_premium_monthly",
    },
    "unlimited": {
        "name": "Unlimited Membership",
        "description": "Unlimited classes and personal training, premium services",
        "amount": Decimal("149.99"),
        "lookup_key": "gym_unlimited_monthly",
    },
}
DEFAULT_MEMBERSHIP_TIER = "premium"


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Core authentication and security
    jwt_secret_key: Optional[str] = Field(default=None, alias="JWT_SECRET_KEY")

    # Stripe billing configuration
    stripe_secret_key: Optional[str] = Field(default=None, alias="STRIPE_SECRET_KEY")
    stripe_publishable_key: Optional[str] = Field(default=None, alias="STRIPE_PUBLISHABLE_KEY")
    stripe_membership_price_id: Optional[str] = Field(default=None, alias="STRIPE_MEMBERSHIP_PRICE_ID")
    payment_currency: str = Field(default="gbp", alias="PAYMENT_CURRENCY")

    # Infrastructure configuration
    redis_url: Optional[str] = Field(default=None, alias="REDIS_URL")
    database_url: Optional[str] = Field(default="sqlite+aiosqlite:///./gym.db", alias="DATABASE_URL")

    # Booking configuration
    app_timezone: str = Field(default="Europe/London", alias="APP_TIMEZONE")
    booking_capacity_policy: str = Field(default=CAPACITY_GUARDED, alias="BOOKING_CAPACITY_POLICY")

    # Requests per minute per client IP, 0 disables rate limiting
    rate_limit_per_minute: int = Field(default=120, alias="RATE_LIMIT_PER_MINUTE")

    # Frontend configuration
    frontend_url: Optional[str] = Field(default="http://localhost:5173", alias="FRONTEND_URL")

    # Render.com deployment configuration
    render: Optional[str] = Field(default=None, alias="RENDER")
    render_external_url: Optional[str] = Field(default=None, alias="RENDER_EXTERNAL_URL")
    render_service_name: Optional[str] = Field(default=None, alias="RENDER_SERVICE_NAME")

    # Environment configuration
    env: Optional[str] = Field(default=None, alias="ENV")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "populate_by_name": True,
        "extra": "ignore",
    }


# Instantiate settings object
settings = Settings()

# Determine if we're in production mode
IS_PRODUCTION = bool(settings.render) or bool(settings.env and settings.env.lower() == "production")
