"""
Shared FastAPI dependencies that assemble services for request handlers
"""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from database import get_db
from services.analytics_service import AnalyticsService
from services.booking_service import BookingService, CapacityPolicy, get_capacity_policy
from services.catalog_service import CatalogService
from services.payment_service import PaymentService


def get_payment_gateway(request: Request):
    """Gateway built once at startup and kept on the application state."""
    return getattr(request.app.state, "payment_gateway", None)


def get_booking_policy() -> CapacityPolicy:
    return get_capacity_policy(settings.booking_capacity_policy)


def get_catalog_service(db: AsyncSession = Depends(get_db)) -> CatalogService:
    return CatalogService(db, tz_name=settings.app_timezone)


def get_booking_service(
    db: AsyncSession = Depends(get_db),
    policy: CapacityPolicy = Depends(get_booking_policy)
) -> BookingService:
    return BookingService(db, policy=policy, tz_name=settings.app_timezone)


def get_payment_service(
    db: AsyncSession = Depends(get_db),
    gateway=Depends(get_payment_gateway)
) -> PaymentService:
    return PaymentService(db, gateway=gateway)


def get_analytics_service(db: AsyncSession = Depends(get_db)) -> AnalyticsService:
    return AnalyticsService(db)
