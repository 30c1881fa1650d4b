"""
Analytics Service - aggregate booking and revenue metrics for the admin dashboard
"""
import logging
from typing import Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession

from crud.payment import StatsRepository

logger = logging.getLogger(__name__)


class AnalyticsService:
    """Service class for admin analytics. Every call is a fresh read."""

    def __init__(self, db: AsyncSession):
        self.stats = StatsRepository(db)

    async def booking_stats(self) -> Dict[str, Any]:
        """
        Returns:
            {"total": all bookings, "confirmed": bookings with status confirmed}
        """
        return {
            "total": await self.stats.count_bookings(),
            "confirmed": await self.stats.count_confirmed_bookings(),
        }

    async def revenue_stats(self) -> Dict[str, Any]:
        """
        Returns:
            {"total": Decimal sum of completed payment amounts}
        """
        return {"total": await self.stats.sum_completed_revenue()}

    async def get_dashboard_stats(self) -> Dict[str, Any]:
        bookings = await self.booking_stats()
        revenue = await self.revenue_stats()
        logger.debug(f"Dashboard stats: bookings={bookings} revenue={revenue}")
        return {"bookings": bookings, "revenue": revenue}
