"""
PaymentRepository plus the aggregate reads used by the admin dashboard
"""

from decimal import Decimal
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc, func

from database_models import Payment, ClassBooking, PAYMENT_COMPLETED, BOOKING_CONFIRMED


class PaymentRepository:
    """Database operations for Payment rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_user(self, user_id: str) -> List[Payment]:
        result = await self.db.execute(
            select(Payment)
            .where(Payment.user_id == user_id)
            .order_by(desc(Payment.created_at))
        )
        return list(result.scalars().all())

    async def create(self, data: dict) -> Payment:
        payment = Payment(**data)
        self.db.add(payment)
        await self.db.flush()
        await self.db.refresh(payment)
        return payment


class StatsRepository:
    """Point-in-time aggregate queries over bookings and payments."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def count_bookings(self, status: Optional[str] = None) -> int:
        stmt = select(func.count()).select_from(ClassBooking)
        if status is not None:
            stmt = stmt.where(ClassBooking.status == status)
        result = await self.db.execute(stmt)
        return int(result.scalar_one() or 0)

    async def count_confirmed_bookings(self) -> int:
        return await self.count_bookings(BOOKING_CONFIRMED)

    async def sum_completed_revenue(self) -> Decimal:
        result = await self.db.execute(
            select(func.sum(Payment.amount)).where(Payment.status == PAYMENT_COMPLETED)
        )
        total = result.scalar_one_or_none()
        if total is None:
            return Decimal("0.00")
        return Decimal(str(total)).quantize(Decimal("0.01"))
