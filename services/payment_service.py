"""
Payment Service - one-off payment intents and membership subscriptions
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from backend.utils.errors import NotFound, PaymentsUnavailable, ValidationFailed
from config.settings import MEMBERSHIP_TIERS, DEFAULT_MEMBERSHIP_TIER
from crud.payment import PaymentRepository
from crud.user import UserRepository
from database_models import Payment, PAYMENT_PENDING

logger = logging.getLogger(__name__)


def to_minor_units(amount: Decimal) -> int:
    """Convert a major-unit amount (e.g. pounds) to minor units (pence)."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PaymentService:
    """
    Service class for payment business logic.

    The gateway is injected; with no gateway every write operation raises
    PaymentsUnavailable. Local Payment rows mirror the gateway state at
    creation time and stay pending, since no settlement handling exists.
    """

    def __init__(self, db: AsyncSession, gateway=None):
        """
        Args:
            db: AsyncSession instance for database operations
            gateway: StripeGateway (or compatible) instance, or None
        """
        self.db = db
        self.gateway = gateway
        self.payments = PaymentRepository(db)
        self.users = UserRepository(db)

    def _require_gateway(self, action: str):
        if self.gateway is None:
            logger.error(f"Payment gateway not configured. Cannot {action}.")
            raise PaymentsUnavailable(f"{action.capitalize()} is currently unavailable. Stripe not configured.")
        return self.gateway

    async def list_user_payments(self, user_id: str) -> List[Payment]:
        return await self.payments.list_for_user(user_id)

    async def create_payment_intent(self, user_id: str, amount: Decimal, description: str) -> Dict[str, Any]:
        """
        Create a gateway payment intent and record a pending local payment.

        If the local insert fails after the intent was created the two sides
        stay inconsistent; there is no compensation.

        Returns:
            {"clientSecret": str, "paymentId": str}
        """
        gateway = self._require_gateway("payment processing")
        amount = Decimal(amount)
        if amount <= 0:
            raise ValidationFailed("Amount must be positive")

        intent = gateway.create_payment_intent(
            to_minor_units(amount),
            metadata={"userId": user_id, "description": description},
        )
        payment = await self.payments.create({
            "user_id": user_id,
            "amount": amount,
            "currency": gateway.currency,
            "description": description,
            "stripe_payment_intent_id": intent["id"],
            "status": PAYMENT_PENDING,
        })
        logger.info(f"Payment {payment.id} pending for user {user_id}: {amount} {gateway.currency} ({intent['id']})")
        return {"clientSecret": intent["client_secret"], "paymentId": payment.id}

    async def create_subscription(self, user_id: str, tier: Optional[str] = None) -> Dict[str, Any]:
        """
        Start (or resume) a monthly membership subscription.

        A user who already holds a subscription reference gets that
        subscription's current client secret back instead of a second
        subscription. A newly created billing customer is committed before
        the subscription is attempted, so retries reuse it.

        Returns:
            {"subscriptionId": str, "clientSecret": str | None}
        """
        gateway = self._require_gateway("subscription processing")
        tier = tier or DEFAULT_MEMBERSHIP_TIER
        if tier not in MEMBERSHIP_TIERS:
            raise ValidationFailed(f"Unknown membership tier: {tier}", code="unknown_tier")

        user = await self.users.get_user_by_id(user_id)
        if not user:
            raise NotFound("User not found", code="user_not_found")

        if user.stripe_subscription_id:
            subscription = gateway.retrieve_subscription(user.stripe_subscription_id)
            return {"subscriptionId": subscription["id"], "clientSecret": subscription["client_secret"]}

        if not user.email:
            raise ValidationFailed("No user email on file", code="missing_email")

        customer_id = user.stripe_customer_id
        if not customer_id:
            customer_id = gateway.create_customer(
                email=user.email,
                name=user.full_name,
                metadata={"userId": user.id},
            )
            await self.users.update_user_stripe_info(user, customer_id)
            # Must survive a failure in the gateway calls below
            await self.db.commit()

        price_id = gateway.ensure_membership_price(tier)
        subscription = gateway.create_subscription(customer_id, price_id)
        await self.users.update_user_stripe_info(user, customer_id, subscription["id"])
        logger.info(f"Subscription {subscription['id']} ({tier}) created for user {user_id}")

        return {"subscriptionId": subscription["id"], "clientSecret": subscription["client_secret"]}
