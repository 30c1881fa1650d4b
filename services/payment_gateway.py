"""
Stripe gateway - the payment processor capability handed to PaymentService.

Every SDK call passes its API key explicitly so that no process-wide Stripe
configuration is needed.
"""

import logging
from typing import Any, Dict, Optional

import stripe

from backend.utils.errors import PaymentGatewayError, ValidationFailed
from config.settings import MEMBERSHIP_TIERS, DEFAULT_MEMBERSHIP_TIER, Settings

logger = logging.getLogger(__name__)


def _field(obj, key):
    """Read a key from a StripeObject, dict or None."""
    if obj is None or isinstance(obj, str):
        return None
    try:
        return obj.get(key)
    except AttributeError:
        return getattr(obj, key, None)


def subscription_client_secret(subscription) -> Optional[str]:
    """
    Client secret for paying a subscription's first invoice.
    Newer API versions expose it as invoice.confirmation_secret, older ones
    through the expanded invoice.payment_intent.
    """
    invoice = _field(subscription, "latest_invoice")
    secret = _field(_field(invoice, "confirmation_secret"), "client_secret")
    if secret:
        return secret
    return _field(_field(invoice, "payment_intent"), "client_secret")


class StripeGateway:
    """
    Thin wrapper over the Stripe SDK returning plain dicts.
    Stripe failures are re-raised as PaymentGatewayError.
    """

    def __init__(self, api_key: str, currency: str = "gbp", membership_price_id: Optional[str] = None):
        """
        Args:
            api_key: Stripe secret key
            currency: ISO currency code used for every charge
            membership_price_id: Pre-provisioned price for the default tier
        """
        self.api_key = api_key
        self.currency = currency
        self._prices: Dict[str, str] = {}
        if membership_price_id:
            self._prices[DEFAULT_MEMBERSHIP_TIER] = membership_price_id

    def create_payment_intent(self, amount_minor: int, metadata: Dict[str, Any]) -> Dict[str, Any]:
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount_minor,
                currency=self.currency,
                metadata=metadata,
                api_key=self.api_key,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe payment intent creation failed: {e}", exc_info=True)
            raise PaymentGatewayError("Error creating payment intent")
        return {"id": intent.id, "client_secret": intent.client_secret}

    def create_customer(self, email: str, name: Optional[str] = None, metadata: Optional[Dict[str, Any]] = None) -> str:
        try:
            customer = stripe.Customer.create(
                email=email,
                name=name or None,
                metadata=metadata or {},
                api_key=self.api_key,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe customer creation failed: {e}", exc_info=True)
            raise PaymentGatewayError("Error creating billing customer")
        return customer.id

    def ensure_membership_price(self, tier: str) -> str:
        """
        Return the recurring price id for a membership tier.

        Resolution order: cached or configured id, an existing price with the
        tier's lookup key, otherwise a new product and price are created once
        and cached for the lifetime of the gateway.
        """
        if tier in self._prices:
            return self._prices[tier]
        plan = MEMBERSHIP_TIERS.get(tier)
        if not plan:
            raise ValidationFailed(f"Unknown membership tier: {tier}", code="unknown_tier")

        try:
            existing = stripe.Price.list(
                lookup_keys=[plan["lookup_key"]],
                active=True,
                limit=1,
                api_key=self.api_key,
            )
            if existing.data:
                price_id = existing.data[0].id
            else:
                product = stripe.Product.create(
                    name=plan["name"],
                    description=plan["description"],
                    api_key=self.api_key,
                )
                price = stripe.Price.create(
                    product=product.id,
                    unit_amount=int(plan["amount"] * 100),
                    currency=self.currency,
                    recurring={"interval": "month"},
                    lookup_key=plan["lookup_key"],
                    api_key=self.api_key,
                )
                price_id = price.id
                logger.info(f"Provisioned Stripe price {price_id} for {tier} membership")
        except stripe.StripeError as e:
            logger.error(f"Stripe price lookup for {tier} failed: {e}", exc_info=True)
            raise PaymentGatewayError("Error preparing membership price")

        self._prices[tier] = price_id
        return price_id

    def create_subscription(self, customer_id: str, price_id: str) -> Dict[str, Any]:
        try:
            subscription = stripe.Subscription.create(
                customer=customer_id,
                items=[{"price": price_id}],
                payment_behavior="default_incomplete",
                expand=["latest_invoice.confirmation_secret"],
                api_key=self.api_key,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe subscription creation failed: {e}", exc_info=True)
            raise PaymentGatewayError("Error creating subscription")
        return {"id": subscription.id, "client_secret": subscription_client_secret(subscription)}

    def retrieve_subscription(self, subscription_id: str) -> Dict[str, Any]:
        try:
            subscription = stripe.Subscription.retrieve(
                subscription_id,
                expand=["latest_invoice.confirmation_secret"],
                api_key=self.api_key,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe subscription retrieval failed: {e}", exc_info=True)
            raise PaymentGatewayError("Error retrieving subscription")
        return {"id": subscription.id, "client_secret": subscription_client_secret(subscription)}


def build_payment_gateway(config: Settings) -> Optional[StripeGateway]:
    """Build the gateway from settings; None when Stripe is not configured."""
    if not config.stripe_secret_key:
        logger.warning("STRIPE_SECRET_KEY is not set. Stripe functionality will be unavailable.")
        return None
    return StripeGateway(
        api_key=config.stripe_secret_key,
        currency=config.payment_currency,
        membership_price_id=config.stripe_membership_price_id,
    )
