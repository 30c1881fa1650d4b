"""
Payment Router - payment history, one-off payments and membership subscriptions
"""
from typing import Optional
from fastapi import APIRouter, Depends

from auth import get_current_user
from backend.utils.responses import success_response
from config.settings import MEMBERSHIP_TIERS, settings
from models.gym import PaymentIntentRequest, PaymentOut, SubscriptionRequest, dump
from routers.dependencies import get_payment_service
from services.payment_service import PaymentService
from utils.shared_utils import log_endpoint_event

payment_router = APIRouter(prefix="/api", tags=["payments"])


@payment_router.get("/payments")
async def list_payments(
    current_user: dict = Depends(get_current_user),
    payments: PaymentService = Depends(get_payment_service)
):
    """List the caller's payments, newest first"""
    rows = await payments.list_user_payments(current_user["user_id"])
    return success_response(data=dump(PaymentOut, rows), message="Payments retrieved successfully")


@payment_router.get("/payments/config")
async def get_payment_config():
    """Publishable key, currency and membership plans for the client checkout"""
    plans = [
        {
            "tier": tier,
            "name": plan["name"],
            "description": plan["description"],
            "amount": str(plan["amount"]),
        }
        for tier, plan in MEMBERSHIP_TIERS.items()
    ]
    return success_response(
        data={
            "publishableKey": settings.stripe_publishable_key,
            "currency": settings.payment_currency,
            "plans": plans,
        },
        message="Payment configuration retrieved"
    )


@payment_router.post("/create-payment-intent")
async def create_payment_intent(
    request: PaymentIntentRequest,
    current_user: dict = Depends(get_current_user),
    payments: PaymentService = Depends(get_payment_service)
):
    """
    Create a Stripe payment intent for a one-off charge.
    The client completes the payment with the returned clientSecret.
    """
    result = await payments.create_payment_intent(
        current_user["user_id"],
        request.amount,
        request.description
    )
    log_endpoint_event("/create-payment-intent", current_user["user_id"], "success", {
        "payment_id": result["paymentId"],
        "amount": request.amount,
    })
    return success_response(data=result, message="Payment intent created")


@payment_router.post("/create-subscription")
async def create_subscription(
    request: Optional[SubscriptionRequest] = None,
    current_user: dict = Depends(get_current_user),
    payments: PaymentService = Depends(get_payment_service)
):
    """Start a monthly membership subscription, or return the existing one"""
    tier = request.tier if request else None
    result = await payments.create_subscription(current_user["user_id"], tier)
    log_endpoint_event("/create-subscription", current_user["user_id"], "success", {
        "subscription_id": result["subscriptionId"],
        "tier": tier,
    })
    return success_response(data=result, message="Subscription ready")
