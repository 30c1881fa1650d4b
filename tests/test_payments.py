"""
Tests for PaymentService, the Stripe gateway wrapper and revenue stats
"""
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import patch

import pytest
import stripe

from backend.utils.errors import NotFound, PaymentGatewayError, PaymentsUnavailable, ValidationFailed
from config.settings import Settings
from crud.payment import PaymentRepository
from database_models import Payment, PAYMENT_COMPLETED, PAYMENT_FAILED, PAYMENT_PENDING
from services.analytics_service import AnalyticsService
from services.booking_service import BookingService
from services.payment_gateway import StripeGateway, build_payment_gateway, subscription_client_secret
from services.payment_service import PaymentService, to_minor_units
from tests.conftest import FakeGateway, add_class, add_schedule, add_trainer, add_user


def test_to_minor_units():
    assert to_minor_units(Decimal("12.34")) == 1234
    assert to_minor_units(Decimal("0.005")) == 1
    assert to_minor_units(Decimal("89.99")) == 8999


@pytest.mark.asyncio
async def test_payment_intent_records_pending_payment(test_db):
    member = await add_user(test_db)
    gateway = FakeGateway()
    service = PaymentService(test_db, gateway=gateway)

    result = await service.create_payment_intent(member.id, Decimal("25.50"), "Drop-in class")

    assert gateway.intents[0]["amount"] == 2550
    assert result["clientSecret"] == "pi_1_secret"
    payment = (await PaymentRepository(test_db).list_for_user(member.id))[0]
    assert payment.id == result["paymentId"]
    assert payment.status == PAYMENT_PENDING
    assert payment.currency == "gbp"
    assert payment.stripe_payment_intent_id == "pi_1"


@pytest.mark.asyncio
async def test_payment_intent_rejects_non_positive_amount(test_db):
    member = await add_user(test_db)
    with pytest.raises(ValidationFailed):
        await PaymentService(test_db, gateway=FakeGateway()).create_payment_intent(member.id, Decimal("0"), "Nothing")


@pytest.mark.asyncio
async def test_payments_unavailable_without_gateway(test_db):
    member = await add_user(test_db)
    service = PaymentService(test_db, gateway=None)
    with pytest.raises(PaymentsUnavailable):
        await service.create_payment_intent(member.id, Decimal("10.00"), "Class")
    with pytest.raises(PaymentsUnavailable):
        await service.create_subscription(member.id)


@pytest.mark.asyncio
async def test_gateway_failure_leaves_no_payment_row(test_db):
    member = await add_user(test_db)
    with pytest.raises(PaymentGatewayError):
        await PaymentService(test_db, gateway=FakeGateway(fail=True)).create_payment_intent(
            member.id, Decimal("10.00"), "Class"
        )
    assert await PaymentRepository(test_db).list_for_user(member.id) == []


@pytest.mark.asyncio
async def test_subscription_is_reused(test_db):
    member = await add_user(test_db, email="sub@example.com")
    gateway = FakeGateway()
    service = PaymentService(test_db, gateway=gateway)

    first = await service.create_subscription(member.id)
    second = await service.create_subscription(member.id)

    assert first["subscriptionId"] == second["subscriptionId"]
    assert first["clientSecret"]
    assert len(gateway.subscriptions) == 1
    assert len(gateway.customers) == 1
    assert gateway.price_creations == 1
    assert member.stripe_customer_id == "cus_1"
    assert member.stripe_subscription_id == first["subscriptionId"]


@pytest.mark.asyncio
async def test_customer_kept_when_subscription_fails(test_db):
    member = await add_user(test_db, email="retry@example.com")
    gateway = FakeGateway()
    gateway.fail_once.add("create_subscription")
    service = PaymentService(test_db, gateway=gateway)

    with pytest.raises(PaymentGatewayError):
        await service.create_subscription(member.id)
    # get_db rolls the request session back after a failure
    await test_db.rollback()

    result = await service.create_subscription(member.id)

    assert [c["id"] for c in gateway.customers] == ["cus_1"]
    assert gateway.subscriptions[result["subscriptionId"]]["customer"] == "cus_1"


@pytest.mark.asyncio
async def test_price_is_provisioned_once_per_tier(test_db):
    gateway = FakeGateway()
    service = PaymentService(test_db, gateway=gateway)
    for n in range(3):
        member = await add_user(test_db, email=f"member{n}@example.com")
        await service.create_subscription(member.id, "basic")

    assert gateway.price_creations == 1
    assert {s["price"] for s in gateway.subscriptions.values()} == {"price_basic"}


@pytest.mark.asyncio
async def test_subscription_validation(test_db):
    service = PaymentService(test_db, gateway=FakeGateway())
    with pytest.raises(NotFound):
        await service.create_subscription("missing")

    no_email = await add_user(test_db, email=None)
    with pytest.raises(ValidationFailed) as exc_info:
        await service.create_subscription(no_email.id)
    assert exc_info.value.code == "missing_email"

    with pytest.raises(ValidationFailed) as exc_info:
        await service.create_subscription(no_email.id, "platinum")
    assert exc_info.value.code == "unknown_tier"


@pytest.mark.asyncio
async def test_revenue_counts_completed_payments_only(test_db):
    member = await add_user(test_db)
    for amount, status in [("10.00", PAYMENT_PENDING), ("20.00", PAYMENT_COMPLETED), ("5.00", PAYMENT_FAILED)]:
        test_db.add(Payment(user_id=member.id, amount=Decimal(amount), description="x", status=status))
    await test_db.flush()

    revenue = await AnalyticsService(test_db).revenue_stats()
    assert revenue["total"] == Decimal("20.00")


@pytest.mark.asyncio
async def test_dashboard_stats(test_db):
    member = await add_user(test_db)
    schedule = await add_schedule(test_db, await add_class(test_db, await add_trainer(test_db)))
    bookings = BookingService(test_db)
    await bookings.create_class_booking(member.id, schedule.id)
    await bookings.create_class_booking(member.id, schedule.id, payment_id="pay_1")

    stats = await AnalyticsService(test_db).get_dashboard_stats()
    assert stats == {
        "bookings": {"total": 2, "confirmed": 1},
        "revenue": {"total": Decimal("0.00")},
    }


def test_build_payment_gateway():
    assert build_payment_gateway(Settings(STRIPE_SECRET_KEY=None)) is None
    gateway = build_payment_gateway(Settings(STRIPE_SECRET_KEY="sk_test_123", PAYMENT_CURRENCY="eur"))
    assert isinstance(gateway, StripeGateway)
    assert gateway.currency == "eur"


def test_subscription_client_secret_shapes():
    new_style = {"latest_invoice": {"confirmation_secret": {"client_secret": "cs_new"}}}
    old_style = {"latest_invoice": {"payment_intent": {"client_secret": "cs_old"}}}
    assert subscription_client_secret(new_style) == "cs_new"
    assert subscription_client_secret(old_style) == "cs_old"
    assert subscription_client_secret({"latest_invoice": "in_123"}) is None


def test_gateway_reuses_existing_price():
    gateway = StripeGateway(api_key="sk_test_123")
    listing = SimpleNamespace(data=[SimpleNamespace(id="price_existing")])
    with patch("stripe.Price.list", return_value=listing) as price_list, \
            patch("stripe.Product.create") as product_create:
        assert gateway.ensure_membership_price("premium") == "price_existing"
        assert gateway.ensure_membership_price("premium") == "price_existing"

    price_list.assert_called_once()
    assert price_list.call_args.kwargs["lookup_keys"] == ["gym_premium_monthly"]
    product_create.assert_not_called()


def test_gateway_creates_missing_price():
    gateway = StripeGateway(api_key="sk_test_123", currency="gbp")
    with patch("stripe.Price.list", return_value=SimpleNamespace(data=[])), \
            patch("stripe.Product.create", return_value=SimpleNamespace(id="prod_1")), \
            patch("stripe.Price.create", return_value=SimpleNamespace(id="price_new")) as price_create:
        assert gateway.ensure_membership_price("unlimited") == "price_new"

    kwargs = price_create.call_args.kwargs
    assert kwargs["unit_amount"] == 14999
    assert kwargs["recurring"] == {"interval": "month"}
    assert kwargs["api_key"] == "sk_test_123"


def test_gateway_uses_configured_price_for_default_tier():
    gateway = StripeGateway(api_key="sk_test_123", membership_price_id="price_configured")
    with patch("stripe.Price.list") as price_list:
        assert gateway.ensure_membership_price("premium") == "price_configured"
    price_list.assert_not_called()


def test_gateway_wraps_stripe_errors():
    gateway = StripeGateway(api_key="sk_test_123")
    with patch("stripe.PaymentIntent.create", side_effect=stripe.StripeError("card declined")):
        with pytest.raises(PaymentGatewayError):
            gateway.create_payment_intent(1000, {"userId": "u1"})
