"""
Billing service - Stripe checkout sessions and webhook reconciliation.
"""
import asyncio
import json
import math
import uuid
import logging
from typing import Optional, Dict, Any
from datetime import datetime, timedelta

import stripe
from sqlalchemy.exc import IntegrityError
from sqlmodel.ext.asyncio.session import AsyncSession

from advocacy.config import settings
from advocacy.core.exceptions import (
    ExternalServiceError,
    SignatureVerificationError,
    UnsupportedPaymentType,
    ValidationError,
)
from advocacy.repositories.action_repo import CampaignActionRepository
from advocacy.repositories.advocate_repo import AdvocateRepository
from advocacy.repositories.campaign_repo import CampaignRepository
from advocacy.repositories.activity_repo import ActivityLogRepository
from advocacy.models.campaign import CampaignStatus
from advocacy.models.activity import Actions
from advocacy.schemas.payment import PaymentType, CheckoutRequest, CheckoutResponse, WebhookAck
from advocacy.services.campaign_service import parse_payload

logger = logging.getLogger(__name__)

# payment_type -> (product name, description, unit amount in cents, recurring interval)
PRODUCTS = {
    PaymentType.VALIDATION_FEE: (
        "Validation Fee", "Annual validation fee for Advocate/Organizer", 299, None
    ),
    PaymentType.CAMPAIGN_UNLIMITED: (
        "Campaign Unlimited Subscription", "Monthly subscription for unlimited campaign", 2999, "month"
    ),
    PaymentType.EMAIL_SEND: (
        "Campaign Email Send", "Pay-per-send email outreach", 299, None
    ),
    PaymentType.CAMPAIGN_REACTIVATION: (
        "Campaign Reactivation", "Reactivation fee for archived campaign", 2999, None
    ),
    PaymentType.DONATION: (
        "Campaign Donation", "Donation to campaign organizer", None, None
    ),
}

DONATION_FEE_RATE = 0.045
DONATION_FEE_FIXED_CENTS = 50


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def to_cents(amount: float) -> int:
    """Convert a major-unit amount to cents."""
    return _round_half_up(amount * 100)


def donation_fee(amount_cents: int) -> int:
    """Platform fee on a donation: 4.5% plus $0.50."""
    return _round_half_up(amount_cents * DONATION_FEE_RATE + DONATION_FEE_FIXED_CENTS)


def _clean_metadata(metadata: Dict[str, Any]) -> Dict[str, str]:
    # Stripe metadata values must be strings
    return {key: str(value) for key, value in metadata.items() if value is not None}


def build_checkout_params(request: CheckoutRequest) -> Dict[str, Any]:
    """Build the Stripe checkout session arguments for a payment request."""
    if request.payment_type not in PRODUCTS:
        raise UnsupportedPaymentType(request.payment_type)

    name, description, unit_amount, interval = PRODUCTS[request.payment_type]
    extra_metadata = request.metadata or {}

    price_data: Dict[str, Any] = {
        "currency": request.currency,
        "product_data": {"name": name, "description": description},
        "unit_amount": unit_amount,
    }
    params: Dict[str, Any] = {
        "payment_method_types": ["card"],
        "mode": "payment",
        "success_url": f"{settings.FRONTEND_URL}/payment/success?session_id={{CHECKOUT_SESSION_ID}}",
        "cancel_url": f"{settings.FRONTEND_URL}/payment/cancel",
    }

    if request.payment_type == PaymentType.VALIDATION_FEE:
        metadata = {"payment_type": PaymentType.VALIDATION_FEE, "user_id": request.user_id}

    elif request.payment_type == PaymentType.CAMPAIGN_UNLIMITED:
        price_data["recurring"] = {"interval": interval}
        params["mode"] = "subscription"
        metadata = {
            "payment_type": PaymentType.CAMPAIGN_SUBSCRIPTION,
            "subscription_type": PaymentType.CAMPAIGN_UNLIMITED,
            "campaign_id": request.campaign_id,
            "user_id": request.user_id,
        }
        # Carried onto the subscription so renewal invoices can be matched
        params["subscription_data"] = {"metadata": _clean_metadata({
            "subscription_type": PaymentType.CAMPAIGN_UNLIMITED,
            "campaign_id": request.campaign_id,
        })}

    elif request.payment_type == PaymentType.EMAIL_SEND:
        metadata = {
            "payment_type": PaymentType.EMAIL_SEND,
            "campaign_id": request.campaign_id,
            "advocate_id": request.advocate_id,
        }

    elif request.payment_type == PaymentType.CAMPAIGN_REACTIVATION:
        metadata = {
            "payment_type": PaymentType.CAMPAIGN_REACTIVATION,
            "campaign_id": request.campaign_id,
            "user_id": request.user_id,
        }

    else:
        amount_cents = to_cents(request.amount)
        if amount_cents <= 0:
            raise ValidationError("Donation amount must be positive", field="amount")
        price_data["unit_amount"] = amount_cents
        price_data["product_data"]["description"] = extra_metadata.get("description") or description
        params["payment_intent_data"] = {"application_fee_amount": donation_fee(amount_cents)}
        metadata = {
            "payment_type": PaymentType.DONATION,
            "campaign_id": request.campaign_id,
            "advocate_id": request.advocate_id,
            **extra_metadata,
        }

    params["line_items"] = [{"price_data": price_data, "quantity": 1}]
    params["metadata"] = _clean_metadata(metadata)
    return params


def _parse_uuid(value: Optional[str]) -> Optional[uuid.UUID]:
    if not value:
        return None
    try:
        return uuid.UUID(str(value))
    except ValueError:
        logger.warning(f"Ignoring malformed id in payment metadata: {value!r}")
        return None


def invoice_metadata(invoice: Dict[str, Any]) -> Dict[str, Any]:
    """
    Subscription tags for an invoice. Newer API versions only expose them
    through the subscription details, older ones on the invoice itself.
    """
    if invoice.get("metadata"):
        return invoice["metadata"]
    details = invoice.get("subscription_details") or \
        ((invoice.get("parent") or {}).get("subscription_details")) or {}
    return details.get("metadata") or {}


class BillingService:
    """Service for payments."""

    def __init__(self, session: AsyncSession, stripe_secret_key: Optional[str] = None,
                 webhook_secret: Optional[str] = None):
        self.session = session
        self.webhook_secret = webhook_secret if webhook_secret is not None else settings.STRIPE_WEBHOOK_SECRET
        stripe.api_key = stripe_secret_key or settings.STRIPE_SECRET_KEY or None

        self.campaign_repo = CampaignRepository(session)
        self.advocate_repo = AdvocateRepository(session)
        self.action_repo = CampaignActionRepository(session)
        self.activity_repo = ActivityLogRepository(session)

    async def create_checkout_session(self, request: CheckoutRequest) -> CheckoutResponse:
        """Create a hosted checkout session for one of the priced actions."""
        request = parse_payload(CheckoutRequest, request)
        if not request.payment_type or not request.amount:
            raise ValidationError("Missing required fields")

        params = build_checkout_params(request)

        try:
            checkout_session = await asyncio.to_thread(stripe.checkout.Session.create, **params)
        except stripe.StripeError as e:
            logger.error(f"Stripe checkout creation failed for {request.payment_type}: {e}")
            raise ExternalServiceError("Stripe", e.user_message or str(e))

        logger.info(f"Created {request.payment_type} checkout session {checkout_session.id}")
        return CheckoutResponse(sessionId=checkout_session.id, url=checkout_session.url)

    def verify_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """Check the Stripe signature and decode the event."""
        if not signature:
            raise SignatureVerificationError("Missing Stripe signature")

        try:
            body = payload.decode("utf-8") if isinstance(payload, bytes) else payload
        except UnicodeDecodeError:
            raise SignatureVerificationError("Payload is not valid UTF-8")

        try:
            stripe.WebhookSignature.verify_header(
                body, signature, self.webhook_secret, stripe.Webhook.DEFAULT_TOLERANCE
            )
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            raise SignatureVerificationError(str(e))

        try:
            return json.loads(body)
        except ValueError:
            raise ValidationError("Webhook payload is not valid JSON")

    async def reconcile(self, payload: bytes, signature: Optional[str]) -> WebhookAck:
        """
        Apply a Stripe webhook event.
        Unrecognized events are acknowledged without changes.
        """
        event = self.verify_event(payload, signature)

        event_type = event.get("type")
        event_data = (event.get("data") or {}).get("object") or {}
        logger.info(f"Received Stripe webhook: {event_type}")

        if event_type == "checkout.session.completed":
            await self._checkout_completed(event_data.get("metadata") or {})

        elif event_type == "invoice.payment_succeeded":
            metadata = invoice_metadata(event_data)
            if metadata.get("subscription_type") == PaymentType.CAMPAIGN_UNLIMITED:
                await self._set_campaign_status(metadata.get("campaign_id"), CampaignStatus.ACTIVE)

        elif event_type == "invoice.payment_failed":
            metadata = invoice_metadata(event_data)
            if metadata.get("subscription_type") == PaymentType.CAMPAIGN_UNLIMITED:
                await self._set_campaign_status(metadata.get("campaign_id"), CampaignStatus.INACTIVE)

        return WebhookAck()

    async def _checkout_completed(self, metadata: Dict[str, Any]) -> None:
        payment_type = metadata.get("payment_type")

        if payment_type == PaymentType.VALIDATION_FEE:
            user_id = metadata.get("user_id")
            expires_at = datetime.utcnow() + timedelta(days=settings.VALIDATION_PERIOD_DAYS)
            advocate = await self.advocate_repo.mark_validated(user_id, expires_at) if user_id else None
            if not advocate:
                logger.warning(f"Validation fee paid for unknown user {user_id}")
                return
            await self.activity_repo.log(
                actor_id=advocate.id,
                action=Actions.ADVOCATE_VALIDATED,
                entity_type="advocate",
                entity_id=advocate.id,
                description=f"Validation fee paid, valid until {expires_at.date().isoformat()}"
            )

        elif payment_type == PaymentType.CAMPAIGN_SUBSCRIPTION:
            await self._set_campaign_status(metadata.get("campaign_id"), CampaignStatus.ACTIVE)

        elif payment_type == PaymentType.CAMPAIGN_REACTIVATION:
            await self._set_campaign_status(
                metadata.get("campaign_id"), CampaignStatus.ACTIVE, reactivation_fee_paid=True
            )

        elif payment_type == PaymentType.EMAIL_SEND:
            await self._record_paid_send(metadata)

        else:
            logger.info(f"No state change for checkout with payment_type={payment_type}")

    async def _set_campaign_status(self, campaign_id: Optional[str], status: str, **fields) -> None:
        parsed_id = _parse_uuid(campaign_id)
        campaign = await self.campaign_repo.update_status(parsed_id, status, **fields) if parsed_id else None
        if not campaign:
            logger.warning(f"Payment event for unknown campaign {campaign_id}")
            return

        await self.activity_repo.log(
            actor_id=campaign.organizer_id,
            action=Actions.CAMPAIGN_ACTIVATED if status == CampaignStatus.ACTIVE else Actions.CAMPAIGN_DEACTIVATED,
            entity_type="campaign",
            entity_id=campaign.id,
            description=f"Campaign '{campaign.title}' set {status} by payment event"
        )

    async def _record_paid_send(self, metadata: Dict[str, Any]) -> None:
        """
        Record that a pay-per-send payment cleared. No email is sent here.
        The row counts against today's limit but never takes the daily slot,
        so a paid send after a free one is still recorded.
        """
        campaign_id = _parse_uuid(metadata.get("campaign_id"))
        advocate_id = _parse_uuid(metadata.get("advocate_id"))
        if not campaign_id or not advocate_id:
            logger.warning(f"email_send payment without campaign/advocate ids: {metadata}")
            return

        try:
            action = await self.action_repo.record(
                campaign_id=campaign_id,
                advocate_id=advocate_id,
                email_sent=True,
                sent_at=datetime.utcnow(),
                claim_daily_slot=False
            )
        except IntegrityError:
            await self.session.rollback()
            logger.warning(
                f"Could not record paid send for advocate {advocate_id} on campaign {campaign_id}: "
                f"the campaign or advocate does not exist"
            )
            return

        await self.activity_repo.log(
            actor_id=advocate_id,
            action=Actions.PAYMENT_EMAIL_SEND,
            entity_type="campaign_action",
            entity_id=action.id,
            description="Pay-per-send payment recorded",
            meta_data={"campaign_id": str(campaign_id)}
        )
