"""
Payments API routes - checkout sessions and Stripe webhooks.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Header, Request

from advocacy.services.billing_service import BillingService
from advocacy.schemas.payment import CheckoutRequest, CheckoutResponse, WebhookAck
from advocacy.api.deps import get_billing_service

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout_session(
    checkout_data: CheckoutRequest,
    billing_service: BillingService = Depends(get_billing_service)
):
    """Create a Stripe checkout session for a fee, subscription or donation."""
    return await billing_service.create_checkout_session(checkout_data)


@router.post("/webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="Stripe-Signature"),
    billing_service: BillingService = Depends(get_billing_service)
):
    """Reconcile a Stripe event. The raw body is needed for signature checks."""
    payload = await request.body()
    return await billing_service.reconcile(payload, stripe_signature)
