"""
Payment schemas.
"""
import uuid
from typing import Optional, Dict, Any
from pydantic import BaseModel


class PaymentType:
    VALIDATION_FEE = "validation_fee"
    CAMPAIGN_UNLIMITED = "campaign_unlimited"
    EMAIL_SEND = "email_send"
    CAMPAIGN_REACTIVATION = "campaign_reactivation"
    DONATION = "donation"

    # Tag written on subscription checkouts
    CAMPAIGN_SUBSCRIPTION = "campaign_subscription"

    ALL = (VALIDATION_FEE, CAMPAIGN_UNLIMITED, EMAIL_SEND, CAMPAIGN_REACTIVATION, DONATION)


class CheckoutRequest(BaseModel):
    """Create a hosted checkout session."""
    payment_type: Optional[str] = None
    amount: Optional[float] = None  # Major currency units; only priced for donations
    currency: str = "usd"
    user_id: Optional[str] = None
    campaign_id: Optional[uuid.UUID] = None
    advocate_id: Optional[uuid.UUID] = None
    metadata: Dict[str, Any] = {}

    class Config:
        json_schema_extra = {
            "example": {
                "payment_type": "donation",
                "amount": 25,
                "currency": "usd",
                "campaign_id": "550e8400-e29b-41d4-a716-446655440000",
                "metadata": {"description": "Thanks for organizing"}
            }
        }


class CheckoutResponse(BaseModel):
    """Provider-hosted checkout reference."""
    sessionId: str
    url: Optional[str] = None


class WebhookAck(BaseModel):
    """Webhook acknowledgment."""
    received: bool = True
