"""
Activity log model - audit trail for campaign, outreach and billing events.
"""
import uuid
from datetime import datetime
from typing import Optional, Dict, Any

from sqlmodel import SQLModel, Field
from sqlalchemy import Column

from advocacy.models.campaign import JSONType


class ActivityLog(SQLModel, table=True):
    """
    Activity log for tracking significant actions.
    Also holds informational records such as transient bounces.
    """
    __tablename__ = "activity_log"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    actor_id: Optional[uuid.UUID] = Field(default=None, index=True)

    # Action details
    action: str = Field(index=True)  # campaign_created, email_sent, bounce_permanent, etc.
    entity_type: str = Field(index=True)  # campaign, campaign_action, advocate
    entity_id: Optional[uuid.UUID] = None

    # Human-readable description
    description: Optional[str] = None

    # Additional metadata
    meta_data: Dict[str, Any] = Field(default={}, sa_column=Column(JSONType))
    # Example: {"recipient_email": "rep@gov.example", "bounce_type": "Transient"}

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)


# Action constants for consistency
class Actions:
    # Campaign actions
    CAMPAIGN_CREATED = "campaign_created"
    CAMPAIGN_UPDATED = "campaign_updated"
    CAMPAIGN_DELETED = "campaign_deleted"
    CAMPAIGN_ACTIVATED = "campaign_activated"
    CAMPAIGN_DEACTIVATED = "campaign_deactivated"

    # Outreach actions
    EMAIL_SENT = "email_sent"
    EMAIL_FAILED = "email_failed"

    # Advocate actions
    ADVOCATE_CREATED = "advocate_created"
    ADVOCATE_VALIDATED = "advocate_validated"

    # Billing actions
    PAYMENT_EMAIL_SEND = "payment_email_send"

    # Delivery feedback
    BOUNCE_PERMANENT = "bounce_permanent"
    BOUNCE_TRANSIENT = "bounce_transient"
    COMPLAINT = "complaint"
