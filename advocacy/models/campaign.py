"""
Campaign model - an advocacy effort with a bounded recipient list.
Supports pay-per-send and unlimited (subscription) billing modes.
"""
import uuid
from datetime import datetime
from typing import Optional, List, Dict

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from sqlalchemy.dialects.postgresql import JSONB

# JSONB on Postgres, plain JSON elsewhere
JSONType = JSON().with_variant(JSONB(), "postgresql")


class CampaignType:
    PAY_PER_SEND = "pay-per-send"
    UNLIMITED = "unlimited"

    ALL = (PAY_PER_SEND, UNLIMITED)


class CampaignStatus:
    ACTIVE = "active"
    INACTIVE = "inactive"

    ALL = (ACTIVE, INACTIVE)


class Campaign(SQLModel, table=True):
    """
    Campaign entity - message template plus recipient list.
    The id is assigned before insert so share links can be built in one write.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    organizer_id: uuid.UUID = Field(index=True)

    # Message
    title: str = Field(max_length=255)
    email_subject: str = Field(max_length=255)
    email_body: str

    # Recipients, stored as [{"name": ..., "email": ...}]
    recipient_list: List[Dict[str, Optional[str]]] = Field(
        default_factory=list, sa_column=Column(JSONType, nullable=False)
    )
    max_recipients: int = Field(default=200)

    # Type and status
    campaign_type: str = Field(default=CampaignType.PAY_PER_SEND, index=True)
    status: str = Field(default=CampaignStatus.ACTIVE, index=True)
    reactivation_fee_paid: bool = Field(default=False)

    # Sharing
    campaign_url: Optional[str] = None
    qr_code_url: Optional[str] = None

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    expires_at: Optional[datetime] = None
