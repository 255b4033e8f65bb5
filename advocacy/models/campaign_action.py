"""
CampaignAction model - one outreach attempt.
Doubles as the audit trail and the daily send-limit ledger.
"""
import uuid
from datetime import datetime, date
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint


class CampaignAction(SQLModel, table=True):
    """
    Record of an advocate emailing a recipient for a campaign.
    At most one row per (campaign, advocate, calendar day).
    """
    __tablename__ = "campaign_action"
    __table_args__ = (
        UniqueConstraint("campaign_id", "advocate_id", "send_date", name="uq_campaign_action_daily"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    campaign_id: uuid.UUID = Field(foreign_key="campaign.id", index=True)
    advocate_id: uuid.UUID = Field(foreign_key="advocate.id", index=True)

    # Outcome
    email_sent: bool = Field(default=False)
    sent_at: Optional[datetime] = Field(default=None, index=True)
    send_date: Optional[date] = None  # sent_at truncated to the UTC day

    # What was sent
    recipient_email: Optional[str] = Field(default=None, index=True, max_length=255)
    personalized_message: Optional[str] = None

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
