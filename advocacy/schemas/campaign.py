"""
Campaign schemas.
Recipients are always handled as List[Recipient] in memory; conversion to
and from the stored JSON form happens only at the repository boundary.
"""
import json
import uuid
from typing import Optional, List, Any
from datetime import datetime
from pydantic import BaseModel, field_validator


class Recipient(BaseModel):
    """A government contact on a campaign's recipient list."""
    name: Optional[str] = None
    email: str

    @field_validator("email")
    @classmethod
    def strip_email(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("email must not be empty")
        return value

    def matches(self, email: str) -> bool:
        return self.email.lower() == email.strip().lower()


def normalize_recipients(value: Any) -> List[Recipient]:
    """Coerce a stored or submitted recipient list into its canonical form."""
    if value is None:
        return []
    if isinstance(value, (str, bytes)):
        value = json.loads(value)
    return [r if isinstance(r, Recipient) else Recipient.model_validate(r) for r in value]


def dump_recipients(recipients: List[Recipient]) -> List[dict]:
    """Serialize recipients for the JSON column."""
    return [r.model_dump() for r in recipients]


class CampaignCreate(BaseModel):
    """Create a new campaign."""
    organizer_id: uuid.UUID
    title: str
    email_subject: str
    email_body: str
    recipient_list: List[Recipient]
    campaign_type: str = "pay-per-send"
    expires_at: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "organizer_id": "550e8400-e29b-41d4-a716-446655440000",
                "title": "Fund the county library",
                "email_subject": "Please support library funding",
                "email_body": "I am writing to ask you to support the library budget.",
                "recipient_list": [
                    {"name": "Rep. Jane Doe", "email": "jane.doe@gov.example"}
                ],
                "campaign_type": "pay-per-send"
            }
        }


class CampaignUpdate(BaseModel):
    """Update an existing campaign. Only these fields may change."""
    title: Optional[str] = None
    email_subject: Optional[str] = None
    email_body: Optional[str] = None
    recipient_list: Optional[List[Recipient]] = None
    campaign_type: Optional[str] = None
    status: Optional[str] = None
    expires_at: Optional[datetime] = None
    max_recipients: Optional[int] = None
    reactivation_fee_paid: Optional[bool] = None

    class Config:
        extra = "forbid"


class CampaignResponse(BaseModel):
    """Campaign response."""
    id: uuid.UUID
    organizer_id: uuid.UUID
    title: str
    email_subject: str
    email_body: str
    recipient_list: List[Recipient]
    campaign_type: str
    status: str
    created_at: datetime
    updated_at: datetime
    expires_at: Optional[datetime]
    qr_code_url: Optional[str]
    campaign_url: Optional[str]
    max_recipients: int
    reactivation_fee_paid: bool

    class Config:
        from_attributes = True
