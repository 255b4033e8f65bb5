"""
Advocate model - a person who sends outreach on a campaign's behalf.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field


class Advocate(SQLModel, table=True):
    """
    Local record for an identity-provider user.
    Created on first lookup, never deleted.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    # Identity provider subject id
    user_id: str = Field(unique=True, index=True, max_length=255)

    # Profile
    email: str = Field(max_length=255)
    name: Optional[str] = Field(default=None, max_length=255)

    # Validation fee
    validation_fee_paid: bool = Field(default=False)
    validation_expires_at: Optional[datetime] = None

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
