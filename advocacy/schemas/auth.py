"""
Identity schemas.
"""
import uuid
from typing import Optional, Dict, Any
from datetime import datetime
from pydantic import BaseModel


class AdvocateLookupRequest(BaseModel):
    """Resolve an identity-provider user into a local advocate."""
    action: str = "get_user"
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "action": "get_user",
                "user_id": "us-east-1:3f1c2b7e-0000-4000-8000-000000000000",
                "email": "sam@example.org",
                "name": "Sam Rivera"
            }
        }


class AdvocateResponse(BaseModel):
    """Local advocate record."""
    id: uuid.UUID
    user_id: str
    email: str
    name: Optional[str]
    validation_fee_paid: bool
    validation_expires_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class AdvocateLookupResponse(BaseModel):
    """Identity profile plus the local advocate."""
    user: Dict[str, Any]
    advocate: AdvocateResponse
