"""
Outreach schemas.
"""
import uuid
from typing import Optional, Literal
from datetime import datetime
from pydantic import BaseModel


class SendEmailRequest(BaseModel):
    """Send one outreach email on behalf of an advocate."""
    campaign_id: uuid.UUID
    advocate_id: uuid.UUID
    recipient_email: str
    recipient_name: Optional[str] = None
    personalized_message: Optional[str] = None
    advocate_name: str
    advocate_email: Optional[str] = None
    email_subject: str
    email_body: str
    send_method: Literal["smtp", "oauth"] = "smtp"

    class Config:
        json_schema_extra = {
            "example": {
                "campaign_id": "550e8400-e29b-41d4-a716-446655440000",
                "advocate_id": "0b7c6a52-3f0e-4d4c-9a51-1c2b3d4e5f60",
                "recipient_email": "jane.doe@gov.example",
                "recipient_name": "Rep. Jane Doe",
                "advocate_name": "Sam Rivera",
                "email_subject": "Please support library funding",
                "email_body": "I am writing to ask you to support the library budget."
            }
        }


class SendEmailResponse(BaseModel):
    """Result of a successful send."""
    message: str = "Email sent successfully"
    sent_at: datetime

