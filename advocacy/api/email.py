"""
Email API routes - outreach sends and delivery feedback.
"""
import json

from fastapi import APIRouter, Depends, Request

from advocacy.core.exceptions import ValidationError
from advocacy.services.outreach_service import OutreachService
from advocacy.services.feedback_service import FeedbackService
from advocacy.schemas.outreach import SendEmailRequest, SendEmailResponse
from advocacy.api.deps import get_outreach_service, get_feedback_service

router = APIRouter(prefix="/api/email", tags=["email"])


@router.post("/send", response_model=SendEmailResponse)
async def send_email(
    request: SendEmailRequest,
    outreach_service: OutreachService = Depends(get_outreach_service)
):
    """Send one personalized email for an advocate (once per campaign per day)."""
    return await outreach_service.send(request)


@router.post("/notifications")
async def delivery_notifications(
    request: Request,
    feedback_service: FeedbackService = Depends(get_feedback_service)
):
    """
    SNS endpoint for SES bounce and complaint notifications.
    SNS posts JSON with a text/plain content type, so the body is parsed here.
    """
    raw = await request.body()
    try:
        envelope = json.loads(raw or b"{}")
    except ValueError:
        raise ValidationError("Notification body is not valid JSON")

    if not isinstance(envelope, dict):
        raise ValidationError("Notification body must be a JSON object")

    return await feedback_service.handle_sns(envelope)
