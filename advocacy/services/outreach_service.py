"""
Outreach service - personalized sends with a once-per-day limit.
"""
import logging
from typing import Optional, Union
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlmodel.ext.asyncio.session import AsyncSession

from advocacy.core.exceptions import (
    CampaignInactiveError,
    DeliveryFailedError,
    ExternalServiceError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from advocacy.repositories.action_repo import CampaignActionRepository
from advocacy.repositories.advocate_repo import AdvocateRepository
from advocacy.repositories.campaign_repo import CampaignRepository
from advocacy.repositories.activity_repo import ActivityLogRepository
from advocacy.models.campaign import CampaignStatus
from advocacy.models.activity import Actions
from advocacy.schemas.outreach import SendEmailRequest, SendEmailResponse
from advocacy.services.campaign_service import parse_payload
from advocacy.services.integrations.base import EmailProvider
from advocacy.services.integrations.email import get_email_provider

logger = logging.getLogger(__name__)


def personalize_message(body: str, advocate_name: str, recipient_name: Optional[str] = None) -> str:
    """Wrap a message body in a greeting and a signature."""
    greeting = f"Dear {recipient_name}," if recipient_name else "Dear Representative,"
    return f"{greeting}\n\n{body}\n\nSincerely,\n{advocate_name}"


class OutreachService:
    """Service for sending campaign emails."""

    def __init__(self, session: AsyncSession, provider: Optional[EmailProvider] = None):
        self.session = session
        self.provider = provider or get_email_provider()
        self.action_repo = CampaignActionRepository(session)
        self.advocate_repo = AdvocateRepository(session)
        self.campaign_repo = CampaignRepository(session)
        self.activity_repo = ActivityLogRepository(session)

    async def send(self, request: Union[SendEmailRequest, dict]) -> SendEmailResponse:
        """
        Send one email for an advocate.

        Every attempt that reaches the provider is recorded, including
        failures; a failed delivery raises DeliveryFailedError only after
        the action row exists.
        """
        request = parse_payload(SendEmailRequest, request)

        required = [request.recipient_email, request.advocate_name, request.email_subject, request.email_body]
        if not all(value and value.strip() for value in required):
            raise ValidationError("Missing required fields")

        now = datetime.utcnow()
        if await self.action_repo.exists_for_day(request.campaign_id, request.advocate_id, now.date()):
            raise RateLimitError()

        campaign = await self.campaign_repo.get(request.campaign_id)
        if not campaign:
            raise NotFoundError("Campaign", str(request.campaign_id))

        if campaign.status != CampaignStatus.ACTIVE:
            raise CampaignInactiveError()

        if not await self.advocate_repo.exists(request.advocate_id):
            raise NotFoundError("Advocate", str(request.advocate_id))

        message_body = request.personalized_message or request.email_body
        final_body = personalize_message(message_body, request.advocate_name, request.recipient_name)

        if request.send_method == "oauth":
            # TODO: send through the advocate's own Gmail/Outlook account once OAuth is wired up
            logger.info("OAuth sending not yet implemented, using email provider")

        email_sent = False
        error_message = None
        try:
            await self.provider.send(
                to=request.recipient_email,
                subject=request.email_subject,
                body=final_body,
                from_email=request.advocate_email,
                from_name=request.advocate_name
            )
            email_sent = True
        except ExternalServiceError as e:
            logger.error(f"Send failed for campaign {campaign.id} to {request.recipient_email}: {e.message}")
            error_message = e.detail or e.message

        try:
            action = await self.action_repo.record(
                campaign_id=campaign.id,
                advocate_id=request.advocate_id,
                email_sent=email_sent,
                sent_at=now,
                recipient_email=request.recipient_email,
                personalized_message=message_body
            )
        except IntegrityError:
            # Lost the race to a concurrent send for the same day
            await self.session.rollback()
            logger.warning(
                f"Duplicate same-day send for campaign {request.campaign_id} by advocate {request.advocate_id}"
            )
            raise RateLimitError()

        await self.activity_repo.log(
            actor_id=request.advocate_id,
            action=Actions.EMAIL_SENT if email_sent else Actions.EMAIL_FAILED,
            entity_type="campaign_action",
            entity_id=action.id,
            description=f"Email to {request.recipient_email} {'sent' if email_sent else 'failed'}",
            meta_data={"campaign_id": str(campaign.id), "error": error_message} if error_message
            else {"campaign_id": str(campaign.id)}
        )

        if not email_sent:
            raise DeliveryFailedError(error_message)

        return SendEmailResponse(sent_at=now)
