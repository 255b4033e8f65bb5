"""
Feedback service - SES bounce and complaint handling.

Notifications arrive through an SNS HTTP subscription and are only acted on
once their SNS signature checks out. Hard bounces and complaints remove the
address from the campaign it was last sent for; transient bounces are only
recorded.
"""
import json
import logging
from typing import Optional, List, Tuple, Dict, Any

import httpx
from sqlmodel.ext.asyncio.session import AsyncSession

from advocacy.core.exceptions import ExternalServiceError, SignatureVerificationError, ValidationError
from advocacy.core.security import SNSMessageVerifier, is_sns_url
from advocacy.repositories.action_repo import CampaignActionRepository
from advocacy.repositories.campaign_repo import CampaignRepository
from advocacy.repositories.activity_repo import ActivityLogRepository
from advocacy.models.activity import Actions

logger = logging.getLogger(__name__)


class FeedbackKind:
    HARD_BOUNCE = "hard_bounce"
    SOFT_BOUNCE = "soft_bounce"
    COMPLAINT = "complaint"

    # Kinds that remove the address from the recipient list
    PRUNING = (HARD_BOUNCE, COMPLAINT)


def classify_notification(message: Dict[str, Any]) -> List[Tuple[str, str]]:
    """
    Turn an SES notification into (address, kind) pairs.
    Handles both notification payloads (notificationType) and
    configuration-set event payloads (eventType).
    """
    notification_type = message.get("notificationType") or message.get("eventType")
    affected = []

    if notification_type == "Bounce":
        bounce = message.get("bounce") or {}
        for recipient in bounce.get("bouncedRecipients") or []:
            address = recipient.get("emailAddress")
            if not address:
                continue
            bounce_type = recipient.get("bounceType") or bounce.get("bounceType")
            kind = FeedbackKind.HARD_BOUNCE if bounce_type == "Permanent" else FeedbackKind.SOFT_BOUNCE
            affected.append((address, kind))

    elif notification_type == "Complaint":
        complaint = message.get("complaint") or {}
        for recipient in complaint.get("complainedRecipients") or []:
            address = recipient.get("emailAddress")
            if address:
                affected.append((address, FeedbackKind.COMPLAINT))

    return affected


def unwrap_sns(envelope: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
    """
    Split an SNS HTTP delivery into its type and payload.
    Anything without an SNS Type, bare SES payloads included, is rejected.
    """
    sns_type = envelope.get("Type")
    if not sns_type:
        raise SignatureVerificationError("Not an SNS message")

    if sns_type == "Notification":
        try:
            message = json.loads(envelope.get("Message") or "{}")
        except (TypeError, ValueError):
            raise ValidationError("SNS message is not valid JSON")
        if not isinstance(message, dict):
            raise ValidationError("SNS message must be a JSON object")
        return sns_type, message

    return sns_type, envelope


class FeedbackService:
    """Service for delivery feedback."""

    def __init__(
        self,
        session: AsyncSession,
        http_client: Optional[httpx.AsyncClient] = None,
        verifier: Optional[SNSMessageVerifier] = None
    ):
        self.session = session
        self.http_client = http_client
        self.verifier = verifier or SNSMessageVerifier(http_client=http_client)
        self.action_repo = CampaignActionRepository(session)
        self.campaign_repo = CampaignRepository(session)
        self.activity_repo = ActivityLogRepository(session)

    async def handle_sns(self, envelope: Dict[str, Any]) -> Dict[str, Any]:
        """Entry point for an SNS HTTP delivery. Nothing is applied before the signature is verified."""
        sns_type, payload = unwrap_sns(envelope)
        await self.verifier.verify(envelope)

        if sns_type == "SubscriptionConfirmation":
            await self.confirm_subscription(payload.get("SubscribeURL"))
            return {"message": "Subscription confirmed"}

        if sns_type == "Notification":
            processed = await self.process_notification(payload)
            return {"message": "Bounce handled successfully", "processed": processed}

        logger.info(f"Ignoring SNS message of type {sns_type}")
        return {"message": "Ignored"}

    async def confirm_subscription(self, subscribe_url: Optional[str]) -> None:
        if not is_sns_url(subscribe_url):
            raise ValidationError("Invalid SubscribeURL")

        try:
            if self.http_client:
                response = await self.http_client.get(subscribe_url)
            else:
                async with httpx.AsyncClient(timeout=10.0) as client:
                    response = await client.get(subscribe_url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"SNS subscription confirmation failed: {e}")
            raise ExternalServiceError("SNS", str(e))

        logger.info("SNS subscription confirmed")

    async def process_notification(self, message: Dict[str, Any]) -> int:
        """
        Apply an SES notification. Returns how many addresses matched an action.
        Safe to replay: pruning filters by membership.
        """
        processed = 0
        for address, kind in classify_notification(message):
            if await self.apply(address, kind):
                processed += 1
        return processed

    async def apply(self, address: str, kind: str) -> bool:
        """Apply one feedback event to the latest action for an address."""
        action = await self.action_repo.latest_for_recipient(address)
        if not action:
            logger.info(f"No campaign action for {address}, ignoring {kind}")
            return False

        if kind not in FeedbackKind.PRUNING:
            logger.info(f"Transient bounce for {address} in campaign {action.campaign_id}")
            await self.activity_repo.log(
                action=Actions.BOUNCE_TRANSIENT,
                entity_type="campaign_action",
                entity_id=action.id,
                description=f"Transient bounce for {address}",
                meta_data={"recipient_email": address, "campaign_id": str(action.campaign_id)}
            )
            return True

        campaign = await self.campaign_repo.get(action.campaign_id)
        removed = 0
        if campaign:
            recipients = self.campaign_repo.get_recipients(campaign)
            remaining = [r for r in recipients if not r.matches(address)]
            removed = len(recipients) - len(remaining)
            if removed:
                await self.campaign_repo.replace_recipients(campaign, remaining)

            # TODO: email the organizer once organizer notifications exist
            logger.info(
                f"{kind} for {address} in campaign {campaign.id}; "
                f"removed {removed} recipient(s). Notifying organizer {campaign.organizer_id}"
            )

        if action.email_sent:
            await self.action_repo.mark_failed(action)

        await self.activity_repo.log(
            actor_id=campaign.organizer_id if campaign else None,
            action=Actions.COMPLAINT if kind == FeedbackKind.COMPLAINT else Actions.BOUNCE_PERMANENT,
            entity_type="campaign",
            entity_id=action.campaign_id,
            description=f"{address} removed after {kind.replace('_', ' ')}",
            meta_data={"recipient_email": address, "removed": removed, "action_id": str(action.id)}
        )
        return True
