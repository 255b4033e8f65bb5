"""
Campaign service - campaign registry and share links.
"""
import uuid
import logging
from typing import Optional, List, Union, Type, TypeVar
from urllib.parse import quote

from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlmodel.ext.asyncio.session import AsyncSession

from advocacy.config import settings
from advocacy.core.exceptions import NotFoundError, ValidationError
from advocacy.repositories.campaign_repo import CampaignRepository
from advocacy.repositories.activity_repo import ActivityLogRepository
from advocacy.models.campaign import Campaign, CampaignType, CampaignStatus
from advocacy.models.activity import Actions
from advocacy.schemas.campaign import CampaignCreate, CampaignUpdate

logger = logging.getLogger(__name__)

SchemaType = TypeVar("SchemaType", bound=BaseModel)

# Columns a patch may never touch
IMMUTABLE_FIELDS = frozenset({"id", "created_at"})

# Columns a patch may not clear
NON_NULLABLE_FIELDS = frozenset({
    "title", "email_subject", "email_body", "recipient_list",
    "campaign_type", "status", "max_recipients", "reactivation_fee_paid"
})


def build_campaign_url(campaign_id: uuid.UUID) -> str:
    """Public share link for a campaign."""
    return f"{settings.FRONTEND_URL.rstrip('/')}/campaign/{campaign_id}"


def build_qr_code_url(campaign_url: str) -> str:
    """Scannable code image that encodes the share link."""
    return f"{settings.QR_CODE_SERVICE_URL}?size=300x300&data={quote(campaign_url, safe='')}"


def parse_payload(schema: Type[SchemaType], data: Union[SchemaType, dict]) -> SchemaType:
    """Validate a raw payload, reporting problems as ValidationError."""
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise ValidationError(f"Invalid or missing fields: {', '.join(fields)}")


class CampaignService:
    """Service for campaign operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.campaign_repo = CampaignRepository(session)
        self.activity_repo = ActivityLogRepository(session)

    async def create(self, campaign_data: Union[CampaignCreate, dict]) -> Campaign:
        """
        Create a new campaign.
        The id is generated up front so the share link and QR code
        are part of the one and only insert.
        """
        campaign_data = parse_payload(CampaignCreate, campaign_data)

        if not all([campaign_data.title, campaign_data.email_subject, campaign_data.email_body]):
            raise ValidationError("Missing required fields")

        if len(campaign_data.recipient_list) > settings.MAX_RECIPIENTS:
            raise ValidationError(f"Recipient list cannot exceed {settings.MAX_RECIPIENTS} emails")

        if campaign_data.campaign_type not in CampaignType.ALL:
            raise ValidationError(f"Unknown campaign type '{campaign_data.campaign_type}'", field="campaign_type")

        campaign_id = uuid.uuid4()
        campaign_url = build_campaign_url(campaign_id)

        data = campaign_data.model_dump()
        data.update({
            "id": campaign_id,
            "status": CampaignStatus.ACTIVE,
            "max_recipients": settings.MAX_RECIPIENTS,
            "campaign_url": campaign_url,
            "qr_code_url": build_qr_code_url(campaign_url)
        })

        campaign = await self.campaign_repo.create(data)
        logger.info(f"Campaign {campaign.id} created by organizer {campaign.organizer_id}")

        # Log activity
        await self.activity_repo.log(
            actor_id=campaign.organizer_id,
            action=Actions.CAMPAIGN_CREATED,
            entity_type="campaign",
            entity_id=campaign.id,
            description=f"Campaign '{campaign.title}' created",
            meta_data={"recipients": len(campaign.recipient_list), "campaign_type": campaign.campaign_type}
        )

        return campaign

    async def get(self, campaign_id: uuid.UUID) -> Optional[Campaign]:
        """Get a campaign by ID, or None when absent."""
        return await self.campaign_repo.get(campaign_id)

    async def list(self, organizer_id: Optional[uuid.UUID] = None) -> List[Campaign]:
        """List campaigns newest first, optionally for one organizer."""
        return await self.campaign_repo.list_by_organizer(organizer_id)

    async def update(
        self,
        campaign_id: uuid.UUID,
        campaign_data: Union[CampaignUpdate, dict]
    ) -> Campaign:
        """Apply a partial update."""
        if isinstance(campaign_data, dict):
            immutable = IMMUTABLE_FIELDS.intersection(campaign_data)
            if immutable:
                raise ValidationError(f"Cannot update {', '.join(sorted(immutable))}")
        campaign_data = parse_payload(CampaignUpdate, campaign_data)

        update_data = campaign_data.model_dump(exclude_unset=True)
        if not update_data:
            raise ValidationError("No fields to update")

        cleared = sorted(f for f in NON_NULLABLE_FIELDS if f in update_data and update_data[f] is None)
        if cleared:
            raise ValidationError(f"Cannot clear {', '.join(cleared)}")

        if "recipient_list" in update_data and len(update_data["recipient_list"]) > settings.MAX_RECIPIENTS:
            raise ValidationError(f"Recipient list cannot exceed {settings.MAX_RECIPIENTS} emails")

        if "status" in update_data and update_data["status"] not in CampaignStatus.ALL:
            raise ValidationError(f"Unknown status '{update_data['status']}'", field="status")

        if "campaign_type" in update_data and update_data["campaign_type"] not in CampaignType.ALL:
            raise ValidationError(f"Unknown campaign type '{update_data['campaign_type']}'", field="campaign_type")

        current = await self.campaign_repo.get(campaign_id)
        if not current:
            raise NotFoundError("Campaign", str(campaign_id))

        cap = update_data.get("max_recipients", current.max_recipients)
        if "max_recipients" in update_data and not 1 <= cap <= settings.MAX_RECIPIENTS:
            raise ValidationError(f"must be between 1 and {settings.MAX_RECIPIENTS}", field="max_recipients")

        recipients = update_data.get("recipient_list", current.recipient_list)
        if len(recipients) > cap:
            if "recipient_list" in update_data:
                raise ValidationError(f"Recipient list cannot exceed {cap} emails")
            raise ValidationError(f"cannot be below the {len(recipients)} listed recipients", field="max_recipients")

        campaign = await self.campaign_repo.update(campaign_id, update_data)
        if not campaign:
            raise NotFoundError("Campaign", str(campaign_id))

        # Log activity
        await self.activity_repo.log(
            actor_id=campaign.organizer_id,
            action=Actions.CAMPAIGN_UPDATED,
            entity_type="campaign",
            entity_id=campaign_id,
            description=f"Campaign '{campaign.title}' updated",
            meta_data={"fields": sorted(update_data)}
        )

        return campaign

    async def delete(self, campaign_id: uuid.UUID) -> bool:
        """
        Delete a campaign and its outreach actions.
        Deleting a campaign that does not exist is not an error.
        """
        campaign = await self.campaign_repo.get(campaign_id)
        if not campaign:
            return False

        campaign_title = campaign.title
        organizer_id = campaign.organizer_id
        success = await self.campaign_repo.delete(campaign_id)

        if success:
            logger.info(f"Campaign {campaign_id} deleted")
            await self.activity_repo.log(
                actor_id=organizer_id,
                action=Actions.CAMPAIGN_DELETED,
                entity_type="campaign",
                entity_id=campaign_id,
                description=f"Campaign '{campaign_title}' deleted"
            )

        return success
