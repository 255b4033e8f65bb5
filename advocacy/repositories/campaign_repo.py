"""
Campaign repository.
"""
import uuid
from typing import Optional, List
from datetime import datetime

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from advocacy.models.campaign import Campaign
from advocacy.models.campaign_action import CampaignAction
from advocacy.repositories.base import BaseRepository
from advocacy.schemas.campaign import Recipient, normalize_recipients, dump_recipients


class CampaignRepository(BaseRepository[Campaign]):
    """Repository for Campaign operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Campaign, session)

    async def create(self, obj_in: dict) -> Campaign:
        """Create a campaign in a single insert."""
        data = dict(obj_in)
        if "recipient_list" in data:
            data["recipient_list"] = dump_recipients(normalize_recipients(data["recipient_list"]))
        return await super().create(data)

    async def update(self, id: uuid.UUID, obj_in: dict) -> Optional[Campaign]:
        """Update a campaign, storing any recipient list in its canonical form."""
        data = dict(obj_in)
        if "recipient_list" in data:
            data["recipient_list"] = dump_recipients(normalize_recipients(data["recipient_list"]))
        return await super().update(id, data)

    async def list_by_organizer(self, organizer_id: Optional[uuid.UUID] = None) -> List[Campaign]:
        """List campaigns newest first, optionally for one organizer."""
        return await self.list(filters={"organizer_id": organizer_id})

    def get_recipients(self, campaign: Campaign) -> List[Recipient]:
        """Read a campaign's recipients in canonical form."""
        return normalize_recipients(campaign.recipient_list)

    async def replace_recipients(self, campaign: Campaign, recipients: List[Recipient]) -> Campaign:
        """Persist a new recipient list."""
        campaign.recipient_list = dump_recipients(recipients)
        campaign.updated_at = datetime.utcnow()
        return await self.save(campaign)

    async def update_status(self, campaign_id: uuid.UUID, status: str, **fields) -> Optional[Campaign]:
        """Set campaign status along with any extra columns."""
        campaign = await self.get(campaign_id)
        if not campaign:
            return None

        campaign.status = status
        for field, value in fields.items():
            setattr(campaign, field, value)
        campaign.updated_at = datetime.utcnow()

        return await self.save(campaign)

    async def delete(self, id: uuid.UUID) -> bool:
        """Delete a campaign together with its outreach actions."""
        campaign = await self.get(id)
        if not campaign:
            return False

        result = await self.session.exec(
            select(CampaignAction).where(CampaignAction.campaign_id == id)
        )
        for action in result.all():
            await self.session.delete(action)
        # Actions must be gone before the campaign row they reference
        await self.session.flush()

        await self.session.delete(campaign)
        await self.session.commit()
        return True
