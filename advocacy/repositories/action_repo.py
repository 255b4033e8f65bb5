"""
Campaign action repository - outreach audit trail and daily-limit ledger.
"""
import uuid
from typing import Optional, List
from datetime import datetime, date, time, timedelta

from sqlmodel import select
from sqlalchemy import func
from sqlmodel.ext.asyncio.session import AsyncSession

from advocacy.models.campaign_action import CampaignAction
from advocacy.repositories.base import BaseRepository


class CampaignActionRepository(BaseRepository[CampaignAction]):
    """Repository for CampaignAction operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(CampaignAction, session)

    async def exists_for_day(self, campaign_id: uuid.UUID, advocate_id: uuid.UUID, day: date) -> bool:
        """
        Check whether the advocate already acted on this campaign on the given day.
        Matches on sent_at so paid sends without a daily slot still count.
        """
        start = datetime.combine(day, time.min)
        query = select(CampaignAction.id).where(
            CampaignAction.campaign_id == campaign_id,
            CampaignAction.advocate_id == advocate_id,
            CampaignAction.sent_at >= start,
            CampaignAction.sent_at < start + timedelta(days=1)
        )
        result = await self.session.exec(query)
        return result.first() is not None

    async def record(
        self,
        campaign_id: uuid.UUID,
        advocate_id: uuid.UUID,
        email_sent: bool,
        sent_at: datetime,
        recipient_email: Optional[str] = None,
        personalized_message: Optional[str] = None,
        claim_daily_slot: bool = True
    ) -> CampaignAction:
        """
        Insert an action row.
        With claim_daily_slot the row takes the (campaign, advocate, day) slot and
        sqlalchemy IntegrityError is raised when it is already taken. Without it
        send_date stays NULL, which the unique constraint never compares.
        """
        return await self.create({
            "campaign_id": campaign_id,
            "advocate_id": advocate_id,
            "email_sent": email_sent,
            "sent_at": sent_at,
            "send_date": sent_at.date() if claim_daily_slot else None,
            "recipient_email": recipient_email,
            "personalized_message": personalized_message
        })

    async def latest_for_recipient(self, email: str) -> Optional[CampaignAction]:
        """Most recent action for an address, across all campaigns."""
        query = select(CampaignAction).where(
            func.lower(CampaignAction.recipient_email) == email.strip().lower()
        ).order_by(CampaignAction.sent_at.desc().nulls_last(), CampaignAction.created_at.desc()).limit(1)
        result = await self.session.exec(query)
        return result.first()

    async def mark_failed(self, action: CampaignAction) -> CampaignAction:
        """Flag an action as not delivered."""
        action.email_sent = False
        return await self.save(action)

    async def list_by_campaign(self, campaign_id: uuid.UUID) -> List[CampaignAction]:
        """All actions for a campaign, newest first."""
        return await self.list(filters={"campaign_id": campaign_id})
