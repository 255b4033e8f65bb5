"""
Campaigns API routes.
"""
import uuid
from typing import Optional, List, Dict, Any
from fastapi import APIRouter, Body, Depends, Query

from advocacy.services.campaign_service import CampaignService
from advocacy.schemas.campaign import CampaignCreate, CampaignResponse
from advocacy.schemas.common import MessageResponse
from advocacy.api.deps import get_campaign_service

router = APIRouter(prefix="/api/campaigns", tags=["campaigns"])


@router.post("/", response_model=CampaignResponse, status_code=201)
async def create_campaign(
    campaign_data: CampaignCreate,
    campaign_service: CampaignService = Depends(get_campaign_service)
):
    """Create a new campaign with its share link and QR code."""
    return await campaign_service.create(campaign_data)


@router.get("/", response_model=List[CampaignResponse])
async def list_campaigns(
    organizer_id: Optional[uuid.UUID] = Query(None),
    campaign_service: CampaignService = Depends(get_campaign_service)
):
    """List campaigns, newest first."""
    return await campaign_service.list(organizer_id)


@router.get("/{campaign_id}", response_model=Optional[CampaignResponse])
async def get_campaign(
    campaign_id: uuid.UUID,
    campaign_service: CampaignService = Depends(get_campaign_service)
):
    """Get a campaign by ID. Answers null when it does not exist."""
    return await campaign_service.get(campaign_id)


@router.put("/{campaign_id}", response_model=CampaignResponse)
@router.patch("/{campaign_id}", response_model=CampaignResponse)
async def update_campaign(
    campaign_id: uuid.UUID,
    campaign_data: Dict[str, Any] = Body(...),
    campaign_service: CampaignService = Depends(get_campaign_service)
):
    """Update the supplied fields of a campaign."""
    return await campaign_service.update(campaign_id, campaign_data)


@router.delete("/{campaign_id}", response_model=MessageResponse)
async def delete_campaign(
    campaign_id: uuid.UUID,
    campaign_service: CampaignService = Depends(get_campaign_service)
):
    """Delete a campaign and its outreach history."""
    await campaign_service.delete(campaign_id)
    return MessageResponse(message="Campaign deleted successfully")
