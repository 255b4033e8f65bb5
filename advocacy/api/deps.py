"""
API dependencies - shared across all routes.
"""
from fastapi import Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from advocacy.core.security import SNSMessageVerifier
from advocacy.database import get_session
from advocacy.services.billing_service import BillingService
from advocacy.services.campaign_service import CampaignService
from advocacy.services.feedback_service import FeedbackService
from advocacy.services.identity_service import IdentityService
from advocacy.services.outreach_service import OutreachService

# Shared so signing certificates are fetched once per process
sns_verifier = SNSMessageVerifier()


def get_campaign_service(session: AsyncSession = Depends(get_session)) -> CampaignService:
    return CampaignService(session)


def get_identity_service(session: AsyncSession = Depends(get_session)) -> IdentityService:
    return IdentityService(session)


def get_outreach_service(session: AsyncSession = Depends(get_session)) -> OutreachService:
    return OutreachService(session)


def get_billing_service(session: AsyncSession = Depends(get_session)) -> BillingService:
    return BillingService(session)


def get_feedback_service(session: AsyncSession = Depends(get_session)) -> FeedbackService:
    return FeedbackService(session, verifier=sns_verifier)
