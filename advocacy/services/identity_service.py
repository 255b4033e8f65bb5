"""
Identity service - maps identity-provider users to local advocates.
"""
import logging
from typing import Optional, Tuple, Dict, Any

from sqlmodel.ext.asyncio.session import AsyncSession

from advocacy.core.exceptions import ValidationError
from advocacy.repositories.advocate_repo import AdvocateRepository
from advocacy.repositories.activity_repo import ActivityLogRepository
from advocacy.models.advocate import Advocate
from advocacy.models.activity import Actions
from advocacy.services.integrations.base import IdentityProvider, get_attribute
from advocacy.services.integrations.identity import get_identity_provider

logger = logging.getLogger(__name__)


class IdentityService:
    """Service for resolving advocates."""

    def __init__(self, session: AsyncSession, provider: Optional[IdentityProvider] = None):
        self.session = session
        self.provider = provider or get_identity_provider()
        self.advocate_repo = AdvocateRepository(session)
        self.activity_repo = ActivityLogRepository(session)

    async def resolve_or_create_advocate(
        self,
        user_id: str,
        email: Optional[str] = None,
        name: Optional[str] = None
    ) -> Tuple[Dict[str, Any], Advocate]:
        """
        Look the user up with the identity provider and return the profile
        with the matching advocate, creating the advocate on first sight.
        Existing advocates are returned as stored.
        """
        if not user_id:
            raise ValidationError("Missing required fields")

        # Raises IdentityNotFound / IdentityProviderError
        profile = await self.provider.get_user(user_id)

        advocate = await self.advocate_repo.get_by_user_id(user_id)
        if advocate:
            return profile, advocate

        advocate_email = email or get_attribute(profile, "email")
        if not advocate_email:
            raise ValidationError("No email available for advocate", field="email")

        advocate = await self.advocate_repo.create({
            "user_id": user_id,
            "email": advocate_email,
            "name": name or get_attribute(profile, "name")
        })
        logger.info(f"Created advocate {advocate.id} for user {user_id}")

        await self.activity_repo.log(
            actor_id=advocate.id,
            action=Actions.ADVOCATE_CREATED,
            entity_type="advocate",
            entity_id=advocate.id,
            description=f"Advocate '{advocate.email}' created"
        )

        return profile, advocate
