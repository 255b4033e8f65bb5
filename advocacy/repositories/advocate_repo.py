"""
Advocate repository.
"""
from typing import Optional
from datetime import datetime

from sqlmodel.ext.asyncio.session import AsyncSession

from advocacy.models.advocate import Advocate
from advocacy.repositories.base import BaseRepository


class AdvocateRepository(BaseRepository[Advocate]):
    """Repository for Advocate operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Advocate, session)

    async def get_by_user_id(self, user_id: str) -> Optional[Advocate]:
        """Get advocate by identity-provider subject id."""
        return await self.get_by_field("user_id", user_id)

    async def mark_validated(self, user_id: str, expires_at: datetime) -> Optional[Advocate]:
        """Record a paid validation fee."""
        advocate = await self.get_by_user_id(user_id)
        if not advocate:
            return None

        advocate.validation_fee_paid = True
        advocate.validation_expires_at = expires_at
        return await self.save(advocate)
