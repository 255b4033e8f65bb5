"""
Activity log repository.
"""
import uuid
from typing import Optional, List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from advocacy.models.activity import ActivityLog
from advocacy.repositories.base import BaseRepository


class ActivityLogRepository(BaseRepository[ActivityLog]):
    """Append-only audit feed."""

    def __init__(self, session: AsyncSession):
        super().__init__(ActivityLog, session)

    async def log(
        self,
        action: str,
        entity_type: str,
        entity_id: Optional[uuid.UUID] = None,
        actor_id: Optional[uuid.UUID] = None,
        description: Optional[str] = None,
        meta_data: Optional[dict] = None
    ) -> ActivityLog:
        """Record one event. See Actions for the known action names."""
        return await self.save(ActivityLog(
            actor_id=actor_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            meta_data=meta_data or {}
        ))

    async def get_by_entity(self, entity_type: str, entity_id: uuid.UUID, limit: int = 50) -> List[ActivityLog]:
        """Events about one row, newest first."""
        query = (
            select(ActivityLog)
            .where(ActivityLog.entity_type == entity_type, ActivityLog.entity_id == entity_id)
            .order_by(ActivityLog.created_at.desc())
            .limit(limit)
        )
        result = await self.session.exec(query)
        return result.all()
