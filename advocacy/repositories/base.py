"""
Base repository with generic CRUD operations.
Every write commits immediately; services never hold a transaction open
across provider calls.
"""
import uuid
from typing import TypeVar, Generic, Type, Optional, List, Any, Dict
from datetime import datetime

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository over one SQLModel table.
    Inherit and pass the model class.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def save(self, db_obj: ModelType) -> ModelType:
        """Persist a new or modified row and reload it."""
        self.session.add(db_obj)
        await self.session.commit()
        await self.session.refresh(db_obj)
        return db_obj

    async def create(self, obj_in: Dict[str, Any]) -> ModelType:
        return await self.save(self.model(**obj_in))

    async def get(self, id: uuid.UUID) -> Optional[ModelType]:
        return await self.session.get(self.model, id)

    async def get_by_field(self, field: str, value: Any) -> Optional[ModelType]:
        """First row whose column equals value."""
        result = await self.session.exec(select(self.model).where(getattr(self.model, field) == value))
        return result.first()

    async def list(
        self,
        filters: Optional[Dict[str, Any]] = None,
        order_by: str = "created_at",
        order_desc: bool = True
    ) -> List[ModelType]:
        """Rows matching every non-None filter, newest first by default."""
        query = select(self.model)
        for field, value in (filters or {}).items():
            if value is not None and hasattr(self.model, field):
                query = query.where(getattr(self.model, field) == value)

        column = getattr(self.model, order_by, None)
        if column is not None:
            query = query.order_by(column.desc() if order_desc else column)

        result = await self.session.exec(query)
        return result.all()

    async def update(self, id: uuid.UUID, obj_in: Dict[str, Any]) -> Optional[ModelType]:
        """
        Set every key in obj_in, None included. Keys that are not columns
        are ignored; callers validate the patch first.
        """
        db_obj = await self.get(id)
        if not db_obj:
            return None

        for field, value in obj_in.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)
        if hasattr(db_obj, "updated_at"):
            db_obj.updated_at = datetime.utcnow()

        return await self.save(db_obj)

    async def delete(self, id: uuid.UUID) -> bool:
        db_obj = await self.get(id)
        if not db_obj:
            return False

        await self.session.delete(db_obj)
        await self.session.commit()
        return True

    async def exists(self, id: uuid.UUID) -> bool:
        return await self.get(id) is not None
