# app/db/repositories/base.py
from typing import Generic, Type, TypeVar, Optional
from sqlmodel import SQLModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.errors import DatabaseError

ModelType = TypeVar("ModelType", bound=SQLModel)

logger = get_logger("repositories")


class BaseRepository(Generic[ModelType]):
    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def get(self, session: AsyncSession, id: str) -> Optional[ModelType]:
        return await session.get(self.model, id)

    async def create(self, session: AsyncSession, *, obj_in: ModelType) -> ModelType:
        return await self._commit(session, obj_in)

    async def save(self, session: AsyncSession, *, obj: ModelType) -> ModelType:
        """Persist changes made to an already loaded instance."""
        return await self._commit(session, obj)

    async def _commit(self, session: AsyncSession, obj: ModelType) -> ModelType:
        session.add(obj)
        try:
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Failed to persist {self.model.__name__}: {e}")
            raise DatabaseError(f"Could not save {self.model.__name__}") from e
        await session.refresh(obj)
        return obj

