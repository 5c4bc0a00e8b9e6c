# app/db/repositories/account_repo.py
from typing import Optional
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import AdminUser
from app.db.repositories.base import BaseRepository

class AccountRepository(BaseRepository[AdminUser]):
    async def get_by_email(self, session: AsyncSession, *, email: str) -> Optional[AdminUser]:
        statement = select(AdminUser).where(AdminUser.email == email.lower())
        result = await session.execute(statement)
        return result.scalars().first()

account_repo = AccountRepository(AdminUser)
