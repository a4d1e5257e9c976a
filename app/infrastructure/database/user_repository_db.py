"""DB-backed user repository."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.database.models import UserRow
from app.infrastructure.database.repository import AsyncRepository


class DbUserRepository:
    """Users table access over one AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._rows = AsyncRepository(UserRow)

    async def get(self, user_id: UUID) -> Optional[UserRow]:
        return await self._rows.get_by_id(self._session, user_id)

    async def get_by_email(self, email: str) -> Optional[UserRow]:
        return await self._rows.find_one_by(self._session, email=email)

    async def add(self, user: UserRow) -> UserRow:
        return await self._rows.create(self._session, user)

    async def save(self, user: UserRow) -> UserRow:
        return await self._rows.save(self._session, user)

    async def remove(self, user: UserRow) -> None:
        await self._rows.delete(self._session, user)

    async def list_all(self) -> List[UserRow]:
        """Oldest first, so listings are stable as users are added."""
        return await self._rows.list_all(self._session, newest_first=False)
