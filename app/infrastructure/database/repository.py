# app/infrastructure/database/repository.py

from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

RowT = TypeVar("RowT")


class AsyncRepository(Generic[RowT]):
    """Generic row access for one ORM model. Every write commits; the caller owns the session."""

    def __init__(self, model: Type[RowT]):
        self.model = model

    async def get_by_id(self, db: AsyncSession, row_id: Any) -> Optional[RowT]:
        return await self.find_one_by(db, id=row_id)

    async def find_one_by(self, db: AsyncSession, **criteria: Any) -> Optional[RowT]:
        conditions = [getattr(self.model, name) == value for name, value in criteria.items()]
        result = await db.execute(select(self.model).where(*conditions).limit(1))
        return result.scalar_one_or_none()

    async def create(self, db: AsyncSession, obj: RowT) -> RowT:
        db.add(obj)
        await db.commit()
        await db.refresh(obj)
        return obj

    async def save(self, db: AsyncSession, obj: RowT) -> RowT:
        """Flush pending attribute changes on an already-loaded row."""
        await db.commit()
        await db.refresh(obj)
        return obj

    async def delete(self, db: AsyncSession, obj: RowT) -> None:
        await db.delete(obj)
        await db.commit()

    async def list_all(self, db: AsyncSession, newest_first: bool = True) -> List[RowT]:
        order = self.model.created_at.desc() if newest_first else self.model.created_at.asc()
        result = await db.execute(select(self.model).order_by(order))
        return list(result.scalars().all())
