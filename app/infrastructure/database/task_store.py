"""SQLAlchemy-backed task store: the raw persistence operations the audit hooks wrap."""

from typing import Any, Dict, List, Mapping, Optional, Set, Tuple
from uuid import UUID

from sqlalchemy import delete, inspect, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.infrastructure.database.models import TaskRow

TASK_COLUMNS = ("id", "title", "description", "completed", "owner_id", "created_at", "updated_at")


# Oldest first, so every first-match read and write targets the same row.
FIRST_MATCH_ORDER = (TaskRow.created_at, TaskRow.id)


class SqlTaskStore:
    """
    Task persistence over one AsyncSession. Every mutation commits.
    Rows are exchanged as TaskRow instances; snapshots as plain dicts keyed by column.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def _conditions(self, criteria: Mapping[str, Any], entity=TaskRow) -> list:
        return [getattr(entity, name) == value for name, value in criteria.items()]

    def _first_match(self, criteria: Mapping[str, Any]):
        """Restrict a statement to the first row matching criteria (find-one semantics)."""
        # Aliased so the subquery is not correlated to the statement's own table.
        candidate = aliased(TaskRow)
        first_id = (
            select(candidate.id)
            .where(*self._conditions(criteria, candidate))
            .order_by(candidate.created_at, candidate.id)
            .limit(1)
            .scalar_subquery()
        )
        return TaskRow.id == first_id

    # --- reads -------------------------------------------------------------

    async def find_one(self, criteria: Mapping[str, Any]) -> Optional[TaskRow]:
        stmt = select(TaskRow).where(*self._conditions(criteria)).order_by(*FIRST_MATCH_ORDER).limit(1)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def snapshot_one(self, criteria: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """Column values of the first match, read straight from the database."""
        columns = [getattr(TaskRow, name) for name in TASK_COLUMNS]
        stmt = (
            select(*columns)
            .where(*self._conditions(criteria))
            .order_by(*FIRST_MATCH_ORDER)
            .limit(1)
        )
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return dict(row) if row is not None else None

    async def list_tasks(self, owner_id: Optional[UUID] = None) -> List[TaskRow]:
        stmt = select(TaskRow).order_by(TaskRow.created_at.desc())
        if owner_id is not None:
            stmt = stmt.where(TaskRow.owner_id == owner_id)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def ids_where(self, criteria: Mapping[str, Any]) -> List[UUID]:
        result = await self._session.execute(
            select(TaskRow.id).where(*self._conditions(criteria))
        )
        return list(result.scalars().all())

    # --- in-memory state ---------------------------------------------------

    def row_values(self, row: TaskRow) -> Dict[str, Any]:
        """Loaded column values of an instance. Unloaded attributes are left out."""
        state = inspect(row).dict
        return {name: state[name] for name in TASK_COLUMNS if name in state}

    def pending_changes(self, row: TaskRow) -> Tuple[Set[str], Dict[str, Any]]:
        """
        Columns the ORM has marked modified since load, with their prior values.
        Setting an attribute to the value it already holds does not mark it.
        """
        modified: Set[str] = set()
        before: Dict[str, Any] = {}
        attrs = inspect(row).attrs
        for name in TASK_COLUMNS:
            history = attrs[name].history
            if history.has_changes():
                modified.add(name)
                before[name] = history.deleted[0] if history.deleted else None
        return modified, before

    # --- mutations ---------------------------------------------------------

    async def insert(self, row: TaskRow) -> TaskRow:
        self._session.add(row)
        await self._session.commit()
        await self._session.refresh(row)
        return row

    async def save(self, row: TaskRow) -> TaskRow:
        self._session.add(row)
        await self._session.commit()
        await self._session.refresh(row)
        return row

    async def update_one(
        self, criteria: Mapping[str, Any], values: Mapping[str, Any]
    ) -> Optional[TaskRow]:
        """Atomically update the first match and return it as updated, or None."""
        if not values:
            return await self.find_one(criteria)
        stmt = (
            update(TaskRow)
            .where(self._first_match(criteria))
            .values(**values)
            .returning(TaskRow)
            .execution_options(synchronize_session="fetch")
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        await self._session.commit()
        return row

    async def delete_one(self, criteria: Mapping[str, Any]) -> Optional[UUID]:
        """Atomically delete the first match; return its id, or None if nothing matched."""
        stmt = (
            delete(TaskRow)
            .where(self._first_match(criteria))
            .returning(TaskRow.id)
            .execution_options(synchronize_session="fetch")
        )
        result = await self._session.execute(stmt)
        deleted_id = result.scalar_one_or_none()
        await self._session.commit()
        return deleted_id
