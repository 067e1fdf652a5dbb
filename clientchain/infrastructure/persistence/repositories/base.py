"""Base repository: model lookup and insert shared by the SQL repositories."""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clientchain.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository over one ORM model.

    Subclasses map ORM rows to domain entities or DTOs; callers never see
    ORM instances.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def _get_model(
        self, entity_id: str, *, for_update: bool = False, fresh: bool = False
    ) -> ModelType | None:
        """Return a single row by primary key, or None.

        ``fresh`` overwrites an instance already in the identity map with the
        row as it is now (rows changed by other sessions or bulk UPDATEs).
        """
        model: Any = self.model
        stmt = select(self.model).where(model.id == entity_id)
        if fresh:
            stmt = stmt.execution_options(populate_existing=True)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _add(self, obj: ModelType) -> ModelType:
        """Insert a row and reload server defaults."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj
