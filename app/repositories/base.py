"""
Base repository shared by all table repositories.

Repositories flush so generated values become visible inside the current
transaction, but never commit: services decide where a unit of work ends.
"""
from typing import Any, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Lookups and writes keyed by the string ``id`` primary key."""

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Initialize repository.

        Args:
            model: Mapped class this repository reads and writes
            db: Request-scoped async session
        """
        self.model = model
        self.db = db

    def _matching(self, **filters):
        """Equality conditions for the given column names; an unknown name raises AttributeError."""
        return [getattr(self.model, column) == value for column, value in filters.items()]

    async def create(self, **kwargs) -> ModelType:
        """
        Add a row and return it with defaults (id, timestamps) populated.

        Example:
            ```python
            message = await message_repo.create(conversation_id=conv.id, sender_id=me, content="hi")
            ```
        """
        instance = self.model(**kwargs)
        self.db.add(instance)
        await self.db.flush()
        await self.db.refresh(instance)
        return instance

    async def get(self, id: str) -> Optional[ModelType]:
        result = await self.db.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def get_many(
        self,
        ids: Sequence[str],
        order_by: Optional[Any] = None
    ) -> List[ModelType]:
        """
        Load every row whose id is in ``ids``; missing ids are simply absent.

        Args:
            ids: Primary keys to load (an empty sequence skips the query)
            order_by: Optional ORDER BY clause
        """
        if not ids:
            return []

        query = select(self.model).where(self.model.id.in_(list(ids)))
        if order_by is not None:
            query = query.order_by(order_by)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def update(self, id: str, **kwargs) -> Optional[ModelType]:
        """
        Apply column values to one row and return the reloaded instance.

        Returns:
            The refreshed instance, or None when no row has that id
        """
        await self.db.execute(
            update(self.model)
            .where(self.model.id == id)
            .values(**kwargs)
        )
        await self.db.flush()

        instance = await self.get(id)
        if instance is not None:
            # The identity map may still hold pre-update values
            await self.db.refresh(instance)
        return instance

    async def exists(self, id: str) -> bool:
        return await self.count(id=id) > 0

    async def count(self, **filters) -> int:
        """
        Count rows whose columns equal the given values.

        Example:
            ```python
            followers = await follow_repo.count(following_id=user_id)
            ```
        """
        result = await self.db.execute(
            select(func.count()).select_from(self.model).where(*self._matching(**filters))
        )
        return result.scalar()

    async def insert_ignore(self, conflict_columns: List[str], **values) -> bool:
        """
        Insert a row unless it collides with a unique constraint.

        Compiles ``INSERT ... ON CONFLICT DO NOTHING`` for whichever backend the
        session is bound to (PostgreSQL in production, SQLite in tests), so
        concurrent duplicate inserts are settled by the database.

        Args:
            conflict_columns: Columns of the unique constraint to arbitrate on
            **values: Column values for the new row; column defaults fill the rest

        Returns:
            True if a row was inserted, False if an equal one already existed
        """
        dialect = self.db.get_bind().dialect.name
        insert_fn = postgresql.insert if dialect == "postgresql" else sqlite.insert

        stmt = insert_fn(self.model.__table__).values(**values).on_conflict_do_nothing(
            index_elements=conflict_columns
        )
        result = await self.db.execute(stmt)
        await self.db.flush()
        return result.rowcount > 0
