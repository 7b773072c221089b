"""Record store client.

Thin async wrapper over SQLAlchemy exposing the five record operations the
rest of the service relies on: ``get``, ``list``, ``insert``, ``update`` and
``delete``, each scoped to one model (table) and an equality filter.

Each call opens its own short-lived session and commits before returning, so
records handed back are detached snapshots. Driver failures are translated
into the application's exception hierarchy:

- unique/foreign key violations -> ``ConflictError`` (409)
- connection or other driver errors -> ``StoreUnavailableError`` (503)
"""

import logging
from typing import Any, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.config import Settings
from app.database import Base, create_engine_from_settings
from app.exceptions import ConflictError, StoreUnavailableError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class RecordStore:
    """Table-scoped CRUD over an async engine."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._sessions = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "RecordStore":
        return cls(create_engine_from_settings(settings))

    async def create_all(self) -> None:
        """Create missing tables. Used by tests and AUTO_CREATE_TABLES."""
        # Import for table registration on Base.metadata
        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        await self.engine.dispose()

    @staticmethod
    def _where(model: Type[ModelT], filters: Optional[dict]):
        clauses = []
        for column, value in (filters or {}).items():
            if not hasattr(model, column):
                raise ValueError(f"{model.__name__} has no column {column!r}")
            clauses.append(getattr(model, column) == value)
        return clauses

    def _translate(self, model: Type[ModelT], exc: Exception) -> Exception:
        table = model.__tablename__
        if isinstance(exc, IntegrityError):
            # Never include the statement parameters, they may hold customer data
            logger.warning(f"Integrity violation on {table}: {type(exc.orig).__name__}")
            return ConflictError(f"Write to {table} conflicts with an existing record")
        logger.error(f"Record store failure on {table}: {type(exc).__name__}")
        return StoreUnavailableError()

    async def get(self, model: Type[ModelT], **filters: Any) -> Optional[ModelT]:
        """First record matching every filter, or ``None``."""
        try:
            async with self._sessions() as session:
                result = await session.execute(
                    select(model).where(*self._where(model, filters)).limit(1)
                )
                return result.scalar_one_or_none()
        except DBAPIError as e:
            raise self._translate(model, e) from e

    async def list(
        self,
        model: Type[ModelT],
        filters: Optional[dict] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> Sequence[ModelT]:
        """Every record matching ``filters``, optionally ordered by one column."""
        query = select(model).where(*self._where(model, filters))
        if order_by:
            column = getattr(model, order_by)
            query = query.order_by(column.desc() if descending else column.asc())
        try:
            async with self._sessions() as session:
                result = await session.execute(query)
                return list(result.scalars().all())
        except DBAPIError as e:
            raise self._translate(model, e) from e

    async def insert(self, model: Type[ModelT], values: dict) -> ModelT:
        record = model(**values)
        try:
            async with self._sessions() as session:
                session.add(record)
                await session.commit()
                await session.refresh(record)
                return record
        except DBAPIError as e:
            raise self._translate(model, e) from e

    async def update(self, model: Type[ModelT], record_id: Any, values: dict) -> Optional[ModelT]:
        """Apply ``values`` to the record with primary key ``record_id``.

        Returns the updated record, or ``None`` when no such record exists.
        """
        try:
            async with self._sessions() as session:
                record = await session.get(model, record_id)
                if record is None:
                    return None
                for column, value in values.items():
                    if not hasattr(model, column):
                        raise ValueError(f"{model.__name__} has no column {column!r}")
                    setattr(record, column, value)
                await session.commit()
                await session.refresh(record)
                return record
        except DBAPIError as e:
            raise self._translate(model, e) from e

    async def delete(self, model: Type[ModelT], record_id: Any) -> bool:
        """Delete by primary key. Returns whether a record was removed."""
        try:
            async with self._sessions() as session:
                result = await session.execute(delete(model).where(model.id == record_id))
                await session.commit()
                return result.rowcount > 0
        except DBAPIError as e:
            raise self._translate(model, e) from e
