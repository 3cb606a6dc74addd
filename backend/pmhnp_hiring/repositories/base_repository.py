"""
Base Repository Pattern Implementation

Shared CRUD for the pipeline tables on top of the async session factory of
a ``DatabaseManager``. Reads and writes log ``SQLAlchemyError`` and return a
neutral value (``None``, ``False``, ``0``); writes are rolled back first.
"""

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import TypeVar, Generic, Optional, Dict, Any, Type, AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError

from pmhnp_hiring.core.database import DatabaseManager, db_manager as default_db_manager
from pmhnp_hiring.utils.logger import get_logger

ModelType = TypeVar("ModelType")

logger = get_logger(__name__)


class WriteFailed(Exception):
    """Raised by ``write_scope`` after a rollback."""


class BaseRepository(Generic[ModelType], ABC):
    """Abstract base repository providing common CRUD operations."""

    def __init__(self, db_manager: Optional[DatabaseManager] = None):
        self.db_manager = db_manager or default_db_manager

    @property
    @abstractmethod
    def model(self) -> Type[ModelType]:
        """Return the SQLAlchemy model class."""
        pass

    @property
    def model_name(self) -> str:
        return self.model.__name__

    def get_session(self) -> AsyncSession:
        return self.db_manager.session_factory()

    @asynccontextmanager
    async def write_scope(self, action: str) -> AsyncIterator[AsyncSession]:
        """
        Session that commits when the block exits normally.

        On ``SQLAlchemyError`` the session is rolled back, the error logged
        with ``action`` and ``WriteFailed`` raised for the caller to map to
        its neutral return value.
        """
        async with self.get_session() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Error {action} {self.model_name}: {e}")
                raise WriteFailed(action) from e

    def _apply_filters(self, query, filters: Optional[Dict[str, Any]]):
        """``column == value``, or ``column IN value`` for lists. Unknown keys are ignored."""
        for field, value in (filters or {}).items():
            column = getattr(self.model, field, None)
            if column is None:
                continue
            query = query.where(column.in_(value) if isinstance(value, list) else column == value)
        return query

    async def get_by_id(self, id: str) -> Optional[ModelType]:
        async with self.get_session() as session:
            try:
                return await session.get(self.model, id)
            except SQLAlchemyError as e:
                logger.error(f"Error getting {self.model_name} by ID {id}: {e}")
                return None

    async def create(self, data: Dict[str, Any]) -> Optional[ModelType]:
        try:
            async with self.write_scope("creating") as session:
                db_obj = self.model(**data)
                session.add(db_obj)
                await session.flush()
                await session.refresh(db_obj)
        except WriteFailed:
            return None
        return db_obj

    async def update(self, id: str, data: Dict[str, Any]) -> Optional[ModelType]:
        """Set the given attributes on one row. Unknown attributes are skipped."""
        try:
            async with self.write_scope(f"updating {id} of") as session:
                db_obj = await session.get(self.model, id)
                if db_obj is None:
                    return None
                for field, value in data.items():
                    if hasattr(db_obj, field):
                        setattr(db_obj, field, value)
                await session.flush()
                await session.refresh(db_obj)
        except WriteFailed:
            return None
        return db_obj

    async def delete(self, id: str) -> bool:
        try:
            async with self.write_scope(f"deleting {id} of") as session:
                db_obj = await session.get(self.model, id)
                if db_obj is None:
                    return False
                await session.delete(db_obj)
        except WriteFailed:
            return False
        return True

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        async with self.get_session() as session:
            try:
                query = self._apply_filters(select(func.count(self.model.id)), filters)
                return (await session.execute(query)).scalar() or 0
            except SQLAlchemyError as e:
                logger.error(f"Error counting {self.model_name}: {e}")
                return 0
