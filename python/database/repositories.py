"""
Repository Pattern for Customer Master Data Operations

Provides clean data access layer with proper typing and error handling.
A single generic repository serves every party table; the table, its
primary key column and its owner column are parameters.

Errors raised by the data and service layers form a closed set:
- EntityNotFoundError     (NOT_FOUND)
- OwnershipMismatchError  (OWNERSHIP_MISMATCH)
- PersistenceError        (PERSISTENCE_FAILURE)
- InvalidFilterError      (INVALID_FILTER)
"""

import logging
from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy import select, delete
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from database.models import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class RepositoryError(Exception):
    """Base exception for repository errors."""
    error_code = "REPOSITORY_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EntityNotFoundError(RepositoryError):
    """Raised when an entity is not found."""
    error_code = "NOT_FOUND"


class OwnershipMismatchError(RepositoryError):
    """Raised when an entity does not belong to the party given in the path."""
    error_code = "OWNERSHIP_MISMATCH"


class PersistenceError(RepositoryError):
    """Raised when the database rejects a read or write."""
    error_code = "PERSISTENCE_FAILURE"


class InvalidFilterError(RepositoryError):
    """Raised when a filter request names unknown fields or carries bad values."""
    error_code = "INVALID_FILTER"


# ============================================
# GENERIC REPOSITORY
# ============================================

class BaseRepository(Generic[ModelT]):
    """
    Repository for one party table.

    Usage:
        repo = BaseRepository(Address, session, id_field="address_id")
        address = repo.find_by_id(address_id)
        repo.save(address)
        repo.delete_by_id(address_id)
    """

    def __init__(
        self,
        model: Type[ModelT],
        session: Session,
        id_field: str,
        owner_field: Optional[str] = "party_id"
    ):
        self._model = model
        self._session = session
        self._id_field = id_field
        self._owner_field = owner_field

    @property
    def model(self) -> Type[ModelT]:
        return self._model

    @property
    def session(self) -> Session:
        return self._session

    @property
    def id_column(self):
        return getattr(self._model, self._id_field)

    def _rollback(self, error: SQLAlchemyError, action: str) -> PersistenceError:
        """Roll back the session and build the error to raise."""
        self._session.rollback()
        logger.error(f"{self._model.__name__} {action} failed: {error}")
        return PersistenceError(f"Failed to {action} {self._model.__name__}: {error}")

    def find_by_id(self, entity_id: Any) -> Optional[ModelT]:
        """
        Get entity by primary key.

        Returns:
            Entity or None
        """
        try:
            query = select(self._model).where(self.id_column == entity_id)
            return self._session.scalar(query)
        except SQLAlchemyError as e:
            raise self._rollback(e, "load") from e

    def find_by_party_id(self, party_id: Any) -> Optional[ModelT]:
        """
        Get the first entity owned by a party.

        Returns:
            Entity or None (also None for tables without an owner column)
        """
        if not self._owner_field:
            return None
        try:
            query = (
                select(self._model)
                .where(getattr(self._model, self._owner_field) == party_id)
                .order_by(self._model.created_at, self.id_column)
                .limit(1)
            )
            return self._session.scalar(query)
        except SQLAlchemyError as e:
            raise self._rollback(e, "load") from e

    def save(self, entity: ModelT) -> ModelT:
        """
        Insert or update an entity and commit.

        Returns:
            The persisted entity with server-assigned values loaded

        Raises:
            PersistenceError: If the database rejects the write
        """
        try:
            self._session.add(entity)
            self._session.commit()
            self._session.refresh(entity)
            logger.debug(f"Saved {self._model.__name__}: {getattr(entity, self._id_field)}")
            return entity
        except SQLAlchemyError as e:
            raise self._rollback(e, "save") from e

    def delete_by_id(self, entity_id: Any) -> None:
        """
        Hard delete an entity by primary key and commit.

        Raises:
            PersistenceError: If the database rejects the delete
        """
        try:
            self._session.execute(delete(self._model).where(self.id_column == entity_id))
            self._session.commit()
            logger.debug(f"Deleted {self._model.__name__}: {entity_id}")
        except SQLAlchemyError as e:
            raise self._rollback(e, "delete") from e
