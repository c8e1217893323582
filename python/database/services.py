"""
Generic CRUD service for party resources

Every resource (Party, Address, Consent, ...) runs through the same
service, configured by a ResourceDefinition:

- create:  DTO -> entity, saved once, mapped back with server-assigned id/timestamps
- get:     not found -> EntityNotFoundError; optional ownership check
- update:  fetch, ownership check, merge or replace, save once
- delete:  fetch, ownership check, hard delete by id
- filter:  delegated to database.filtering

Ownership: for resources with `enforce_ownership`, the stored owner column
must equal the party id from the request path; otherwise the operation
fails with OwnershipMismatchError before anything is written.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Optional, Type, TypeVar
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy.orm import Session

from database.filtering import FilterRequest, PaginationResponse, create_filter
from database.mappers import EntityMapper
from database.models import Base, PartyStatus, utcnow
from database.repositories import (
    BaseRepository,
    EntityNotFoundError,
    OwnershipMismatchError,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
DtoT = TypeVar("DtoT", bound=BaseModel)


class UpdateMode(str, Enum):
    """How an update request is applied to the stored entity."""
    MERGE = "merge"      # null fields in the request leave stored values alone
    REPLACE = "replace"  # every mutable field is overwritten


@dataclass(frozen=True)
class ResourceDefinition:
    """
    Static description of one resource.

    Attributes:
        name: Registry key, also used in config (`ownership.enforced_resources`)
        label: Human-readable name used in error messages
        model: ORM model class
        dto: Pydantic transfer object class (responses and mapping)
        request_dto: Stricter subclass of `dto` for request bodies, if any
        id_field: Primary key attribute
        path: URL prefix under /api/v1
        owner_field: Attribute holding the owning party id, None if not owned
        enforce_ownership: Check owner_field against the path party id
        bind_party: Path party id overrides the body on create and update
        update_mode: MERGE or REPLACE
        tag: OpenAPI tag
        service_class: CrudService subclass to use instead of CrudService
    """
    name: str
    label: str
    model: Type[Base]
    dto: Type[BaseModel]
    id_field: str
    path: str
    owner_field: Optional[str] = "party_id"
    enforce_ownership: bool = False
    bind_party: bool = False
    update_mode: UpdateMode = UpdateMode.REPLACE
    tag: str = field(default="")
    service_class: Optional[type] = None
    request_dto: Optional[Type[BaseModel]] = None

    @property
    def body_dto(self) -> Type[BaseModel]:
        return self.request_dto or self.dto

    @property
    def party_scoped(self) -> bool:
        return "{partyId}" in self.path


class CrudService(Generic[ModelT, DtoT]):
    """
    Service for one resource bound to one session.

    Usage:
        service = CrudService(get_resource("address"), session)
        created = service.create(dto, party_id=party_id)
        service.delete(created.address_id, party_id=party_id)
    """

    def __init__(
        self,
        resource: ResourceDefinition,
        session: Session,
        repository: Optional[BaseRepository] = None,
        mapper: Optional[EntityMapper] = None
    ):
        self.resource = resource
        self.session = session
        self.repository = repository or BaseRepository(
            resource.model, session, resource.id_field, resource.owner_field
        )
        self.mapper = mapper or EntityMapper(resource.model, resource.dto)

    # ============================================
    # HELPERS
    # ============================================

    def _entity_id(self, entity: ModelT) -> Any:
        return getattr(entity, self.resource.id_field)

    def _get_or_raise(self, entity_id: UUID) -> ModelT:
        entity = self.repository.find_by_id(entity_id)
        if entity is None:
            logger.warning(f"{self.resource.label} not found: {entity_id}")
            raise EntityNotFoundError(f"{self.resource.label} not found with ID: {entity_id}")
        return entity

    def _check_ownership(self, entity: ModelT, entity_id: UUID, party_id: Optional[UUID]) -> None:
        """Fail when the entity belongs to another party than the path party."""
        if not self.resource.enforce_ownership or party_id is None:
            return
        owner = getattr(entity, self.resource.owner_field)
        if owner != party_id:
            logger.warning(
                f"{self.resource.label} {entity_id} belongs to party {owner}, "
                f"request was for party {party_id}"
            )
            raise OwnershipMismatchError(
                f"{self.resource.label} with ID {entity_id} does not belong to party {party_id}"
            )

    def _bind_party(self, entity: ModelT, party_id: Optional[UUID]) -> None:
        if self.resource.bind_party and party_id is not None:
            setattr(entity, self.resource.owner_field, party_id)

    # ============================================
    # OPERATIONS
    # ============================================

    def create(self, dto: DtoT, party_id: Optional[UUID] = None) -> DtoT:
        """
        Persist a new entity.

        Args:
            dto: Validated request body
            party_id: Path party; overrides the body for party-bound resources

        Returns:
            DTO of the stored entity
        """
        entity = self.mapper.to_entity(dto)
        self._bind_party(entity, party_id)

        saved = self.repository.save(entity)
        logger.info(f"Created {self.resource.label}: {self._entity_id(saved)}")
        return self.mapper.to_dto(saved)

    def get_by_id(self, entity_id: UUID, party_id: Optional[UUID] = None) -> DtoT:
        entity = self._get_or_raise(entity_id)
        self._check_ownership(entity, entity_id, party_id)
        return self.mapper.to_dto(entity)

    def update(self, entity_id: UUID, dto: DtoT, party_id: Optional[UUID] = None) -> DtoT:
        """
        Apply `dto` to the stored entity.

        Raises:
            EntityNotFoundError: No entity with this id (nothing saved)
            OwnershipMismatchError: Entity owned by another party (nothing saved)
        """
        entity = self._get_or_raise(entity_id)
        self._check_ownership(entity, entity_id, party_id)

        if self.resource.update_mode == UpdateMode.MERGE:
            self.mapper.update_entity_from_dto(dto, entity)
        else:
            self.mapper.replace_entity_from_dto(dto, entity)
        self._bind_party(entity, party_id)
        # An update without changed columns emits no UPDATE, so onupdate never fires
        entity.updated_at = utcnow()

        saved = self.repository.save(entity)
        logger.info(f"Updated {self.resource.label}: {entity_id}")
        return self.mapper.to_dto(saved)

    def delete(self, entity_id: UUID, party_id: Optional[UUID] = None) -> None:
        """
        Hard delete an entity.

        Raises:
            EntityNotFoundError: No entity with this id (nothing deleted)
            OwnershipMismatchError: Entity owned by another party (nothing deleted)
        """
        entity = self._get_or_raise(entity_id)
        self._check_ownership(entity, entity_id, party_id)

        self.repository.delete_by_id(entity_id)
        logger.info(f"Deleted {self.resource.label}: {entity_id}")

    def filter(self, request: FilterRequest, party_id: Optional[UUID] = None) -> PaginationResponse:
        """Run a filtered search. Results are not restricted to `party_id`."""
        if party_id is not None:
            logger.debug(f"{self.resource.label} filter ignores party scope {party_id}")
        entity_filter = create_filter(
            self.resource.model, self.mapper.to_dto, self.session, dto=self.resource.dto
        )
        return entity_filter.filter(request)

    def get_by_party_id(self, party_id: UUID) -> Optional[DtoT]:
        """First entity owned by the party, or None."""
        entity = self.repository.find_by_party_id(party_id)
        return self.mapper.to_dto(entity) if entity is not None else None


class PartyStatusService(CrudService[PartyStatus, BaseModel]):
    """Party status service with update addressed by party instead of status id."""

    def update_for_party(self, party_id: UUID, dto: BaseModel) -> BaseModel:
        """
        Merge `dto` into the status row of a party.

        Raises:
            EntityNotFoundError: The party has no status row (nothing saved)
        """
        entity = self.repository.find_by_party_id(party_id)
        if entity is None:
            logger.warning(f"Party status not found for party: {party_id}")
            raise EntityNotFoundError(f"Party status not found for party ID: {party_id}")

        self.mapper.update_entity_from_dto(dto, entity)
        entity.updated_at = utcnow()
        saved = self.repository.save(entity)
        logger.info(f"Updated Party status {self._entity_id(saved)} for party {party_id}")
        return self.mapper.to_dto(saved)


def create_service(resource: ResourceDefinition, session: Session) -> CrudService:
    """Build the service for a resource."""
    service_class = resource.service_class or CrudService
    return service_class(resource, session)
