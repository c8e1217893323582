"""
Entity <-> DTO mapping

A single mapper class converts between an ORM model and its pydantic
transfer object. Attributes are matched by name; the primary key and the
audit timestamps are read-only and never copied onto an entity.
"""

from typing import Any, Dict, Generic, Type, TypeVar, Tuple

from pydantic import BaseModel
from sqlalchemy import inspect

from database.models import Base

ModelT = TypeVar("ModelT", bound=Base)
DtoT = TypeVar("DtoT", bound=BaseModel)

AUDIT_FIELDS = ("created_at", "updated_at")


class EntityMapper(Generic[ModelT, DtoT]):
    """
    Maps one ORM model to one DTO class.

    Usage:
        mapper = EntityMapper(Address, AddressDTO)
        entity = mapper.to_entity(dto)
        dto = mapper.to_dto(entity)
    """

    def __init__(self, model: Type[ModelT], dto: Type[DtoT]):
        self.model = model
        self.dto = dto

        mapper = inspect(model)
        columns = [attr.key for attr in mapper.column_attrs]
        primary_keys = {mapper.get_property_by_column(col).key for col in mapper.primary_key}

        self.read_only_fields: Tuple[str, ...] = tuple(primary_keys) + AUDIT_FIELDS
        self.mapped_fields: Tuple[str, ...] = tuple(
            name for name in dto.model_fields if name in columns
        )
        self.writable_fields: Tuple[str, ...] = tuple(
            name for name in self.mapped_fields if name not in self.read_only_fields
        )

    def to_dto(self, entity: ModelT) -> DtoT:
        """Build the DTO from an entity's attributes."""
        return self.dto.model_validate(entity)

    def to_entity(self, dto: DtoT) -> ModelT:
        """Build a new, unsaved entity. Read-only fields are dropped."""
        return self.model(**self._values(dto))

    def update_entity_from_dto(self, dto: DtoT, entity: ModelT) -> ModelT:
        """Merge: copy every non-null writable field onto the entity."""
        for name, value in self._values(dto).items():
            if value is not None:
                setattr(entity, name, value)
        return entity

    def replace_entity_from_dto(self, dto: DtoT, entity: ModelT) -> ModelT:
        """Replace: copy every writable field, nulls included."""
        for name, value in self._values(dto).items():
            setattr(entity, name, value)
        return entity

    def _values(self, dto: DtoT) -> Dict[str, Any]:
        return {name: getattr(dto, name) for name in self.writable_fields}
