"""
Filtered, paginated search over party tables

Request contract (JSON, camelCase):

    {
        "filters": {"city": "lon", "addressKind": "HOME"},
        "rangeFilters": {"createdAt": {"from": "2024-01-01T00:00:00Z", "to": null}},
        "pagination": {"pageNumber": 0, "pageSize": 10, "sortBy": "city", "sortDirection": "ASC"}
    }

- `filters` is an all-optional version of the resource DTO; unknown keys are rejected.
  An unparameterized `FilterRequest` keeps `filters` as a plain mapping, whose keys
  and values are checked when the filter runs (InvalidFilterError).
- String columns match case-insensitively by substring, every other type by equality.
- Range bounds are inclusive and coerced to the column type.
- Without `sortBy` rows come back in primary key order.

Response contract:

    {"content": [...], "totalElements": 42, "totalPages": 5, "currentPage": 0}

Usage:
    entity_filter = create_filter(Address, mapper.to_dto, session)
    page = entity_filter.filter(request)
"""

import logging
import math
from enum import Enum as PyEnum
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, create_model
from pydantic.alias_generators import to_camel
from sqlalchemy import select, func, inspect
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from database.models import Base
from database.repositories import InvalidFilterError, PersistenceError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
DtoT = TypeVar("DtoT", bound=BaseModel)
FilterT = TypeVar("FilterT")

MAX_PAGE_SIZE = 500
DEFAULT_PAGE_SIZE = 10


class SortDirection(str, PyEnum):
    ASC = "ASC"
    DESC = "DESC"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PaginationRequest(_CamelModel):
    """Page selection and ordering."""
    page_number: int = Field(default=0, ge=0, description="Zero-based page index")
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Rows per page")
    sort_by: Optional[str] = Field(default=None, description="Field to sort by (camelCase or snake_case)")
    sort_direction: SortDirection = Field(default=SortDirection.DESC)


class RangeFilter(BaseModel):
    """Inclusive bounds; either side may be omitted."""
    from_: Optional[Any] = Field(default=None, alias="from")
    to: Optional[Any] = None

    model_config = ConfigDict(populate_by_name=True)


class FilterRequest(_CamelModel, Generic[FilterT]):
    """Search request for one resource."""
    filters: Optional[FilterT] = None
    range_filters: Dict[str, RangeFilter] = Field(default_factory=dict)
    pagination: PaginationRequest = Field(default_factory=PaginationRequest)


class PaginationResponse(_CamelModel, Generic[DtoT]):
    """One page of results."""
    content: List[DtoT] = Field(default_factory=list)
    total_elements: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
    current_page: int = Field(..., ge=0)


# ============================================
# COLUMN INTROSPECTION
# ============================================

def _column_types(model: Type[Base]) -> Dict[str, type]:
    """Map attribute name -> Python type for every mapped column."""
    types = {}
    for attr in inspect(model).column_attrs:
        try:
            types[attr.key] = attr.columns[0].type.python_type
        except NotImplementedError:
            types[attr.key] = Any
    return types


def filterable_fields(model: Type[Base], dto: Type[BaseModel]) -> Dict[str, type]:
    """DTO fields backed by a column, with the column's Python type."""
    column_types = _column_types(model)
    return {name: column_types[name] for name in dto.model_fields if name in column_types}


def build_filter_model(model: Type[Base], dto: Type[BaseModel]) -> Type[BaseModel]:
    """
    Build the partial DTO accepted under `filters`.

    Every field is optional and typed after its column, without the
    DTO's input constraints (a filter on `email` is a fragment, not an address).
    """
    fields = {
        name: (Optional[python_type], None)
        for name, python_type in filterable_fields(model, dto).items()
    }
    name = dto.__name__[:-3] if dto.__name__.endswith("DTO") else dto.__name__
    return create_model(
        f"{name}Filter",
        __config__=ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid"),
        **fields
    )


# ============================================
# FILTER EXECUTION
# ============================================

def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class EntityFilter(Generic[ModelT, DtoT]):
    """Runs a FilterRequest against one table and maps rows to DTOs."""

    def __init__(
        self,
        model: Type[ModelT],
        to_dto: Callable[[ModelT], DtoT],
        session: Session,
        dto: Optional[Type[DtoT]] = None
    ):
        self.model = model
        self.to_dto = to_dto
        self.session = session

        if dto is not None:
            self._field_types = filterable_fields(model, dto)
            self._response_model = PaginationResponse[dto]
        else:
            self._field_types = _column_types(model)
            self._response_model = PaginationResponse

        # Accept both `familyName1` and `family_name1`
        self._names: Dict[str, str] = {}
        for name in self._field_types:
            self._names[name] = name
            self._names[to_camel(name)] = name

        self._primary_key = inspect(model).primary_key[0]

    def resolve_field(self, name: str, purpose: str) -> str:
        """Translate a client field name to the attribute name, or fail."""
        try:
            return self._names[name]
        except KeyError:
            raise InvalidFilterError(
                f"Unknown {purpose} field '{name}' for {self.model.__name__}"
            ) from None

    def _coerce(self, field: str, value: Any, purpose: str = "range") -> Any:
        try:
            return TypeAdapter(self._field_types[field]).validate_python(value)
        except ValidationError as e:
            raise InvalidFilterError(
                f"Invalid {purpose} value {value!r} for field '{field}': {e.errors()[0]['msg']}"
            ) from None

    def filter_values(self, filters: Any) -> Dict[str, Any]:
        """
        Criteria as {attribute: value}.

        A typed filter model has already been validated; a plain mapping
        (from an unparameterized FilterRequest) is resolved and coerced here.
        """
        if filters is None:
            return {}
        if isinstance(filters, BaseModel):
            return {
                self.resolve_field(name, "filter"): value
                for name, value in filters.model_dump(exclude_none=True).items()
            }
        if not isinstance(filters, Mapping):
            raise InvalidFilterError(f"Filters for {self.model.__name__} must be an object")

        values = {}
        for name, value in filters.items():
            if value is None:
                continue
            field = self.resolve_field(name, "filter")
            values[field] = self._coerce(field, value, "filter")
        return values

    def build_conditions(self, request: FilterRequest) -> List[Any]:
        """Translate filters and range filters into SQL expressions."""
        conditions = []

        for field, value in self.filter_values(request.filters).items():
            column = getattr(self.model, field)
            if self._field_types[field] is str:
                conditions.append(column.ilike(f"%{_escape_like(value)}%", escape="\\"))
            else:
                conditions.append(column == value)

        for name, bounds in request.range_filters.items():
            field = self.resolve_field(name, "range filter")
            column = getattr(self.model, field)
            if bounds.from_ is not None:
                conditions.append(column >= self._coerce(field, bounds.from_))
            if bounds.to is not None:
                conditions.append(column <= self._coerce(field, bounds.to))

        return conditions

    def build_order(self, pagination: PaginationRequest) -> List[Any]:
        if not pagination.sort_by:
            return [self._primary_key.asc()]
        column = getattr(self.model, self.resolve_field(pagination.sort_by, "sort"))
        if pagination.sort_direction == SortDirection.ASC:
            return [column.asc(), self._primary_key.asc()]
        return [column.desc(), self._primary_key.asc()]

    def filter(self, request: FilterRequest) -> PaginationResponse:
        """
        Execute the request.

        Raises:
            InvalidFilterError: Unknown field or uncoercible range value
            PersistenceError: Database failure
        """
        pagination = request.pagination
        conditions = self.build_conditions(request)
        order = self.build_order(pagination)

        try:
            total = self.session.scalar(
                select(func.count()).select_from(self.model).where(*conditions)
            ) or 0
            rows = self.session.scalars(
                select(self.model)
                .where(*conditions)
                .order_by(*order)
                .offset(pagination.page_number * pagination.page_size)
                .limit(pagination.page_size)
            ).all()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"{self.model.__name__} filter failed: {e}")
            raise PersistenceError(f"Failed to filter {self.model.__name__}: {e}") from e

        total_pages = math.ceil(total / pagination.page_size) if total else 0
        logger.debug(
            f"{self.model.__name__} filter: {len(conditions)} conditions, "
            f"{total} matches, page {pagination.page_number}/{total_pages}"
        )
        return self._response_model(
            content=[self.to_dto(row) for row in rows],
            total_elements=total,
            total_pages=total_pages,
            current_page=pagination.page_number
        )


def create_filter(
    model: Type[ModelT],
    to_dto: Callable[[ModelT], DtoT],
    session: Session,
    dto: Optional[Type[DtoT]] = None
) -> EntityFilter[ModelT, DtoT]:
    """Entry point used by services."""
    return EntityFilter(model, to_dto, session, dto=dto)
