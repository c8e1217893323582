"""
Database Package for the Customer Master Data Service

This package provides:
- SQLAlchemy ORM models for every party table
- FastAPI Dependency Injection for database sessions
- A generic repository, mapper and CRUD service shared by all resources
- Filtered, paginated search
- Alembic integration for migrations
"""

from database.models import (
    Base,
    Party,
    NaturalPerson,
    LegalEntity,
    Address,
    EmailContact,
    PhoneContact,
    IdentityDocument,
    Consent,
    PartyStatus,
    PartyRelationship,
    PartyGroupMembership,
    PartyEconomicActivity,
    PartyProvider,
    PoliticallyExposedPerson,
)
from database.connection import (
    DatabaseSessionProvider,
    DatabaseSettings,
    # FastAPI dependencies
    get_db,
    get_db_provider,
    # Initialization
    init_db,
    close_db,
    # Testing support
    create_test_provider,
)
from database.repositories import (
    BaseRepository,
    RepositoryError,
    EntityNotFoundError,
    OwnershipMismatchError,
    PersistenceError,
    InvalidFilterError,
)
from database.mappers import EntityMapper
from database.filtering import (
    FilterRequest,
    PaginationRequest,
    PaginationResponse,
    RangeFilter,
    SortDirection,
    build_filter_model,
    create_filter,
)
from database.services import (
    CrudService,
    PartyStatusService,
    ResourceDefinition,
    UpdateMode,
    create_service,
)

__all__ = [
    # Base
    'Base',
    # Party models
    'Party',
    'NaturalPerson',
    'LegalEntity',
    'Address',
    'EmailContact',
    'PhoneContact',
    'IdentityDocument',
    'Consent',
    'PartyStatus',
    'PartyRelationship',
    'PartyGroupMembership',
    'PartyEconomicActivity',
    'PartyProvider',
    'PoliticallyExposedPerson',
    # Database provider
    'DatabaseSessionProvider',
    'DatabaseSettings',
    # FastAPI dependencies
    'get_db',
    'get_db_provider',
    # Initialization
    'init_db',
    'close_db',
    # Testing support
    'create_test_provider',
    # Data access
    'BaseRepository',
    'EntityMapper',
    'CrudService',
    'PartyStatusService',
    'ResourceDefinition',
    'UpdateMode',
    'create_service',
    # Filtering
    'FilterRequest',
    'PaginationRequest',
    'PaginationResponse',
    'RangeFilter',
    'SortDirection',
    'build_filter_model',
    'create_filter',
    # Errors
    'RepositoryError',
    'EntityNotFoundError',
    'OwnershipMismatchError',
    'PersistenceError',
    'InvalidFilterError',
]
