"""
Pydantic request/response schemas for the Customer Master Data API

One transfer object (DTO) per party table. JSON keys are camelCase
(`partyId`, `addressKind`, ...); Python attributes keep the ORM column
names so DTOs map onto entities attribute by attribute.

The primary key and the created_at/updated_at timestamps are read-only:
accepted on input but ignored when mapping to an entity, always returned.
"""

import re
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from database.models import (
    PartyKind,
    AddressKind,
    EmailKind,
    PhoneKind,
    Gender,
    MaritalStatus,
    ResidencyStatus,
    StatusCode,
    ProviderStatus,
)

PHONE_PATTERN = r'^\+?[1-9]\d{1,14}$'
CURRENCY_PATTERN = r'^[A-Z]{3}$'


def _as_aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class ApiModel(BaseModel):
    """Base schema: camelCase JSON keys, populated from ORM objects."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class AuditedModel(ApiModel):
    """Adds the read-only timestamps every table carries."""
    created_at: Optional[datetime] = Field(default=None, description="Creation timestamp (read-only)")
    updated_at: Optional[datetime] = Field(default=None, description="Last update timestamp (read-only)")


# ============================================
# PARTY
# ============================================

class PartyDTO(AuditedModel):
    """Root customer record."""
    party_id: Optional[UUID] = Field(default=None, description="Party ID (read-only)")
    party_kind: PartyKind = Field(..., description="INDIVIDUAL or ORGANIZATION")
    preferred_language: Optional[str] = Field(default=None, max_length=10)
    source_system: Optional[str] = Field(default=None, max_length=100)


class NaturalPersonDTO(AuditedModel):
    """Personal details of an individual party.

    `partyId` may be omitted in the body; the path party is bound on create.
    """
    natural_person_id: Optional[UUID] = Field(default=None, description="Natural person ID (read-only)")
    party_id: Optional[UUID] = Field(default=None, description="Owning party")
    title: Optional[str] = Field(default=None, max_length=50)
    given_name: str = Field(..., min_length=1, max_length=100)
    middle_name: Optional[str] = Field(default=None, max_length=100)
    family_name1: str = Field(..., min_length=1, max_length=100)
    family_name2: Optional[str] = Field(default=None, max_length=100)
    date_of_birth: Optional[date] = Field(default=None, description="Must be in the past")
    birth_place: Optional[str] = Field(default=None, max_length=150)
    birth_country_id: Optional[UUID] = None
    nationality_country_id: Optional[UUID] = None
    gender: Optional[Gender] = None
    marital_status: Optional[MaritalStatus] = None
    tax_id_number: Optional[str] = Field(default=None, max_length=50)
    residency_status: Optional[ResidencyStatus] = None
    occupation: Optional[str] = Field(default=None, max_length=150)
    monthly_income: Optional[Decimal] = Field(default=None, gt=0)
    suffix: Optional[str] = Field(default=None, max_length=20)

    @field_validator('date_of_birth')
    @classmethod
    def validate_date_of_birth(cls, v: Optional[date]) -> Optional[date]:
        if v is not None and v >= date.today():
            raise ValueError("Date of birth must be in the past")
        return v


class LegalEntityDTO(AuditedModel):
    """Corporate details of an organization party."""
    legal_entity_id: Optional[UUID] = Field(default=None, description="Legal entity ID (read-only)")
    party_id: UUID = Field(..., description="Owning party")
    legal_name: str = Field(..., min_length=1, max_length=200)
    trade_name: Optional[str] = Field(default=None, max_length=200)
    registration_number: Optional[str] = Field(default=None, max_length=100)
    tax_id_number: Optional[str] = Field(default=None, max_length=50)
    legal_form_id: Optional[UUID] = None
    incorporation_date: Optional[date] = Field(default=None, description="Must be in the past")
    industry_description: Optional[str] = Field(default=None, max_length=300)
    headcount: Optional[int] = Field(default=None, ge=0)
    share_capital: Optional[Decimal] = Field(default=None, ge=0)
    website_url: Optional[str] = Field(default=None, max_length=500)
    incorporation_country_id: Optional[UUID] = None

    @field_validator('incorporation_date')
    @classmethod
    def validate_incorporation_date(cls, v: Optional[date]) -> Optional[date]:
        if v is not None and v >= date.today():
            raise ValueError("Incorporation date must be in the past")
        return v

    @field_validator('website_url')
    @classmethod
    def validate_website_url(cls, v: Optional[str]) -> Optional[str]:
        """Website must be an http or https URL."""
        if v is not None and not re.match(r'^https?://[^\s/$.?#].[^\s]*$', v, re.IGNORECASE):
            raise ValueError("Website URL must start with http:// or https://")
        return v


# ============================================
# CONTACTS
# ============================================

class AddressDTO(AuditedModel):
    """Postal address of a party.

    `partyId` may be omitted in the body; the path party is bound on create.
    """
    address_id: Optional[UUID] = Field(default=None, description="Address ID (read-only)")
    party_id: Optional[UUID] = Field(default=None, description="Owning party")
    address_kind: AddressKind = Field(..., description="HOME, WORK, MAILING or REGISTERED")
    line1: str = Field(..., min_length=1, max_length=255)
    line2: Optional[str] = Field(default=None, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    region: Optional[str] = Field(default=None, max_length=100)
    postal_code: Optional[str] = Field(default=None, max_length=20)
    country_id: UUID = Field(..., description="Country reference")
    is_primary: Optional[bool] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)


class EmailContactDTO(AuditedModel):
    """Email address of a party."""
    email_contact_id: Optional[UUID] = Field(default=None, description="Email contact ID (read-only)")
    party_id: UUID = Field(..., description="Owning party")
    email: EmailStr = Field(..., description="Valid email address")
    email_kind: EmailKind = Field(..., description="PERSONAL, BUSINESS or OTHER")
    is_primary: Optional[bool] = None
    is_verified: Optional[bool] = None


class PhoneContactDTO(AuditedModel):
    """Phone number of a party (E.164 style)."""
    phone_contact_id: Optional[UUID] = Field(default=None, description="Phone contact ID (read-only)")
    party_id: UUID = Field(..., description="Owning party")
    phone_number: str = Field(..., max_length=20, pattern=PHONE_PATTERN)
    phone_kind: PhoneKind = Field(..., description="MOBILE, HOME, WORK or OTHER")
    is_primary: Optional[bool] = None
    is_verified: Optional[bool] = None
    extension: Optional[str] = Field(default=None, max_length=10)


# ============================================
# COMPLIANCE
# ============================================

class IdentityDocumentDTO(AuditedModel):
    """Identity document held by a party."""
    identity_document_id: Optional[UUID] = Field(default=None, description="Identity document ID (read-only)")
    party_id: UUID = Field(..., description="Owning party")
    identity_document_category_id: UUID
    identity_document_type_id: UUID
    document_number: str = Field(..., min_length=1, max_length=100)
    issuing_country_id: UUID
    issue_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    issuing_authority: Optional[str] = Field(default=None, max_length=200)
    validated: Optional[bool] = None
    document_uri: Optional[str] = Field(default=None, max_length=500)


class IdentityDocumentRequest(IdentityDocumentDTO):
    """Identity document as submitted by a client.

    Stored documents may have expired since they were recorded, so the
    expiry check applies to request bodies only.
    """

    @field_validator('expiry_date')
    @classmethod
    def validate_expiry_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and _as_aware(v) <= datetime.now(timezone.utc):
            raise ValueError("Expiry date must be in the future")
        return v


class ConsentDTO(AuditedModel):
    """Consent granted or revoked by a party."""
    consent_id: Optional[UUID] = Field(default=None, description="Consent ID (read-only)")
    party_id: UUID = Field(..., description="Owning party")
    consent_type_id: UUID
    granted: bool
    granted_at: Optional[datetime] = None
    revoked_at: Optional[datetime] = None
    channel: Optional[str] = Field(default=None, max_length=50)


class PoliticallyExposedPersonDTO(AuditedModel):
    """PEP declaration of a party."""
    pep_id: Optional[UUID] = Field(default=None, description="PEP record ID (read-only)")
    party_id: UUID = Field(..., description="Owning party")
    pep: bool
    category: Optional[str] = Field(default=None, max_length=100)
    public_position: Optional[str] = Field(default=None, max_length=200)
    country_of_position_id: Optional[UUID] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    notes: Optional[str] = Field(default=None, max_length=500)


# ============================================
# PARTY LIFECYCLE AND LINKS
# ============================================

class PartyStatusDTO(AuditedModel):
    """Lifecycle status of a party."""
    party_status_id: Optional[UUID] = Field(default=None, description="Party status ID (read-only)")
    party_id: UUID = Field(..., description="Owning party")
    status_code: StatusCode
    status_reason: Optional[str] = Field(default=None, max_length=500)
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None


class PartyRelationshipDTO(AuditedModel):
    """Directed relationship between two parties."""
    party_relationship_id: Optional[UUID] = Field(default=None, description="Relationship ID (read-only)")
    from_party_id: UUID
    to_party_id: UUID
    relationship_type_id: UUID
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    active: Optional[bool] = None
    notes: Optional[str] = Field(default=None, max_length=500)


class PartyGroupMembershipDTO(AuditedModel):
    """Membership of a party in a group."""
    party_group_membership_id: Optional[UUID] = Field(default=None, description="Membership ID (read-only)")
    group_id: UUID
    party_id: UUID = Field(..., description="Member party")
    is_active: Optional[bool] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    notes: Optional[str] = Field(default=None, max_length=1000)


class PartyEconomicActivityDTO(AuditedModel):
    """Economic activity declared by a party."""
    party_economic_activity_id: Optional[UUID] = Field(default=None, description="Economic activity link ID (read-only)")
    party_id: UUID = Field(..., description="Owning party")
    economic_activity_id: UUID
    annual_turnover: Optional[Decimal] = Field(default=None, ge=0)
    currency_code: Optional[str] = Field(default=None, pattern=CURRENCY_PATTERN)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_primary: Optional[bool] = None


class PartyProviderDTO(AuditedModel):
    """Reference of a party in an external provider system."""
    party_provider_id: Optional[UUID] = Field(default=None, description="Provider link ID (read-only)")
    party_id: UUID = Field(..., description="Owning party")
    provider_name: str = Field(..., min_length=1, max_length=100)
    external_reference: str = Field(..., min_length=1, max_length=200)
    provider_status: ProviderStatus
    last_sync_at: Optional[datetime] = None


# ============================================
# SERVICE SCHEMAS
# ============================================

class HealthResponse(BaseModel):
    """Response schema for health check endpoint."""
    status: str = Field(default="healthy", description="Service status")
    database: str = Field(..., description="Database status: connected, disconnected or not_initialized")
    version: str = Field(..., description="Service version")
    uptime_seconds: Optional[int] = Field(default=None, description="Server uptime in seconds")


class ErrorDetail(BaseModel):
    """Detailed error information."""
    code: str = Field(..., description="Error code for programmatic handling")
    message: str = Field(..., description="Human-readable error message")
    field: Optional[str] = Field(default=None, description="Field that caused error")
    timestamp: str = Field(..., description="Error timestamp (ISO 8601)")


class ErrorResponse(BaseModel):
    """Standardized error response format."""
    error: ErrorDetail
