"""
SQLAlchemy ORM Models for the Customer Master Data Service

This module defines the party-centric relational schema:
- UUID primary keys on every table
- `party_id` foreign keys from every child table to `party`
- Timestamps for all records (created_at, updated_at)
- Hard deletes (rows are removed, child rows cascade at the database level)

Tables:
1. party - Root customer record (individual or organization)
2. natural_person - Personal details of an individual party
3. legal_entity - Corporate details of an organization party
4. address - Postal addresses of a party
5. email_contact - Email addresses of a party
6. phone_contact - Phone numbers of a party
7. identity_document - Passports, national IDs and similar documents
8. consent - Consents granted or revoked by a party
9. party_status - Lifecycle status of a party
10. party_relationship - Directed relationship between two parties
11. party_group_membership - Membership of a party in a group
12. party_economic_activity - Economic activities declared by a party
13. party_provider - External provider references for a party
14. politically_exposed_person - PEP declarations for a party
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import (
    String, BigInteger, Float, Boolean, Date, DateTime, Numeric,
    ForeignKey, Enum, Uuid
)
from sqlalchemy.orm import declarative_base, Mapped, mapped_column
from sqlalchemy.sql import func

# Base class for all models
Base = declarative_base()


def utcnow() -> datetime:
    """Timezone-aware current timestamp used for created_at/updated_at."""
    return datetime.now(timezone.utc)


# ============================================
# ENUMS
# ============================================

class PartyKind(str, PyEnum):
    """Kind of party"""
    INDIVIDUAL = "INDIVIDUAL"
    ORGANIZATION = "ORGANIZATION"


class AddressKind(str, PyEnum):
    """Purpose of an address"""
    HOME = "HOME"
    WORK = "WORK"
    MAILING = "MAILING"
    REGISTERED = "REGISTERED"


class EmailKind(str, PyEnum):
    """Purpose of an email contact"""
    PERSONAL = "PERSONAL"
    BUSINESS = "BUSINESS"
    OTHER = "OTHER"


class PhoneKind(str, PyEnum):
    """Purpose of a phone contact"""
    MOBILE = "MOBILE"
    HOME = "HOME"
    WORK = "WORK"
    OTHER = "OTHER"


class Gender(str, PyEnum):
    """Gender of a natural person"""
    MALE = "MALE"
    FEMALE = "FEMALE"
    NON_BINARY = "NON_BINARY"
    UNSPECIFIED = "UNSPECIFIED"


class MaritalStatus(str, PyEnum):
    """Marital status of a natural person"""
    SINGLE = "SINGLE"
    MARRIED = "MARRIED"
    DIVORCED = "DIVORCED"
    WIDOWED = "WIDOWED"


class ResidencyStatus(str, PyEnum):
    """Tax residency of a natural person"""
    RESIDENT = "RESIDENT"
    NON_RESIDENT = "NON_RESIDENT"


class StatusCode(str, PyEnum):
    """Lifecycle status of a party"""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"
    PENDING = "PENDING"
    CLOSED = "CLOSED"


class ProviderStatus(str, PyEnum):
    """Synchronization status of an external provider reference"""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    ERROR = "ERROR"
    SYNCING = "SYNCING"


# ============================================
# MIXIN CLASSES
# ============================================

class TimestampMixin:
    """Mixin for created_at and updated_at timestamps"""
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False
    )


def party_fk(nullable: bool = False, index: bool = True):
    """Foreign key column referencing party.party_id."""
    return mapped_column(
        Uuid,
        ForeignKey("party.party_id", ondelete="CASCADE"),
        nullable=nullable,
        index=index
    )


# ============================================
# PARTY
# ============================================

class Party(Base, TimestampMixin):
    """
    Root customer record.

    Every other table references a party, either as its owner (party_id)
    or, for relationships, as one of the two ends.
    """
    __tablename__ = "party"

    party_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    party_kind: Mapped[PartyKind] = mapped_column(
        Enum(PartyKind, name="party_kind_enum"),
        nullable=False,
        index=True
    )
    preferred_language: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    source_system: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    def __repr__(self) -> str:
        return f"<Party(id={self.party_id}, kind={self.party_kind})>"


class NaturalPerson(Base, TimestampMixin):
    """Personal details of an individual party."""
    __tablename__ = "natural_person"

    natural_person_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    party_id: Mapped[uuid.UUID] = party_fk()

    title: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    given_name: Mapped[str] = mapped_column(String(100), nullable=False)
    middle_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    family_name1: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    family_name2: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    birth_place: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)
    birth_country_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    nationality_country_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    gender: Mapped[Optional[Gender]] = mapped_column(Enum(Gender, name="gender_enum"), nullable=True)
    marital_status: Mapped[Optional[MaritalStatus]] = mapped_column(
        Enum(MaritalStatus, name="marital_status_enum"),
        nullable=True
    )
    tax_id_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)
    residency_status: Mapped[Optional[ResidencyStatus]] = mapped_column(
        Enum(ResidencyStatus, name="residency_status_enum"),
        nullable=True
    )
    occupation: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)
    monthly_income: Mapped[Optional[Decimal]] = mapped_column(Numeric(19, 4), nullable=True)
    suffix: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    def __repr__(self) -> str:
        return f"<NaturalPerson(id={self.natural_person_id}, party={self.party_id})>"


class LegalEntity(Base, TimestampMixin):
    """Corporate details of an organization party."""
    __tablename__ = "legal_entity"

    legal_entity_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    party_id: Mapped[uuid.UUID] = party_fk()

    legal_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    trade_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    registration_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    tax_id_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)
    legal_form_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    incorporation_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    industry_description: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    headcount: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    share_capital: Mapped[Optional[Decimal]] = mapped_column(Numeric(19, 4), nullable=True)
    website_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    incorporation_country_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)

    def __repr__(self) -> str:
        return f"<LegalEntity(id={self.legal_entity_id}, name={self.legal_name[:30] if self.legal_name else ''})>"


# ============================================
# CONTACT MODELS
# ============================================

class Address(Base, TimestampMixin):
    """Postal address of a party."""
    __tablename__ = "address"

    address_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    party_id: Mapped[uuid.UUID] = party_fk()

    address_kind: Mapped[AddressKind] = mapped_column(
        Enum(AddressKind, name="address_kind_enum"),
        nullable=False
    )
    line1: Mapped[str] = mapped_column(String(255), nullable=False)
    line2: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    region: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    postal_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    country_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    is_primary: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    def __repr__(self) -> str:
        return f"<Address(id={self.address_id}, city={self.city})>"


class EmailContact(Base, TimestampMixin):
    """Email address of a party."""
    __tablename__ = "email_contact"

    email_contact_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    party_id: Mapped[uuid.UUID] = party_fk()

    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    email_kind: Mapped[EmailKind] = mapped_column(Enum(EmailKind, name="email_kind_enum"), nullable=False)
    is_primary: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    is_verified: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)


class PhoneContact(Base, TimestampMixin):
    """Phone number of a party."""
    __tablename__ = "phone_contact"

    phone_contact_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    party_id: Mapped[uuid.UUID] = party_fk()

    phone_number: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    phone_kind: Mapped[PhoneKind] = mapped_column(Enum(PhoneKind, name="phone_kind_enum"), nullable=False)
    is_primary: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    is_verified: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    extension: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)


# ============================================
# COMPLIANCE MODELS
# ============================================

class IdentityDocument(Base, TimestampMixin):
    """Identity document (passport, national ID, ...) held by a party."""
    __tablename__ = "identity_document"

    identity_document_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    party_id: Mapped[uuid.UUID] = party_fk()

    identity_document_category_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    identity_document_type_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    document_number: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    issuing_country_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    issue_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    expiry_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    issuing_authority: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    validated: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    document_uri: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)


class Consent(Base, TimestampMixin):
    """Consent granted (or revoked) by a party for a consent type."""
    __tablename__ = "consent"

    consent_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    party_id: Mapped[uuid.UUID] = party_fk()

    consent_type_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    granted: Mapped[bool] = mapped_column(Boolean, nullable=False)
    granted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    revoked_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    channel: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)


class PoliticallyExposedPerson(Base, TimestampMixin):
    """PEP declaration of a party."""
    __tablename__ = "politically_exposed_person"

    pep_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    party_id: Mapped[uuid.UUID] = party_fk()

    pep: Mapped[bool] = mapped_column(Boolean, nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    public_position: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    country_of_position_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)


# ============================================
# PARTY LIFECYCLE AND LINK MODELS
# ============================================

class PartyStatus(Base, TimestampMixin):
    """Lifecycle status of a party."""
    __tablename__ = "party_status"

    party_status_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    party_id: Mapped[uuid.UUID] = party_fk()

    status_code: Mapped[StatusCode] = mapped_column(Enum(StatusCode, name="status_code_enum"), nullable=False)
    status_reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    valid_from: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    valid_to: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class PartyRelationship(Base, TimestampMixin):
    """Directed relationship between two parties (e.g. director of, parent of)."""
    __tablename__ = "party_relationship"

    party_relationship_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    from_party_id: Mapped[uuid.UUID] = party_fk()
    to_party_id: Mapped[uuid.UUID] = party_fk()

    relationship_type_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    active: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)


class PartyGroupMembership(Base, TimestampMixin):
    """Membership of a party in a group."""
    __tablename__ = "party_group_membership"

    party_group_membership_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    group_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    party_id: Mapped[uuid.UUID] = party_fk()

    is_active: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)


class PartyEconomicActivity(Base, TimestampMixin):
    """Economic activity declared by a party."""
    __tablename__ = "party_economic_activity"

    party_economic_activity_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    party_id: Mapped[uuid.UUID] = party_fk()

    economic_activity_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    annual_turnover: Mapped[Optional[Decimal]] = mapped_column(Numeric(19, 4), nullable=True)
    currency_code: Mapped[Optional[str]] = mapped_column(String(3), nullable=True)
    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    is_primary: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)


class PartyProvider(Base, TimestampMixin):
    """Reference of a party in an external provider system."""
    __tablename__ = "party_provider"

    party_provider_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    party_id: Mapped[uuid.UUID] = party_fk()

    provider_name: Mapped[str] = mapped_column(String(100), nullable=False)
    external_reference: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    provider_status: Mapped[ProviderStatus] = mapped_column(
        Enum(ProviderStatus, name="provider_status_enum"),
        nullable=False
    )
    last_sync_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
