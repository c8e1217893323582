"""Initial schema - Baseline migration

Revision ID: 001_initial
Revises:
Create Date: 2024-12-01 00:00:00.000000

This is the baseline migration that creates all party tables for the
Customer Master Data service. It matches database/models.py.
For existing databases, use `alembic stamp 001_initial` to mark as applied.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ENUMS = {
    'party_kind_enum': ('INDIVIDUAL', 'ORGANIZATION'),
    'address_kind_enum': ('HOME', 'WORK', 'MAILING', 'REGISTERED'),
    'email_kind_enum': ('PERSONAL', 'BUSINESS', 'OTHER'),
    'phone_kind_enum': ('MOBILE', 'HOME', 'WORK', 'OTHER'),
    'gender_enum': ('MALE', 'FEMALE', 'NON_BINARY', 'UNSPECIFIED'),
    'marital_status_enum': ('SINGLE', 'MARRIED', 'DIVORCED', 'WIDOWED'),
    'residency_status_enum': ('RESIDENT', 'NON_RESIDENT'),
    'status_code_enum': ('ACTIVE', 'INACTIVE', 'SUSPENDED', 'PENDING', 'CLOSED'),
    'provider_status_enum': ('ACTIVE', 'INACTIVE', 'ERROR', 'SYNCING'),
}

# Child tables in creation order (dropped in reverse)
TABLES = (
    'party',
    'natural_person',
    'legal_entity',
    'address',
    'email_contact',
    'phone_contact',
    'identity_document',
    'consent',
    'party_status',
    'party_relationship',
    'party_group_membership',
    'party_economic_activity',
    'party_provider',
    'politically_exposed_person',
)


def enum(name: str) -> postgresql.ENUM:
    """Column type for an enum created up front."""
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def uuid_pk(name: str) -> sa.Column:
    return sa.Column(name, postgresql.UUID(as_uuid=True), primary_key=True,
                     server_default=sa.text('gen_random_uuid()'))


def party_fk(name: str = 'party_id', nullable: bool = False) -> sa.Column:
    return sa.Column(name, postgresql.UUID(as_uuid=True),
                     sa.ForeignKey('party.party_id', ondelete='CASCADE'), nullable=nullable)


def timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('now()')),
    ]


def upgrade() -> None:
    """Create initial database schema."""

    # Create enums
    bind = op.get_bind()
    for name, values in ENUMS.items():
        postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    op.create_table(
        'party',
        uuid_pk('party_id'),
        sa.Column('party_kind', enum('party_kind_enum'), nullable=False),
        sa.Column('preferred_language', sa.String(10)),
        sa.Column('source_system', sa.String(100)),
        *timestamps(),
    )
    op.create_index('ix_party_party_kind', 'party', ['party_kind'])

    op.create_table(
        'natural_person',
        uuid_pk('natural_person_id'),
        party_fk(),
        sa.Column('title', sa.String(50)),
        sa.Column('given_name', sa.String(100), nullable=False),
        sa.Column('middle_name', sa.String(100)),
        sa.Column('family_name1', sa.String(100), nullable=False),
        sa.Column('family_name2', sa.String(100)),
        sa.Column('date_of_birth', sa.Date()),
        sa.Column('birth_place', sa.String(150)),
        sa.Column('birth_country_id', postgresql.UUID(as_uuid=True)),
        sa.Column('nationality_country_id', postgresql.UUID(as_uuid=True)),
        sa.Column('gender', enum('gender_enum')),
        sa.Column('marital_status', enum('marital_status_enum')),
        sa.Column('tax_id_number', sa.String(50)),
        sa.Column('residency_status', enum('residency_status_enum')),
        sa.Column('occupation', sa.String(150)),
        sa.Column('monthly_income', sa.Numeric(19, 4)),
        sa.Column('suffix', sa.String(20)),
        *timestamps(),
    )
    op.create_index('ix_natural_person_party_id', 'natural_person', ['party_id'])
    op.create_index('ix_natural_person_family_name1', 'natural_person', ['family_name1'])
    op.create_index('ix_natural_person_tax_id_number', 'natural_person', ['tax_id_number'])

    op.create_table(
        'legal_entity',
        uuid_pk('legal_entity_id'),
        party_fk(),
        sa.Column('legal_name', sa.String(200), nullable=False),
        sa.Column('trade_name', sa.String(200)),
        sa.Column('registration_number', sa.String(100)),
        sa.Column('tax_id_number', sa.String(50)),
        sa.Column('legal_form_id', postgresql.UUID(as_uuid=True)),
        sa.Column('incorporation_date', sa.Date()),
        sa.Column('industry_description', sa.String(300)),
        sa.Column('headcount', sa.BigInteger()),
        sa.Column('share_capital', sa.Numeric(19, 4)),
        sa.Column('website_url', sa.String(500)),
        sa.Column('incorporation_country_id', postgresql.UUID(as_uuid=True)),
        *timestamps(),
    )
    op.create_index('ix_legal_entity_party_id', 'legal_entity', ['party_id'])
    op.create_index('ix_legal_entity_legal_name', 'legal_entity', ['legal_name'])
    op.create_index('ix_legal_entity_registration_number', 'legal_entity', ['registration_number'])
    op.create_index('ix_legal_entity_tax_id_number', 'legal_entity', ['tax_id_number'])

    op.create_table(
        'address',
        uuid_pk('address_id'),
        party_fk(),
        sa.Column('address_kind', enum('address_kind_enum'), nullable=False),
        sa.Column('line1', sa.String(255), nullable=False),
        sa.Column('line2', sa.String(255)),
        sa.Column('city', sa.String(100), nullable=False),
        sa.Column('region', sa.String(100)),
        sa.Column('postal_code', sa.String(20)),
        sa.Column('country_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('is_primary', sa.Boolean()),
        sa.Column('latitude', sa.Float()),
        sa.Column('longitude', sa.Float()),
        *timestamps(),
    )
    op.create_index('ix_address_party_id', 'address', ['party_id'])
    op.create_index('ix_address_country_id', 'address', ['country_id'])

    op.create_table(
        'email_contact',
        uuid_pk('email_contact_id'),
        party_fk(),
        sa.Column('email', sa.String(320), nullable=False),
        sa.Column('email_kind', enum('email_kind_enum'), nullable=False),
        sa.Column('is_primary', sa.Boolean()),
        sa.Column('is_verified', sa.Boolean()),
        *timestamps(),
    )
    op.create_index('ix_email_contact_party_id', 'email_contact', ['party_id'])
    op.create_index('ix_email_contact_email', 'email_contact', ['email'])

    op.create_table(
        'phone_contact',
        uuid_pk('phone_contact_id'),
        party_fk(),
        sa.Column('phone_number', sa.String(20), nullable=False),
        sa.Column('phone_kind', enum('phone_kind_enum'), nullable=False),
        sa.Column('is_primary', sa.Boolean()),
        sa.Column('is_verified', sa.Boolean()),
        sa.Column('extension', sa.String(10)),
        *timestamps(),
    )
    op.create_index('ix_phone_contact_party_id', 'phone_contact', ['party_id'])
    op.create_index('ix_phone_contact_phone_number', 'phone_contact', ['phone_number'])

    op.create_table(
        'identity_document',
        uuid_pk('identity_document_id'),
        party_fk(),
        sa.Column('identity_document_category_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('identity_document_type_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('document_number', sa.String(100), nullable=False),
        sa.Column('issuing_country_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('issue_date', sa.DateTime(timezone=True)),
        sa.Column('expiry_date', sa.DateTime(timezone=True)),
        sa.Column('issuing_authority', sa.String(200)),
        sa.Column('validated', sa.Boolean()),
        sa.Column('document_uri', sa.String(500)),
        *timestamps(),
    )
    op.create_index('ix_identity_document_party_id', 'identity_document', ['party_id'])
    op.create_index('ix_identity_document_document_number', 'identity_document', ['document_number'])

    op.create_table(
        'consent',
        uuid_pk('consent_id'),
        party_fk(),
        sa.Column('consent_type_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('granted', sa.Boolean(), nullable=False),
        sa.Column('granted_at', sa.DateTime(timezone=True)),
        sa.Column('revoked_at', sa.DateTime(timezone=True)),
        sa.Column('channel', sa.String(50)),
        *timestamps(),
    )
    op.create_index('ix_consent_party_id', 'consent', ['party_id'])

    op.create_table(
        'party_status',
        uuid_pk('party_status_id'),
        party_fk(),
        sa.Column('status_code', enum('status_code_enum'), nullable=False),
        sa.Column('status_reason', sa.String(500)),
        sa.Column('valid_from', sa.DateTime(timezone=True)),
        sa.Column('valid_to', sa.DateTime(timezone=True)),
        *timestamps(),
    )
    op.create_index('ix_party_status_party_id', 'party_status', ['party_id'])

    op.create_table(
        'party_relationship',
        uuid_pk('party_relationship_id'),
        party_fk('from_party_id'),
        party_fk('to_party_id'),
        sa.Column('relationship_type_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True)),
        sa.Column('end_date', sa.DateTime(timezone=True)),
        sa.Column('active', sa.Boolean()),
        sa.Column('notes', sa.String(500)),
        *timestamps(),
    )
    op.create_index('ix_party_relationship_from_party_id', 'party_relationship', ['from_party_id'])
    op.create_index('ix_party_relationship_to_party_id', 'party_relationship', ['to_party_id'])

    op.create_table(
        'party_group_membership',
        uuid_pk('party_group_membership_id'),
        sa.Column('group_id', postgresql.UUID(as_uuid=True), nullable=False),
        party_fk(),
        sa.Column('is_active', sa.Boolean()),
        sa.Column('start_date', sa.DateTime(timezone=True)),
        sa.Column('end_date', sa.DateTime(timezone=True)),
        sa.Column('notes', sa.String(1000)),
        *timestamps(),
    )
    op.create_index('ix_party_group_membership_group_id', 'party_group_membership', ['group_id'])
    op.create_index('ix_party_group_membership_party_id', 'party_group_membership', ['party_id'])

    op.create_table(
        'party_economic_activity',
        uuid_pk('party_economic_activity_id'),
        party_fk(),
        sa.Column('economic_activity_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('annual_turnover', sa.Numeric(19, 4)),
        sa.Column('currency_code', sa.String(3)),
        sa.Column('start_date', sa.DateTime(timezone=True)),
        sa.Column('end_date', sa.DateTime(timezone=True)),
        sa.Column('is_primary', sa.Boolean()),
        *timestamps(),
    )
    op.create_index('ix_party_economic_activity_party_id', 'party_economic_activity', ['party_id'])

    op.create_table(
        'party_provider',
        uuid_pk('party_provider_id'),
        party_fk(),
        sa.Column('provider_name', sa.String(100), nullable=False),
        sa.Column('external_reference', sa.String(200), nullable=False),
        sa.Column('provider_status', enum('provider_status_enum'), nullable=False),
        sa.Column('last_sync_at', sa.DateTime(timezone=True)),
        *timestamps(),
    )
    op.create_index('ix_party_provider_party_id', 'party_provider', ['party_id'])
    op.create_index('ix_party_provider_external_reference', 'party_provider', ['external_reference'])

    op.create_table(
        'politically_exposed_person',
        uuid_pk('pep_id'),
        party_fk(),
        sa.Column('pep', sa.Boolean(), nullable=False),
        sa.Column('category', sa.String(100)),
        sa.Column('public_position', sa.String(200)),
        sa.Column('country_of_position_id', postgresql.UUID(as_uuid=True)),
        sa.Column('start_date', sa.DateTime(timezone=True)),
        sa.Column('end_date', sa.DateTime(timezone=True)),
        sa.Column('notes', sa.String(500)),
        *timestamps(),
    )
    op.create_index('ix_politically_exposed_person_party_id', 'politically_exposed_person', ['party_id'])


def downgrade() -> None:
    """Drop all tables and types."""
    # Drop tables in reverse order (indexes go with them)
    for table in reversed(TABLES):
        op.drop_table(table)

    # Drop enums
    for name in reversed(list(ENUMS)):
        op.execute(f'DROP TYPE IF EXISTS {name}')
