"""
Shared fixtures for the Customer Master Data test suite.

Every test gets a fresh in-memory SQLite database (StaticPool keeps the
single connection alive across sessions) with the full schema created from
the ORM metadata. The API client swaps the production `get_db` dependency
for a session from that database.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from api.resources import configure_resources
from config_manager import ConfigManager
from database.connection import create_test_provider, get_db
from database.models import Base, Party, PartyKind


# ============================================
# DATABASE FIXTURES
# ============================================

@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_provider(engine):
    """Session provider bound to the test engine."""
    provider = create_test_provider(engine=engine)
    provider.init()
    yield provider
    provider.close()


@pytest.fixture
def session(db_provider):
    """A session on the test database."""
    session = db_provider.session_factory()
    yield session
    session.close()


@pytest.fixture
def make_party(session) -> Callable[..., uuid.UUID]:
    """Factory inserting a party row and returning its id."""
    def _make_party(kind: PartyKind = PartyKind.INDIVIDUAL) -> uuid.UUID:
        party = Party(party_kind=kind, preferred_language="en", source_system="tests")
        session.add(party)
        session.commit()
        return party.party_id
    return _make_party


# ============================================
# REGISTRY / CONFIG ISOLATION
# ============================================

@pytest.fixture(autouse=True)
def default_resources():
    """Every test starts and ends with the default ownership configuration."""
    configure_resources(None)
    yield
    configure_resources(None)


@pytest.fixture(autouse=True)
def reset_config():
    """Drop the ConfigManager singleton after each test."""
    yield
    ConfigManager.reset_instance()


# ============================================
# SAMPLE PAYLOADS
# ============================================

@pytest.fixture
def payload_factory() -> Callable[[str, uuid.UUID], Dict[str, Any]]:
    """
    Factory building a valid request payload (snake_case keys) per resource.

    Usage:
        payload = payload_factory("address", party_id)
    """
    def _payload(name: str, party_id: uuid.UUID) -> Dict[str, Any]:
        ref = uuid.uuid4
        payloads = {
            "party": {
                "party_kind": "INDIVIDUAL",
                "preferred_language": "en",
                "source_system": "CRM",
            },
            "natural_person": {
                "party_id": party_id,
                "given_name": "Ada",
                "family_name1": "Lovelace",
                "date_of_birth": "1985-12-10",
                "gender": "FEMALE",
                "marital_status": "SINGLE",
                "occupation": "Engineer",
            },
            "legal_entity": {
                "party_id": party_id,
                "legal_name": "Acme Trading Ltd",
                "registration_number": "REG-0001",
                "incorporation_date": "2001-05-01",
                "headcount": 120,
                "website_url": "https://acme.io",
            },
            "address": {
                "party_id": party_id,
                "address_kind": "HOME",
                "line1": "1 Main Street",
                "city": "London",
                "postal_code": "EC1A 1BB",
                "country_id": ref(),
                "is_primary": True,
                "latitude": 51.5,
                "longitude": -0.12,
            },
            "email_contact": {
                "party_id": party_id,
                "email": "ada@acme.io",
                "email_kind": "PERSONAL",
                "is_primary": True,
            },
            "phone_contact": {
                "party_id": party_id,
                "phone_number": "+447700900123",
                "phone_kind": "MOBILE",
            },
            "identity_document": {
                "party_id": party_id,
                "identity_document_category_id": ref(),
                "identity_document_type_id": ref(),
                "document_number": "P1234567",
                "issuing_country_id": ref(),
                "expiry_date": datetime.now(timezone.utc) + timedelta(days=365),
                "issuing_authority": "Passport Office",
            },
            "consent": {
                "party_id": party_id,
                "consent_type_id": ref(),
                "granted": True,
                "channel": "WEB",
            },
            "party_status": {
                "party_id": party_id,
                "status_code": "ACTIVE",
                "status_reason": "Onboarded",
            },
            "party_relationship": {
                "from_party_id": party_id,
                "to_party_id": ref(),
                "relationship_type_id": ref(),
                "active": True,
            },
            "party_group_membership": {
                "group_id": ref(),
                "party_id": party_id,
                "is_active": True,
            },
            "party_economic_activity": {
                "party_id": party_id,
                "economic_activity_id": ref(),
                "currency_code": "EUR",
                "is_primary": True,
            },
            "party_provider": {
                "party_id": party_id,
                "provider_name": "KYC Hub",
                "external_reference": "EXT-42",
                "provider_status": "ACTIVE",
            },
            "politically_exposed_person": {
                "party_id": party_id,
                "pep": False,
                "category": "NONE",
            },
        }
        return payloads[name]
    return _payload


# ============================================
# API FIXTURES
# ============================================

@pytest.fixture
def client(db_provider):
    """Test client on the test database with API key checks disabled."""
    from api import server

    server.app.dependency_overrides[get_db] = db_provider.get_session
    try:
        with patch.object(server, 'API_KEY', ''):
            yield TestClient(server.app)
    finally:
        server.app.dependency_overrides.clear()
