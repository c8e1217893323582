"""
Resource registry

One ResourceDefinition per party table: which model and DTO it uses,
where it is mounted, and which ownership, party-binding and update rules
its service applies.
"""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from api.models import (
    PartyDTO,
    NaturalPersonDTO,
    LegalEntityDTO,
    AddressDTO,
    EmailContactDTO,
    PhoneContactDTO,
    IdentityDocumentDTO,
    IdentityDocumentRequest,
    ConsentDTO,
    PartyStatusDTO,
    PartyRelationshipDTO,
    PartyGroupMembershipDTO,
    PartyEconomicActivityDTO,
    PartyProviderDTO,
    PoliticallyExposedPersonDTO,
)
from database.models import (
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
from database.services import PartyStatusService, ResourceDefinition, UpdateMode

logger = logging.getLogger(__name__)

PARTY_PATH = "/api/v1/parties/{partyId}"

_DEFINITIONS: List[ResourceDefinition] = [
    ResourceDefinition(
        name="party", label="Party", model=Party, dto=PartyDTO,
        id_field="party_id", path="/api/v1/parties", owner_field=None,
        tag="Parties",
    ),
    ResourceDefinition(
        name="natural_person", label="Natural person", model=NaturalPerson, dto=NaturalPersonDTO,
        id_field="natural_person_id", path=f"{PARTY_PATH}/natural-persons",
        enforce_ownership=True, bind_party=True, update_mode=UpdateMode.MERGE,
        tag="Natural Persons",
    ),
    ResourceDefinition(
        name="legal_entity", label="Legal entity", model=LegalEntity, dto=LegalEntityDTO,
        id_field="legal_entity_id", path=f"{PARTY_PATH}/legal-entities",
        enforce_ownership=True, update_mode=UpdateMode.MERGE,
        tag="Legal Entities",
    ),
    ResourceDefinition(
        name="address", label="Address", model=Address, dto=AddressDTO,
        id_field="address_id", path=f"{PARTY_PATH}/addresses",
        enforce_ownership=True, bind_party=True, update_mode=UpdateMode.MERGE,
        tag="Addresses",
    ),
    ResourceDefinition(
        name="email_contact", label="Email contact", model=EmailContact, dto=EmailContactDTO,
        id_field="email_contact_id", path=f"{PARTY_PATH}/contacts/email",
        enforce_ownership=True, update_mode=UpdateMode.MERGE,
        tag="Email Contacts",
    ),
    ResourceDefinition(
        name="phone_contact", label="Phone contact", model=PhoneContact, dto=PhoneContactDTO,
        id_field="phone_contact_id", path=f"{PARTY_PATH}/contacts/phone",
        enforce_ownership=True, update_mode=UpdateMode.MERGE,
        tag="Phone Contacts",
    ),
    ResourceDefinition(
        name="identity_document", label="Identity document", model=IdentityDocument, dto=IdentityDocumentDTO,
        id_field="identity_document_id", path=f"{PARTY_PATH}/documents/identity",
        request_dto=IdentityDocumentRequest,
        tag="Identity Documents",
    ),
    ResourceDefinition(
        name="consent", label="Consent", model=Consent, dto=ConsentDTO,
        id_field="consent_id", path=f"{PARTY_PATH}/consents",
        tag="Consents",
    ),
    ResourceDefinition(
        name="party_status", label="Party status", model=PartyStatus, dto=PartyStatusDTO,
        id_field="party_status_id", path=f"{PARTY_PATH}/party-statuses",
        update_mode=UpdateMode.MERGE, service_class=PartyStatusService,
        tag="Party Statuses",
    ),
    ResourceDefinition(
        name="party_relationship", label="Party relationship", model=PartyRelationship, dto=PartyRelationshipDTO,
        id_field="party_relationship_id", path=f"{PARTY_PATH}/relationships", owner_field="from_party_id",
        tag="Party Relationships",
    ),
    ResourceDefinition(
        name="party_group_membership", label="Party group membership", model=PartyGroupMembership,
        dto=PartyGroupMembershipDTO,
        id_field="party_group_membership_id", path=f"{PARTY_PATH}/party-group-memberships",
        tag="Party Group Memberships",
    ),
    ResourceDefinition(
        name="party_economic_activity", label="Party economic activity", model=PartyEconomicActivity,
        dto=PartyEconomicActivityDTO,
        id_field="party_economic_activity_id", path=f"{PARTY_PATH}/party-economic-activities",
        tag="Party Economic Activities",
    ),
    ResourceDefinition(
        name="party_provider", label="Party provider", model=PartyProvider, dto=PartyProviderDTO,
        id_field="party_provider_id", path=f"{PARTY_PATH}/party-providers",
        tag="Party Providers",
    ),
    ResourceDefinition(
        name="politically_exposed_person", label="Politically exposed person", model=PoliticallyExposedPerson,
        dto=PoliticallyExposedPersonDTO,
        id_field="pep_id", path=f"{PARTY_PATH}/politically-exposed-persons",
        tag="Politically Exposed Persons",
    ),
]

RESOURCES: Dict[str, ResourceDefinition] = {d.name: d for d in _DEFINITIONS}

DEFAULT_ENFORCED_RESOURCES = tuple(d.name for d in _DEFINITIONS if d.enforce_ownership)


def get_resource(name: str) -> ResourceDefinition:
    """Look up a resource by registry name."""
    try:
        return RESOURCES[name]
    except KeyError:
        raise KeyError(f"Unknown resource: {name}") from None


def configure_resources(enforced_resources: Optional[Iterable[str]] = None) -> List[ResourceDefinition]:
    """
    Apply ownership enforcement from configuration to the registry.

    Routers look resources up by name on every request, so this takes
    effect for routers that were built before it ran.

    Args:
        enforced_resources: Names that get the ownership check; None restores the defaults

    Raises:
        ValueError: A name is not a registered resource or has no owner column
    """
    if enforced_resources is None:
        enforced = set(DEFAULT_ENFORCED_RESOURCES)
    else:
        enforced = set(enforced_resources)

    unknown = enforced - {d.name for d in _DEFINITIONS}
    if unknown:
        raise ValueError(f"Unknown resources in ownership config: {', '.join(sorted(unknown))}")
    unowned = sorted(d.name for d in _DEFINITIONS if d.name in enforced and d.owner_field is None)
    if unowned:
        raise ValueError(f"Resources without an owning party cannot enforce ownership: {', '.join(unowned)}")

    for definition in _DEFINITIONS:
        RESOURCES[definition.name] = replace(definition, enforce_ownership=definition.name in enforced)

    logger.info(f"Ownership enforced for: {', '.join(sorted(enforced)) or 'none'}")
    return list(RESOURCES.values())
