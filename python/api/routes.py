"""
HTTP routes for party resources

`build_router` generates the same five endpoints for every resource:

    POST   {prefix}/filter      200  filtered, paginated search
    POST   {prefix}             201  create
    GET    {prefix}/{id}        200  read
    PUT    {prefix}/{id}        200  update
    DELETE {prefix}/{id}        204  delete

Party statuses additionally accept `PUT {prefix}` to update the status
of the party in the path without knowing the status id.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, FastAPI, Path, Response, status
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from api.models import ErrorResponse
from api.resources import RESOURCES, get_resource
from database.connection import get_db
from database.filtering import FilterRequest, PaginationResponse, build_filter_model
from database.services import CrudService, PartyStatusService, ResourceDefinition, create_service

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid filter request"},
    401: {"model": ErrorResponse, "description": "Missing API key"},
    403: {"model": ErrorResponse, "description": "Invalid API key or resource owned by another party"},
    404: {"model": ErrorResponse, "description": "Resource not found"},
    422: {"model": ErrorResponse, "description": "Validation error"},
    500: {"model": ErrorResponse, "description": "Persistence failure"},
}


def _party_scope_dependency(resource: ResourceDefinition):
    """Dependency yielding the `partyId` path parameter, or None for top-level resources."""
    if resource.party_scoped:
        def party_scope(party_id: UUID = Path(..., alias="partyId", description="Owning party ID")) -> Optional[UUID]:
            return party_id
    else:
        def party_scope() -> Optional[UUID]:
            return None
    return party_scope


def build_router(resource: ResourceDefinition, dependencies: Optional[list] = None) -> APIRouter:
    """
    Build the router for one resource.

    Args:
        resource: Resource to expose
        dependencies: Extra dependencies applied to every endpoint (e.g. API key check)
    """
    dto = resource.dto
    body_dto = resource.body_dto
    label = resource.label
    name = resource.name
    filter_request_model = FilterRequest[build_filter_model(resource.model, dto)]
    page_model = PaginationResponse[dto]
    id_param = to_camel(resource.id_field)
    item_path = f"/{{{id_param}}}"

    party_scope = _party_scope_dependency(resource)

    def get_service(db: Session = Depends(get_db)) -> CrudService:
        # Looked up per request so ownership configuration applied at startup is honored
        return create_service(get_resource(name), db)

    router = APIRouter(
        prefix=resource.path,
        tags=[resource.tag or label],
        dependencies=dependencies or [],
        responses=ERROR_RESPONSES,
    )

    @router.post("/filter", response_model=page_model, summary=f"Filter {label.lower()} records")
    def filter_entities(
        filter_request: filter_request_model,
        party_id: Optional[UUID] = Depends(party_scope),
        service: CrudService = Depends(get_service),
    ):
        return service.filter(filter_request, party_id)

    @router.post("", response_model=dto, status_code=status.HTTP_201_CREATED, summary=f"Create {label.lower()}")
    def create_entity(
        body: body_dto,
        party_id: Optional[UUID] = Depends(party_scope),
        service: CrudService = Depends(get_service),
    ):
        return service.create(body, party_id)

    @router.get(item_path, response_model=dto, summary=f"Get {label.lower()} by ID")
    def get_entity(
        entity_id: UUID = Path(..., alias=id_param),
        party_id: Optional[UUID] = Depends(party_scope),
        service: CrudService = Depends(get_service),
    ):
        return service.get_by_id(entity_id, party_id)

    @router.put(item_path, response_model=dto, summary=f"Update {label.lower()}")
    def update_entity(
        body: body_dto,
        entity_id: UUID = Path(..., alias=id_param),
        party_id: Optional[UUID] = Depends(party_scope),
        service: CrudService = Depends(get_service),
    ):
        return service.update(entity_id, body, party_id)

    @router.delete(item_path, status_code=status.HTTP_204_NO_CONTENT, response_class=Response,
                   summary=f"Delete {label.lower()}")
    def delete_entity(
        entity_id: UUID = Path(..., alias=id_param),
        party_id: Optional[UUID] = Depends(party_scope),
        service: CrudService = Depends(get_service),
    ):
        service.delete(entity_id, party_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    if resource.service_class is not None and issubclass(resource.service_class, PartyStatusService):
        @router.put("", response_model=dto, summary="Update the status of the party")
        def update_party_status(
            body: body_dto,
            party_id: Optional[UUID] = Depends(party_scope),
            service: PartyStatusService = Depends(get_service),
        ):
            return service.update_for_party(party_id, body)

    return router


def include_resource_routers(app: FastAPI, dependencies: Optional[list] = None) -> List[APIRouter]:
    """Mount a router for every registered resource."""
    routers = []
    for resource in RESOURCES.values():
        router = build_router(resource, dependencies)
        app.include_router(router)
        routers.append(router)
    logger.debug(f"Mounted {len(routers)} resource routers")
    return routers
