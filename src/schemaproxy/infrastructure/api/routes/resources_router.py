"""Resources API routes.

Endpoints that create collections, add properties and rename collections.
"""

from typing import Annotated

from fastapi import APIRouter, Body, status
from fastapi.responses import JSONResponse

from schemaproxy.core.exceptions import SchemaProxyError
from schemaproxy.core.logging import get_logger
from schemaproxy.domain.entities import MirrorResult
from schemaproxy.domain.services import DescriptorValidator
from schemaproxy.infrastructure.api.dependencies import SchemaMirrorDep
from schemaproxy.infrastructure.api.error_mapping import (
    error_payload,
    error_response,
    status_for_error,
)
from schemaproxy.infrastructure.api.schemas import (
    CreateCollectionRequest,
    CreateCollectionResponse,
    PropertyDefinitionRequest,
    RenameCollectionsRequest,
)

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Validation error"},
        500: {"description": "The folder could not be created"},
    },
)
async def create_collection(
    request: CreateCollectionRequest,
    mirror: SchemaMirrorDep,
) -> JSONResponse:
    """Create a collection folder and its descriptor.

    The stored identifier is the requested name suffixed with the creation
    timestamp; properties get orders 0, 1, 2, ... in request order.
    """
    try:
        properties = DescriptorValidator.build_properties(
            {name: prop.to_payload() for name, prop in request.properties.items()}
        )
        result = await mirror.create_collection(request.id, request.type, properties)
    except SchemaProxyError as e:
        logger.info(
            "Collection creation failed",
            requested_name=request.id,
            error=str(e),
        )
        return error_response(e)

    response = CreateCollectionResponse(collection_id=result.collection_id)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=response.model_dump(by_alias=True),
    )


@router.put(
    "",
    responses={
        201: {"description": "Every collection renamed"},
        400: {"description": "Validation error"},
    },
)
async def rename_collections(
    request: RenameCollectionsRequest,
    mirror: SchemaMirrorDep,
) -> JSONResponse:
    """Rename collections, locally and on the backend.

    Returns one aggregate response with a result per collection. The overall
    status is 201 when every rename succeeded, otherwise the highest status
    among the failed entries.
    """
    try:
        results = await mirror.rename_collections(request.collections)
    except SchemaProxyError as e:
        return error_response(e)

    items = {old: _rename_item(result) for old, result in results.items()}
    failed = [item["status"] for item in items.values() if item["status"] >= 300]
    overall = max(failed) if failed else status.HTTP_201_CREATED

    return JSONResponse(status_code=overall, content={"results": items})


def _rename_item(result: MirrorResult) -> dict:
    item: dict = {**result.to_dict(), "response": result.remote_body}
    if result.succeeded:
        item["status"] = status.HTTP_201_CREATED
        return item

    error = result.error
    # Delivered backend responses are relayed with their own status
    if result.remote_status is not None:
        item["status"] = result.remote_status
    else:
        item["status"] = status_for_error(error) if error else status.HTTP_500_INTERNAL_SERVER_ERROR
    if error is not None:
        item.update(error_payload(error))
    return item


@router.get(
    "/{collection_id}",
    responses={
        404: {"description": "Collection not found"},
        500: {"description": "Corrupt descriptor"},
    },
)
async def get_collection(collection_id: str, mirror: SchemaMirrorDep) -> JSONResponse:
    """Return the stored descriptor of a collection."""
    try:
        descriptor = await mirror.get_collection(collection_id)
    except SchemaProxyError as e:
        return error_response(e)
    return JSONResponse(status_code=status.HTTP_200_OK, content=descriptor.to_dict())


@router.put(
    "/{collection_id}",
    responses={
        400: {"description": "Validation error"},
        404: {"description": "Collection not found"},
    },
)
async def add_property(
    collection_id: str,
    properties: Annotated[dict[str, PropertyDefinitionRequest], Body()],
    mirror: SchemaMirrorDep,
) -> JSONResponse:
    """Add properties to a collection descriptor.

    Clients do not send ``order``; each property gets one past the current
    maximum.
    """
    try:
        definitions = DescriptorValidator.build_properties(
            {name: prop.to_payload() for name, prop in properties.items()}
        )
        result = await mirror.add_properties(collection_id, definitions)
    except SchemaProxyError as e:
        logger.info(
            "Property addition failed",
            collection_id=collection_id,
            error=str(e),
        )
        return error_response(e)

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "Ok",
            "properties": {prop.name: prop.to_dict() for prop in result.properties},
            **result.to_dict(),
        },
    )
