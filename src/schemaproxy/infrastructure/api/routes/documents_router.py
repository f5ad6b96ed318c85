"""Document API routes.

Document writes are forwarded to the backend as-is; property renames are
mirrored between the backend and the collection descriptor.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Path, Response, status
from fastapi.responses import JSONResponse

from schemaproxy.core.exceptions import SchemaProxyError
from schemaproxy.core.logging import get_logger
from schemaproxy.infrastructure.api.dependencies import DocumentForwarderDep, SchemaMirrorDep
from schemaproxy.infrastructure.api.error_mapping import error_response
from schemaproxy.infrastructure.api.schemas import RenamePropertiesRequest
from schemaproxy.infrastructure.backend import BackendResponse

logger = get_logger(__name__)

router = APIRouter()

DocumentBody = Annotated[dict[str, Any], Body()]


def _relay(response: BackendResponse) -> Response:
    if response.body is None:
        return Response(status_code=response.status_code)
    return JSONResponse(status_code=response.status_code, content=response.body)


@router.post("/{collection}")
async def create_document(
    collection: str,
    body: DocumentBody,
    forwarder: DocumentForwarderDep,
) -> Response:
    """Create a document; the backend's status and body are relayed."""
    try:
        response = await forwarder.create(collection, body)
    except SchemaProxyError as e:
        return error_response(e)
    return _relay(response)


@router.put(
    "/{collection}/rename",
    responses={
        400: {"description": "Validation error"},
        404: {"description": "Collection or property not found"},
        502: {"description": "Backend unreachable or rejected the rename"},
    },
)
async def rename_properties(
    collection: str,
    request: RenamePropertiesRequest,
    mirror: SchemaMirrorDep,
) -> JSONResponse:
    """Rename properties on stored documents, then in the descriptor."""
    result = await mirror.rename_properties(collection, request.properties)

    if result.error is not None:
        logger.info(
            "Property rename failed",
            collection_id=collection,
            local_applied=result.local_applied,
            remote_applied=result.remote_applied,
            error=str(result.error),
        )
        return error_response(result.error, **result.to_dict())

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={"status": "Ok", **result.to_dict()},
    )


@router.put("/{collection}/{document_id}")
async def update_document(
    collection: str,
    document_id: Annotated[str, Path(pattern=r"^[a-zA-Z0-9]+$")],
    body: DocumentBody,
    forwarder: DocumentForwarderDep,
) -> Response:
    """Update a document; the backend's status and body are relayed."""
    try:
        response = await forwarder.update(collection, document_id, body)
    except SchemaProxyError as e:
        return error_response(e)
    return _relay(response)
