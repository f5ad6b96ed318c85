"""Translation of SchemaProxy errors into HTTP status codes and bodies."""

from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse

from schemaproxy.core.exceptions import (
    AlreadyExistsError,
    BackendError,
    BackendUnreachableError,
    CorruptDescriptorError,
    NotFoundError,
    SchemaProxyError,
    ValidationError,
)

ERROR_STATUS: list[tuple[type[SchemaProxyError], int, str]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND, "Not Found"),
    (AlreadyExistsError, status.HTTP_500_INTERNAL_SERVER_ERROR, "The folder could not be created"),
    (CorruptDescriptorError, status.HTTP_500_INTERNAL_SERVER_ERROR, "Corrupt descriptor"),
    (ValidationError, status.HTTP_400_BAD_REQUEST, "Validation error"),
    (BackendUnreachableError, status.HTTP_502_BAD_GATEWAY, "Backend unreachable"),
    (BackendError, status.HTTP_502_BAD_GATEWAY, "Backend error"),
]


def status_for_error(error: SchemaProxyError) -> int:
    for error_type, status_code, _ in ERROR_STATUS:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_payload(error: SchemaProxyError) -> dict[str, Any]:
    """Minimal JSON body describing an error."""
    title = "Internal server error"
    for error_type, _, error_title in ERROR_STATUS:
        if isinstance(error, error_type):
            title = error_title
            break
    payload: dict[str, Any] = {"error": title, "message": str(error)}
    if isinstance(error, BackendError):
        payload["backend_status"] = error.status_code
        payload["backend_response"] = error.body
    return payload


def error_response(error: SchemaProxyError, **extra: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_for_error(error),
        content={**error_payload(error), **extra},
    )
