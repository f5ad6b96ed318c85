"""API Schemas for request/response validation."""

from schemaproxy.infrastructure.api.schemas.resource_schemas import (
    CreateCollectionRequest,
    CreateCollectionResponse,
    PropertyDefinitionRequest,
    RenameCollectionsRequest,
    RenamePropertiesRequest,
)

__all__ = [
    "CreateCollectionRequest",
    "CreateCollectionResponse",
    "PropertyDefinitionRequest",
    "RenameCollectionsRequest",
    "RenamePropertiesRequest",
]
