"""Pydantic schemas for resource (collection schema) endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PropertyDefinitionRequest(BaseModel):
    """One property as sent by clients.

    The name appears three times (mapping key, ``name``, ``id``) because that
    is the shape the backend expects. Extra attributes are accepted and kept.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str | None = Field(default=None, description="Property name (must match the key)")
    type: str = Field(..., min_length=1, description="Property data type")
    type_label: str | None = Field(
        default=None,
        alias="typeLabel",
        description="Display type, defaults to the data type",
    )
    required: bool = Field(default=False, description="Whether the property is required")
    id: str | None = Field(default=None, description="Property id (must match the key)")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class CreateCollectionRequest(BaseModel):
    """Request body for creating a new collection."""

    type: str = Field(default="Collection", min_length=1, description="Schema kind tag")
    id: str = Field(..., min_length=1, description="Requested collection name")
    properties: dict[str, PropertyDefinitionRequest] = Field(
        default_factory=dict,
        description="Properties keyed by name; orders follow this order",
    )


class RenameCollectionsRequest(BaseModel):
    """Request body for renaming collections."""

    collections: dict[str, str] = Field(
        ..., min_length=1, description="Map of collection identifier to new name"
    )


class RenamePropertiesRequest(BaseModel):
    """Request body for renaming properties of a collection."""

    properties: dict[str, str] = Field(
        ..., min_length=1, description="Map of old property name to new name"
    )


class CreateCollectionResponse(BaseModel):
    """Response for a created collection."""

    model_config = ConfigDict(populate_by_name=True)

    status: str = "Ok"
    collection_id: str = Field(..., serialization_alias="collectionId")
    local_applied: bool = Field(default=True, serialization_alias="localApplied")
    remote_applied: bool = Field(default=False, serialization_alias="remoteApplied")
