"""Outcome of a schema operation mirrored between descriptor and backend."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from schemaproxy.core.exceptions import SchemaProxyError
from schemaproxy.domain.entities.descriptor import PropertyDefinition


class MirrorOperation(str, Enum):
    """Schema-mutating operations and the phases each one needs."""

    CREATE_COLLECTION = "create_collection"
    ADD_PROPERTY = "add_property"
    RENAME_COLLECTION = "rename_collection"
    RENAME_PROPERTIES = "rename_properties"

    @property
    def requires_remote(self) -> bool:
        return self in (MirrorOperation.RENAME_COLLECTION, MirrorOperation.RENAME_PROPERTIES)


@dataclass
class MirrorResult:
    """Structured result of a two-phase schema operation.

    Partial failures are reported, not rolled back: ``local_applied`` and
    ``remote_applied`` say exactly which side was changed. ``properties``
    holds the definitions stored by an add-property operation.
    """

    operation: MirrorOperation
    collection_id: str
    local_applied: bool = False
    remote_applied: bool = False
    remote_status: int | None = None
    remote_body: Any = None
    error: SchemaProxyError | None = None
    properties: list[PropertyDefinition] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        if self.error is not None or not self.local_applied:
            return False
        return self.remote_applied or not self.operation.requires_remote

    @property
    def drifted(self) -> bool:
        """One side changed while the other did not."""
        return self.operation.requires_remote and self.local_applied != self.remote_applied

    def to_dict(self) -> dict[str, Any]:
        return {"localApplied": self.local_applied, "remoteApplied": self.remote_applied}
