"""Domain entities for SchemaProxy."""

from schemaproxy.domain.entities.descriptor import CollectionDescriptor, PropertyDefinition
from schemaproxy.domain.entities.mirror_result import MirrorOperation, MirrorResult

__all__ = [
    "CollectionDescriptor",
    "MirrorOperation",
    "MirrorResult",
    "PropertyDefinition",
]
