"""Domain services for SchemaProxy.

Services hold the schema mirroring and document forwarding logic. They reach
storage and the backend only through the store and client they are given.
"""

from schemaproxy.domain.services.collection_id_generator import CollectionIdGenerator
from schemaproxy.domain.services.descriptor_validator import DescriptorValidator
from schemaproxy.domain.services.document_forwarder import DocumentForwarder
from schemaproxy.domain.services.schema_mirror import SchemaMirror

__all__ = [
    "CollectionIdGenerator",
    "DescriptorValidator",
    "DocumentForwarder",
    "SchemaMirror",
]
