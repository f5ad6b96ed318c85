"""Schema mirror service.

Keeps a collection's local descriptor and the backend's live schema in step.
Each schema-mutating request is one of four operations:

- create collection: local only; the backend learns of the collection on
  its first document write.
- add property: local only; the backend learns new fields from documents.
- rename collection: local first (embedded ``id``), then the backend.
- rename properties: backend first (stored documents), then local.

The two-phase operations never roll back. When the second phase fails the
result reports which side changed and the drift is logged on its own.
"""

from typing import Mapping

from schemaproxy.core.exceptions import BackendError, SchemaProxyError, ValidationError
from schemaproxy.core.keyed_lock import KeyedLock
from schemaproxy.core.logging import get_logger
from schemaproxy.domain.entities.descriptor import CollectionDescriptor, PropertyDefinition
from schemaproxy.domain.entities.mirror_result import MirrorOperation, MirrorResult
from schemaproxy.domain.services.collection_id_generator import CollectionIdGenerator
from schemaproxy.domain.services.descriptor_validator import DescriptorValidator
from schemaproxy.infrastructure.backend.backend_client import BackendClient
from schemaproxy.infrastructure.storage.descriptor_store import DescriptorStore

logger = get_logger(__name__)


class SchemaMirror:
    """Orchestrates descriptor changes and the matching backend calls."""

    def __init__(
        self,
        store: DescriptorStore,
        backend: BackendClient,
        locks: KeyedLock | None = None,
        id_generator: CollectionIdGenerator | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            store: Descriptor store owning the descriptor files.
            backend: Client for the backend service.
            locks: Per-collection locks serializing read-modify-write cycles.
            id_generator: Generator for internal collection identifiers.
        """
        self.store = store
        self.backend = backend
        self.locks = locks or KeyedLock()
        self.id_generator = id_generator or CollectionIdGenerator()

    async def get_collection(self, collection_id: str) -> CollectionDescriptor:
        return await self.store.read(collection_id)

    async def create_collection(
        self,
        requested_name: str,
        descriptor_type: str,
        properties: Mapping[str, PropertyDefinition],
    ) -> MirrorResult:
        """Create a collection descriptor under a fresh internal identifier.

        Raises:
            ValidationError: If the requested name is unusable.
            AlreadyExistsError: If the synthesized folder already exists.
        """
        collection_id = self.id_generator.generate(requested_name)
        async with self.locks.hold(collection_id):
            await self.store.create(collection_id, descriptor_type, properties)

        logger.info(
            "Collection created",
            collection_id=collection_id,
            requested_name=requested_name,
            property_count=len(properties),
        )
        return MirrorResult(
            operation=MirrorOperation.CREATE_COLLECTION,
            collection_id=collection_id,
            local_applied=True,
        )

    async def add_properties(
        self, collection_id: str, properties: Mapping[str, PropertyDefinition]
    ) -> MirrorResult:
        """Add properties to a descriptor, each with the next free order.

        The result carries the stored definitions with their assigned orders.

        Raises:
            ValidationError: If no property is given.
            NotFoundError: If the collection is unknown.
        """
        if not properties:
            raise ValidationError("At least one property is required")

        result = MirrorResult(
            operation=MirrorOperation.ADD_PROPERTY, collection_id=collection_id
        )
        async with self.locks.hold(collection_id):
            for prop in properties.values():
                result.properties.append(await self.store.add_property(collection_id, prop))
        result.local_applied = True
        return result

    async def rename_collections(self, renames: Mapping[str, str]) -> dict[str, MirrorResult]:
        """Rename several collections, one independent result per entry.

        Raises:
            ValidationError: If the rename map is malformed.
        """
        DescriptorValidator.validate_rename_map(renames, field="collections")
        results = {}
        for collection_id, new_external_id in renames.items():
            results[collection_id] = await self.rename_collection(collection_id, new_external_id)
        return results

    async def rename_collection(self, collection_id: str, new_external_id: str) -> MirrorResult:
        """Set the descriptor's external id, then rename on the backend.

        The descriptor is written before the backend call and stays written
        if that call fails.
        """
        result = MirrorResult(
            operation=MirrorOperation.RENAME_COLLECTION, collection_id=collection_id
        )
        async with self.locks.hold(collection_id):
            try:
                descriptor = await self.store.set_collection_id(collection_id, new_external_id)
            except SchemaProxyError as e:
                logger.info(
                    "Collection rename failed locally",
                    collection_id=collection_id,
                    error=str(e),
                )
                result.error = e
                return result
            result.local_applied = True

            try:
                response = await self.backend.rename_collection(
                    collection_id, descriptor.to_dict()
                )
            except SchemaProxyError as e:
                result.error = e
                if isinstance(e, BackendError):
                    result.remote_status = e.status_code
                    result.remote_body = e.body
                self._log_drift(result)
                return result

        result.remote_applied = True
        result.remote_status = response.status_code
        result.remote_body = response.body
        logger.info(
            "Collection renamed",
            collection_id=collection_id,
            external_id=new_external_id,
        )
        return result

    async def rename_properties(
        self, collection_id: str, renames: Mapping[str, str]
    ) -> MirrorResult:
        """Rename properties on the backend, then mirror them locally.

        The rename map is checked against the current descriptor before the
        backend is called, so a missing property never reaches the backend.
        """
        result = MirrorResult(
            operation=MirrorOperation.RENAME_PROPERTIES, collection_id=collection_id
        )
        async with self.locks.hold(collection_id):
            try:
                descriptor = await self.store.read(collection_id)
                DescriptorValidator.validate_property_renames(collection_id, descriptor, renames)
            except SchemaProxyError as e:
                result.error = e
                return result

            try:
                response = await self.backend.rename_property(collection_id, renames)
            except SchemaProxyError as e:
                logger.info(
                    "Property rename rejected by backend",
                    collection_id=collection_id,
                    error=str(e),
                )
                result.error = e
                if isinstance(e, BackendError):
                    result.remote_status = e.status_code
                    result.remote_body = e.body
                return result
            result.remote_applied = True
            result.remote_status = response.status_code
            result.remote_body = response.body

            try:
                await self.store.rename_properties(collection_id, renames)
            except SchemaProxyError as e:
                result.error = e
                self._log_drift(result)
                return result

        result.local_applied = True
        logger.info(
            "Properties renamed",
            collection_id=collection_id,
            renames=dict(renames),
        )
        return result

    @staticmethod
    def _log_drift(result: MirrorResult) -> None:
        logger.error(
            "Schema drift detected",
            operation=result.operation.value,
            collection_id=result.collection_id,
            local_applied=result.local_applied,
            remote_applied=result.remote_applied,
            remote_status=result.remote_status,
            error=str(result.error),
        )
