"""Document forwarder: pass-through for document writes.

Bodies go to the backend unmodified and the backend's status code and body
come back unmodified, error statuses included. No local state is touched.
"""

from typing import Any

from schemaproxy.core.exceptions import BackendError
from schemaproxy.core.logging import get_logger
from schemaproxy.infrastructure.backend.backend_client import BackendClient, BackendResponse

logger = get_logger(__name__)


class DocumentForwarder:
    """Relays document create and update requests to the backend."""

    def __init__(self, backend: BackendClient) -> None:
        self.backend = backend

    async def create(self, collection: str, body: Any) -> BackendResponse:
        """Forward a document creation.

        Raises:
            BackendUnreachableError: If the backend cannot be reached.
        """
        try:
            return await self.backend.create_document(collection, body)
        except BackendError as e:
            return self._relay(e, collection=collection)

    async def update(self, collection: str, document_id: str, body: Any) -> BackendResponse:
        """Forward a document update.

        Raises:
            BackendUnreachableError: If the backend cannot be reached.
        """
        try:
            return await self.backend.update_document(collection, document_id, body)
        except BackendError as e:
            return self._relay(e, collection=collection, document_id=document_id)

    @staticmethod
    def _relay(error: BackendError, **context: str) -> BackendResponse:
        logger.info(
            "Relaying backend error response",
            status_code=error.status_code,
            **context,
        )
        return BackendResponse(status_code=error.status_code, body=error.body)
