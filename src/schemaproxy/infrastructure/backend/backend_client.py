"""HTTP client for the document-storage backend.

Maps the proxy's administrative and document calls onto the backend's own
endpoints. Every call is a single attempt: there is no retry, and no timeout
unless one is configured.
"""

from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import quote

import httpx

from schemaproxy.core.exceptions import BackendError, BackendUnreachableError
from schemaproxy.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class BackendResponse:
    """Status code and parsed JSON body of a delivered backend response."""

    status_code: int
    body: Any


def _segment(value: str) -> str:
    return quote(value, safe="")


class BackendClient:
    """Stateless request/response mapper to the backend service."""

    def __init__(
        self,
        base_url: str,
        admin_header: str = "dpd-ssh-key",
        admin_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Backend root URL, e.g. ``http://localhost:3123``.
            admin_header: Header carrying the administrative credential.
            admin_key: Administrative credential; sent on admin calls only.
            timeout: Per-call timeout in seconds; ``None`` waits indefinitely.
            transport: Optional httpx transport, used to stub the backend.
        """
        self.base_url = base_url.rstrip("/")
        self.admin_header = admin_header
        self.admin_key = admin_key
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def rename_collection(
        self, internal_id: str, descriptor: Mapping[str, Any]
    ) -> BackendResponse:
        """Ask the backend to rename a collection.

        The payload is the full descriptor carrying the new ``id``.
        """
        return await self._request(
            "PUT",
            f"/__resources/{_segment(internal_id)}",
            payload=dict(descriptor),
            admin=True,
        )

    async def rename_property(
        self, collection: str, renames: Mapping[str, str]
    ) -> BackendResponse:
        """Rename fields on the collection's stored documents."""
        return await self._request(
            "POST",
            f"/{_segment(collection)}/rename",
            payload={"properties": dict(renames)},
        )

    async def create_document(self, collection: str, body: Any) -> BackendResponse:
        return await self._request("POST", f"/{_segment(collection)}", payload=body)

    async def update_document(
        self, collection: str, document_id: str, body: Any
    ) -> BackendResponse:
        return await self._request(
            "PUT", f"/{_segment(collection)}/{_segment(document_id)}", payload=body
        )

    async def ping(self) -> bool:
        """Check whether the backend answers at all, whatever the status."""
        try:
            await self._client.get("/")
        except httpx.TransportError as e:
            logger.warning("Backend ping failed", backend_url=self.base_url, error=str(e))
            return False
        return True

    async def _request(
        self, method: str, path: str, payload: Any, admin: bool = False
    ) -> BackendResponse:
        headers = {}
        if admin and self.admin_key is not None:
            headers[self.admin_header] = self.admin_key

        url = f"{self.base_url}{path}"
        try:
            response = await self._client.request(method, path, json=payload, headers=headers)
        except httpx.TransportError as e:
            logger.error(
                "Backend unreachable",
                method=method,
                url=url,
                error=str(e),
                exc_type=type(e).__name__,
            )
            raise BackendUnreachableError(url, str(e) or type(e).__name__) from e

        body = self._parse_body(response)
        logger.debug(
            "Backend responded",
            method=method,
            url=url,
            status_code=response.status_code,
        )

        if not response.is_success:
            logger.warning(
                "Backend returned error status",
                method=method,
                url=url,
                status_code=response.status_code,
            )
            raise BackendError(url, response.status_code, body)

        return BackendResponse(status_code=response.status_code, body=body)

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text
