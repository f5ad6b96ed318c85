"""Backend service client."""

from schemaproxy.infrastructure.backend.backend_client import BackendClient, BackendResponse

__all__ = ["BackendClient", "BackendResponse"]
