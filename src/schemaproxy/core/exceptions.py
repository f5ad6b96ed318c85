"""Error taxonomy shared by the descriptor store, backend client and mirror."""

from typing import Any


class SchemaProxyError(Exception):
    """Base class for all SchemaProxy errors."""
    pass


class NotFoundError(SchemaProxyError):
    """Raised when a collection descriptor does not exist."""

    def __init__(self, collection_id: str, message: str | None = None):
        self.collection_id = collection_id
        super().__init__(message or f"Collection '{collection_id}' not found")


class PropertyNotFoundError(NotFoundError):
    """Raised when a property is missing from a descriptor."""

    def __init__(self, collection_id: str, property_name: str):
        self.property_name = property_name
        super().__init__(
            collection_id,
            f"Property '{property_name}' not found in collection '{collection_id}'",
        )


class AlreadyExistsError(SchemaProxyError):
    """Raised when a descriptor folder already exists for an identifier."""

    def __init__(self, collection_id: str):
        self.collection_id = collection_id
        super().__init__(f"Collection '{collection_id}' already exists")


class CorruptDescriptorError(SchemaProxyError):
    """Raised when a stored descriptor is not well-formed."""

    def __init__(self, collection_id: str, reason: str):
        self.collection_id = collection_id
        self.reason = reason
        super().__init__(f"Descriptor for '{collection_id}' is corrupt: {reason}")


class ValidationError(SchemaProxyError):
    """Raised when a request body is structurally malformed."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(f"{field}: {message}" if field else message)


class BackendUnreachableError(SchemaProxyError):
    """Raised when the backend cannot be reached at the connection level."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Backend unreachable at {url}: {reason}")


class BackendError(SchemaProxyError):
    """Raised when the backend answers with a non-2xx status.

    The response was delivered, so the status code and parsed body are kept
    for callers that relay them to the client.
    """

    def __init__(self, url: str, status_code: int, body: Any):
        self.url = url
        self.status_code = status_code
        self.body = body
        super().__init__(f"Backend returned HTTP {status_code} for {url}")
