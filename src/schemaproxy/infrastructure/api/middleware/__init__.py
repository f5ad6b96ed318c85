"""HTTP middleware."""

from schemaproxy.infrastructure.api.middleware.method_override_middleware import (
    MethodOverrideMiddleware,
)

__all__ = ["MethodOverrideMiddleware"]
