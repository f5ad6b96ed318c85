"""HTTP front end of the proxy."""

from schemaproxy.infrastructure.api.app import create_app

__all__ = ["create_app"]
