"""Descriptor storage."""

from schemaproxy.infrastructure.storage.descriptor_store import (
    DEFAULT_DESCRIPTOR_FILENAME,
    DescriptorStore,
)

__all__ = ["DEFAULT_DESCRIPTOR_FILENAME", "DescriptorStore"]
