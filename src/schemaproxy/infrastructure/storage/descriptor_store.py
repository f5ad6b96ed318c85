"""File-based collection descriptor store.

One folder per collection under the resources root, named by the internal
collection identifier and holding a single descriptor file::

    resources/
        companies_1429012345678/
            config.json
        people_1429012345990/
            config.json

Every operation re-reads the descriptor from disk; nothing is cached between
calls. File I/O runs in a worker thread so the event loop is never blocked.
"""

import asyncio
import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Mapping

from schemaproxy.core.exceptions import (
    AlreadyExistsError,
    CorruptDescriptorError,
    NotFoundError,
    PropertyNotFoundError,
    ValidationError,
)
from schemaproxy.core.logging import get_logger
from schemaproxy.domain.entities.descriptor import CollectionDescriptor, PropertyDefinition

logger = get_logger(__name__)

DEFAULT_DESCRIPTOR_FILENAME = "config.json"


def _default_file_mode() -> int:
    # The umask can only be read by setting it
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


# Mode a plain open() would create files with; temp files start at 0600
DESCRIPTOR_FILE_MODE = _default_file_mode()


class DescriptorStore:
    """Owner of the descriptor files under a resources root."""

    def __init__(
        self,
        resources_directory: str | Path,
        descriptor_filename: str = DEFAULT_DESCRIPTOR_FILENAME,
    ) -> None:
        self.root = Path(resources_directory)
        self.descriptor_filename = descriptor_filename

    def ensure_root(self) -> None:
        """Create the resources root if it does not exist yet."""
        self.root.mkdir(parents=True, exist_ok=True)

    def collection_path(self, collection_id: str) -> Path:
        """Folder of a collection, guarded against escaping the root.

        Raises:
            ValidationError: If the identifier is not a plain folder name.
        """
        if (
            not collection_id
            or collection_id in (".", "..")
            or "/" in collection_id
            or "\\" in collection_id
        ):
            raise ValidationError(f"Invalid collection identifier '{collection_id}'")
        path = (self.root / collection_id).resolve()
        if path.parent != self.root.resolve():
            raise ValidationError(f"Invalid collection identifier '{collection_id}'")
        return path

    def descriptor_path(self, collection_id: str) -> Path:
        return self.collection_path(collection_id) / self.descriptor_filename

    async def create(
        self,
        collection_id: str,
        descriptor_type: str,
        properties: Mapping[str, PropertyDefinition],
    ) -> str:
        """Create the folder and descriptor for a new collection.

        Orders are assigned 0, 1, 2, ... following the iteration order of
        ``properties``.

        Returns:
            The identifier the descriptor was stored under.

        Raises:
            AlreadyExistsError: If the collection folder already exists.
        """
        folder = self.collection_path(collection_id)
        descriptor = CollectionDescriptor(
            type=descriptor_type,
            properties={
                name: prop.with_order(index)
                for index, (name, prop) in enumerate(properties.items())
            },
        )

        try:
            await asyncio.to_thread(folder.mkdir)
        except FileExistsError as e:
            raise AlreadyExistsError(collection_id) from e

        try:
            await self._write(collection_id, descriptor)
        except BaseException:
            # Folder and descriptor appear together or not at all
            await asyncio.to_thread(shutil.rmtree, folder, True)
            raise

        logger.info(
            "Descriptor created",
            collection_id=collection_id,
            property_count=len(descriptor.properties),
        )
        return collection_id

    async def read(self, collection_id: str) -> CollectionDescriptor:
        """Load and parse a descriptor.

        Raises:
            NotFoundError: If no descriptor exists for the identifier.
            CorruptDescriptorError: If the stored content is not a descriptor.
        """
        path = self.descriptor_path(collection_id)
        try:
            raw = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (FileNotFoundError, NotADirectoryError) as e:
            raise NotFoundError(collection_id) from e
        except (IsADirectoryError, UnicodeDecodeError) as e:
            raise CorruptDescriptorError(collection_id, str(e)) from e

        try:
            data: Any = json.loads(raw)
            return CollectionDescriptor.from_dict(data)
        except (json.JSONDecodeError, ValueError) as e:
            logger.error(
                "Descriptor is corrupt",
                collection_id=collection_id,
                path=str(path),
                error=str(e),
            )
            raise CorruptDescriptorError(collection_id, str(e)) from e

    async def write(self, collection_id: str, descriptor: CollectionDescriptor) -> None:
        """Persist a descriptor over an existing collection.

        Raises:
            NotFoundError: If the collection folder does not exist.
        """
        folder = self.collection_path(collection_id)
        if not await asyncio.to_thread(folder.is_dir):
            raise NotFoundError(collection_id)
        await self._write(collection_id, descriptor)

    async def add_property(
        self, collection_id: str, prop: PropertyDefinition
    ) -> PropertyDefinition:
        """Add a property with the next free order and persist.

        An existing property with the same name is overwritten.

        Returns:
            The stored definition, carrying its assigned order.

        Raises:
            NotFoundError: If the collection is unknown.
        """
        descriptor = await self.read(collection_id)
        if not descriptor.has_consistent_order():
            logger.warning(
                "Descriptor property orders are inconsistent",
                collection_id=collection_id,
            )
        stored = prop.with_order(descriptor.next_order())
        replaced = stored.name in descriptor.properties
        descriptor.properties[stored.name] = stored
        await self.write(collection_id, descriptor)

        logger.info(
            "Property added to descriptor",
            collection_id=collection_id,
            property_name=stored.name,
            order=stored.order,
            replaced=replaced,
        )
        return stored

    async def rename_properties(
        self, collection_id: str, renames: Mapping[str, str]
    ) -> CollectionDescriptor:
        """Rename properties, keeping type, label, required flag and order.

        All renames are resolved against the descriptor as read, then the
        result is written once, so chained renames such as ``{a: b, b: c}``
        move each property exactly once.

        Raises:
            NotFoundError: If the collection is unknown.
            PropertyNotFoundError: If an old name is not in the descriptor.
        """
        descriptor = await self.read(collection_id)
        for old in renames:
            if old not in descriptor.properties:
                raise PropertyNotFoundError(collection_id, old)

        properties = {
            name: prop for name, prop in descriptor.properties.items() if name not in renames
        }
        for old, new in renames.items():
            properties[new] = descriptor.properties[old].renamed(new)
        descriptor.properties = properties
        await self.write(collection_id, descriptor)

        logger.info(
            "Descriptor properties renamed",
            collection_id=collection_id,
            renames=dict(renames),
        )
        return descriptor

    async def set_collection_id(
        self, collection_id: str, new_external_id: str
    ) -> CollectionDescriptor:
        """Set the embedded external ``id`` of a descriptor and persist.

        The folder keeps its internal identifier.

        Raises:
            NotFoundError: If the collection is unknown.
        """
        descriptor = await self.read(collection_id)
        descriptor.id = new_external_id
        await self.write(collection_id, descriptor)

        logger.info(
            "Descriptor collection id set",
            collection_id=collection_id,
            external_id=new_external_id,
        )
        return descriptor

    async def _write(self, collection_id: str, descriptor: CollectionDescriptor) -> None:
        path = self.descriptor_path(collection_id)
        content = json.dumps(descriptor.to_dict(), indent=4)
        await asyncio.to_thread(self._replace_file, path, content)

    @staticmethod
    def _replace_file(path: Path, content: str) -> None:
        # Readers only ever see a complete descriptor: write a sibling temp
        # file, then swap it in.
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.chmod(tmp_name, DESCRIPTOR_FILE_MODE)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
