"""Structural validation of schema requests.

Checks only that the pieces a request needs are present and consistent.
Property type tags are not checked against any list of known types.
"""

from typing import Any, Mapping

from schemaproxy.core.exceptions import PropertyNotFoundError, ValidationError
from schemaproxy.domain.entities.descriptor import CollectionDescriptor, PropertyDefinition


class DescriptorValidator:
    """Validator for property payloads and rename maps."""

    @classmethod
    def build_property(cls, key: str, raw: Mapping[str, Any]) -> PropertyDefinition:
        """Turn a client-supplied property object into a definition.

        ``name`` and ``id`` may be omitted; when given they must match the
        mapping key. Any client-supplied ``order`` is discarded because the
        store assigns orders.

        Raises:
            ValidationError: If the property is structurally malformed.
        """
        if not key:
            raise ValidationError("Property name cannot be empty", field="properties")
        if not isinstance(raw, Mapping):
            raise ValidationError("Property definition must be an object", field=key)
        for alias in ("name", "id"):
            value = raw.get(alias)
            if value is not None and value != key:
                raise ValidationError(
                    f"'{alias}' must equal the property key '{key}', got '{value}'",
                    field=key,
                )
        payload = {k: v for k, v in raw.items() if k != "order"}
        try:
            return PropertyDefinition.from_dict(key, payload)
        except ValueError as e:
            raise ValidationError(str(e), field=key) from e

    @classmethod
    def build_properties(
        cls, raw_properties: Mapping[str, Mapping[str, Any]]
    ) -> dict[str, PropertyDefinition]:
        """Build definitions for every entry, keeping the supplied order."""
        return {key: cls.build_property(key, raw) for key, raw in raw_properties.items()}

    @classmethod
    def validate_rename_map(cls, renames: Mapping[str, str], field: str) -> None:
        """Check a ``{old: new}`` map is non-empty with non-empty, distinct targets.

        Raises:
            ValidationError: If the map is malformed.
        """
        if not renames:
            raise ValidationError("At least one rename is required", field=field)
        targets: set[str] = set()
        for old, new in renames.items():
            if not old or not isinstance(new, str) or not new:
                raise ValidationError(
                    f"Rename of '{old}' needs a non-empty new name", field=field
                )
            if new in targets:
                raise ValidationError(
                    f"More than one entry is renamed to '{new}'", field=field
                )
            targets.add(new)

    @classmethod
    def validate_property_renames(
        cls,
        collection_id: str,
        descriptor: CollectionDescriptor,
        renames: Mapping[str, str],
    ) -> None:
        """Check a property rename map against the current descriptor.

        Every old name must exist, and no new name may land on a property
        that is not itself being renamed away.

        Raises:
            PropertyNotFoundError: If an old name is missing.
            ValidationError: If a new name would overwrite another property.
        """
        cls.validate_rename_map(renames, field="properties")
        for old in renames:
            if old not in descriptor.properties:
                raise PropertyNotFoundError(collection_id, old)
        for old, new in renames.items():
            if new != old and new in descriptor.properties and new not in renames:
                raise ValidationError(
                    f"Cannot rename '{old}' to '{new}': property already exists",
                    field="properties",
                )
