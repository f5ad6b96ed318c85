"""Collection descriptor entities.

A descriptor is the local JSON record of a collection's type and property
schema. Each property is stored with its name repeated three times (mapping
key, ``name`` and ``id``) because the backend reads the schema in that shape;
``PropertyDefinition`` keeps a single name and only expands it when
serialized.
"""

from dataclasses import dataclass, field, replace
from typing import Any

PROPERTY_FIELDS = ("name", "type", "typeLabel", "required", "id", "order")


@dataclass(frozen=True)
class PropertyDefinition:
    """Metadata for one property of a collection.

    Attributes:
        name: Property name, also used as mapping key and ``id``.
        type: Semantic data type tag (string, number, date, boolean, ...).
        type_label: Display tag, generally mirrors ``type``.
        required: Whether documents must carry the property.
        order: Presentation position; ``None`` until the store assigns one.
        extras: Additional attributes supplied by the client, kept verbatim.
    """

    name: str
    type: str
    type_label: str | None = None
    required: bool = False
    order: int | None = None
    extras: dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return self.name

    @property
    def label(self) -> str:
        return self.type_label if self.type_label is not None else self.type

    def with_order(self, order: int) -> "PropertyDefinition":
        return replace(self, order=order)

    def renamed(self, new_name: str) -> "PropertyDefinition":
        """Copy carrying only the core attributes under a new name."""
        return PropertyDefinition(
            name=new_name,
            type=self.type,
            type_label=self.type_label,
            required=self.required,
            order=self.order,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "typeLabel": self.label,
            "required": self.required,
            "id": self.name,
        }
        if self.order is not None:
            data["order"] = self.order
        for key, value in self.extras.items():
            data.setdefault(key, value)
        return data

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> "PropertyDefinition":
        """Build a definition from its stored form.

        The mapping key is authoritative for the name.

        Raises:
            ValueError: If the structure is not a property definition.
        """
        if not isinstance(data, dict):
            raise ValueError(f"property '{name}' must be an object")
        prop_type = data.get("type")
        if not isinstance(prop_type, str) or not prop_type:
            raise ValueError(f"property '{name}' has no type")
        order = data.get("order")
        if order is not None and (
            isinstance(order, bool) or not isinstance(order, int) or order < 0
        ):
            raise ValueError(f"property '{name}' has invalid order {order!r}")
        type_label = data.get("typeLabel")
        return cls(
            name=name,
            type=prop_type,
            type_label=type_label if isinstance(type_label, str) else None,
            required=bool(data.get("required", False)),
            order=order,
            extras={k: v for k, v in data.items() if k not in PROPERTY_FIELDS},
        )


@dataclass
class CollectionDescriptor:
    """Schema descriptor for one collection.

    Attributes:
        type: Schema kind tag (e.g. ``Collection``).
        properties: Property definitions keyed by name. Mapping order carries
            no meaning; presentation order comes from each ``order``.
        id: External collection name set by a collection rename, if any.
        extras: Unknown top-level keys, kept so rewrites do not drop them.
    """

    type: str
    properties: dict[str, PropertyDefinition] = field(default_factory=dict)
    id: str | None = None
    extras: dict[str, Any] = field(default_factory=dict)

    def next_order(self) -> int:
        """Order for the next added property: one past the maximum, or 0."""
        orders = [p.order for p in self.properties.values() if p.order is not None]
        return max(orders) + 1 if orders else 0

    def ordered_properties(self) -> list[PropertyDefinition]:
        return sorted(
            self.properties.values(),
            key=lambda p: (p.order is None, p.order if p.order is not None else 0),
        )

    def has_consistent_order(self) -> bool:
        """Check that every property has a unique non-negative order."""
        orders = [p.order for p in self.properties.values()]
        if any(o is None for o in orders):
            return False
        return len(set(orders)) == len(orders)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type}
        if self.id is not None:
            data["id"] = self.id
        data["properties"] = {p.name: p.to_dict() for p in self.ordered_properties()}
        for key, value in self.extras.items():
            data.setdefault(key, value)
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "CollectionDescriptor":
        """Parse the stored JSON structure.

        Raises:
            ValueError: If the structure is not a descriptor.
        """
        if not isinstance(data, dict):
            raise ValueError("descriptor must be a JSON object")
        descriptor_type = data.get("type")
        if not isinstance(descriptor_type, str):
            raise ValueError("descriptor has no type")
        raw_properties = data.get("properties")
        if raw_properties is None:
            raw_properties = {}
        if not isinstance(raw_properties, dict):
            raise ValueError("descriptor properties must be an object")
        external_id = data.get("id")
        if external_id is not None and not isinstance(external_id, str):
            raise ValueError("descriptor id must be a string")
        return cls(
            type=descriptor_type,
            properties={
                name: PropertyDefinition.from_dict(name, raw)
                for name, raw in raw_properties.items()
            },
            id=external_id,
            extras={k: v for k, v in data.items() if k not in ("type", "id", "properties")},
        )
