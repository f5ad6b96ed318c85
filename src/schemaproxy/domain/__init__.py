"""Domain layer: descriptor entities and schema services."""
