"""Internal collection identifier generator.

Internal identifiers have the form ``<requested-name>_<milliseconds>`` so
that creating the same collection name twice still yields two distinct
descriptor folders.
"""

import re
import threading
import time
from typing import Callable

from schemaproxy.core.exceptions import ValidationError


class CollectionIdGenerator:
    """Generator for timestamp-suffixed internal collection identifiers.

    Timestamps are strictly increasing per generator instance: two calls in
    the same millisecond get consecutive suffixes instead of colliding.

    Example IDs: companies_1429012345678, people_1429012345679
    """

    # Pattern for valid requested collection names (must be a safe folder name)
    NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_\-]*$")

    MAX_NAME_LENGTH = 128

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        """Initialize the generator.

        Args:
            clock: Returns the current time in seconds; injectable for tests.
        """
        self._clock = clock
        self._last_millis = 0
        self._lock = threading.Lock()

    @classmethod
    def validate_name(cls, name: str) -> None:
        """Validate a requested collection name.

        Raises:
            ValidationError: If the name cannot be used as a folder name.
        """
        if not isinstance(name, str) or not name:
            raise ValidationError("Collection name is required", field="id")
        if len(name) > cls.MAX_NAME_LENGTH:
            raise ValidationError(
                f"Collection name must be at most {cls.MAX_NAME_LENGTH} characters",
                field="id",
            )
        if not cls.NAME_PATTERN.match(name):
            raise ValidationError(
                "Collection name must start with a letter or digit and contain only "
                "letters, digits, underscores and hyphens",
                field="id",
            )

    def generate(self, requested_name: str) -> str:
        """Generate a new internal identifier for a requested name.

        Raises:
            ValidationError: If the requested name is not usable.
        """
        self.validate_name(requested_name)
        with self._lock:
            millis = int(self._clock() * 1000)
            if millis <= self._last_millis:
                millis = self._last_millis + 1
            self._last_millis = millis
        return f"{requested_name}_{millis}"
