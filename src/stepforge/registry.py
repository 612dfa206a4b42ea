"""Pattern registry: the ordered store of step patterns.

Insertion order is match priority. The registry is built once by application
wiring (see ``stepforge.wiring``) and passed to whatever needs it.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator

from stepforge.models import PatternDescriptor

logger = logging.getLogger(__name__)


class RegistrationError(ValueError):
    """A pattern descriptor that cannot be registered."""


@dataclass(frozen=True)
class RegisteredPattern:
    """A descriptor together with its key and compiled pattern."""

    key: str
    descriptor: PatternDescriptor
    regex: re.Pattern[str]


class PatternRegistry:
    """Insertion-ordered mapping of key to pattern descriptor."""

    def __init__(self) -> None:
        self._entries: dict[str, RegisteredPattern] = {}

    def register(self, key: str, descriptor: PatternDescriptor) -> None:
        """Validate and register a descriptor.

        Re-registering an existing key replaces its descriptor but keeps the
        key's original priority.
        """
        if not isinstance(key, str) or not key.strip():
            raise RegistrationError(f"Pattern key must be a non-empty string, got {key!r}")
        if not callable(descriptor.generate):
            raise RegistrationError(f"Generator for '{key}' is not callable")

        try:
            regex = re.compile(descriptor.pattern, re.IGNORECASE)
        except re.error as exc:
            raise RegistrationError(
                f"Invalid regex for '{key}': {descriptor.pattern} ({exc})"
            ) from exc

        if regex.groups != len(descriptor.params):
            raise RegistrationError(
                f"Pattern '{key}' has {regex.groups} capture group(s) but declares "
                f"{len(descriptor.params)} param(s): {list(descriptor.params)}"
            )

        if descriptor.example and regex.search(descriptor.example) is None:
            raise RegistrationError(
                f"Example for '{key}' does not match its pattern: {descriptor.example!r}"
            )

        if key in self._entries:
            logger.warning("Replacing step pattern '%s' (priority unchanged)", key)
        else:
            logger.debug("Registered step pattern '%s': %s", key, descriptor.pattern)
        self._entries[key] = RegisteredPattern(key=key, descriptor=descriptor, regex=regex)

    def register_many(self, items: Iterable[tuple[str, PatternDescriptor]]) -> None:
        """Register several ``(key, descriptor)`` pairs in order."""
        for key, descriptor in items:
            self.register(key, descriptor)

    def get(self, key: str) -> PatternDescriptor | None:
        entry = self._entries.get(key)
        return entry.descriptor if entry else None

    def entry(self, key: str) -> RegisteredPattern | None:
        return self._entries.get(key)

    def all(self) -> list[PatternDescriptor]:
        """All descriptors in insertion order."""
        return [e.descriptor for e in self._entries.values()]

    def entries(self) -> list[RegisteredPattern]:
        """All registered records in insertion (priority) order."""
        return list(self._entries.values())

    def keys(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))
