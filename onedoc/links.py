"""Reference-link bookkeeping.

Part of the `onedoc` framework.

Resolved doc links are written as reference-style links (`[text][name]`) and
their definitions are listed once at the end of the document. The table below
hands out the reference identifiers and keeps them stable for a whole run:
the same name and destination always map to the same identifier, and a second
destination under an already used name gets a numbered identifier.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Tuple

REFERENCE_NAME_STRIP_PATTERN = re.compile(r"[^A-Za-z0-9_\-]")


def reference_name(text: str) -> str:
    """Derive the reference name used for the display text of a link."""
    generic_start = text.find("<")
    if generic_start != -1:
        text = text[:generic_start]
    return REFERENCE_NAME_STRIP_PATTERN.sub("", text.lower().replace(" ", "-"))


def identifier_for(name: str, index: int) -> str:
    return name if index == 0 else f"{name}-{index}"


class LinkTable:
    """Reference name -> distinct destinations, in first-seen order."""

    def __init__(self) -> None:
        self._entries: Dict[str, List[str]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def destinations(self, name: str) -> Tuple[str, ...]:
        return tuple(self._entries.get(name, ()))

    def lookup_or_register(self, name: str, destination: str) -> str:
        """Return the identifier for `destination` under `name`, registering it if new."""
        destinations = self._entries.setdefault(name, [])
        try:
            index = destinations.index(destination)
        except ValueError:
            index = len(destinations)
            destinations.append(destination)
        return identifier_for(name, index)

    def is_ambiguous(self, identifier: str) -> bool:
        """True when `identifier` is handed out for more than one destination."""
        return sum(1 for candidate, _ in self.definitions() if candidate == identifier) > 1

    def definitions(self, used: Optional[Iterable[str]] = None) -> List[Tuple[str, str]]:
        """List `(identifier, destination)` pairs ordered by name, then index."""
        wanted = None if used is None else set(used)
        result: List[Tuple[str, str]] = []
        for name in sorted(self._entries):
            for index, destination in enumerate(self._entries[name]):
                identifier = identifier_for(name, index)
                if wanted is None or identifier in wanted:
                    result.append((identifier, destination))
        return result
