"""Single-slot memo of the last documentation lookup."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class CacheEntry:
    """Most recently looked up name and the documentation it produced."""

    name: str
    doc: str | None


class LookupCache:
    """Remembers one `(name, doc)` pair.

    A hit requires exact string equality with the stored name. Any lookup of
    a different name replaces the entry, including lookups that found nothing.
    """

    __slots__ = ("entry",)

    def __init__(self) -> None:
        self.entry: CacheEntry | None = None

    def __repr__(self) -> str:
        return f"LookupCache(entry={self.entry!r})"

    def matches(self, name: str) -> bool:
        return self.entry is not None and self.entry.name == name

    def store(self, name: str, doc: str | None) -> None:
        self.entry = CacheEntry(name=name, doc=doc)

    def fetch(self, name: str, lookup: Callable[[str], Optional[str]]) -> str | None:
        """Return the documentation for `name`, querying `lookup` on a miss."""
        if self.matches(name):
            LOGGER.debug("Cache hit for %s", name)
            return self.entry.doc  # type: ignore[union-attr]

        doc = lookup(name)
        self.store(name, doc)
        return doc
