"""Core esseldoc data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from esseldoc.eldoc.cache import LookupCache

LookupArgs = Callable[[str], Optional[str]]
DocProvider = Callable[[], Optional[str]]


@dataclass(slots=True)
class DocState:
    """Documentation state owned by a single buffer."""

    cache: LookupCache = field(default_factory=LookupCache)
    provider: DocProvider | None = None
    doc_mode: bool = False
