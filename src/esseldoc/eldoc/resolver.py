"""Resolve the function documentation relevant to a cursor position."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from esseldoc.buffer import BufferSnapshot
from esseldoc.config import AppConfig
from esseldoc.eldoc.cache import LookupCache
from esseldoc.models import DocProvider, DocState, LookupArgs
from esseldoc.utils.text import scan_token

if TYPE_CHECKING:
    from esseldoc.eldoc.activation import DocumentationHost

LOGGER = logging.getLogger(__name__)


def find_enclosing_call(snapshot: BufferSnapshot, cursor: int | None = None) -> str | None:
    """Return the name in front of the bracket list enclosing `cursor`.

    None means the cursor is at top level, the brackets before it do not
    balance, or nothing name-like precedes the opening bracket.
    """
    opener = snapshot.bracket_ascend(cursor)
    if opener is None:
        return None
    return scan_token(snapshot.text, opener) or None


def _has_doc(doc: str | None, empty_doc_is_missing: bool) -> bool:
    if doc is None:
        return False
    return bool(doc) or not empty_doc_is_missing


def _resolve(
    snapshot: BufferSnapshot,
    lookup: LookupArgs,
    *,
    empty_doc_is_missing: bool = False,
) -> tuple[str | None, str | None]:
    name = snapshot.token_at()
    if name:
        doc = lookup(name)
        LOGGER.debug("Lookup for token %s: %r", name, doc)
        if _has_doc(doc, empty_doc_is_missing):
            return name, doc

    name = find_enclosing_call(snapshot)
    if name is None:
        LOGGER.debug("No enclosing call near %r", snapshot.text_around(snapshot.cursor, 20))
        return None, None

    doc = lookup(name)
    LOGGER.debug("Lookup for enclosing call %s: %r", name, doc)
    if not _has_doc(doc, empty_doc_is_missing):
        return name, None
    return name, doc


def resolve_doc(
    text: str,
    cursor: int,
    interpreter_active: bool,
    lookup: LookupArgs,
    *,
    empty_doc_is_missing: bool = False,
) -> str | None:
    """Look up the token at `cursor`, falling back to the enclosing call.

    Issues at most two lookups, and none when no interpreter is running. A
    direct hit on the token under the cursor always wins over the call the
    cursor sits in.
    """
    if not interpreter_active:
        return None
    _, doc = _resolve(
        BufferSnapshot(text, cursor), lookup, empty_doc_is_missing=empty_doc_is_missing
    )
    return doc


def resolve_doc_cached(
    text: str,
    cursor: int,
    interpreter_active: bool,
    lookup: LookupArgs,
    cache: LookupCache,
) -> str | None:
    """Look up the token at `cursor` only, reusing the last answer for the same name."""
    if not interpreter_active:
        return None
    name = scan_token(text, cursor)
    if not name:
        return None
    return cache.fetch(name, lookup)


class DocResolver:
    """Documentation provider wired to an interpreter lookup and a strategy."""

    def __init__(
        self,
        lookup: LookupArgs,
        is_active: Callable[[], bool],
        config: AppConfig | None = None,
    ) -> None:
        self.lookup = lookup
        self.is_active = is_active
        self.config = config or AppConfig()
        self.state = DocState()

    def provider(
        self,
        snapshot: BufferSnapshot,
        state: DocState | None = None,
        *,
        interpreter_active: bool | None = None,
    ) -> str | None:
        """Return the string to display for `snapshot`, or None for nothing."""
        if interpreter_active is None:
            interpreter_active = self.is_active()
        if not interpreter_active:
            LOGGER.debug("No active interpreter, skipping lookup")
            return None

        state = state or self.state
        if self.config.strategy == "cached":
            name = snapshot.token_at()
            doc = resolve_doc_cached(
                snapshot.text, snapshot.cursor, True, self.lookup, state.cache
            )
            if self.config.empty_doc_is_missing and not doc:
                doc = None
        else:
            name, doc = _resolve(
                snapshot, self.lookup, empty_doc_is_missing=self.config.empty_doc_is_missing
            )

        return self.format(name, doc)

    def format(self, name: str | None, doc: str | None) -> str | None:
        if doc is None:
            return None
        if not self.config.show_name or not name:
            return doc
        return f"{name}: {doc}" if doc else name

    def bind(self, host: DocumentationHost) -> DocProvider:
        """Return a zero-argument provider reading the host's current state.

        A host without documentation state gets its own on first use, so
        buffers bound to one resolver never share a cache.
        """

        def provide() -> str | None:
            if host.doc_state is None:
                host.doc_state = DocState()
            return self.provider(
                host.snapshot(),
                host.doc_state,
                interpreter_active=host.interpreter_active(),
            )

        return provide
