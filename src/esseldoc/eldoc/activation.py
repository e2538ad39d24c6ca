"""Hook that turns on argument hints for R buffers."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from esseldoc.buffer import BufferSnapshot
from esseldoc.eldoc.resolver import DocResolver
from esseldoc.models import DocProvider, DocState

LOGGER = logging.getLogger(__name__)


class DocumentationHost(Protocol):
    """What the editor has to offer for a buffer to show argument hints."""

    doc_state: Optional[DocState]

    def snapshot(self) -> BufferSnapshot: ...

    def interpreter_active(self) -> bool: ...

    def dialect(self) -> str: ...

    def set_documentation_provider(self, provider: DocProvider) -> None: ...

    def enable_documentation_mode(self) -> None: ...


def activate_for_buffer(
    buffer: DocumentationHost,
    resolver: DocResolver,
    dialect: str | None = None,
) -> bool:
    """Register `resolver` as the documentation provider of an R buffer.

    Returns whether the buffer is (now) active. Calling it again on an
    active buffer changes nothing.
    """
    if dialect is None:
        dialect = buffer.dialect()
    if dialect != resolver.config.dialect:
        LOGGER.debug("Dialect %s not supported, leaving buffer alone", dialect)
        return False

    state = buffer.doc_state
    if state is None:
        state = DocState()
        buffer.doc_state = state

    if state.provider is None:
        state.provider = resolver.bind(buffer)
        buffer.set_documentation_provider(state.provider)
        LOGGER.debug("Registered documentation provider")

    if not state.doc_mode:
        buffer.enable_documentation_mode()
        state.doc_mode = True

    return True
