"""FastAPI application serving argument hints to editors over HTTP."""

from __future__ import annotations

import logging
from typing import Dict, Literal, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from esseldoc.buffer import BufferSnapshot
from esseldoc.config import AppConfig
from esseldoc.eldoc.resolver import DocResolver
from esseldoc.interpreter.session import RscriptSession
from esseldoc.models import DocState
from esseldoc.utils.text import offset_from_position

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="esseldoc", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.buffers = {}

# Documentation states kept for buffers that never send DELETE
MAX_BUFFERS = 256


class CursorPayload(BaseModel):
    text: str
    cursor: Optional[int] = Field(default=None, ge=0)
    line: Optional[int] = Field(default=None, ge=1)
    column: int = Field(default=0, ge=0)


class DocPayload(CursorPayload):
    strategy: Literal["fallback", "cached"] = "fallback"
    buffer_id: Optional[str] = None
    show_name: bool = False


def _session() -> RscriptSession:
    return RscriptSession(AppConfig())


def _buffer_state(buffer_id: str | None) -> DocState | None:
    """Return the state kept for `buffer_id`, evicting the least recently used past MAX_BUFFERS."""
    if buffer_id is None:
        return None
    buffers: Dict[str, DocState] = app.state.buffers
    state = buffers.pop(buffer_id, None) or DocState()
    buffers[buffer_id] = state
    while len(buffers) > MAX_BUFFERS:
        evicted = next(iter(buffers))
        del buffers[evicted]
        LOGGER.debug("Dropped documentation state for %s", evicted)
    return state


def _snapshot(payload: CursorPayload) -> BufferSnapshot:
    if payload.cursor is not None:
        if payload.cursor > len(payload.text):
            raise HTTPException(
                status_code=400,
                detail=f"Cursor {payload.cursor} outside 0..{len(payload.text)}",
            )
        return BufferSnapshot(payload.text, payload.cursor)
    if payload.line is None:
        raise HTTPException(status_code=400, detail="Either cursor or line must be provided")
    return BufferSnapshot(payload.text, offset_from_position(payload.text, payload.line, payload.column))


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.get("/health")
async def health() -> dict[str, object]:
    return {"status": "ok", "interpreter_active": _session().is_active()}


@app.post("/token")
async def token_at_cursor(payload: CursorPayload) -> dict[str, str]:
    snapshot = _snapshot(payload)
    return {"token": snapshot.token_at()}


@app.post("/doc")
def doc_at_cursor(payload: DocPayload) -> dict[str, Optional[str]]:
    """Resolve the argument hint for the cursor; `doc` is null when there is none."""
    if payload.strategy == "cached" and payload.buffer_id is None:
        raise HTTPException(status_code=400, detail="The cached strategy needs a buffer_id")
    snapshot = _snapshot(payload)
    config = AppConfig(strategy=payload.strategy, show_name=payload.show_name)
    session = _session()
    resolver = DocResolver(session.lookup_args, session.is_active, config)
    doc = resolver.provider(snapshot, _buffer_state(payload.buffer_id))
    LOGGER.info("Resolved hint at offset %d: %r", snapshot.cursor, doc)
    return {"doc": doc}


@app.delete("/buffers/{buffer_id}")
async def forget_buffer(buffer_id: str) -> dict[str, str]:
    """Drop the documentation state kept for a closed buffer."""
    if app.state.buffers.pop(buffer_id, None) is None:
        raise HTTPException(status_code=404, detail=f"Unknown buffer {buffer_id}")
    return {"status": "ok"}
