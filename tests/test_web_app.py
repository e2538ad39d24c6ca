"""Tests for the FastAPI web application."""

from __future__ import annotations

from typing import Iterator
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from esseldoc.models import DocState
from esseldoc.web.app import _buffer_state, app


client = TestClient(app)

CALL = "rnorm(n=100, mean=sqrt(20), sd=10)"


@pytest.fixture
def session() -> Iterator[MagicMock]:
    known = {"rnorm": "n, mean = 0, sd = 1", "sqrt": "x"}
    mock_session = MagicMock()
    mock_session.is_active.return_value = True
    mock_session.lookup_args.side_effect = lambda name: known.get(name)
    with patch("esseldoc.web.app._session", return_value=mock_session):
        yield mock_session


@pytest.fixture(autouse=True)
def clear_buffers() -> Iterator[None]:
    app.state.buffers.clear()
    yield
    app.state.buffers.clear()


class TestHelperFunctions:
    """Tests for helper functions."""

    def test_buffer_state_none(self) -> None:
        """Returns None without a buffer id."""
        assert _buffer_state(None) is None

    def test_buffer_state_reused(self) -> None:
        """Returns the same state for the same buffer id."""
        state = _buffer_state("script.R")
        assert isinstance(state, DocState)
        assert _buffer_state("script.R") is state

    def test_buffer_state_capped(self) -> None:
        """Drops the least recently used buffer past the limit."""
        with patch("esseldoc.web.app.MAX_BUFFERS", 2):
            first = _buffer_state("a.R")
            _buffer_state("b.R")
            assert _buffer_state("a.R") is first
            _buffer_state("c.R")

        assert list(app.state.buffers) == ["a.R", "c.R"]


class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_health(self, session: MagicMock) -> None:
        """Reports interpreter availability."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "interpreter_active": True}


class TestTokenEndpoint:
    """Tests for POST /token."""

    def test_token_by_cursor(self) -> None:
        """Returns the name under the cursor."""
        response = client.post("/token", json={"text": CALL, "cursor": 2})
        assert response.status_code == 200
        assert response.json() == {"token": "rnorm"}

    def test_token_by_line(self) -> None:
        """Accepts line and column."""
        response = client.post("/token", json={"text": "x\nmean(y)", "line": 2, "column": 1})
        assert response.json() == {"token": "mean"}

    def test_cursor_out_of_range(self) -> None:
        """Returns 400 for a cursor past the end."""
        response = client.post("/token", json={"text": "abc", "cursor": 10})
        assert response.status_code == 400

    def test_missing_position(self) -> None:
        """Returns 400 without cursor or line."""
        response = client.post("/token", json={"text": "abc"})
        assert response.status_code == 400

    def test_negative_cursor(self) -> None:
        """Returns 422 for invalid payloads."""
        response = client.post("/token", json={"text": "abc", "cursor": -1})
        assert response.status_code == 422


class TestDocEndpoint:
    """Tests for POST /doc."""

    def test_doc_direct(self, session: MagicMock) -> None:
        """Returns the doc of the token under the cursor."""
        response = client.post("/doc", json={"text": CALL, "cursor": 2})
        assert response.status_code == 200
        assert response.json() == {"doc": "n, mean = 0, sd = 1"}

    def test_doc_fallback(self, session: MagicMock) -> None:
        """Falls back to the enclosing call."""
        text = "rnorm(n = "
        response = client.post("/doc", json={"text": text, "cursor": len(text), "show_name": True})
        assert response.json() == {"doc": "rnorm: n, mean = 0, sd = 1"}

    def test_doc_nothing(self, session: MagicMock) -> None:
        """Returns null when nothing applies."""
        response = client.post("/doc", json={"text": "x <- 1 ", "cursor": 7})
        assert response.json() == {"doc": None}
        session.lookup_args.assert_not_called()

    def test_doc_inactive(self, session: MagicMock) -> None:
        """Returns null without an interpreter."""
        session.is_active.return_value = False
        response = client.post("/doc", json={"text": CALL, "cursor": 2})
        assert response.json() == {"doc": None}
        session.lookup_args.assert_not_called()

    def test_doc_cached_per_buffer(self, session: MagicMock) -> None:
        """Reuses the last answer for the same buffer."""
        payload = {"text": CALL, "cursor": 2, "strategy": "cached", "buffer_id": "a.R"}
        client.post("/doc", json=payload)
        response = client.post("/doc", json=payload)

        assert response.json() == {"doc": "n, mean = 0, sd = 1"}
        assert session.lookup_args.call_count == 1

        client.post("/doc", json={**payload, "buffer_id": "b.R"})
        assert session.lookup_args.call_count == 2

    def test_doc_cached_requires_buffer(self, session: MagicMock) -> None:
        """Returns 400 for the cached strategy without a buffer id."""
        response = client.post("/doc", json={"text": CALL, "cursor": 2, "strategy": "cached"})
        assert response.status_code == 400
        assert "buffer_id" in response.json()["detail"]
        session.lookup_args.assert_not_called()

    def test_doc_unknown_strategy(self) -> None:
        """Returns 422 for unknown strategies."""
        response = client.post("/doc", json={"text": CALL, "cursor": 2, "strategy": "both"})
        assert response.status_code == 422


class TestForgetBuffer:
    """Tests for DELETE /buffers/{buffer_id}."""

    def test_forget_known(self) -> None:
        """Drops the stored state."""
        _buffer_state("a.R")
        response = client.delete("/buffers/a.R")
        assert response.status_code == 200
        assert "a.R" not in app.state.buffers

    def test_forget_unknown(self) -> None:
        """Returns 404 for unknown buffers."""
        response = client.delete("/buffers/missing.R")
        assert response.status_code == 404
