"""Tests for the context library."""

import logging

import pytest

from cluster_assets.context import current_trace, trace_context
from cluster_assets.store import InMemoryStore

from .conftest import FakeAsset


def test_trace_context() -> None:
    """Test nested trace contexts build up a chain of names."""
    assert current_trace() == ""
    with trace_context("outer"):
        assert current_trace() == "outer"
        with trace_context("inner"):
            assert current_trace() == "outer > inner"
        assert current_trace() == "outer"
    assert current_trace() == ""


def test_trace_context_reset_on_error() -> None:
    """Test the trace is restored when the block raises."""
    with pytest.raises(ValueError):
        with trace_context("outer"):
            raise ValueError("error")
    assert current_trace() == ""


async def test_store_trace(caplog: pytest.LogCaptureFixture) -> None:
    """Test resolving assets logs the chain of dependencies."""
    store = InMemoryStore([FakeAsset("top", ["middle"]), FakeAsset("middle")])
    with caplog.at_level(logging.DEBUG, logger="cluster_assets.context"):
        await store.resolve("top")

    assert "[Trace] > top > middle" in caplog.text
    assert "[Trace] < top > middle (" in caplog.text
    assert current_trace() == ""
