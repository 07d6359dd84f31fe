"""Utilities for tracing the chain of assets being resolved.

Each asyncio task resolving a dependency runs in a copy of its parent's
context, so the trace stack reflects the path from the requested asset down
to the asset currently being generated.
"""

import contextvars
from contextlib import contextmanager
import logging
from time import perf_counter
from typing import Generator


_LOGGER = logging.getLogger(__name__)

# No public API
__all__: list[str] = []


trace: contextvars.ContextVar[tuple[str, ...]] = contextvars.ContextVar(
    "trace", default=()
)


def current_trace() -> str:
    """Return the chain of asset names currently being resolved."""
    return " > ".join(trace.get())


@contextmanager
def trace_context(name: str) -> Generator[None, None, None]:
    stack = trace.get()
    token = trace.set(stack + (name,))
    label = current_trace()
    t1 = perf_counter()
    _LOGGER.debug("[Trace] > %s", label)
    try:
        yield
    finally:
        t2 = perf_counter()
        trace.reset(token)
        _LOGGER.debug("[Trace] < %s (%0.2fs)", label, (t2 - t1))
