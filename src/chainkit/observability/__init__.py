"""Observability: chain tracing."""

from .tracing import ChainTrace, ChainTracer

__all__ = [
    "ChainTrace",
    "ChainTracer",
]
