"""Chains: the invocation contract and composable chain building blocks.

This module provides:
- Chain: abstract contract (key declarations, validation, memory, sync and streaming calls)
- Streaming: output accumulation and single-pass chain streams
- SequentialChain: multi-step chain composition
- RunnableChain: wrapper for LangChain Runnables / LCEL pipelines
"""

from .base import Chain
from .streaming import ChainStream, StreamAccumulator, StreamState
from .sequential import SequentialChain
from .runnable_chain import RunnableChain

__all__ = [
    # Base
    "Chain",
    # Streaming
    "ChainStream",
    "StreamAccumulator",
    "StreamState",
    # Chain implementations
    "SequentialChain",
    "RunnableChain",
]
