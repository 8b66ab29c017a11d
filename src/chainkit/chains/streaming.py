"""Streaming primitives for chains: output accumulation and a single-pass chain stream.

This module provides the pieces ``Chain.invoke_stream`` is built from:

- ``StreamAccumulator``: folds partial output mappings into one final mapping
- ``ChainStream``: iterator that validates, folds and shapes each element, and
  runs a completion hook once the source is exhausted

Example:
    ```python
    stream = chain.invoke_stream({"question": "What is RAG?"})
    with stream:
        for chunk in stream:
            print(chunk["text"], end="")
    print(stream.accumulator.result())
    ```
"""

import logging
from enum import Enum
from typing import Any, Callable, Iterable, Iterator, Optional

logger = logging.getLogger(__name__)


class StreamState(Enum):
    """Lifecycle of a chain stream."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


class StreamAccumulator:
    """Merge partial outputs from a stream, one entry per output key.

    The first declared output key is treated as incremental text and its
    values are concatenated. Every other key keeps the first non-blank value
    seen; later values for that key are ignored. Keys that only ever carried
    blank values are absent from the result.
    """

    def __init__(self, output_keys: list[str]):
        self._primary_key = output_keys[0] if output_keys else None
        self._values: dict[str, str] = {}

    def add(self, chunk: dict[str, str]) -> None:
        """Fold one stream element into the accumulated outputs."""
        for key, value in chunk.items():
            if key == self._primary_key:
                self._values[key] = self._values.get(key, "") + ("" if value is None else str(value))
            elif _is_blank(self._values.get(key)) and not _is_blank(value):
                self._values[key] = str(value)

    def result(self) -> dict[str, str]:
        """Accumulated outputs so far (a copy)."""
        return dict(self._values)


class ChainStream(Iterator[dict[str, Any]]):
    """Single-pass iterator over the shaped elements of a chain's output stream.

    Each element pulled from ``source`` is validated, folded into the
    accumulator and then shaped for the caller. ``on_complete`` receives the
    accumulated outputs exactly once, when the source is exhausted without
    error. A failing source or element, or a call to ``close()``, ends the
    stream without running ``on_complete``.
    """

    def __init__(
        self,
        source: Iterable[dict[str, str]],
        accumulator: StreamAccumulator,
        validate: Optional[Callable[[dict[str, str]], None]] = None,
        shape: Optional[Callable[[dict[str, str]], dict[str, Any]]] = None,
        on_complete: Optional[Callable[[dict[str, str]], None]] = None,
        on_finish: Optional[Callable[[StreamState, Optional[BaseException]], None]] = None,
    ):
        """
        Args:
            source: Partial output mappings, e.g. a chain's execute_stream().
            accumulator: Fold state for the elements.
            validate: Raises if an element is malformed.
            shape: Maps a validated element to what the caller sees; identity if None.
            on_complete: Called with the accumulated outputs after successful exhaustion.
            on_finish: Called once with the terminal state and error (if any).
        """
        self._source = iter(source)
        self._accumulator = accumulator
        self._validate = validate
        self._shape = shape
        self._on_complete = on_complete
        self._on_finish = on_finish
        self._state = StreamState.PENDING

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def accumulator(self) -> StreamAccumulator:
        return self._accumulator

    def __iter__(self) -> "ChainStream":
        return self

    def __next__(self) -> dict[str, Any]:
        if self._state is not StreamState.PENDING:
            raise StopIteration
        try:
            chunk = next(self._source)
        except StopIteration:
            self._complete()
            raise
        except Exception as e:
            self._finish(StreamState.FAILED, e)
            raise
        try:
            if self._validate is not None:
                self._validate(chunk)
        except Exception as e:
            self._close_source()
            self._finish(StreamState.FAILED, e)
            raise
        self._accumulator.add(chunk)
        return self._shape(chunk) if self._shape is not None else chunk

    def close(self) -> None:
        """Cancel the stream. The completion hook will not run."""
        if self._state is not StreamState.PENDING:
            return
        self._close_source()
        logger.debug("Chain stream cancelled before completion")
        self._finish(StreamState.CANCELLED, None)

    def __enter__(self) -> "ChainStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __del__(self) -> None:
        # a stream dropped mid-way counts as cancelled
        if getattr(self, "_state", None) is StreamState.PENDING:
            self.close()

    def _complete(self) -> None:
        # on_complete fires at most once: leave PENDING before calling it
        self._state = StreamState.COMPLETED
        try:
            if self._on_complete is not None:
                self._on_complete(self._accumulator.result())
        except Exception as e:
            self._finish(StreamState.FAILED, e)
            raise
        self._finish(StreamState.COMPLETED, None)

    def _finish(self, state: StreamState, error: Optional[BaseException]) -> None:
        self._state = state
        if self._on_finish is not None:
            self._on_finish(state, error)

    def _close_source(self) -> None:
        close = getattr(self._source, "close", None)
        if callable(close):
            close()
