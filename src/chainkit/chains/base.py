"""Abstract chain contract: key declarations, validation, memory, sync and streaming invocation."""

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Iterator, Optional

from ..config import get_settings
from ..exceptions import InvalidArgumentError, UnsupportedOperationError
from ..memory.base import BaseMemory
from ..observability.tracing import ChainTrace, ChainTracer
from .streaming import ChainStream, StreamAccumulator, StreamState

logger = logging.getLogger(__name__)


class Chain(ABC):
    """Base interface that all chains implement.

    Subclasses declare ``chain_type``, ``input_keys`` and ``output_keys`` and
    implement ``execute`` (and optionally ``execute_stream``). The base class
    wraps that computation: it prepares and validates inputs, merges values
    recalled from an optional memory, validates outputs, saves the turn back
    to memory and shapes the result.

    Example:
        ```python
        chain = MyChain(memory=ConversationBufferMemory())
        chain.invoke({"question": "What is RAG?"})
        chain.run("What is RAG?")
        for token in chain.run_stream("What is RAG?"):
            print(token, end="")
        ```
    """

    _memory: Optional[BaseMemory] = None
    _tracer: Optional[ChainTracer] = None

    def __init__(self, memory: Optional[BaseMemory] = None, tracer: Optional[ChainTracer] = None):
        """
        Args:
            memory: Optional memory shared by reference; never created or cleared by the chain.
            tracer: Optional tracer; when None and ENABLE_CHAIN_TRACING is set, a default one is used.
        """
        self._memory = memory
        if tracer is None and get_settings().ENABLE_CHAIN_TRACING:
            tracer = ChainTracer.from_settings()
        self._tracer = tracer

    @property
    def memory(self) -> Optional[BaseMemory]:
        return self._memory

    @property
    @abstractmethod
    def chain_type(self) -> str:
        """Identifier of the chain family."""
        ...

    @property
    @abstractmethod
    def input_keys(self) -> list[str]:
        """Input keys this chain expects, in declaration order."""
        ...

    @property
    @abstractmethod
    def output_keys(self) -> list[str]:
        """Output keys this chain guarantees to produce, in declaration order."""
        ...

    @abstractmethod
    def execute(self, inputs: dict[str, Any]) -> dict[str, str]:
        """Run the logic of this chain on prepared inputs and return its outputs."""
        ...

    def execute_stream(self, inputs: dict[str, Any]) -> Iterator[dict[str, str]]:
        """Run the logic of this chain and yield partial outputs. Override in chains that stream."""
        raise UnsupportedOperationError("execute_stream", self.chain_type)

    def prep_inputs(self, inputs: Any) -> dict[str, Any]:
        """Validate and prepare inputs.

        A mapping is copied, values recalled from memory are merged over it and
        every input key is checked. Any other value is treated as a single
        input and bound to the one input key memory does not supply.

        Returns:
            A new dict of inputs; the caller's mapping is never modified.
        """
        if not isinstance(inputs, Mapping):
            inputs = {self._single_input_key(): inputs}
        prepared = dict(inputs)
        if self._memory is not None:
            external_context = self._memory.load_memory_variables(prepared)
            logger.debug("Merged memory variables %s into %s inputs", list(external_context), self.chain_type)
            prepared.update(external_context)
        self._validate_inputs(prepared)
        return prepared

    def invoke(self, inputs: Any, return_only_outputs: bool = False) -> dict[str, str]:
        """Run the chain and return its outputs, optionally merged with its inputs.

        Args:
            inputs: Mapping of inputs, or a single value if the chain expects one input.
            return_only_outputs: If True, return only the keys produced by the chain.
                If False, return the stringified inputs overlaid by the outputs.
        """
        start = time.perf_counter()
        try:
            prepared = self.prep_inputs(inputs)
            logger.debug("Executing %s chain", self.chain_type)
            outputs = self.execute(prepared)
            result = self._prep_outputs(prepared, outputs, return_only_outputs)
        except Exception as e:
            self._trace("invoke", start, "error", e)
            raise
        self._trace("invoke", start, "ok", None)
        return result

    def __call__(self, inputs: Any, return_only_outputs: bool = False) -> dict[str, str]:
        """Convenience: chain(inputs) == chain.invoke(inputs)."""
        return self.invoke(inputs, return_only_outputs=return_only_outputs)

    def invoke_stream(self, inputs: Any, return_only_outputs: bool = False) -> ChainStream:
        """Run the chain and stream its outputs.

        Inputs are prepared immediately, so input errors raise here. Each
        streamed element is validated as it arrives and forwarded either as is
        or merged over the stringified inputs. Memory is saved once, with the
        accumulated outputs, only after the stream is fully consumed.
        """
        start = time.perf_counter()
        try:
            prepared = self.prep_inputs(inputs)
            logger.debug("Streaming %s chain", self.chain_type)
            source = self.execute_stream(prepared)
        except Exception as e:
            self._trace("invoke_stream", start, "error", e)
            raise

        def shape(chunk: dict[str, str]) -> dict[str, str]:
            if return_only_outputs:
                return chunk
            return self._merge_inputs(prepared, chunk)

        def on_complete(accumulated: dict[str, str]) -> None:
            if self._memory is not None:
                self._memory.save_context(prepared, accumulated)
            logger.debug("Stream of %s chain completed with keys %s", self.chain_type, list(accumulated))

        def on_finish(state: StreamState, error: Optional[BaseException]) -> None:
            status = {
                StreamState.COMPLETED: "ok",
                StreamState.CANCELLED: "cancelled",
            }.get(state, "error")
            self._trace("invoke_stream", start, status, error)

        return ChainStream(
            source,
            StreamAccumulator(self.output_keys),
            validate=self._validate_outputs,
            shape=shape,
            on_complete=on_complete,
            on_finish=on_finish,
        )

    def run(self, inputs: Any) -> str:
        """Run the chain as text in, text out (or multiple variables, text out)."""
        output_key = self._single_output_key("run")
        return self.invoke(inputs)[output_key]

    def run_stream(self, inputs: Any) -> Iterator[str]:
        """Run the chain and stream the value of its single output key."""
        output_key = self._single_output_key("run_stream")
        return _stream_values(self.invoke_stream(inputs), output_key)

    def _single_input_key(self) -> str:
        input_keys = list(self.input_keys)
        if self._memory is not None:
            # keys supplied by memory need no caller value
            memory_variables = set(self._memory.memory_variables)
            input_keys = [k for k in input_keys if k not in memory_variables]
        if len(input_keys) != 1:
            raise InvalidArgumentError(
                "A single input value was passed in, but this chain expects "
                f"{len(input_keys)} inputs ({input_keys}). When a chain expects multiple inputs, "
                "call it with a mapping, e.g. `chain.invoke({'foo': 1, 'bar': 2})`",
                input_keys,
            )
        return input_keys[0]

    def _single_output_key(self, operation: str) -> str:
        output_keys = list(self.output_keys)
        if len(output_keys) != 1:
            raise InvalidArgumentError(
                f"`{operation}` is not supported when there is not exactly one output key. Got {output_keys}.",
                output_keys,
            )
        return output_keys[0]

    def _validate_inputs(self, inputs: Mapping[str, Any]) -> None:
        missing_keys = [k for k in self.input_keys if k not in inputs]
        if missing_keys:
            raise InvalidArgumentError(f"Missing some input keys: {missing_keys}", missing_keys)

    def _validate_outputs(self, outputs: Mapping[str, str]) -> None:
        missing_keys = [k for k in self.output_keys if k not in outputs]
        if missing_keys:
            raise InvalidArgumentError(f"Missing some output keys: {missing_keys}", missing_keys)

    def _prep_outputs(
        self,
        inputs: dict[str, Any],
        outputs: dict[str, str],
        return_only_outputs: bool,
    ) -> dict[str, str]:
        self._validate_outputs(outputs)
        if self._memory is not None:
            self._memory.save_context(inputs, outputs)
        if return_only_outputs:
            return outputs
        return self._merge_inputs(inputs, outputs)

    @staticmethod
    def _merge_inputs(inputs: dict[str, Any], outputs: Mapping[str, str]) -> dict[str, str]:
        result = {k: str(v) for k, v in inputs.items()}
        result.update(outputs)
        return result

    def _trace(
        self,
        operation: str,
        start: float,
        status: str,
        error: Optional[BaseException],
    ) -> None:
        if self._tracer is None:
            return
        self._tracer.record(ChainTrace(
            chain_type=self.chain_type,
            operation=operation,
            status=status,
            latency_seconds=time.perf_counter() - start,
            input_keys=list(self.input_keys),
            output_keys=list(self.output_keys),
            error=repr(error) if error is not None else None,
        ))


def _stream_values(stream: ChainStream, output_key: str) -> Iterator[str]:
    try:
        for chunk in stream:
            yield chunk[output_key]
    finally:
        stream.close()
