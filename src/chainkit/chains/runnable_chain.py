"""Wrap a LangChain Runnable (e.g. an LCEL pipeline) so it conforms to the Chain contract."""

from collections.abc import Mapping
from typing import Any, Iterator, Optional

from langchain_core.messages import BaseMessage
from langchain_core.runnables import Runnable

from ..exceptions import InvalidArgumentError
from ..memory.base import BaseMemory
from ..observability.tracing import ChainTracer
from .base import Chain


def _to_text(value: Any) -> str:
    if isinstance(value, BaseMessage):
        content = value.content
        return content if isinstance(content, str) else str(content)
    return "" if value is None else str(value)


class RunnableChain(Chain):
    """
    Wraps any LangChain Runnable so it can be used as a Chain with memory and streaming.
    execute(inputs) delegates to runnable.invoke, execute_stream to runnable.stream.

    A text or message result is bound to the first output key; a mapping
    result is taken key by key.
    """

    def __init__(
        self,
        runnable: Runnable,
        input_keys: list[str],
        output_keys: Optional[list[str]] = None,
        chain_type: str = "runnable_chain",
        memory: Optional[BaseMemory] = None,
        tracer: Optional[ChainTracer] = None,
    ):
        """
        Args:
            runnable: A LangChain Runnable (e.g. PromptTemplate | llm | StrOutputParser()).
            input_keys: Keys passed to the runnable as its input mapping.
            output_keys: Keys the runnable produces; defaults to ["text"].
            chain_type: Identifier reported by chain_type.
            memory: Optional memory.
            tracer: Optional tracer.
        """
        super().__init__(memory=memory, tracer=tracer)
        self._runnable = runnable
        self._input_keys = list(input_keys)
        self._output_keys = list(output_keys) if output_keys is not None else ["text"]
        if not self._output_keys:
            raise InvalidArgumentError("RunnableChain needs at least one output key")
        self._chain_type = chain_type

    @property
    def chain_type(self) -> str:
        return self._chain_type

    @property
    def input_keys(self) -> list[str]:
        return list(self._input_keys)

    @property
    def output_keys(self) -> list[str]:
        return list(self._output_keys)

    def execute(self, inputs: dict[str, Any]) -> dict[str, str]:
        return self._to_outputs(self._runnable.invoke(self._runnable_input(inputs)))

    def execute_stream(self, inputs: dict[str, Any]) -> Iterator[dict[str, str]]:
        for chunk in self._runnable.stream(self._runnable_input(inputs)):
            outputs = self._to_outputs(chunk)
            # partial chunks may omit secondary keys
            for key in self._output_keys:
                outputs.setdefault(key, "")
            yield outputs

    def _runnable_input(self, inputs: dict[str, Any]) -> dict[str, Any]:
        return {k: inputs[k] for k in self._input_keys}

    def _to_outputs(self, value: Any) -> dict[str, str]:
        if isinstance(value, Mapping):
            return {k: _to_text(v) for k, v in value.items()}
        return {self._output_keys[0]: _to_text(value)}
