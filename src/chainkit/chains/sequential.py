"""Composable chains: run sub-chains in sequence over a shared state."""

import logging
from typing import Any, Optional

from ..exceptions import InvalidArgumentError
from ..memory.base import BaseMemory
from ..observability.tracing import ChainTracer
from .base import Chain

logger = logging.getLogger(__name__)


class SequentialChain(Chain):
    """Run a sequence of chains; each step receives the initial inputs plus all previous outputs.

    Key wiring is checked when the chain is built, so a step whose inputs can
    never be satisfied fails at construction rather than mid-run.
    """

    def __init__(
        self,
        chains: list[Chain],
        input_variables: list[str],
        output_variables: Optional[list[str]] = None,
        return_all: bool = False,
        memory: Optional[BaseMemory] = None,
        tracer: Optional[ChainTracer] = None,
    ):
        """
        Args:
            chains: Sub-chains, run in order.
            input_variables: Keys the caller provides.
            output_variables: Keys to return; if None, the last chain's outputs
                (or every produced key when return_all is True).
            return_all: Return every key produced by the sub-chains.
            memory: Optional memory for the sequence as a whole.
            tracer: Optional tracer.
        """
        super().__init__(memory=memory, tracer=tracer)
        if not chains:
            raise InvalidArgumentError("SequentialChain needs at least one chain")
        self._chains = list(chains)
        self._input_variables = list(input_variables)

        known = list(self._input_variables)
        if memory is not None:
            known += [k for k in memory.memory_variables if k not in known]
        produced: list[str] = []
        for chain in self._chains:
            supplied = set(chain.memory.memory_variables) if chain.memory is not None else set()
            missing = [k for k in chain.input_keys if k not in known and k not in supplied]
            if missing:
                raise InvalidArgumentError(
                    f"Missing required input keys {missing} for chain '{chain.chain_type}', only had {known}",
                    missing,
                )
            for key in chain.output_keys:
                if key not in known:
                    known.append(key)
                if key not in produced:
                    produced.append(key)

        if output_variables is None:
            output_variables = produced if return_all else list(self._chains[-1].output_keys)
        else:
            missing = [k for k in output_variables if k not in known]
            if missing:
                raise InvalidArgumentError(f"Expected output variables that were not found: {missing}", missing)
        self._output_variables = list(output_variables)

    @property
    def chain_type(self) -> str:
        return "sequential_chain"

    @property
    def input_keys(self) -> list[str]:
        return list(self._input_variables)

    @property
    def output_keys(self) -> list[str]:
        return list(self._output_variables)

    @property
    def chains(self) -> list[Chain]:
        return list(self._chains)

    def execute(self, inputs: dict[str, Any]) -> dict[str, str]:
        state: dict[str, Any] = dict(inputs)
        for i, chain in enumerate(self._chains):
            logger.debug("Sequential step %s: %s", i, chain.chain_type)
            state.update(chain.invoke(state, return_only_outputs=True))
        return {k: str(state[k]) for k in self._output_variables}
