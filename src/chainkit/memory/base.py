"""Memory collaborator interface used by chains to recall and persist conversation context."""

from abc import ABC, abstractmethod
from typing import Any


class BaseMemory(ABC):
    """Abstract interface for chain memory.

    A chain holds a memory by reference and only talks to it through these
    methods: it asks which keys the memory can supply, loads those values
    before execution, and saves the finished turn afterwards.
    """

    @property
    @abstractmethod
    def memory_variables(self) -> list[str]:
        """Input keys this memory supplies to the chain."""
        ...

    @abstractmethod
    def load_memory_variables(self, inputs: dict[str, Any]) -> dict[str, Any]:
        """Return recalled values keyed by memory variable."""
        ...

    @abstractmethod
    def save_context(self, inputs: dict[str, Any], outputs: dict[str, str]) -> None:
        """Record one completed chain turn."""
        ...

    def clear(self) -> None:
        """Forget everything stored. Default: nothing to clear."""
        pass
