"""In-process conversation buffer memory for chains."""

import logging
import threading
from dataclasses import dataclass, asdict, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..config import get_settings
from ..exceptions import InvalidArgumentError
from .base import BaseMemory

logger = logging.getLogger(__name__)


@dataclass
class ConversationTurn:
    """One stored exchange between the caller and the chain."""
    human: str
    ai: str
    timestamp: datetime
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage."""
        return {
            **asdict(self),
            "timestamp": self.timestamp.isoformat()
        }


class ConversationBufferMemory(BaseMemory):
    """Memory that keeps every turn in a list and replays it as a transcript.

    The transcript is exposed to the chain under ``memory_key`` as lines of
    ``"<human_prefix>: ..."`` and ``"<ai_prefix>: ..."``.
    """

    def __init__(
        self,
        memory_key: Optional[str] = None,
        input_key: Optional[str] = None,
        output_key: Optional[str] = None,
        human_prefix: Optional[str] = None,
        ai_prefix: Optional[str] = None,
        max_turns: Optional[int] = None,
    ):
        """Initialize buffer memory. Unset options fall back to settings.

        Args:
            memory_key: Chain input key the transcript is supplied under
            input_key: Input key holding the human message; inferred when None
            output_key: Output key holding the chain reply; inferred when None
            human_prefix: Speaker label for human lines
            ai_prefix: Speaker label for chain lines
            max_turns: Keep only the most recent N turns (0 = unbounded)
        """
        settings = get_settings()
        self._memory_key = memory_key or settings.MEMORY_KEY
        self._input_key = input_key
        self._output_key = output_key
        self._human_prefix = human_prefix or settings.HUMAN_PREFIX
        self._ai_prefix = ai_prefix or settings.AI_PREFIX
        self._max_turns = settings.MEMORY_MAX_TURNS if max_turns is None else max_turns
        self._turns: List[ConversationTurn] = []
        self._lock = threading.Lock()

    @property
    def memory_key(self) -> str:
        return self._memory_key

    @property
    def memory_variables(self) -> list[str]:
        return [self._memory_key]

    @property
    def turns(self) -> List[ConversationTurn]:
        """Snapshot of stored turns, oldest first."""
        with self._lock:
            return list(self._turns)

    @property
    def buffer(self) -> str:
        """Transcript of stored turns."""
        lines = []
        for turn in self.turns:
            lines.append(f"{self._human_prefix}: {turn.human}")
            lines.append(f"{self._ai_prefix}: {turn.ai}")
        return "\n".join(lines)

    def load_memory_variables(self, inputs: dict[str, Any]) -> dict[str, Any]:
        return {self._memory_key: self.buffer}

    def save_context(self, inputs: dict[str, Any], outputs: dict[str, str]) -> None:
        input_key = self._input_key or self._infer_key(inputs, "input")
        output_key = self._output_key or self._infer_key(outputs, "output")
        turn = ConversationTurn(
            human=str(inputs[input_key]),
            ai=str(outputs[output_key]),
            timestamp=datetime.now(),
        )
        with self._lock:
            self._turns.append(turn)
            if self._max_turns > 0 and len(self._turns) > self._max_turns:
                del self._turns[: len(self._turns) - self._max_turns]
        logger.debug("Saved turn under %s (%s=%s, %s=%s)", self._memory_key, input_key, turn.human[:50], output_key, turn.ai[:50])

    def clear(self) -> None:
        with self._lock:
            self._turns.clear()

    def _infer_key(self, values: dict[str, Any], kind: str) -> str:
        candidates = [k for k in values if k != self._memory_key]
        if len(candidates) != 1:
            raise InvalidArgumentError(
                f"Cannot infer the {kind} key to store in memory, got {candidates}. "
                f"Pass {kind}_key explicitly.",
                candidates,
            )
        return candidates[0]
