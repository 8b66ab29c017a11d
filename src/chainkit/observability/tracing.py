"""Chain call tracing: log chain type, operation, outcome and latency."""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from ..config import ChainSettings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class ChainTrace:
    """Single chain call trace."""

    chain_type: str
    operation: str  # "invoke" | "invoke_stream"
    status: str  # "ok" | "error" | "cancelled"
    latency_seconds: float
    input_keys: list[str] = field(default_factory=list)
    output_keys: list[str] = field(default_factory=list)
    error: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)


class ChainTracer:
    """Logs each chain call and forwards it to an optional callback."""

    def __init__(
        self,
        log_level: int = logging.INFO,
        callback: Optional[Callable[[ChainTrace], None]] = None,
    ):
        self._log_level = log_level
        self._callback = callback

    @classmethod
    def from_settings(
        cls,
        settings: Optional[ChainSettings] = None,
        callback: Optional[Callable[[ChainTrace], None]] = None,
    ) -> "ChainTracer":
        settings = settings or get_settings()
        level = getattr(logging, (settings.TRACING_LOG_LEVEL or "INFO").upper(), logging.INFO)
        return cls(log_level=level, callback=callback)

    def record(self, entry: ChainTrace) -> None:
        logger.log(
            self._log_level,
            "Chain trace | type=%s op=%s status=%s latency=%.3fs",
            entry.chain_type,
            entry.operation,
            entry.status,
            entry.latency_seconds,
        )
        if self._callback:
            try:
                self._callback(entry)
            except Exception as e:
                logger.warning("Tracing callback failed: %s", e)
