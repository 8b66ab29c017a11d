"""Memory collaborators that chains recall from and persist to."""

from .base import BaseMemory
from .buffer import ConversationBufferMemory, ConversationTurn

__all__ = [
    "BaseMemory",
    "ConversationBufferMemory",
    "ConversationTurn",
]
