"""Chain exception hierarchy.

This module defines custom exceptions for chains to provide
clearer error messages and better error handling.
"""

from typing import Iterable, Optional


class ChainError(Exception):
    """Base exception for all chain errors.

    All chainkit-specific exceptions should inherit from this class.
    """
    pass


class InvalidArgumentError(ChainError, ValueError):
    """Raised when inputs, outputs or call shape do not match a chain's key declarations.

    Attributes:
        keys: Offending keys (missing, ambiguous or unexpected), in declaration order
        message: Detailed error message
    """
    def __init__(self, message: str, keys: Optional[Iterable[str]] = None):
        self.keys = list(keys or [])
        self.message = message
        super().__init__(message)


class UnsupportedOperationError(ChainError, NotImplementedError):
    """Raised when a chain is asked for an operation it does not implement.

    Attributes:
        operation: Name of the unsupported operation
        chain_type: Chain type that rejected the call
    """
    def __init__(self, operation: str, chain_type: str):
        self.operation = operation
        self.chain_type = chain_type
        super().__init__(f"'{operation}' is not supported by chain '{chain_type}'")
