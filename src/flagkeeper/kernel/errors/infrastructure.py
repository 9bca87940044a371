"""Infrastructure errors – I/O failures and corrupt payloads."""

from __future__ import annotations

from typing import Any

from flagkeeper.kernel.errors.base import BaseError
from flagkeeper.kernel.errors.codes import ErrorCode


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure that is not a business rule violation."""

    default_code = ErrorCode.STORAGE_ERROR


class StorageError(InfrastructureError):
    """A flag persistence operation failed.

    Raised by the flag service; ``operation`` names what was attempted
    (``"list flags"``, ``"update flag <id>"``) and ``cause`` holds the
    underlying exception.
    """

    def __init__(self, operation: str, cause: BaseException | None = None, **kwargs: Any) -> None:
        super().__init__(
            f"Storage operation failed: {operation}",
            detail={"operation": operation},
            cause=cause,
            **kwargs,
        )
        self.operation = operation


class KeyValueStoreError(InfrastructureError):
    """A key-value backend could not complete a single-key operation."""

    def __init__(self, backend: str, message: str | None = None, **kwargs: Any) -> None:
        super().__init__(message or f"Key-value backend '{backend}' failed", **kwargs)
        self.backend = backend


class SerializationError(InfrastructureError):
    """Failed to serialize or deserialize a stored payload."""

    def __init__(self, message: str, *, storage_key: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.storage_key = storage_key


__all__ = [
    "InfrastructureError",
    "KeyValueStoreError",
    "SerializationError",
    "StorageError",
]
