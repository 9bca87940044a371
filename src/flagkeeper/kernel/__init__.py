"""Kernel – errors, error mapping and time."""
from flagkeeper.kernel.errors import (
    BaseError,
    ErrorCode,
    FlagKeyExistsError,
    FlagNotFoundError,
    InvalidRequestError,
    StorageError,
    ValidationFailedError,
)
from flagkeeper.kernel.time import Clock, FrozenClock, SystemClock

__all__ = [
    "BaseError",
    "Clock",
    "ErrorCode",
    "FlagKeyExistsError",
    "FlagNotFoundError",
    "FrozenClock",
    "InvalidRequestError",
    "StorageError",
    "SystemClock",
    "ValidationFailedError",
]
