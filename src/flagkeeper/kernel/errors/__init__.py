"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError              (domain.py)
    │   ├── ValidationFailedError    VALIDATION_FAILED
    │   ├── FlagNotFoundError        FLAG_NOT_FOUND
    │   └── FlagKeyExistsError       FLAG_KEY_EXISTS
    ├── ApplicationError         (application.py)
    │   └── InvalidRequestError      INVALID_REQUEST
    └── InfrastructureError      (infrastructure.py)   STORAGE_ERROR
        ├── StorageError
        ├── KeyValueStoreError
        └── SerializationError
"""

from flagkeeper.kernel.errors.application import ApplicationError, InvalidRequestError
from flagkeeper.kernel.errors.base import BaseError
from flagkeeper.kernel.errors.codes import ErrorCode
from flagkeeper.kernel.errors.domain import (
    DomainError,
    FlagKeyExistsError,
    FlagNotFoundError,
    ValidationFailedError,
)
from flagkeeper.kernel.errors.infrastructure import (
    InfrastructureError,
    KeyValueStoreError,
    SerializationError,
    StorageError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "DomainError",
    "ErrorCode",
    "FlagKeyExistsError",
    "FlagNotFoundError",
    "InfrastructureError",
    "InvalidRequestError",
    "KeyValueStoreError",
    "SerializationError",
    "StorageError",
    "ValidationFailedError",
]
