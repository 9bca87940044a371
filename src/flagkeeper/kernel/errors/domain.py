"""Domain errors – flag validation, uniqueness and existence rules."""

from __future__ import annotations

from typing import Any

from flagkeeper.kernel.errors.base import BaseError
from flagkeeper.kernel.errors.codes import ErrorCode


class DomainError(BaseError):
    """Raised when a domain rule / invariant is violated."""


class ValidationFailedError(DomainError):
    """A caller-supplied field does not meet validation rules."""

    default_code = ErrorCode.VALIDATION_FAILED

    def __init__(self, field: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            f"Validation failed for {field}: {reason}",
            detail={"field": field, "reason": reason},
            **kwargs,
        )
        self.field = field
        self.reason = reason


class FlagNotFoundError(DomainError):
    """The referenced flag id does not exist."""

    default_code = ErrorCode.FLAG_NOT_FOUND

    def __init__(self, flag_id: str, **kwargs: Any) -> None:
        super().__init__(f"Flag {flag_id} not found", detail={"flag_id": flag_id}, **kwargs)
        self.flag_id = flag_id


class FlagKeyExistsError(DomainError):
    """Another flag already holds the requested key."""

    default_code = ErrorCode.FLAG_KEY_EXISTS

    def __init__(self, key: str, existing_id: str, **kwargs: Any) -> None:
        super().__init__(
            f'Flag with key "{key}" already exists (existing ID: {existing_id})',
            detail={"key": key, "existing_id": existing_id},
            **kwargs,
        )
        self.key = key
        self.existing_id = existing_id


__all__ = [
    "DomainError",
    "FlagKeyExistsError",
    "FlagNotFoundError",
    "ValidationFailedError",
]
