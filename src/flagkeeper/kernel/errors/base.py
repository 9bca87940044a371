"""Root error class for the flagkeeper error hierarchy."""

from __future__ import annotations

import json
from typing import Any

from flagkeeper.kernel.errors.codes import ErrorCode


class BaseError(Exception):
    """Root of the error hierarchy.

    Every error carries an :class:`ErrorCode` so the boundary mapping can be
    exhaustive over error kinds rather than over classes.

    Args:
        message: Human-readable description (internal, may contain identifiers).
        code: Error kind (defaults to ``default_code``).
        detail: Arbitrary extra context (serialisable dict).
        cause: Original exception that triggered this error.
    """

    default_code: ErrorCode = ErrorCode.STORAGE_ERROR

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        detail: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.detail: dict[str, Any] = detail or {}
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        """Return a JSON-serialisable single-line string representation."""
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code.value!r}, message={self.message!r})"

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a plain dict for logging. Never send this to a caller."""
        payload: dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
            "detail": self.detail,
        }
        if self.cause is not None:
            payload["cause"] = repr(self.cause)
        return payload


__all__ = ["BaseError"]
