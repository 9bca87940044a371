"""Application-layer errors – malformed requests at the boundary."""

from __future__ import annotations

from flagkeeper.kernel.errors.base import BaseError
from flagkeeper.kernel.errors.codes import ErrorCode


class ApplicationError(BaseError):
    """Cross-cutting application-layer concern."""


class InvalidRequestError(ApplicationError):
    """Structurally malformed caller input (missing id, unparseable body)."""

    default_code = ErrorCode.INVALID_REQUEST


__all__ = ["ApplicationError", "InvalidRequestError"]
