"""ErrorMapper – domain errors to the stable external taxonomy.

The returned message is fixed per error kind (validation and invalid-request
messages describe the caller's own input). Internal detail, causes and stack
traces go to the log only.
"""

from __future__ import annotations

import dataclasses
from enum import IntEnum
from typing import assert_never

from flagkeeper.kernel.errors.base import BaseError
from flagkeeper.kernel.errors.codes import ErrorCode
from flagkeeper.observability.logging import get_logger

logger = get_logger(__name__)


class ErrorStatus(IntEnum):
    """HTTP-style status class for each error kind."""

    BAD_REQUEST = 400
    NOT_FOUND = 404
    CONFLICT = 409
    INTERNAL = 500


@dataclasses.dataclass(frozen=True)
class MappedError:
    code: ErrorCode
    status: ErrorStatus
    message: str

    def to_body(self) -> dict[str, str]:
        return {"code": self.code.value, "message": self.message}


_INTERNAL_MESSAGE = "Internal server error"


class ErrorMapper:
    """Translate any exception into a :class:`MappedError`."""

    def map(self, error: BaseException) -> MappedError:
        if not isinstance(error, BaseError):
            logger.error("unhandled_error", error_type=type(error).__name__, exc_info=error)
            return MappedError(ErrorCode.STORAGE_ERROR, ErrorStatus.INTERNAL, _INTERNAL_MESSAGE)

        code = error.code
        match code:
            case ErrorCode.VALIDATION_FAILED:
                logger.info("request_rejected", **error.to_dict())
                return MappedError(code, ErrorStatus.BAD_REQUEST, error.message)
            case ErrorCode.INVALID_REQUEST:
                logger.info("request_rejected", **error.to_dict())
                return MappedError(code, ErrorStatus.BAD_REQUEST, error.message)
            case ErrorCode.FLAG_NOT_FOUND:
                logger.info("request_rejected", **error.to_dict())
                return MappedError(code, ErrorStatus.NOT_FOUND, "Flag not found")
            case ErrorCode.FLAG_KEY_EXISTS:
                logger.info("request_rejected", **error.to_dict())
                return MappedError(code, ErrorStatus.CONFLICT, "Flag key already exists")
            case ErrorCode.STORAGE_ERROR:
                logger.error("storage_failure", exc_info=error, **error.to_dict())
                return MappedError(code, ErrorStatus.INTERNAL, _INTERNAL_MESSAGE)
            case ErrorCode.CONFIG_ERROR:
                logger.error("config_failure", **error.to_dict())
                return MappedError(ErrorCode.STORAGE_ERROR, ErrorStatus.INTERNAL, _INTERNAL_MESSAGE)
            case _:
                assert_never(code)


__all__ = ["ErrorMapper", "ErrorStatus", "MappedError"]
