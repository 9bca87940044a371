"""Stable external error codes."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Error kinds. The first five are HTTP wire values; do not rename.

    ``CONFIG_ERROR`` marks startup configuration problems and never reaches
    a caller as such.
    """

    FLAG_NOT_FOUND = "FLAG_NOT_FOUND"
    FLAG_KEY_EXISTS = "FLAG_KEY_EXISTS"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    STORAGE_ERROR = "STORAGE_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    CONFIG_ERROR = "CONFIG_ERROR"


__all__ = ["ErrorCode"]
