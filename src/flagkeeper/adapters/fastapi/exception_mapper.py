"""FastAPI adapter – FastAPIExceptionMapper.

Error body schema::

    {"success": false, "error": {"code": "FLAG_NOT_FOUND", "message": "Flag not found"}}

Status and message come from :class:`~flagkeeper.kernel.errors.mapper.ErrorMapper`;
nothing else from the exception reaches the response.
"""
from __future__ import annotations

from typing import Any

from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from flagkeeper.kernel.errors import BaseError, InvalidRequestError
from flagkeeper.kernel.errors.mapper import ErrorMapper, MappedError


def error_response(mapped: MappedError) -> JSONResponse:
    return JSONResponse(
        status_code=int(mapped.status),
        content={"success": False, "error": mapped.to_body()},
    )


class FastAPIExceptionMapper:
    """Register error handlers that route every failure through :class:`ErrorMapper`."""

    def __init__(self, mapper: ErrorMapper | None = None) -> None:
        self._mapper = mapper or ErrorMapper()

    def register(self, app: Any) -> None:
        """Register all error handlers on a ``FastAPI`` or ``Starlette`` app."""
        app.add_exception_handler(BaseError, self._handle_error)
        app.add_exception_handler(RequestValidationError, self._handle_request_validation)
        app.add_exception_handler(Exception, self._handle_error)

    async def _handle_error(self, request: Any, exc: Exception) -> JSONResponse:  # noqa: ARG002
        return error_response(self._mapper.map(exc))

    async def _handle_request_validation(
        self, request: Any, exc: RequestValidationError  # noqa: ARG002
    ) -> JSONResponse:
        fields = sorted({".".join(str(p) for p in err.get("loc", ())[1:]) for err in exc.errors()})
        message = "Malformed request body"
        if any(fields):
            message = f"Malformed request body: {', '.join(f for f in fields if f)}"
        return error_response(self._mapper.map(InvalidRequestError(message)))


__all__ = ["FastAPIExceptionMapper", "error_response"]
