"""FastAPI adapter – health and flag routers.

Success body schema::

    {"success": true, "data": ...}
"""
from typing import Annotated, Any, Awaitable, Callable

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from flagkeeper.flags import FlagService
from flagkeeper.flags.flag import format_timestamp
from flagkeeper.kernel.errors import InvalidRequestError
from flagkeeper.kernel.time import SystemClock

ReadinessCheck = Callable[[], Awaitable[bool]]


class FlagCreateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    key: str | None = None
    name: str | None = None
    description: str | None = None
    enabled: bool = False


class FlagUpdateRequest(BaseModel):
    """Fields left out (or sent as ``null``) keep their stored value."""

    model_config = ConfigDict(extra="ignore")

    key: str | None = None
    name: str | None = None
    description: str | None = None
    enabled: bool | None = None


def get_flag_service(request: Request) -> FlagService:
    return request.app.state.flag_service


FlagServiceDep = Annotated[FlagService, Depends(get_flag_service)]


def _ok(data: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": True, "data": data})


def _require_id(flag_id: str) -> str:
    if not flag_id.strip():
        raise InvalidRequestError("Flag ID is required")
    return flag_id


def FlagRouter(prefix: str = "/api/flag", tags: list[str] | None = None) -> APIRouter:
    """Return the flag CRUD router."""
    router = APIRouter(prefix=prefix, tags=tags or ["flags"])

    @router.get("")
    async def list_flags(service: FlagServiceDep) -> JSONResponse:
        flags = await service.get_all_flags()
        return _ok([flag.to_dict() for flag in flags])

    @router.post("")
    async def create_flag(body: FlagCreateRequest, service: FlagServiceDep) -> JSONResponse:
        flag = await service.create_flag(body.key, body.name, body.description, body.enabled)
        return _ok(flag.to_dict(), status_code=201)

    @router.get("/{flag_id}")
    async def get_flag(flag_id: str, service: FlagServiceDep) -> JSONResponse:
        flag = await service.get_flag(_require_id(flag_id))
        return _ok(flag.to_dict())

    @router.put("/{flag_id}")
    async def update_flag(
        flag_id: str, body: FlagUpdateRequest, service: FlagServiceDep
    ) -> JSONResponse:
        flag = await service.update_flag(
            _require_id(flag_id),
            key=body.key,
            name=body.name,
            description=body.description,
            enabled=body.enabled,
        )
        return _ok(flag.to_dict())

    @router.delete("/{flag_id}")
    async def delete_flag(flag_id: str, service: FlagServiceDep) -> JSONResponse:
        await service.delete_flag(_require_id(flag_id))
        return _ok(None)

    return router


def FlagkeeperHealthRouter(
    service_name: str,
    version: str,
    path: str = "/api/health",
    readiness_checks: list[ReadinessCheck] | None = None,
) -> APIRouter:
    """Return the health router.

    ``{path}`` reports service name, version and server time. ``{path}/ready``
    runs every readiness check and answers 503 when any fails.
    """
    router = APIRouter(tags=["ops"])
    checks = readiness_checks or []
    clock = SystemClock()

    @router.get(path)
    async def health() -> JSONResponse:
        return _ok({
            "service": service_name,
            "version": version,
            "timestamp": format_timestamp(clock.now()),
        })

    @router.get(f"{path}/ready")
    async def readiness() -> JSONResponse:
        results: dict[str, bool] = {}
        for check in checks:
            name = getattr(check, "__name__", repr(check))
            try:
                ok = await check()
            except Exception:  # noqa: BLE001
                ok = False
            results[name] = ok
        all_ok = all(results.values())
        return JSONResponse(
            status_code=200 if all_ok else 503,
            content={"success": all_ok, "data": {"status": "ok" if all_ok else "degraded", "checks": results}},
        )

    return router


__all__ = [
    "FlagCreateRequest",
    "FlagRouter",
    "FlagUpdateRequest",
    "FlagkeeperHealthRouter",
    "ReadinessCheck",
    "get_flag_service",
]
