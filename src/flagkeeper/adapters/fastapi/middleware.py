"""FastAPI adapter – ASGI middleware.

FastAPICorrelationIdMiddleware
FastAPITokenAuthMiddleware
"""
from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

from flagkeeper.observability.correlation import CorrelationContext, RequestContext
from flagkeeper.observability.logging import get_logger

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Receive, Scope, Send

    from flagkeeper.security.jwt import TokenVerifier

logger = get_logger(__name__)


def _headers(scope: "Scope") -> dict[str, str]:
    return {
        k.decode("latin-1").lower(): v.decode("latin-1")
        for k, v in scope.get("headers", [])
    }


class FastAPICorrelationIdMiddleware:
    """Take the correlation ID from ``X-Correlation-ID`` (or ``X-Request-ID``),
    generate one when absent, and echo it on the response."""

    def __init__(
        self,
        app: "ASGIApp",
        header_name: str = "X-Correlation-ID",
        fallback_headers: tuple[str, ...] = ("X-Request-ID",),
    ) -> None:
        self.app = app
        self._response_header = header_name.lower().encode()
        self._request_headers = [header_name.lower(), *[h.lower() for h in fallback_headers]]

    async def __call__(self, scope: "Scope", receive: "Receive", send: "Send") -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = _headers(scope)
        correlation_id = next(
            (headers[h].strip() for h in self._request_headers if headers.get(h, "").strip()),
            None,
        ) or str(uuid4())

        CorrelationContext.set(RequestContext(correlation_id=correlation_id))
        structlog.contextvars.bind_contextvars(correlation_id=correlation_id)

        response_header = self._response_header
        encoded_id = correlation_id.encode()

        async def send_with_header(message: Any) -> None:
            if message["type"] == "http.response.start":
                headers_list: list[tuple[bytes, bytes]] = list(message.get("headers", []))
                headers_list.append((response_header, encoded_id))
                message = {**message, "headers": headers_list}
            await send(message)

        try:
            await self.app(scope, receive, send_with_header)
        finally:
            structlog.contextvars.unbind_contextvars("correlation_id")


class FastAPITokenAuthMiddleware:
    """Verify the request token with a :class:`TokenVerifier`.

    Parameters
    ----------
    app:
        The inner ASGI application.
    verifier:
        Token verifier. When ``None`` the middleware passes everything through.
    require_auth:
        When ``True`` requests under *protected_prefixes* without verified
        claims receive 401. When ``False`` a valid token still attaches its
        claims, and nothing is rejected.
    protected_prefixes:
        Path prefixes that require authentication.
    """

    def __init__(
        self,
        app: "ASGIApp",
        verifier: "TokenVerifier | None" = None,
        require_auth: bool = False,
        protected_prefixes: tuple[str, ...] = ("/api/flag",),
    ) -> None:
        self.app = app
        self._verifier = verifier
        self._require_auth = require_auth
        self._protected = protected_prefixes

    async def __call__(self, scope: "Scope", receive: "Receive", send: "Send") -> None:
        if scope["type"] != "http" or self._verifier is None:
            await self.app(scope, receive, send)
            return

        path: str = scope.get("path", "")
        protected = any(path.startswith(prefix) for prefix in self._protected)

        claims = None
        if protected:
            try:
                claims = await self._verifier.authenticate(_headers(scope))
            except Exception as exc:  # noqa: BLE001
                logger.warning("token_verification_failed", error=repr(exc))
                claims = None

        if claims is not None:
            scope.setdefault("state", {})["claims"] = claims
            CorrelationContext.bind_subject(claims.sub)
        elif protected and self._require_auth:
            body = json.dumps({
                "success": False,
                "error": {"code": "UNAUTHORIZED", "message": "Missing or invalid credentials"},
            }).encode()
            await send({"type": "http.response.start", "status": 401, "headers": [
                (b"content-type", b"application/json"),
                (b"content-length", str(len(body)).encode()),
            ]})
            await send({"type": "http.response.body", "body": body})
            return

        await self.app(scope, receive, send)


__all__ = ["FastAPICorrelationIdMiddleware", "FastAPITokenAuthMiddleware"]
