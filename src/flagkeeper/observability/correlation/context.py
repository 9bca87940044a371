"""Observability – RequestContext, CorrelationContext."""
from __future__ import annotations

import dataclasses
from contextvars import ContextVar
from uuid import uuid4


@dataclasses.dataclass(frozen=True)
class RequestContext:
    """Ambient context for a single request."""
    correlation_id: str
    subject: str | None = None

    @classmethod
    def new(cls, subject: str | None = None) -> "RequestContext":
        return cls(correlation_id=str(uuid4()), subject=subject)


_CTX_VAR: ContextVar[RequestContext | None] = ContextVar("_flagkeeper_request_ctx", default=None)


class CorrelationContext:
    """Ambient correlation context stored in a ``ContextVar``."""

    @staticmethod
    def set(ctx: RequestContext) -> None:
        _CTX_VAR.set(ctx)

    @staticmethod
    def get() -> RequestContext | None:
        return _CTX_VAR.get()

    @staticmethod
    def clear() -> None:
        _CTX_VAR.set(None)

    @staticmethod
    def bind_subject(subject: str) -> RequestContext:
        """Attach the authenticated subject to the current context."""
        ctx = _CTX_VAR.get() or RequestContext.new()
        ctx = dataclasses.replace(ctx, subject=subject)
        _CTX_VAR.set(ctx)
        return ctx


__all__ = ["CorrelationContext", "RequestContext"]
