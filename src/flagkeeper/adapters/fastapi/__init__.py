"""FastAPI adapter – middleware, exception mapper, health and flag routers."""
from flagkeeper.adapters.fastapi.exception_mapper import FastAPIExceptionMapper
from flagkeeper.adapters.fastapi.middleware import (
    FastAPICorrelationIdMiddleware,
    FastAPITokenAuthMiddleware,
)
from flagkeeper.adapters.fastapi.routers import FlagkeeperHealthRouter, FlagRouter

__all__ = [
    "FastAPICorrelationIdMiddleware",
    "FastAPIExceptionMapper",
    "FastAPITokenAuthMiddleware",
    "FlagRouter",
    "FlagkeeperHealthRouter",
]
