"""Application factory – wires storage, flag service, token verifier and HTTP."""
from __future__ import annotations

import contextlib
from collections.abc import AsyncIterator
from typing import Any

from fastapi import FastAPI

from flagkeeper.adapters.fastapi import (
    FastAPICorrelationIdMiddleware,
    FastAPIExceptionMapper,
    FastAPITokenAuthMiddleware,
    FlagkeeperHealthRouter,
    FlagRouter,
)
from flagkeeper.config import EnvSettingsLoader, FlagkeeperSettings
from flagkeeper.flags import FlagRepository, FlagService
from flagkeeper.kernel.time import Clock
from flagkeeper.observability.logging import JsonLoggerFactory, get_logger
from flagkeeper.security.jwt import CachingJwksFetcher, JwksFetcher, TokenVerifier
from flagkeeper.storage import InMemoryKeyValueStore, KeyValueStore, PartitionRegistry

logger = get_logger(__name__)


def build_store(settings: FlagkeeperSettings) -> KeyValueStore:
    """Instantiate the key-value backend named by ``storage_backend``."""
    if settings.storage_backend == "redis":
        from flagkeeper.adapters.redis import RedisKeyValueStore

        return RedisKeyValueStore(settings.redis_url)
    if settings.storage_backend == "sql":
        from flagkeeper.adapters.sqlalchemy import SqlAlchemyKeyValueStore

        return SqlAlchemyKeyValueStore(settings.database_url)
    return InMemoryKeyValueStore()


def build_verifier(settings: FlagkeeperSettings, clock: Clock | None = None) -> TokenVerifier | None:
    """Return a verifier when a key set and audience are configured."""
    jwks_url = settings.resolved_jwks_url()
    if not jwks_url or not settings.access_audience:
        return None
    fetcher: Any = JwksFetcher(jwks_url, timeout=settings.jwks_timeout_seconds)
    if settings.jwks_cache_ttl_seconds > 0:
        fetcher = CachingJwksFetcher(fetcher, ttl_seconds=settings.jwks_cache_ttl_seconds, clock=clock)
    return TokenVerifier(
        jwks_url,
        settings.access_audience,
        key_set_fetcher=fetcher,
        clock=clock,
    )


def create_app(
    settings: FlagkeeperSettings | None = None,
    *,
    store: KeyValueStore | None = None,
    verifier: TokenVerifier | None = None,
    clock: Clock | None = None,
    configure_logging: bool = True,
) -> FastAPI:
    """Build the flagkeeper FastAPI application.

    Parameters
    ----------
    settings:
        Loaded from ``FLAGKEEPER_*`` environment variables when omitted.
    store:
        Overrides the backend chosen by ``settings.storage_backend``.
    verifier:
        Overrides the verifier built from the access settings.
    clock:
        Shared by the flag service and the token verifier.
    """
    settings = settings or EnvSettingsLoader().load(FlagkeeperSettings)
    if configure_logging:
        JsonLoggerFactory.configure(settings.log_level)

    store = store or build_store(settings)
    verifier = verifier or build_verifier(settings, clock)
    partitions = PartitionRegistry()
    service = FlagService(FlagRepository(store), partition=partitions.get(), clock=clock)

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        create_schema = getattr(store, "create_schema", None)
        if create_schema is not None:
            await create_schema()
        logger.info(
            "flagkeeper_started",
            storage_backend=type(store).__name__,
            auth_required=settings.auth_required,
            token_verification=verifier is not None,
        )
        try:
            yield
        finally:
            for closer in ("close", "dispose"):
                close = getattr(store, closer, None)
                if close is not None:
                    await close()

    readiness = []
    ping = getattr(store, "ping", None)
    if ping is not None:
        readiness.append(ping)

    app = FastAPI(title=settings.service_name, version=settings.version, lifespan=lifespan)
    app.state.settings = settings
    app.state.flag_service = service
    app.state.token_verifier = verifier

    FastAPIExceptionMapper().register(app)
    # added last runs first: correlation id is bound before auth logs anything
    app.add_middleware(
        FastAPITokenAuthMiddleware,
        verifier=verifier,
        require_auth=settings.auth_required,
    )
    app.add_middleware(FastAPICorrelationIdMiddleware)

    app.include_router(
        FlagkeeperHealthRouter(settings.service_name, settings.version, readiness_checks=readiness)
    )
    app.include_router(FlagRouter())
    return app


__all__ = ["build_store", "build_verifier", "create_app"]
