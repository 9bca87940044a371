"""Security – JSON Web Key Set fetchers (httpx).

:class:`JwksFetcher` fetches the key set on every call. Wrap it in
:class:`CachingJwksFetcher` to reuse a fetched set for a bounded time.
"""
from __future__ import annotations

import asyncio
from typing import Any, Protocol

import httpx

from flagkeeper.kernel.errors import InfrastructureError
from flagkeeper.kernel.time import Clock, SystemClock
from flagkeeper.observability.logging import get_logger

logger = get_logger(__name__)

Jwk = dict[str, Any]


class KeySetUnavailableError(InfrastructureError):
    """The identity provider's key set could not be fetched or parsed."""

    def __init__(self, url: str, reason: str, **kwargs: Any) -> None:
        super().__init__(f"Key set at '{url}' unavailable: {reason}", **kwargs)
        self.url = url
        self.reason = reason


class KeySetFetcher(Protocol):
    """Port: return the current list of JWKs."""

    async def fetch_keys(self) -> list[Jwk]: ...


class JwksFetcher:
    """Fetch a JWKS document over HTTPS.

    Parameters
    ----------
    url:
        Full URL of the key-set endpoint.
    timeout:
        Upper bound in seconds for the whole fetch, connect to body.
    client:
        Optional shared ``httpx.AsyncClient``; a short-lived client is opened
        per fetch when omitted.
    """

    def __init__(self, url: str, timeout: float = 5.0, client: httpx.AsyncClient | None = None) -> None:
        self._url = url
        self._timeout = timeout
        self._client = client

    @property
    def url(self) -> str:
        return self._url

    async def fetch_keys(self) -> list[Jwk]:
        try:
            response = await asyncio.wait_for(self._get(), timeout=self._timeout)
            response.raise_for_status()
            document = response.json()
        except (TimeoutError, httpx.TimeoutException) as exc:
            raise KeySetUnavailableError(self._url, "timed out", cause=exc) from exc
        except httpx.HTTPStatusError as exc:
            raise KeySetUnavailableError(
                self._url, f"HTTP {exc.response.status_code}", cause=exc
            ) from exc
        except httpx.HTTPError as exc:
            raise KeySetUnavailableError(self._url, str(exc) or type(exc).__name__, cause=exc) from exc
        except ValueError as exc:
            raise KeySetUnavailableError(self._url, "response is not JSON", cause=exc) from exc

        keys = document.get("keys") if isinstance(document, dict) else None
        if not isinstance(keys, list):
            raise KeySetUnavailableError(self._url, "document has no 'keys' list")
        return [key for key in keys if isinstance(key, dict)]

    async def _get(self) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(self._url, timeout=self._timeout)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.get(self._url)


class CachingJwksFetcher:
    """Decorator that reuses a fetched key set for ``ttl_seconds``.

    Failed fetches are not cached. Call :meth:`invalidate` after a key
    rotation to force a fresh fetch.
    """

    def __init__(self, inner: KeySetFetcher, ttl_seconds: float = 300.0, clock: Clock | None = None) -> None:
        self._inner = inner
        self._ttl = ttl_seconds
        self._clock: Clock = clock or SystemClock()
        self._keys: list[Jwk] | None = None
        self._fetched_at = 0.0

    async def fetch_keys(self) -> list[Jwk]:
        now = self._clock.timestamp()
        if self._keys is not None and now - self._fetched_at < self._ttl:
            return self._keys
        keys = await self._inner.fetch_keys()
        self._keys = keys
        self._fetched_at = now
        logger.debug("jwks_refreshed", key_count=len(keys))
        return keys

    def invalidate(self) -> None:
        self._keys = None


__all__ = [
    "CachingJwksFetcher",
    "Jwk",
    "JwksFetcher",
    "KeySetFetcher",
    "KeySetUnavailableError",
]
