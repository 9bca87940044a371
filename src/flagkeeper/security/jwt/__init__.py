"""Security – JWT verification against a remote key set (PyJWT primitives)."""
from flagkeeper.security.jwt.claims import TokenClaims
from flagkeeper.security.jwt.jwks import (
    CachingJwksFetcher,
    JwksFetcher,
    KeySetFetcher,
    KeySetUnavailableError,
)
from flagkeeper.security.jwt.verifier import DEFAULT_TOKEN_HEADER, TokenVerifier

__all__ = [
    "DEFAULT_TOKEN_HEADER",
    "CachingJwksFetcher",
    "JwksFetcher",
    "KeySetFetcher",
    "KeySetUnavailableError",
    "TokenClaims",
    "TokenVerifier",
]
