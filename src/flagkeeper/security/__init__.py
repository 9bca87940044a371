"""Security – bearer-token verification."""
from flagkeeper.security.jwt import TokenClaims, TokenVerifier

__all__ = ["TokenClaims", "TokenVerifier"]
