"""flagkeeper – feature-flag store with key uniqueness, a single-writer
key-value backend and JWKS-based token verification."""

__version__ = "0.1.0"
