"""Security – TokenVerifier for RS256 tokens signed by a remote key set.

Only the RSASSA-PKCS1-v1_5 / SHA-256 family is accepted. The routine is
deliberately narrow: PyJWT supplies the key import, base64url handling and
the signature primitive, while segment parsing and claim checks happen here.

``verify`` returns ``None`` for every untrusted-input failure; it never raises
because a token is bad.
"""
from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import jwt
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from jwt.algorithms import RSAAlgorithm
from jwt.utils import base64url_decode

from flagkeeper.kernel.time import Clock, SystemClock
from flagkeeper.observability.logging import get_logger
from flagkeeper.security.jwt.claims import TokenClaims, is_representable_timestamp
from flagkeeper.security.jwt.jwks import JwksFetcher, KeySetFetcher, KeySetUnavailableError

logger = get_logger(__name__)

DEFAULT_TOKEN_HEADER = "Cf-Access-Jwt-Assertion"
SUPPORTED_ALGORITHM = "RS256"

_RS256 = RSAAlgorithm(RSAAlgorithm.SHA256)


def _decode_segment(segment: str) -> dict[str, Any]:
    decoded = json.loads(base64url_decode(segment))
    if not isinstance(decoded, dict):
        raise ValueError("segment is not a JSON object")
    return decoded


class TokenVerifier:
    """Authenticate requests against an identity provider's rotating key set.

    Parameters
    ----------
    jwks_url:
        Key-set endpoint; ignored when *key_set_fetcher* is supplied.
    audience:
        Required ``aud`` claim value.
    key_set_fetcher:
        Source of JWKs. Defaults to an uncached :class:`JwksFetcher`.
    header_name:
        Request header carrying the token. ``Authorization: Bearer`` is
        accepted as a fallback.
    clock:
        Used for the ``exp`` check.
    timeout:
        Key-set fetch timeout for the default fetcher.
    """

    def __init__(
        self,
        jwks_url: str,
        audience: str,
        *,
        key_set_fetcher: KeySetFetcher | None = None,
        header_name: str = DEFAULT_TOKEN_HEADER,
        clock: Clock | None = None,
        timeout: float = 5.0,
    ) -> None:
        self._audience = audience
        self._fetcher: KeySetFetcher = key_set_fetcher or JwksFetcher(jwks_url, timeout=timeout)
        self._header = header_name.lower()
        self._clock: Clock = clock or SystemClock()

    def extract_token(self, headers: Mapping[str, str]) -> str | None:
        norm = {k.lower(): v for k, v in headers.items()}
        token = norm.get(self._header, "").strip()
        if token:
            return token
        auth_value = norm.get("authorization", "").strip()
        if auth_value.lower().startswith("bearer "):
            return auth_value[7:].strip() or None
        return None

    async def authenticate(self, headers: Mapping[str, str]) -> TokenClaims | None:
        """Extract and verify; ``None`` when there is no token or it is rejected."""
        token = self.extract_token(headers)
        if token is None:
            return None
        return await self.verify(token)

    async def verify(self, token: str) -> TokenClaims | None:
        try:
            keys = await self._fetcher.fetch_keys()
        except KeySetUnavailableError as exc:
            logger.warning("token_rejected", reason="key_set_unavailable", detail=exc.reason)
            return None

        try:
            return self._verify_with_keys(token, keys)
        except (ValueError, TypeError, KeyError, OverflowError, jwt.PyJWTError) as exc:
            logger.warning("token_rejected", reason="malformed", error=type(exc).__name__)
            return None

    def _verify_with_keys(self, token: str, keys: list[dict[str, Any]]) -> TokenClaims | None:
        segments = token.split(".")
        if len(segments) != 3:
            return self._reject("malformed")
        header_b64, payload_b64, signature_b64 = segments

        header = _decode_segment(header_b64)
        alg = header.get("alg")
        if alg is not None and alg != SUPPORTED_ALGORITHM:
            return self._reject("unsupported_algorithm")
        kid = header.get("kid")
        if not isinstance(kid, str):
            return self._reject("missing_kid")

        jwk = next((key for key in keys if key.get("kid") == kid), None)
        if jwk is None:
            return self._reject("unknown_kid")
        if jwk.get("kty") != "RSA":
            return self._reject("unsupported_key_type")

        public_key = RSAAlgorithm.from_jwk(jwk)
        if isinstance(public_key, RSAPrivateKey):
            public_key = public_key.public_key()
        if not isinstance(public_key, RSAPublicKey):
            return self._reject("unsupported_key_type")

        signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
        signature = base64url_decode(signature_b64)
        if not _RS256.verify(signing_input, public_key, signature):
            return self._reject("bad_signature")

        payload = _decode_segment(payload_b64)
        if not self._audience_matches(payload.get("aud")):
            return self._reject("audience_mismatch")
        exp = payload.get("exp")
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            return self._reject("missing_exp")
        if not is_representable_timestamp(exp):
            return self._reject("exp_out_of_range")
        if exp <= self._clock.timestamp():
            return self._reject("expired")

        return TokenClaims.from_payload(payload)

    def _audience_matches(self, aud: Any) -> bool:
        if isinstance(aud, str):
            return aud == self._audience
        if isinstance(aud, list):
            return self._audience in aud
        return False

    @staticmethod
    def _reject(reason: str) -> None:
        logger.warning("token_rejected", reason=reason)
        return None


__all__ = ["DEFAULT_TOKEN_HEADER", "SUPPORTED_ALGORITHM", "TokenVerifier"]
