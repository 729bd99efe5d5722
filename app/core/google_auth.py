"""
Google ID-token verification.

Signing keys come from Google's JWKS endpoint through PyJWT's PyJWKClient,
which caches the key set. A token naming a key id missing from the cached set
forces one refetch (Google rotates keys), but at most once per
UNKNOWN_KID_REFRESH_SECONDS so made-up key ids cannot drive outbound traffic.
"""
import logging
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import jwt as pyjwt
from jwt import PyJWK, PyJWKClient
from jwt.exceptions import PyJWTError

from app.core.config import GOOGLE_CLIENT_ID, GOOGLE_CERTS_URL, GOOGLE_ISSUERS
from app.core.exceptions import AuthenticationError, UpstreamError
from app.core.logging_config import sanitize_log_data

logger = logging.getLogger(__name__)

JWKS_CACHE_SECONDS = 3600
UNKNOWN_KID_REFRESH_SECONDS = 60


@dataclass(frozen=True)
class GoogleIdentity:
    """Identity asserted by a verified Google ID token."""

    google_id: str
    email: str
    name: str


class GoogleTokenVerifier:
    def __init__(
        self,
        client_id: Optional[str] = None,
        certs_url: str = GOOGLE_CERTS_URL,
        jwks_client: Optional[PyJWKClient] = None,
    ):
        self.client_id = client_id or GOOGLE_CLIENT_ID
        self.jwks_client = jwks_client or PyJWKClient(
            certs_url, cache_keys=True, lifespan=JWKS_CACHE_SECONDS, timeout=10
        )
        self._forced_refresh_at: Optional[float] = None

    def _refresh_allowed(self) -> bool:
        now = time.monotonic()
        if self._forced_refresh_at is not None and now - self._forced_refresh_at < UNKNOWN_KID_REFRESH_SECONDS:
            return False
        self._forced_refresh_at = now
        return True

    def _get_key(self, kid: str) -> Optional[PyJWK]:
        try:
            key = PyJWKClient.match_kid(self.jwks_client.get_signing_keys(), kid)
            if key is None and self._refresh_allowed():
                logger.info(f"Unknown Google key id {kid!r}, refreshing signing keys")
                key = PyJWKClient.match_kid(self.jwks_client.get_signing_keys(refresh=True), kid)
        except PyJWTError as e:
            # connection failures, and key sets with no usable signing key
            logger.error(f"Failed to load Google signing keys: {e}")
            raise UpstreamError("Unable to verify Google token right now")
        return key

    def verify(self, id_token: str) -> GoogleIdentity:
        """
        Verify a Google ID token and return the identity it asserts.

        Raises:
            AuthenticationError: Token is malformed, expired, issued for another
                client or signed with an unknown key
            UpstreamError: Google's key endpoint could not be reached
        """
        if not self.client_id:
            logger.error("GOOGLE_CLIENT_ID is not configured")
            raise AuthenticationError("Google sign-in is not configured")

        try:
            header = pyjwt.get_unverified_header(id_token)
        except PyJWTError:
            raise AuthenticationError("Invalid Google token")

        key = self._get_key(header.get("kid") or "")
        if key is None:
            raise AuthenticationError("Invalid Google token")

        try:
            claims = pyjwt.decode(
                id_token,
                key.key,
                algorithms=["RS256"],
                audience=self.client_id,
                issuer=list(GOOGLE_ISSUERS),
                options={"require": ["sub", "exp", "iat"]},
            )
        except PyJWTError as e:
            logger.info(f"Google token rejected: {e}")
            raise AuthenticationError("Invalid Google token")

        logger.debug(f"Google token verified: {sanitize_log_data(claims)}")

        email = claims.get("email")
        if not claims.get("sub") or not email:
            raise AuthenticationError("Google token is missing required claims")

        return GoogleIdentity(
            google_id=claims["sub"],
            email=email,
            name=claims.get("name") or email.split("@")[0],
        )


@lru_cache
def get_google_verifier() -> GoogleTokenVerifier:
    """Shared verifier so the key cache survives across requests."""
    return GoogleTokenVerifier()
