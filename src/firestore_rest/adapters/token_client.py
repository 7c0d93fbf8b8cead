"""OAuth2 access tokens for a Google service account.

Signs a JWT assertion with the service account's private key and exchanges
it at Google's token endpoint for a bearer token.
"""

import time
from typing import Any, Protocol

import httpx
import jwt
import structlog

from firestore_rest.exceptions import AuthenticationError

logger = structlog.get_logger(__name__)

TOKEN_URL = "https://oauth2.googleapis.com/token"
DATASTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_LIFETIME_SECONDS = 3600


class TokenProvider(Protocol):
    """Anything that can hand out a bearer token."""

    async def fetch_token(self) -> str: ...


def create_jwt(
    client_email: str, private_key: str, now: int | None = None
) -> str:
    """Create a signed JWT assertion for the token endpoint.

    Args:
        client_email: Service account email.
        private_key: PEM encoded RSA private key.
        now: Issue time as a Unix timestamp, defaults to the current time.

    Returns:
        RS256 signed JWT.
    """
    issued_at = int(time.time()) if now is None else now
    payload: dict[str, Any] = {
        "iss": client_email,
        "sub": client_email,
        "aud": TOKEN_URL,
        "iat": issued_at,
        "exp": issued_at + ASSERTION_LIFETIME_SECONDS,
        "scope": DATASTORE_SCOPE,
    }
    return jwt.encode(payload, private_key, algorithm="RS256", headers={"typ": "JWT"})


class ServiceAccountTokenClient:
    """Fetches access tokens for a service account.

    Tokens are not cached here; FirestoreClient owns the cache.
    """

    def __init__(
        self,
        client_email: str,
        private_key: str,
        http_client: httpx.AsyncClient | None = None,
        token_url: str = TOKEN_URL,
    ) -> None:
        """Initialize token client.

        Args:
            client_email: Service account email.
            private_key: PEM encoded RSA private key.
            http_client: Optional shared HTTP client.
            token_url: OAuth2 token endpoint.
        """
        self._client_email = client_email
        self._private_key = private_key
        self._http = http_client
        self._token_url = token_url

    async def fetch_token(self) -> str:
        """Exchange a fresh assertion for an access token.

        Returns:
            Access token string.

        Raises:
            AuthenticationError: If the token endpoint rejects the request.
        """
        assertion = create_jwt(self._client_email, self._private_key)
        form = {"grant_type": JWT_BEARER_GRANT, "assertion": assertion}

        if self._http is not None:
            response = await self._http.post(self._token_url, data=form)
        else:
            async with httpx.AsyncClient() as client:
                response = await client.post(self._token_url, data=form)

        if response.is_error:
            logger.warning(
                "token_request_failed",
                status=response.status_code,
                client_email=self._client_email,
            )
            raise AuthenticationError(
                f"Token request failed: {response.status_code} {response.text}",
                status_code=response.status_code,
            )

        access_token = response.json().get("access_token")
        if not access_token:
            raise AuthenticationError("Token response did not contain access_token")

        logger.debug("token_fetched", client_email=self._client_email)
        return access_token
