"""
IdentityBroker - Exchanges client credentials for a short-lived bearer token.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

import httpx

from .config import DEFAULT_AUDIENCE, DEFAULT_TOKEN_URL
from .errors import AuthenticationFailed


USER_AGENT = 'focalcrop/1.0.0'


@dataclass
class Credential:
    """Long-lived OAuth client credentials."""
    client_id: str
    client_secret: str

    def __repr__(self) -> str:
        return f"Credential(client_id={self.client_id!r}, client_secret='***')"


@dataclass
class BearerToken:
    """
    Short-lived access token; valid for the current operation only.

    Attributes:
        value: Access token string
        token_type: Token type reported by the provider
        expires_in: Lifetime in seconds
        issued_at: Local timestamp when the token was received
    """
    value: str
    token_type: str = 'Bearer'
    expires_in: int = 0
    issued_at: float = field(default_factory=time.time)

    @property
    def expires_at(self) -> float:
        return self.issued_at + self.expires_in

    def is_expired(self, margin: float = 0.0) -> bool:
        """True when the token expires within `margin` seconds."""
        if self.expires_in <= 0:
            return False
        return time.time() + margin >= self.expires_at

    @property
    def authorization(self) -> str:
        return f"Bearer {self.value}"

    def __repr__(self) -> str:
        return f"BearerToken(type={self.token_type!r}, expires_in={self.expires_in})"


class IdentityBroker:
    """
    Performs the OAuth2 client-credentials grant against a token endpoint.

    No retries happen here; retry policy belongs to the caller.
    """

    def __init__(
        self,
        token_url: str = DEFAULT_TOKEN_URL,
        audience: str = DEFAULT_AUDIENCE,
        http_client: Optional[httpx.Client] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize identity broker.

        Args:
            token_url: Token endpoint URL
            audience: Default audience for issued tokens
            http_client: Optional shared httpx client
            logger: Optional logger instance
        """
        self.token_url = token_url
        self.audience = audience
        self._owns_http = http_client is None
        self.http = http_client or httpx.Client()
        self.logger = logger or logging.getLogger(__name__)

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            self.http.close()

    def exchange_credentials(
        self,
        client_id: str,
        client_secret: str,
        audience: Optional[str] = None
    ) -> BearerToken:
        """
        Exchange client credentials for a bearer token.

        Raises:
            AuthenticationFailed: On non-success status, transport error or
                a response without an access token
        """
        form = {
            'grant_type': 'client_credentials',
            'client_id': client_id,
            'client_secret': client_secret,
            'audience': audience or self.audience,
        }
        headers = {
            'Accept': '*/*',
            'User-Agent': USER_AGENT,
            'Cache-Control': 'no-cache',
        }

        self.logger.debug(f"Requesting token from {self.token_url}")
        try:
            response = self.http.post(self.token_url, data=form, headers=headers)
        except httpx.HTTPError as e:
            raise AuthenticationFailed(f"Token request failed: {e}") from e

        if not response.is_success:
            self.logger.error(
                f"Authentication failed: {response.status_code} {response.reason_phrase}"
            )
            raise AuthenticationFailed(
                "Authentication failed",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            payload = response.json()
            access_token = payload['access_token']
        except (ValueError, KeyError, TypeError) as e:
            raise AuthenticationFailed(
                "Token response did not contain an access token",
                status_code=response.status_code,
                body=response.text,
            ) from e

        token = BearerToken(
            value=access_token,
            token_type=payload.get('token_type', 'Bearer'),
            expires_in=int(payload.get('expires_in') or 0),
        )
        self.logger.info(f"Authenticated, token expires in {token.expires_in}s")
        return token

    def authenticate(self, credential: Credential, audience: Optional[str] = None) -> BearerToken:
        """Exchange a Credential for a bearer token."""
        return self.exchange_credentials(credential.client_id, credential.client_secret, audience)
