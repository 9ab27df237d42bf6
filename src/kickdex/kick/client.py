"""HTTP client for the Kick chat and OAuth endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import httpx

from kickdex.exceptions import CredentialError, TransportError
from kickdex.logging import get_logger

logger = get_logger(__name__)

HEADERS = {
    "User-Agent": "Mozilla/5.0 (KickBot/1.0)",
    "Accept": "application/json",
}

DEFAULT_RETRY_AFTER_SECONDS = 2.0
DEFAULT_TOKEN_LIFETIME_SECONDS = 3600


class SendStatus(str, Enum):
    """Classification of a send-message response."""

    OK = "ok"
    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    FAILED = "failed"


@dataclass(frozen=True)
class SendResult:
    status: SendStatus
    status_code: int | None = None
    retry_after: float | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.status is SendStatus.OK


@dataclass(frozen=True)
class TokenGrant:
    """Tokens returned by the OAuth token endpoint."""

    access_token: str
    refresh_token: str | None
    expires_in: int


def parse_retry_after(value: str | None) -> float:
    """Seconds from a ``Retry-After`` header, falling back to a default."""
    if not value:
        return DEFAULT_RETRY_AFTER_SECONDS
    try:
        return max(0.0, float(value))
    except ValueError:
        return DEFAULT_RETRY_AFTER_SECONDS


def classify_response(response: httpx.Response) -> SendResult:
    """Turn a send-message response into a ``SendResult``."""
    code = response.status_code
    if code == 429:
        return SendResult(
            SendStatus.RATE_LIMITED,
            status_code=code,
            retry_after=parse_retry_after(response.headers.get("retry-after")),
        )
    if code == 401:
        return SendResult(SendStatus.UNAUTHORIZED, status_code=code)
    if 200 <= code < 300:
        return SendResult(SendStatus.OK, status_code=code)
    return SendResult(SendStatus.FAILED, status_code=code, detail=response.text[:200])


class KickClient:
    """Thin async wrapper over the Kick REST API."""

    def __init__(
        self,
        *,
        api_url: str = "https://kick.com/api/v2",
        oauth_token_url: str = "https://id.kick.com/oauth/token",
        client_id: str = "",
        client_secret: str = "",
        timeout: float = 15.0,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.oauth_token_url = oauth_token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self._http = http or httpx.AsyncClient(timeout=timeout, headers=HEADERS)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def send_chat_message(
        self, access_token: str, chatroom_id: int, text: str
    ) -> SendResult:
        """Post a message to a chat room.

        Raises ``TransportError`` if the request could not be made at all.
        """
        url = f"{self.api_url}/chat/{chatroom_id}/message"
        try:
            response = await self._http.post(
                url,
                json={"message": text},
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Chat send failed: {e}") from e
        return classify_response(response)

    async def refresh_access_token(self, refresh_token: str) -> TokenGrant:
        """Exchange a refresh token for a new token pair."""
        if not self.client_id or not self.client_secret:
            raise CredentialError(
                "Kick client id and secret are required to refresh the access token"
            )

        try:
            response = await self._http.post(
                self.oauth_token_url,
                data={
                    "grant_type": "refresh_token",
                    "refresh_token": refresh_token,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                },
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Token refresh failed: {e}") from e

        if response.status_code != 200:
            raise CredentialError(
                f"Token refresh rejected with HTTP {response.status_code}: "
                f"{response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise CredentialError("Token refresh response is not JSON") from e

        access_token = data.get("access_token")
        if not access_token:
            raise CredentialError("Refresh response did not contain access_token")

        return TokenGrant(
            access_token=access_token,
            refresh_token=data.get("refresh_token"),
            expires_in=int(data.get("expires_in") or DEFAULT_TOKEN_LIFETIME_SECONDS),
        )
