"""OAuth credential lifecycle for outbound Kick calls."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime, timedelta

from kickdex.core.store import KeyValueStore
from kickdex.exceptions import CredentialError
from kickdex.kick.client import KickClient
from kickdex.logging import get_logger
from kickdex.utils import from_iso, to_iso, utcnow

logger = get_logger(__name__)

ACCESS_KEY = "kick:access_token"
REFRESH_KEY = "kick:refresh_token"
ACCESS_EXPIRES_KEY = "kick:access_expires_at"
CHATROOM_KEY = "kick:chatroom_id"
CHANNEL_KEY = "kick:channel_id"


class CredentialManager:
    """Keeps a valid access token in the key/value store.

    Tokens close to expiry are refreshed ahead of time. When that early
    refresh fails the old token is still handed out, since it has not
    expired yet.
    """

    def __init__(
        self,
        store: KeyValueStore,
        client: KickClient,
        *,
        refresh_margin_seconds: float = 60,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.client = client
        self.refresh_margin = timedelta(seconds=refresh_margin_seconds)
        self.clock = clock
        self._chatroom_id: int | None = None
        self._periodic_task: asyncio.Task | None = None

    async def store_initial_credential(
        self,
        access_token: str,
        refresh_token: str | None,
        expires_in_seconds: int | None = None,
    ) -> None:
        """Persist the token pair produced by the OAuth callback."""
        await self._save(access_token, refresh_token, expires_in_seconds or 3600)
        logger.info("Stored Kick credentials")

    async def _save(
        self, access_token: str, refresh_token: str | None, expires_in: int
    ) -> None:
        expires_at = self.clock() + timedelta(seconds=expires_in)
        await self.store.set_value(ACCESS_KEY, access_token)
        if refresh_token:
            await self.store.set_value(REFRESH_KEY, refresh_token)
        await self.store.set_value(ACCESS_EXPIRES_KEY, to_iso(expires_at))

    async def refresh(self) -> str:
        """Exchange the stored refresh token for a new access token."""
        refresh_token = await self.store.get_value(REFRESH_KEY)
        if not refresh_token:
            raise CredentialError("No refresh token available to refresh access token")

        grant = await self.client.refresh_access_token(refresh_token)
        await self._save(grant.access_token, grant.refresh_token, grant.expires_in)
        logger.info("Refreshed Kick access token", expires_in=grant.expires_in)
        return grant.access_token

    async def _expires_at(self) -> datetime | None:
        raw = await self.store.get_value(ACCESS_EXPIRES_KEY)
        if not raw:
            return None
        try:
            return from_iso(raw)
        except ValueError:
            logger.warning("Stored token expiry is not a timestamp", value=raw)
            return None

    async def get_valid_token(self) -> str:
        """Get an access token, refreshing it when missing or about to expire."""
        token = await self.store.get_value(ACCESS_KEY)
        expires_at = await self._expires_at()

        if not token or expires_at is None:
            return await self.refresh()

        if expires_at - self.clock() <= self.refresh_margin:
            try:
                return await self.refresh()
            except Exception as e:
                logger.warning(
                    "Token refresh failed, returning existing token",
                    error=str(e),
                )
                return token

        return token

    async def set_chat_routing(self, chatroom_id: int, channel_id: int | None = None) -> None:
        """Store the chat room (and optional channel) the bot talks to."""
        if chatroom_id <= 0:
            raise ValueError("chatroom_id must be a positive integer")
        await self.store.set_value(CHATROOM_KEY, str(chatroom_id))
        if channel_id:
            await self.store.set_value(CHANNEL_KEY, str(channel_id))
        self._chatroom_id = None
        logger.info("Stored chat routing", chatroom_id=chatroom_id, channel_id=channel_id)

    async def get_chat_routing(self) -> tuple[int | None, int | None]:
        """Get ``(chatroom_id, channel_id)``; either may be ``None``."""
        chatroom_id = await self._read_int(CHATROOM_KEY)
        channel_id = await self._read_int(CHANNEL_KEY)
        return chatroom_id, channel_id

    async def get_chatroom_id(self) -> int:
        """Get the chat room id, cached after the first successful read."""
        if self._chatroom_id is None:
            chatroom_id = await self._read_int(CHATROOM_KEY)
            if chatroom_id is None:
                raise CredentialError(f"Missing {CHATROOM_KEY}; configure the chat room first")
            self._chatroom_id = chatroom_id
        return self._chatroom_id

    async def _read_int(self, key: str) -> int | None:
        raw = await self.store.get_value(key)
        if raw is None:
            return None
        try:
            value = int(raw)
        except ValueError:
            logger.warning("Stored routing id is not a number", key=key, value=raw)
            return None
        return value if value > 0 else None

    def start_periodic_refresh(self, interval_seconds: float = 60) -> asyncio.Task:
        """Start a background task that keeps the token fresh."""
        if self._periodic_task is None or self._periodic_task.done():
            self._periodic_task = asyncio.create_task(
                self._periodic_refresh(interval_seconds), name="token-refresh"
            )
        return self._periodic_task

    async def stop_periodic_refresh(self) -> None:
        task, self._periodic_task = self._periodic_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _periodic_refresh(self, interval_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                await self.get_valid_token()
            except Exception as e:
                logger.warning("Periodic token refresh failed", error=str(e))
