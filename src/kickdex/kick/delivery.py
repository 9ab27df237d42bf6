"""Outbound chat queue with spacing, retries and credential refresh."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

from kickdex.core.backoff import DELIVERY_BACKOFF, BackoffPolicy
from kickdex.exceptions import CredentialError, TransportError
from kickdex.kick.client import KickClient, SendResult, SendStatus
from kickdex.kick.tokens import CredentialManager
from kickdex.logging import get_logger
from kickdex.utils import truncate_message

logger = get_logger(__name__)

MIN_RETRY_AFTER_SECONDS = 1.0
MAX_RETRY_AFTER_SECONDS = 10.0


class DeliveryQueue:
    """FIFO of chat replies drained by a single worker task.

    Only this worker talks to the send-message endpoint, so replies go out one
    at a time and in order. A message is dropped after ``max_attempts``
    failures so one bad message never blocks the ones behind it.
    """

    def __init__(
        self,
        client: KickClient,
        credentials: CredentialManager,
        *,
        max_attempts: int = 3,
        spacing_seconds: float = 0.35,
        max_length: int = 300,
        backoff: BackoffPolicy = DELIVERY_BACKOFF,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.credentials = credentials
        self.max_attempts = max_attempts
        self.spacing = spacing_seconds
        self.max_length = max_length
        self.backoff = backoff
        self._sleep = sleep
        self._monotonic = monotonic
        self._queue: asyncio.Queue[str] = asyncio.Queue()
        self._worker: asyncio.Task | None = None
        self._last_send_at: float | None = None
        self.sent = 0
        self.dropped = 0

    def __len__(self) -> int:
        return self._queue.qsize()

    def send(self, text: str) -> bool:
        """Queue a message for delivery. Returns ``False`` for empty text."""
        if not text:
            return False
        self._queue.put_nowait(truncate_message(text, self.max_length))
        self.start()
        return True

    def start(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run(), name="delivery-queue")

    async def join(self) -> None:
        """Wait until every queued message was sent or dropped."""
        await self._queue.join()

    async def stop(self) -> None:
        worker, self._worker = self._worker, None
        if worker is None:
            return
        worker.cancel()
        try:
            await worker
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        while True:
            text = await self._queue.get()
            try:
                await self.deliver(text)
            except Exception as e:
                logger.error("Unexpected delivery error", error=str(e))
            finally:
                self._queue.task_done()

    async def _respect_spacing(self) -> None:
        if self._last_send_at is None:
            return
        remaining = self.spacing - (self._monotonic() - self._last_send_at)
        if remaining > 0:
            await self._sleep(remaining)

    async def _send_once(self, text: str) -> SendResult:
        token = await self.credentials.get_valid_token()
        chatroom_id = await self.credentials.get_chatroom_id()
        await self._respect_spacing()
        try:
            return await self.client.send_chat_message(token, chatroom_id, text)
        finally:
            self._last_send_at = self._monotonic()

    async def deliver(self, text: str) -> bool:
        """Send one message, retrying up to ``max_attempts`` times."""
        for attempt in range(1, self.max_attempts + 1):
            try:
                result = await self._send_once(text)
            except (CredentialError, TransportError) as e:
                result = SendResult(SendStatus.FAILED, detail=str(e))
            except Exception as e:
                # Store or client bugs count as a failed attempt, not a lost message
                result = SendResult(SendStatus.FAILED, detail=repr(e))

            if result.ok:
                self.sent += 1
                return True

            logger.warning(
                "Chat send failed",
                attempt=attempt,
                status=result.status.value,
                status_code=result.status_code,
                detail=result.detail,
            )
            if attempt >= self.max_attempts:
                break

            if result.status is SendStatus.RATE_LIMITED:
                delay = min(
                    MAX_RETRY_AFTER_SECONDS,
                    max(MIN_RETRY_AFTER_SECONDS, result.retry_after or 0.0),
                )
            else:
                if result.status is SendStatus.UNAUTHORIZED:
                    await self._force_refresh()
                delay = self.backoff.delay(attempt)
            await self._sleep(delay)

        self.dropped += 1
        logger.warning(
            "Dropping message after retries",
            message=text,
            attempts=self.max_attempts,
        )
        return False

    async def _force_refresh(self) -> None:
        try:
            await self.credentials.refresh()
        except Exception as e:
            logger.warning("Token refresh after 401 failed", error=str(e))
