"""Persistent subscription to the Kick chat room over Pusher websockets."""

from __future__ import annotations

import asyncio
import inspect
import random
from collections.abc import Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from enum import Enum
from typing import Any

import aiohttp

from kickdex.core.backoff import RECONNECT_BACKOFF, BackoffPolicy
from kickdex.kick.events import (
    PING_EVENT,
    ChatMessage,
    chat_message_from_envelope,
    parse_envelope,
    pong_frame,
    subscribe_frame,
    subscription_channels,
)
from kickdex.logging import get_logger

logger = get_logger(__name__)

MessageHandler = Callable[[ChatMessage], Awaitable[None] | None]
ConnectFn = Callable[[], AbstractAsyncContextManager[Any]]


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    SUBSCRIBED = "subscribed"


class KickChatConnector:
    """Reads chat messages from one room and hands them to ``on_message``.

    Any close or error drops back to ``DISCONNECTED`` and a reconnect is
    scheduled with exponential backoff until ``stop`` is called. The attempt
    counter resets once a connection is subscribed again.
    """

    def __init__(
        self,
        url: str,
        chatroom_id: int,
        on_message: MessageHandler,
        *,
        channel_id: int | None = None,
        backoff: BackoffPolicy = RECONNECT_BACKOFF,
        connect: ConnectFn | None = None,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        heartbeat: float = 30.0,
    ) -> None:
        self.url = url
        self.chatroom_id = chatroom_id
        self.channel_id = channel_id
        self.on_message = on_message
        self.backoff = backoff
        self.rng = rng or random.Random()
        self.heartbeat = heartbeat
        self._connect = connect
        self._sleep = sleep
        self._http: aiohttp.ClientSession | None = None
        self._task: asyncio.Task | None = None
        self._stopped = False
        self._dispatching = False
        self.state = ConnectionState.DISCONNECTED
        self.reconnect_attempts = 0
        self.reconnect_delays: list[float] = []

    def start(self) -> asyncio.Task:
        """Start the read loop; repeated calls return the running task."""
        if self._task is None or self._task.done():
            self._stopped = False
            self._task = asyncio.create_task(self.run(), name="kick-connector")
        return self._task

    def stop(self) -> None:
        """Stop reconnecting and close the current connection."""
        self._stopped = True
        task = self._task
        if (
            task is not None
            and not task.done()
            and not self._dispatching
            and task is not asyncio.current_task()
        ):
            task.cancel()

    async def join(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass
        if self._http is not None:
            await self._http.close()
            self._http = None

    def _open(self) -> AbstractAsyncContextManager[Any]:
        if self._connect is not None:
            return self._connect()
        if self._http is None or self._http.closed:
            self._http = aiohttp.ClientSession()
        return self._http.ws_connect(self.url, heartbeat=self.heartbeat)

    async def run(self) -> None:
        """Connect, read until the socket drops, back off, repeat."""
        try:
            while not self._stopped:
                await self._connect_once()
                self.state = ConnectionState.DISCONNECTED
                if self._stopped:
                    break
                await self._wait_before_reconnect()
        finally:
            self.state = ConnectionState.DISCONNECTED

    async def _connect_once(self) -> None:
        self.state = ConnectionState.CONNECTING
        try:
            async with self._open() as ws:
                await self._subscribe(ws)
                self.state = ConnectionState.SUBSCRIBED
                self.reconnect_attempts = 0
                logger.info("Kick websocket connected", chatroom_id=self.chatroom_id)
                await self._read(ws)
            logger.info("Kick websocket closed")
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            logger.warning("Kick websocket error", error=str(e))
        except Exception as e:
            logger.error("Unexpected Kick websocket failure", error=repr(e))

    async def _subscribe(self, ws: Any) -> None:
        for channel in subscription_channels(self.chatroom_id, self.channel_id):
            await ws.send_json(subscribe_frame(channel))

    async def _read(self, ws: Any) -> None:
        async for msg in ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                await self.handle_frame(ws, msg.data)
                if self._stopped:
                    break
            elif msg.type in (aiohttp.WSMsgType.CLOSED, aiohttp.WSMsgType.ERROR):
                break

    async def handle_frame(self, ws: Any, raw: Any) -> None:
        """Answer pings and forward chat messages; everything else is ignored."""
        envelope = parse_envelope(raw)
        if envelope is None:
            return
        if envelope[0] == PING_EVENT:
            try:
                await ws.send_json(pong_frame())
            except (aiohttp.ClientError, ConnectionError, RuntimeError) as e:
                logger.debug("Could not answer ping", error=str(e))
            return

        message = chat_message_from_envelope(*envelope)
        if message is None:
            return
        await self.dispatch(message)

    async def dispatch(self, message: ChatMessage) -> None:
        """Run the message handler; its errors never reach the read loop."""
        self._dispatching = True
        try:
            result = self.on_message(message)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(
                "Error processing chat message",
                username=message.username,
                error=str(e),
            )
        finally:
            self._dispatching = False

    async def _wait_before_reconnect(self) -> None:
        self.reconnect_attempts += 1
        delay = self.backoff.delay(self.reconnect_attempts, self.rng)
        self.reconnect_delays.append(delay)
        logger.warning(
            "Kick websocket reconnecting",
            delay=round(delay, 2),
            attempt=self.reconnect_attempts,
        )
        await self._sleep(delay)
