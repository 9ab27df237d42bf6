"""Background task that spawns Pokemon at random intervals."""

import asyncio
import inspect
import random
from collections.abc import Awaitable, Callable

from kickdex.core.engine import GameEngine
from kickdex.core.types import SpawnInfo
from kickdex.logging import get_logger

logger = get_logger(__name__)

BroadcastFn = Callable[[SpawnInfo], Awaitable[None] | None]


class SpawnScheduler:
    """Calls ``GameEngine.spawn_once`` after a random delay, forever.

    A failing cycle is logged and the next delay is scheduled anyway. ``stop``
    prevents further ticks; a spawn already being created is allowed to finish.
    """

    def __init__(
        self,
        engine: GameEngine,
        broadcast: BroadcastFn | None = None,
        *,
        min_interval_seconds: int = 30,
        max_interval_seconds: int = 120,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_interval_seconds < min_interval_seconds:
            raise ValueError("max_interval_seconds must be >= min_interval_seconds")
        self.engine = engine
        self.broadcast = broadcast
        self.min_interval = min_interval_seconds
        self.max_interval = max_interval_seconds
        self.rng = rng or random.Random()
        self._sleep = sleep
        self._task: asyncio.Task | None = None
        self._running = False
        self._waiting = False

    @property
    def running(self) -> bool:
        return self._running

    def next_delay(self) -> int:
        """Seconds until the next spawn, uniform over the configured range."""
        return self.rng.randint(self.min_interval, self.max_interval)

    def start(self) -> asyncio.Task | None:
        """Start the loop; does nothing if it is already running."""
        if self._running:
            return self._task
        self._running = True
        self._task = asyncio.create_task(self._run(), name="spawn-scheduler")
        logger.info(
            "Spawn scheduler started",
            min_interval=self.min_interval,
            max_interval=self.max_interval,
        )
        return self._task

    def stop(self) -> None:
        """Stop scheduling spawns.

        A pending wait is cancelled; a spawn cycle already running completes.
        """
        if not self._running:
            return
        self._running = False
        task = self._task
        if task is not None and self._waiting and task is not asyncio.current_task():
            task.cancel()
        logger.info("Spawn scheduler stopped")

    async def join(self) -> None:
        """Wait for the loop task to exit after ``stop``."""
        task, self._task = self._task, None
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def tick(self) -> SpawnInfo | None:
        """Run one spawn cycle without waiting."""
        spawn = await self.engine.spawn_once()
        if spawn is not None and self.broadcast is not None:
            result = self.broadcast(spawn)
            if inspect.isawaitable(result):
                await result
        return spawn

    async def _run(self) -> None:
        while self._running:
            delay = self.next_delay()
            logger.debug("Next spawn scheduled", delay=delay)
            self._waiting = True
            try:
                await self._sleep(delay)
            finally:
                self._waiting = False
            if not self._running:
                break
            try:
                await self.tick()
            except Exception as e:
                logger.error("Error in spawn scheduler", error=str(e))
