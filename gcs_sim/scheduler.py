"""
scheduler.py

Tick and jitter timers owned by a vehicle session.

Two independent repeating timers drive the simulation: the position tick
(100 ms by default) and the slower link-jitter sample (1 s). Each start()
opens a new generation; a timer belonging to an older generation never calls
back, so stop() followed by start() cannot leak callbacks from the previous
session.

Usage:
    scheduler = AsyncioScheduler(tick_ms=100, jitter_ms=1000)
    scheduler.bind(on_tick=session.tick, on_jitter=session.sample_jitter)
    scheduler.start()   # inside a running event loop

    manual = ManualScheduler(tick_ms=100, jitter_ms=1000)
    manual.bind(on_tick=session.tick, on_jitter=session.sample_jitter)
    manual.start()
    manual.advance(1000)  # ten ticks, one jitter sample
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


def _noop():
    pass


class Scheduler(ABC):
    """Common start/stop lifecycle for the two session timers"""

    def __init__(self, tick_ms: int = 100, jitter_ms: int = 1000):
        if tick_ms <= 0 or jitter_ms <= 0:
            raise ValueError("Timer periods must be positive")
        self.tick_ms = tick_ms
        self.jitter_ms = jitter_ms
        self.on_tick: Callable[[], object] = _noop
        self.on_jitter: Callable[[], object] = _noop
        self.running = False
        self._generation = 0

    def bind(self, on_tick: Callable[[], object], on_jitter: Callable[[], object]):
        self.on_tick = on_tick
        self.on_jitter = on_jitter

    @property
    def generation(self) -> int:
        return self._generation

    @abstractmethod
    def start(self):
        pass

    @abstractmethod
    def stop(self):
        pass


class ManualScheduler(Scheduler):
    """Virtual clock advanced explicitly, for the CLI and deterministic tests"""

    def __init__(self, tick_ms: int = 100, jitter_ms: int = 1000):
        super().__init__(tick_ms, jitter_ms)
        self.elapsed_ms = 0
        self._next_tick = 0
        self._next_jitter = 0

    def start(self):
        if self.running:
            return
        self._generation += 1
        self.running = True
        self._next_tick = self.elapsed_ms + self.tick_ms
        self._next_jitter = self.elapsed_ms + self.jitter_ms
        logger.debug(f"Manual scheduler started (generation {self._generation})")

    def stop(self):
        if not self.running:
            return
        self._generation += 1
        self.running = False
        logger.debug("Manual scheduler stopped")

    def advance(self, ms: int) -> int:
        """
        Move the virtual clock forward, firing every timer that falls due

        Ticks fire before a jitter sample due at the same instant. Firing stops
        as soon as a callback stops the scheduler.

        Returns:
            int: Number of position ticks fired
        """
        end = self.elapsed_ms + max(ms, 0)
        fired = 0

        while self.running:
            due = min(self._next_tick, self._next_jitter)
            if due > end:
                break

            generation = self._generation
            self.elapsed_ms = due
            if self._next_tick <= self._next_jitter:
                self._next_tick += self.tick_ms
                self.on_tick()
                fired += 1
            else:
                self._next_jitter += self.jitter_ms
                self.on_jitter()

            if generation != self._generation:
                break

        self.elapsed_ms = end
        return fired

    def step(self, ticks: int = 1) -> int:
        return self.advance(ticks * self.tick_ms)


class AsyncioScheduler(Scheduler):
    """Repeating asyncio tasks on the running event loop"""

    def __init__(self, tick_ms: int = 100, jitter_ms: int = 1000):
        super().__init__(tick_ms, jitter_ms)
        self._tasks: List[asyncio.Task] = []

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        if self.running:
            return
        loop = loop or asyncio.get_running_loop()

        self._generation += 1
        generation = self._generation
        self.running = True
        self._tasks = [
            loop.create_task(self._repeat(generation, self.tick_ms, 'tick')),
            loop.create_task(self._repeat(generation, self.jitter_ms, 'jitter')),
        ]
        logger.info(f"Timers started: tick {self.tick_ms}ms, jitter {self.jitter_ms}ms")

    def stop(self):
        if not self.running:
            return
        self._generation += 1
        self.running = False

        for task in self._tasks:
            task.cancel()
        self._tasks = []
        logger.info("Timers stopped")

    async def _repeat(self, generation: int, period_ms: int, name: str):
        while True:
            await asyncio.sleep(period_ms / 1000)
            if generation != self._generation:
                return

            callback = self.on_tick if name == 'tick' else self.on_jitter
            try:
                callback()
            except Exception as e:
                logger.error(f"Scheduler {name} callback failed: {e}")
