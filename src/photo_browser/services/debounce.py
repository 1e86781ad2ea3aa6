"""Debounce raw query-text changes before they reach the search coordinator."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field


@dataclass
class QueryDebouncer:
    """Submit only the last text pushed within a quiescence window.

    A push during the window restarts it. Once the window has elapsed the
    submission runs to completion even if newer text arrives.
    """

    submit: Callable[[str], Awaitable[None]]
    window_seconds: float = 0.5
    _timer: asyncio.Task[None] | None = field(default=None, init=False, repr=False)
    _tasks: set[asyncio.Task[None]] = field(
        default_factory=set, init=False, repr=False
    )

    def push(self, text: str) -> asyncio.Task[None]:
        """Record a text change and (re)start the quiescence window."""
        if self._timer is not None:
            self._timer.cancel()
        task = asyncio.get_running_loop().create_task(self._fire(text))
        self._timer = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait until no timer or submission is outstanding."""
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def cancel(self) -> None:
        """Cancel all outstanding timers and submissions."""
        for task in list(self._tasks):
            task.cancel()
        self._timer = None

    async def _fire(self, text: str) -> None:
        await asyncio.sleep(self.window_seconds)
        if self._timer is asyncio.current_task():
            self._timer = None
        await self.submit(text)
