# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Long-running unit of work that restarts itself after unexpected errors."""

import abc
import asyncio
import logging
from datetime import timedelta

from ._background_service import BackgroundService

_logger = logging.getLogger(__name__)


class Actor(BackgroundService, abc.ABC):
    """A background service running a single `_run()` loop.

    If `_run()` raises an unhandled exception the actor logs it and, if the restart
    limit allows it, waits `RESTART_DELAY` and runs `_run()` again. Cancellation is
    never retried.
    """

    RESTART_DELAY: timedelta = timedelta(seconds=2)
    """The delay between restarts."""

    _restart_limit: int | None = None
    """How many times an actor is restarted after an unhandled exception.

    `None` means unlimited. Tests set it to 0.
    """

    def start(self) -> None:
        """Start this actor, unless it is already running."""
        if self.is_running:
            return
        self._tasks.clear()
        self._tasks.add(asyncio.create_task(self._run_loop(), name=str(self)))

    @abc.abstractmethod
    async def _run(self) -> None:
        """Run the logic of this actor."""

    async def _run_loop(self) -> None:
        """Run `_run()` and restart it after unexpected exceptions.

        Raises:
            asyncio.CancelledError: If the actor was cancelled.
            Exception: If `_run()` failed and the restart limit was reached.
        """
        _logger.info("Actor %s: Started.", self)
        n_restarts = 0
        while True:
            try:
                if n_restarts > 0:
                    delay = self.RESTART_DELAY.total_seconds()
                    _logger.info("Actor %s: Waiting %s seconds...", self, delay)
                    await asyncio.sleep(delay)
                await self._run()
                _logger.info("Actor %s: _run() returned without error.", self)
            except asyncio.CancelledError:
                _logger.info("Actor %s: Cancelled.", self)
                raise
            except Exception:  # pylint: disable=broad-except
                _logger.exception("Actor %s: Raised an unhandled exception.", self)
                limit_str = "∞" if self._restart_limit is None else self._restart_limit
                limit_str = f"({n_restarts}/{limit_str})"
                if self._restart_limit is None or n_restarts < self._restart_limit:
                    n_restarts += 1
                    _logger.info("Actor %s: Restarting %s...", self, limit_str)
                    continue
                _logger.info(
                    "Actor %s: Maximum restarts attempted %s, bailing out...",
                    self,
                    limit_str,
                )
                raise
            break

        _logger.info("Actor %s: Stopped.", self)
