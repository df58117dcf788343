# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Owner of a group of asyncio tasks with a start/stop lifecycle."""

import abc
import asyncio
import collections.abc
from types import TracebackType
from typing import Any, Self


class BackgroundService(abc.ABC):
    """A service that runs one or more asyncio tasks in the background.

    Subclasses implement [`start()`][uroflow.actor.BackgroundService.start], which
    spawns the tasks and adds them to the protected `_tasks` set. Stopping the
    service cancels every task in that set and waits for them to finish, so a
    service used as an async context manager never leaves orphaned tasks behind.

    The subscription set uses this to own one task per open day partition, and the
    chart pipeline builds on it through [`Actor`][uroflow.actor.Actor].

    !!! warning

        A reference to the service must be held for as long as it is expected to
        run. When the service is garbage collected all its tasks are cancelled.

    Example:
        ```python
        import asyncio

        class Ticker(BackgroundService):
            def start(self) -> None:
                self._tasks.add(asyncio.create_task(self._tick()))

            async def _tick(self) -> None:
                while True:
                    await asyncio.sleep(1.0)
                    print("tick")

        async def main() -> None:
            async with Ticker(name="ticker"):
                await asyncio.sleep(5)
        ```
    """

    def __init__(self, *, name: str | None = None) -> None:
        """Initialize this service.

        Args:
            name: The name of this service, used in logs. If `None`, `str(id(self))`
                is used.
        """
        self._name: str = str(id(self)) if name is None else name
        self._tasks: set[asyncio.Task[Any]] = set()

    @abc.abstractmethod
    def start(self) -> None:
        """Start this service."""

    @property
    def name(self) -> str:
        """The name of this service."""
        return self._name

    @property
    def tasks(self) -> collections.abc.Set[asyncio.Task[Any]]:
        """The tasks spawned by this service.

        Only meant for inspection, the returned set must not be modified.
        """
        return self._tasks

    @property
    def is_running(self) -> bool:
        """Whether at least one of the tasks of this service is still running."""
        return any(not task.done() for task in self._tasks)

    def cancel(self, msg: str | None = None) -> None:
        """Cancel all the tasks spawned by this service.

        Args:
            msg: The message passed to the cancelled tasks.
        """
        for task in self._tasks:
            task.cancel(msg)

    async def stop(self, msg: str | None = None) -> None:
        """Cancel all the tasks of this service and wait for them to finish.

        Args:
            msg: The message passed to the cancelled tasks.

        Raises:
            BaseExceptionGroup: If any of the tasks raised something other than
                `CancelledError`.
        """
        if not self._tasks:
            return
        self.cancel(msg)
        try:
            await self.wait()
        except BaseExceptionGroup as exc_group:
            _, rest = exc_group.split(asyncio.CancelledError)
            if rest is not None:
                raise rest  # pylint: disable=raise-missing-from

    async def wait(self) -> None:
        """Wait until all the tasks of this service are done.

        Tasks added while waiting are waited for too.

        Raises:
            BaseExceptionGroup: If any of the tasks raised an exception, including
                `CancelledError`.
        """
        while self._tasks:
            done, pending = await asyncio.wait(self._tasks)
            assert not pending
            self._tasks = self._tasks - done

            exceptions: list[BaseException] = []
            for task in done:
                try:
                    _ = task.result()
                except BaseException as error:  # pylint: disable=broad-except
                    exceptions.append(error)
            if exceptions:
                raise BaseExceptionGroup(f"Error while stopping {self}", exceptions)

    async def __aenter__(self) -> Self:
        """Start this service when entering an async context.

        Returns:
            This service.
        """
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Stop this service when leaving an async context."""
        await self.stop()

    def __await__(self) -> collections.abc.Generator[None, None, None]:
        """Wait for all the tasks of this service to finish.

        Returns:
            An implementation-specific generator for the awaitable.
        """
        return self.wait().__await__()

    def __del__(self) -> None:
        """Cancel all running tasks when this service is destroyed."""
        self.cancel(f"{self!r} was deleted")

    def __repr__(self) -> str:
        """Return a representation of this service."""
        return f"{type(self).__name__}(name={self._name!r}, tasks={self._tasks!r})"

    def __str__(self) -> str:
        """Return a short description of this service."""
        return f"{type(self).__name__}[{self._name}]"
