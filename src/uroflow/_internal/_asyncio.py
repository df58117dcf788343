# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""General purpose async tools."""

import asyncio
from typing import Any


async def cancel_and_await(task: asyncio.Task[Any]) -> None:
    """Cancel a task and wait for it to finish.

    Exits immediately if the task is already done. The `CancelledError` of the task
    is suppressed, but any other exception is propagated.

    Args:
        task: The task to be cancelled and waited for.
    """
    if task.done():
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
