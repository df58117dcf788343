# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Task owners with a deterministic lifecycle.

[`BackgroundService`][uroflow.actor.BackgroundService] owns a set of asyncio tasks
and cancels them on stop. [`Actor`][uroflow.actor.Actor] is a background service
running a single loop that restarts after unexpected errors.
"""

from ._actor import Actor
from ._background_service import BackgroundService

__all__ = ["Actor", "BackgroundService"]
