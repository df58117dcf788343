# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Utilities for testing purposes."""

from .receive_timeout import Timeout, receive_timeout
from .samples import DAY1, DAY2, DAY3, sample, utc

__all__ = [
    "DAY1",
    "DAY2",
    "DAY3",
    "Timeout",
    "receive_timeout",
    "sample",
    "utc",
]
