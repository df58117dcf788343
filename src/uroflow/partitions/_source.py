# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Interface of the store the day partitions are read from."""

import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol

from frequenz.channels import Receiver

from ..timeseries._base_types import Sample
from ._partition_key import PartitionKey

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SamplesReplacement:
    """The full content of one partition, as reported by the data source.

    It always replaces everything previously reported for the partition. An empty
    replacement means the partition has no data (or was cleared).
    """

    samples: tuple[Sample, ...] = field(default_factory=tuple)
    """The samples of the partition, in the order the source reported them."""


@dataclass(frozen=True)
class PartitionSubscription:
    """A live subscription to one partition."""

    receiver: Receiver[SamplesReplacement]
    """Receives a replacement every time the partition changes.

    The first replacement, with the content at subscription time, is sent
    promptly after subscribing.
    """

    cancel: Callable[[], None]
    """Stop the delivery of replacements. Calling it more than once is harmless."""


class PartitionDataSource(Protocol):
    """A store whose data is partitioned by calendar day."""

    async def subscribe(self, key: PartitionKey) -> PartitionSubscription:
        """Subscribe to the changes of one partition.

        Args:
            key: The partition to watch.

        Returns:
            The new subscription.
        """
        ...  # pylint: disable=unnecessary-ellipsis


def extract_samples(node: Any) -> list[Sample]:
    """Collect the samples stored anywhere inside a partition node.

    A partition node is an arbitrarily nested mapping. Every mapping with a `ts`
    entry and either a `volume_ml` or a `flowRate` entry is a sample (`volume_ml`
    is preferred). Other mappings are searched recursively.

    Values that are not numbers are read as 0.0. Timestamps can be ISO 8601
    strings or milliseconds since the UNIX epoch, naive ones are taken as UTC.
    Samples with unreadable timestamps are skipped.

    Args:
        node: The content of a partition node, `None` if it has no content.

    Returns:
        The samples found, in traversal order.
    """
    collected: list[Sample] = []
    _gather(node, collected)
    return collected


def _gather(node: Any, collected: list[Sample]) -> None:
    if not isinstance(node, Mapping):
        return
    if node.get("ts") and ("volume_ml" in node or "flowRate" in node):
        timestamp = _parse_timestamp(node["ts"])
        if timestamp is None:
            _logger.debug("Skipping sample with unreadable timestamp: %r", node)
            return
        raw = node["volume_ml"] if "volume_ml" in node else node["flowRate"]
        collected.append(Sample(timestamp, _parse_value(raw)))
        return
    for child in node.values():
        _gather(child, collected)


def _parse_timestamp(raw: Any) -> datetime | None:
    try:
        if isinstance(raw, str):
            timestamp = datetime.fromisoformat(raw)
        elif isinstance(raw, (int, float)) and not isinstance(raw, bool):
            timestamp = datetime.fromtimestamp(raw / 1000.0, tz=timezone.utc)
        else:
            return None
    except (ValueError, OverflowError, OSError):
        return None
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return timestamp


def _parse_value(raw: Any) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(value) else value
