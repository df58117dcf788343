# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""A partition data source that keeps its data in memory."""

import itertools
import logging
from collections.abc import Iterable
from functools import partial
from typing import Any

from frequenz.channels import Broadcast, Sender

from ..timeseries._base_types import Sample
from ._partition_key import PartitionKey
from ._source import PartitionSubscription, SamplesReplacement, extract_samples

_logger = logging.getLogger(__name__)

_Feed = tuple[Broadcast[SamplesReplacement], Sender[SamplesReplacement]]
"""The channel of one live subscription and the sender feeding it."""


class InMemoryPartitionSource:
    """A [`PartitionDataSource`][uroflow.partitions.PartitionDataSource] in memory.

    Every partition behaves like a single node of a remote store: any change
    replaces its whole content and is pushed to every live subscription of that
    partition. It is useful for replaying recorded data and for tests.

    Example:
        ```python
        source = InMemoryPartitionSource()
        key = PartitionKey(2024, 1, 5)
        subscription = await source.subscribe(key)
        print(await subscription.receiver.receive())  # The current (empty) content
        await source.set_samples(key, [Sample(timestamp, 120.0)])
        print(await subscription.receiver.receive())  # The new content
        subscription.cancel()
        ```
    """

    def __init__(self, *, name: str = "in-memory-source") -> None:
        """Create an empty source.

        Args:
            name: A name to identify the source in the logs and channel names.
        """
        self._name = name
        self._content: dict[PartitionKey, tuple[Sample, ...]] = {}
        self._live: dict[PartitionKey, dict[int, _Feed]] = {}
        self._ids = itertools.count()
        self._subscribe_failures: dict[PartitionKey, Exception] = {}
        self._subscribe_counts: dict[PartitionKey, int] = {}

    async def subscribe(self, key: PartitionKey) -> PartitionSubscription:
        """Subscribe to the changes of one partition.

        The current content of the partition is sent right away.

        Args:
            key: The partition to watch.

        Returns:
            The new subscription.

        Raises:
            Exception: The error set with
                [`fail_next_subscribe()`][uroflow.partitions.InMemoryPartitionSource.fail_next_subscribe],
                if any.
        """
        self._subscribe_counts[key] = self._subscribe_counts.get(key, 0) + 1
        if (error := self._subscribe_failures.pop(key, None)) is not None:
            raise error

        subscription_id = next(self._ids)
        channel = Broadcast[SamplesReplacement](
            name=f"{self._name}-{key}-{subscription_id}"
        )
        receiver = channel.new_receiver()
        sender = channel.new_sender()
        self._live.setdefault(key, {})[subscription_id] = (channel, sender)
        _logger.debug("%s: Subscribed to %s (#%s)", self._name, key, subscription_id)

        await sender.send(SamplesReplacement(self._content.get(key, ())))
        return PartitionSubscription(
            receiver=receiver, cancel=partial(self._cancel, key, subscription_id)
        )

    def _cancel(self, key: PartitionKey, subscription_id: int) -> None:
        subscriptions = self._live.get(key)
        if subscriptions is None or subscriptions.pop(subscription_id, None) is None:
            return
        if not subscriptions:
            del self._live[key]
        _logger.debug("%s: Cancelled %s (#%s)", self._name, key, subscription_id)

    async def set_samples(self, key: PartitionKey, samples: Iterable[Sample]) -> None:
        """Replace the content of a partition.

        Args:
            key: The partition to replace.
            samples: The new content.
        """
        content = tuple(samples)
        if content:
            self._content[key] = content
        else:
            self._content.pop(key, None)
        replacement = SamplesReplacement(content)
        for _, sender in list(self._live.get(key, {}).values()):
            await sender.send(replacement)

    async def set_node(self, key: PartitionKey, node: Any) -> None:
        """Replace the content of a partition with the samples of a raw node.

        Args:
            key: The partition to replace.
            node: The raw node content, see
                [`extract_samples()`][uroflow.partitions.extract_samples].
        """
        await self.set_samples(key, extract_samples(node))

    async def clear(self, key: PartitionKey) -> None:
        """Remove all the content of a partition.

        Args:
            key: The partition to clear.
        """
        await self.set_samples(key, ())

    async def fail(self, key: PartitionKey) -> None:
        """End the streams of all the live subscriptions of a partition.

        Args:
            key: The partition whose subscriptions should fail.
        """
        for channel, _ in self._live.pop(key, {}).values():
            await channel.close()

    def fail_next_subscribe(self, key: PartitionKey, error: Exception) -> None:
        """Make the next subscription to a partition raise an error.

        Args:
            key: The partition whose next subscription should fail.
            error: The error to raise.
        """
        self._subscribe_failures[key] = error

    def samples(self, key: PartitionKey) -> tuple[Sample, ...]:
        """Return the current content of a partition."""
        return self._content.get(key, ())

    def live_subscriptions(self, key: PartitionKey) -> int:
        """Return how many subscriptions to a partition are still live."""
        return len(self._live.get(key, {}))

    def subscribe_count(self, key: PartitionKey) -> int:
        """Return how many times a partition was subscribed to."""
        return self._subscribe_counts.get(key, 0)
