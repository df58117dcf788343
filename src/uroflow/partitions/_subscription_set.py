# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Live subscriptions to a changing set of day partitions."""

from __future__ import annotations

import asyncio
import enum
import itertools
import logging
import typing
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import timedelta

from frequenz.channels import Sender

from .._exceptions import FlowChartError, SubscriptionError
from .._internal._asyncio import cancel_and_await
from ..actor import BackgroundService
from ._partition_key import PartitionKey
from ._source import PartitionDataSource, PartitionSubscription, SamplesReplacement

if typing.TYPE_CHECKING:
    from ..timeseries import SeriesStore

_logger = logging.getLogger(__name__)


class SubscriptionState(enum.Enum):
    """The lifecycle of the subscription to one partition."""

    OPENING = "opening"
    """Waiting for the data source to accept the subscription."""

    OPEN = "open"
    """Receiving replacements."""

    CLOSING = "closing"
    """Cancelled, waiting for the subscription task to finish."""

    CLOSED = "closed"
    """Not subscribed."""


@dataclass(frozen=True)
class PartitionUpdate:
    """Sent every time the replacement of a partition is applied to the store."""

    key: PartitionKey
    """The partition that was replaced."""

    epoch: int
    """The epoch of the subscription that delivered the replacement."""

    sample_count: int
    """The number of samples in the replacement."""

    changed: bool
    """Whether the merged series changed."""


@dataclass
class _Handle:
    """A cancellable subscription to one partition."""

    key: PartitionKey
    epoch: int
    state: SubscriptionState = SubscriptionState.OPENING
    received: bool = False
    task: asyncio.Task[None] | None = field(default=None, repr=False)
    subscription: PartitionSubscription | None = field(default=None, repr=False)


class SubscriptionSet(BackgroundService):
    """Keeps exactly one live subscription per desired day partition.

    The desired partitions are set with
    [`set_keys()`][uroflow.partitions.SubscriptionSet.set_keys]. Partitions that
    are no longer desired are unsubscribed and their data is removed from the
    store, new ones are subscribed, and the ones that stay are left untouched.

    Every subscription runs in its own task and applies each replacement it
    receives to the [`SeriesStore`][uroflow.timeseries.SeriesStore], then sends a
    [`PartitionUpdate`][uroflow.partitions.PartitionUpdate]. Each subscription is
    tagged with an epoch, and a replacement is only applied if the subscription of
    its partition still has the same epoch, so nothing delivered after a partition
    was unsubscribed ever reaches the store.

    If the subscription to one partition fails, the last snapshot of that partition
    is kept, a [`SubscriptionError`][uroflow.SubscriptionError] is reported and the
    partition is subscribed again after `resubscribe_delay`. Other partitions are
    not affected.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        source: PartitionDataSource,
        store: SeriesStore,
        updates_sender: Sender[PartitionUpdate],
        warnings_sender: Sender[FlowChartError] | None = None,
        *,
        resubscribe_delay: timedelta = timedelta(seconds=2),
        name: str | None = None,
    ) -> None:
        """Create a subscription set with no subscriptions.

        Args:
            source: The data source to subscribe to.
            store: The store to apply the received replacements to.
            updates_sender: Where to send a notification for every applied
                replacement.
            warnings_sender: Where to report failing subscriptions, if anywhere.
            resubscribe_delay: How long to wait before subscribing again to a
                partition whose subscription failed.
            name: The name of this subscription set, used in logs.
        """
        super().__init__(name=name)
        self._source = source
        self._store = store
        self._updates_sender = updates_sender
        self._warnings_sender = warnings_sender
        self._resubscribe_delay = resubscribe_delay
        self._desired: list[PartitionKey] = []
        self._handles: dict[PartitionKey, _Handle] = {}
        self._epochs = itertools.count(1)

    @property
    def keys(self) -> Sequence[PartitionKey]:
        """The partitions currently subscribed to, in the order they were set."""
        return [key for key in self._desired if key in self._handles]

    @property
    def loading(self) -> bool:
        """Whether any subscribed partition has not delivered its content yet."""
        return any(not handle.received for handle in self._handles.values())

    def state(self, key: PartitionKey) -> SubscriptionState:
        """Return the state of the subscription to a partition.

        Args:
            key: The partition to look up.

        Returns:
            The state of the subscription, `CLOSED` if there is none.
        """
        handle = self._handles.get(key)
        return SubscriptionState.CLOSED if handle is None else handle.state

    def epoch(self, key: PartitionKey) -> int | None:
        """Return the epoch of the current subscription to a partition.

        Args:
            key: The partition to look up.

        Returns:
            The epoch, or `None` if the partition is not subscribed.
        """
        handle = self._handles.get(key)
        return None if handle is None else handle.epoch

    def start(self) -> None:
        """Subscribe to the desired partitions that are not subscribed yet."""
        for key in self._desired:
            if key not in self._handles:
                self._open(key)

    async def set_keys(self, keys: Iterable[PartitionKey]) -> None:
        """Replace the set of desired partitions.

        Args:
            keys: The partitions to subscribe to. Duplicates are ignored.
        """
        self._desired = list(dict.fromkeys(keys))
        desired = set(self._desired)
        removed = [key for key in self._handles if key not in desired]
        added = [key for key in self._desired if key not in self._handles]
        if removed or added:
            _logger.info(
                "%s: Reconciling subscriptions, %s removed, %s added, %s kept",
                self,
                len(removed),
                len(added),
                len(self._handles) - len(removed),
            )

        closing = [self._detach(key) for key in removed]
        for key in added:
            self._open(key)
        await asyncio.gather(*(self._finish_close(handle) for handle in closing))

    async def stop(self, msg: str | None = None) -> None:
        """Cancel all the subscriptions and wait for their tasks to finish.

        The stored data is kept, and the desired partitions are remembered so
        [`start()`][uroflow.partitions.SubscriptionSet.start] can subscribe to them
        again.

        Args:
            msg: The message passed to the cancelled tasks.
        """
        handles = list(self._handles.values())
        self._handles.clear()
        for handle in handles:
            handle.state = SubscriptionState.CLOSING
        try:
            await super().stop(msg)
        finally:
            for handle in handles:
                handle.state = SubscriptionState.CLOSED

    def _open(self, key: PartitionKey) -> None:
        handle = _Handle(key=key, epoch=next(self._epochs))
        handle.task = asyncio.create_task(
            self._run_subscription(handle), name=f"{self}-{key}"
        )
        self._handles[key] = handle
        self._tasks.add(handle.task)
        _logger.debug("%s: Opening %s (epoch %s)", self, key, handle.epoch)

    def _detach(self, key: PartitionKey) -> _Handle:
        handle = self._handles.pop(key)
        handle.state = SubscriptionState.CLOSING
        self._store.clear_partition(key)
        return handle

    async def _finish_close(self, handle: _Handle) -> None:
        if handle.task is not None:
            await cancel_and_await(handle.task)
            self._tasks.discard(handle.task)
        handle.state = SubscriptionState.CLOSED
        _logger.debug("%s: Closed %s (epoch %s)", self, handle.key, handle.epoch)

    def _is_current(self, handle: _Handle) -> bool:
        current = self._handles.get(handle.key)
        return current is not None and current.epoch == handle.epoch

    def _accept(
        self, handle: _Handle, replacement: SamplesReplacement
    ) -> bool | None:
        """Apply a replacement to the store if its subscription is still current.

        This never awaits, so no close can happen between the check and the store
        update.

        Args:
            handle: The subscription that delivered the replacement.
            replacement: The new content of the partition.

        Returns:
            Whether the merged series changed, or `None` if the replacement was
                dropped because the subscription is no longer current.
        """
        if not self._is_current(handle):
            _logger.debug(
                "%s: Dropping stale replacement for %s (epoch %s)",
                self,
                handle.key,
                handle.epoch,
            )
            return None
        handle.received = True
        return self._store.apply_partition(handle.key, replacement.samples)

    async def _run_subscription(self, handle: _Handle) -> None:
        while True:
            error: SubscriptionError
            try:
                handle.state = SubscriptionState.OPENING
                handle.subscription = await self._source.subscribe(handle.key)
                handle.state = SubscriptionState.OPEN
                async for replacement in handle.subscription.receiver:
                    changed = self._accept(handle, replacement)
                    if changed is None:
                        return
                    await self._updates_sender.send(
                        PartitionUpdate(
                            key=handle.key,
                            epoch=handle.epoch,
                            sample_count=len(replacement.samples),
                            changed=changed,
                        )
                    )
                error = SubscriptionError(handle.key)
            except asyncio.CancelledError:
                raise
            except Exception as exc:  # pylint: disable=broad-except
                error = SubscriptionError(handle.key, exc)
            finally:
                if handle.subscription is not None:
                    handle.subscription.cancel()
                    handle.subscription = None

            if not self._is_current(handle):
                return
            handle.state = SubscriptionState.OPENING
            _logger.warning(
                "%s: %s, keeping the last snapshot and retrying in %s",
                self,
                error,
                self._resubscribe_delay,
            )
            if self._warnings_sender is not None:
                await self._warnings_sender.send(error)
            await asyncio.sleep(self._resubscribe_delay.total_seconds())
