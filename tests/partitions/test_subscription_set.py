# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Tests for the SubscriptionSet."""

import asyncio
from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import timedelta

import async_solipsism
import pytest
from frequenz.channels import Broadcast, Receiver

from uroflow import FlowChartError, SubscriptionError
from uroflow.partitions import (
    InMemoryPartitionSource,
    PartitionUpdate,
    SamplesReplacement,
    SubscriptionSet,
    SubscriptionState,
)
from uroflow.timeseries import SeriesStore

from ..utils import DAY1, DAY2, DAY3, Timeout, receive_timeout, sample

RESUBSCRIBE_DELAY = timedelta(seconds=2)


@pytest.fixture
def event_loop_policy() -> async_solipsism.EventLoopPolicy:
    """Use an event loop with fake time."""
    return async_solipsism.EventLoopPolicy()


@dataclass
class _Harness:
    source: InMemoryPartitionSource
    store: SeriesStore
    subscriptions: SubscriptionSet
    updates: Receiver[PartitionUpdate]
    warnings: Receiver[FlowChartError]


@pytest.fixture
async def harness() -> AsyncIterator[_Harness]:
    """Create a running subscription set over an in-memory source."""
    source = InMemoryPartitionSource(name="test")
    await source.set_samples(DAY1, [sample(DAY1, 9, 0, 1.0), sample(DAY1, 10, 0, 2.0)])
    await source.set_samples(DAY2, [sample(DAY2, 9, 0, 3.0)])
    await source.set_samples(DAY3, [sample(DAY3, 9, 0, 4.0)])

    store = SeriesStore()
    updates_channel = Broadcast[PartitionUpdate](name="updates")
    warnings_channel = Broadcast[FlowChartError](name="warnings")
    updates = updates_channel.new_receiver(limit=100)
    warnings = warnings_channel.new_receiver()
    async with SubscriptionSet(
        source,
        store,
        updates_channel.new_sender(),
        warnings_channel.new_sender(),
        resubscribe_delay=RESUBSCRIBE_DELAY,
        name="test",
    ) as subscriptions:
        yield _Harness(source, store, subscriptions, updates, warnings)


async def _settle() -> None:
    """Let every ready task run, without reaching any resubscription delay."""
    await asyncio.sleep(0.1)


async def test_subscribe_and_merge(harness: _Harness) -> None:
    """Test the content of every subscribed partition reaches the store."""
    await harness.subscriptions.set_keys([DAY1, DAY2])
    await _settle()

    assert harness.subscriptions.keys == [DAY1, DAY2]
    assert harness.subscriptions.state(DAY1) is SubscriptionState.OPEN
    assert harness.subscriptions.state(DAY2) is SubscriptionState.OPEN
    assert harness.subscriptions.loading is False
    assert harness.store.snapshot_series() == (
        sample(DAY1, 9, 0, 1.0),
        sample(DAY1, 10, 0, 2.0),
        sample(DAY2, 9, 0, 3.0),
    )

    first = await receive_timeout(harness.updates)
    second = await receive_timeout(harness.updates)
    assert isinstance(first, PartitionUpdate)
    assert isinstance(second, PartitionUpdate)
    assert {first.key, second.key} == {DAY1, DAY2}
    assert first.changed and second.changed


async def test_duplicate_keys(harness: _Harness) -> None:
    """Test a key given twice is subscribed once."""
    await harness.subscriptions.set_keys([DAY1, DAY1])
    await _settle()
    assert harness.subscriptions.keys == [DAY1]
    assert harness.source.live_subscriptions(DAY1) == 1


async def test_live_replacements(harness: _Harness) -> None:
    """Test later replacements of a partition replace its data in the store."""
    await harness.subscriptions.set_keys([DAY1, DAY2])
    await _settle()

    await harness.source.set_samples(DAY1, [sample(DAY1, 11, 0, 7.0)])
    await _settle()
    assert harness.store.partition(DAY1) == (sample(DAY1, 11, 0, 7.0),)
    assert harness.store.partition(DAY2) == (sample(DAY2, 9, 0, 3.0),)

    await harness.source.clear(DAY1)
    await _settle()
    assert DAY1 not in harness.store.keys
    assert harness.store.snapshot_series() == (sample(DAY2, 9, 0, 3.0),)


async def test_reconcile_keeps_untouched_subscriptions(harness: _Harness) -> None:
    """Test changing the keys only opens and closes the difference."""
    await harness.subscriptions.set_keys([DAY1, DAY2])
    await _settle()
    epoch_day2 = harness.subscriptions.epoch(DAY2)

    await harness.subscriptions.set_keys([DAY2, DAY3])
    await _settle()

    assert harness.subscriptions.keys == [DAY2, DAY3]
    assert harness.subscriptions.epoch(DAY2) == epoch_day2
    assert harness.source.subscribe_count(DAY2) == 1
    assert harness.subscriptions.state(DAY1) is SubscriptionState.CLOSED
    assert harness.subscriptions.epoch(DAY1) is None
    assert harness.source.live_subscriptions(DAY1) == 0
    assert harness.store.keys == {DAY2, DAY3}


async def test_removed_partition_gets_no_more_data(harness: _Harness) -> None:
    """Test changes to an unsubscribed partition never reach the store."""
    await harness.subscriptions.set_keys([DAY1, DAY2])
    await _settle()
    await harness.subscriptions.set_keys([DAY2])

    await harness.source.set_samples(DAY1, [sample(DAY1, 12, 0, 99.0)])
    await _settle()
    assert DAY1 not in harness.store.keys


async def test_stale_replacement_is_dropped(harness: _Harness) -> None:
    """Test a replacement from a closed subscription is not applied."""
    await harness.subscriptions.set_keys([DAY1])
    await _settle()
    # pylint: disable=protected-access
    old_handle = harness.subscriptions._handles[DAY1]

    await harness.subscriptions.set_keys([])
    stale = SamplesReplacement((sample(DAY1, 13, 0, 50.0),))
    assert harness.subscriptions._accept(old_handle, stale) is None
    assert harness.store.snapshot_series() == ()

    # Subscribing again starts a new epoch, the old one stays stale
    await harness.subscriptions.set_keys([DAY1])
    await _settle()
    new_epoch = harness.subscriptions.epoch(DAY1)
    assert new_epoch is not None and new_epoch > old_handle.epoch
    assert harness.subscriptions._accept(old_handle, stale) is None
    assert harness.store.partition(DAY1) == (
        sample(DAY1, 9, 0, 1.0),
        sample(DAY1, 10, 0, 2.0),
    )


async def test_failure_is_isolated(harness: _Harness) -> None:
    """Test a failing partition keeps its data and is subscribed again."""
    await harness.subscriptions.set_keys([DAY1, DAY2])
    await _settle()
    before = harness.store.snapshot_series()

    await harness.source.fail(DAY1)
    error = await receive_timeout(harness.warnings)
    assert isinstance(error, SubscriptionError)
    assert error.key == DAY1
    assert error.cause is None
    assert harness.store.snapshot_series() == before

    await harness.source.set_samples(DAY2, [sample(DAY2, 10, 0, 6.0)])
    await _settle()
    assert harness.store.partition(DAY2) == (sample(DAY2, 10, 0, 6.0),)
    assert harness.source.subscribe_count(DAY1) == 1

    await asyncio.sleep(RESUBSCRIBE_DELAY.total_seconds() + 0.1)
    assert harness.source.subscribe_count(DAY1) == 2
    assert harness.subscriptions.state(DAY1) is SubscriptionState.OPEN
    assert harness.source.subscribe_count(DAY2) == 1


async def test_failed_subscribe_is_retried(harness: _Harness) -> None:
    """Test a partition whose subscription failed is retried after a delay."""
    harness.source.fail_next_subscribe(DAY1, ConnectionError("offline"))
    await harness.subscriptions.set_keys([DAY1])

    error = await receive_timeout(harness.warnings)
    assert isinstance(error, SubscriptionError)
    assert isinstance(error.cause, ConnectionError)
    assert harness.subscriptions.loading is True
    assert harness.store.snapshot_series() == ()

    await asyncio.sleep(RESUBSCRIBE_DELAY.total_seconds() + 0.1)
    assert harness.subscriptions.loading is False
    assert harness.store.partition(DAY1) == (
        sample(DAY1, 9, 0, 1.0),
        sample(DAY1, 10, 0, 2.0),
    )
    assert await receive_timeout(harness.warnings) is Timeout


async def test_no_retry_after_removal(harness: _Harness) -> None:
    """Test a failed partition is not subscribed again once it is removed."""
    await harness.subscriptions.set_keys([DAY1])
    await _settle()
    await harness.source.fail(DAY1)
    await receive_timeout(harness.warnings)

    await harness.subscriptions.set_keys([])
    await asyncio.sleep(RESUBSCRIBE_DELAY.total_seconds() * 2)
    assert harness.source.subscribe_count(DAY1) == 1
    assert harness.subscriptions.is_running is False


async def test_widening_the_range(harness: _Harness) -> None:
    """Test adding days gives the same series as subscribing to them at once."""
    await harness.subscriptions.set_keys([DAY1])
    await _settle()
    await harness.subscriptions.set_keys([DAY1, DAY2, DAY3])
    await _settle()

    direct = SeriesStore()
    for key in (DAY1, DAY2, DAY3):
        direct.apply_partition(key, harness.source.samples(key))
    assert harness.store.snapshot_series() == direct.snapshot_series()
    assert harness.source.subscribe_count(DAY1) == 1


async def test_stop_cancels_everything(harness: _Harness) -> None:
    """Test stopping closes every subscription and leaves no task behind."""
    await harness.subscriptions.set_keys([DAY1, DAY2, DAY3])
    await _settle()
    assert harness.subscriptions.is_running is True

    await harness.subscriptions.stop()
    assert harness.subscriptions.is_running is False
    assert not harness.subscriptions.tasks
    for key in (DAY1, DAY2, DAY3):
        assert harness.source.live_subscriptions(key) == 0
        assert harness.subscriptions.state(key) is SubscriptionState.CLOSED

    # Restarting subscribes to the same partitions again
    harness.subscriptions.start()
    await _settle()
    assert harness.subscriptions.keys == [DAY1, DAY2, DAY3]
    assert harness.source.subscribe_count(DAY1) == 2


async def test_construction_defaults() -> None:
    """Test a new subscription set has nothing to run."""
    updates = Broadcast[PartitionUpdate](name="updates")
    subscriptions = SubscriptionSet(
        InMemoryPartitionSource(), SeriesStore(), updates.new_sender()
    )
    assert subscriptions.name == str(id(subscriptions))
    assert subscriptions.keys == []
    assert subscriptions.tasks == set()
    assert subscriptions.is_running is False
    assert str(subscriptions) == f"SubscriptionSet[{subscriptions.name}]"

    # Stopping and waiting are no-ops when nothing runs
    await subscriptions.stop()
    async with asyncio.timeout(1.0):
        await subscriptions
    assert subscriptions.is_running is False


async def test_context_manager_teardown() -> None:
    """Test leaving the context cancels every subscription task."""
    source = InMemoryPartitionSource(name="test")
    await source.set_samples(DAY1, [sample(DAY1, 9, 0, 1.0)])
    store = SeriesStore()
    updates = Broadcast[PartitionUpdate](name="updates")

    async with SubscriptionSet(
        source, store, updates.new_sender(), name="test"
    ) as subscriptions:
        await subscriptions.set_keys([DAY1, DAY2])
        tasks = set(subscriptions.tasks)
        # Starting again keeps the running subscriptions
        subscriptions.start()
        assert set(subscriptions.tasks) == tasks
        await _settle()
        assert subscriptions.is_running is True
        assert source.live_subscriptions(DAY1) == 1

    assert subscriptions.is_running is False
    assert all(task.done() for task in tasks)
    assert source.live_subscriptions(DAY1) == 0
    assert source.live_subscriptions(DAY2) == 0
    # The data stays in the store after the teardown
    assert store.keys == {DAY1}
