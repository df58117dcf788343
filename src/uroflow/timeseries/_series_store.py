# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""The merged sample series of all the active day partitions."""

from __future__ import annotations

import heapq
import logging
import typing
from collections.abc import Iterable, Set

from ._base_types import Sample, to_epoch_us

if typing.TYPE_CHECKING:
    from ..partitions import PartitionKey

_logger = logging.getLogger(__name__)


def _sort_key(sample: Sample) -> int:
    return to_epoch_us(sample.timestamp)


class SeriesStore:
    """Keeps the latest snapshot of every partition and their merged series.

    Partitions are only ever replaced as a whole. After every change the merged
    series is rebuilt: it holds exactly the samples of the partitions currently
    stored, sorted by timestamp. Samples with the same timestamp keep the order in
    which their partition reported them, and samples of earlier partitions come
    before those of later partitions.

    The store is meant to be used from a single event loop. Its methods never
    await, so each replacement is applied atomically and replacements of the same
    partition take effect in the order they are applied.
    """

    def __init__(self) -> None:
        """Create an empty store."""
        self._snapshots: dict[PartitionKey, tuple[Sample, ...]] = {}
        self._series: tuple[Sample, ...] = ()
        self._version: int = 0

    @property
    def keys(self) -> Set[PartitionKey]:
        """The partitions currently contributing samples."""
        return frozenset(self._snapshots)

    @property
    def version(self) -> int:
        """A counter increased every time the merged series changes."""
        return self._version

    def apply_partition(self, key: PartitionKey, samples: Iterable[Sample]) -> bool:
        """Replace the snapshot of a partition.

        An empty snapshot removes the partition from the store.

        Args:
            key: The partition to replace.
            samples: The full new content of the partition.

        Returns:
            Whether the merged series changed. Applying the same content twice
                changes nothing the second time.
        """
        snapshot = tuple(sorted(samples, key=_sort_key))
        if self._snapshots.get(key, ()) == snapshot:
            return False

        if snapshot:
            self._snapshots[key] = snapshot
        else:
            del self._snapshots[key]
        self._rebuild()
        _logger.debug(
            "Partition %s replaced with %s samples, %s samples in total",
            key,
            len(snapshot),
            len(self._series),
        )
        return True

    def clear_partition(self, key: PartitionKey) -> bool:
        """Remove the snapshot of a partition.

        Args:
            key: The partition to remove.

        Returns:
            Whether the merged series changed.
        """
        return self.apply_partition(key, ())

    def partition(self, key: PartitionKey) -> tuple[Sample, ...]:
        """Return the snapshot of one partition.

        Args:
            key: The partition to look up.

        Returns:
            The samples of the partition, sorted by timestamp, or an empty tuple.
        """
        return self._snapshots.get(key, ())

    def snapshot_series(self) -> tuple[Sample, ...]:
        """Return the merged series.

        The returned value is immutable and is not affected by later changes to
        the store.

        Returns:
            All the stored samples, sorted by timestamp.
        """
        return self._series

    def __len__(self) -> int:
        """Return the number of samples in the merged series."""
        return len(self._series)

    def _rebuild(self) -> None:
        # Each snapshot is already sorted, merging keeps ties in partition order.
        self._series = tuple(
            heapq.merge(
                *(self._snapshots[key] for key in sorted(self._snapshots)),
                key=_sort_key,
            )
        )
        self._version += 1
