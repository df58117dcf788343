# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Day partitions of the sample history and live subscriptions to them.

A patient's samples are stored in one node per calendar day. A
[`DateRange`][uroflow.partitions.DateRange] is expanded into the
[`PartitionKey`][uroflow.partitions.PartitionKey]s of the days it covers with
[`expand_range()`][uroflow.partitions.expand_range], and the
[`SubscriptionSet`][uroflow.partitions.SubscriptionSet] keeps one live
subscription open for each of them.
"""

from ._partition_key import PartitionKey
from ._range import DateRange, RangePreset, expand_range, resolve_preset
from ._source import (
    PartitionDataSource,
    PartitionSubscription,
    SamplesReplacement,
    extract_samples,
)
from ._memory_source import InMemoryPartitionSource
from ._subscription_set import PartitionUpdate, SubscriptionSet, SubscriptionState

__all__ = [
    "DateRange",
    "InMemoryPartitionSource",
    "PartitionDataSource",
    "PartitionKey",
    "PartitionSubscription",
    "PartitionUpdate",
    "RangePreset",
    "SamplesReplacement",
    "SubscriptionSet",
    "SubscriptionState",
    "expand_range",
    "extract_samples",
    "resolve_preset",
]
