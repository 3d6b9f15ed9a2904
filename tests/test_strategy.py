#!/usr/bin/env python3
"""
PROPSHARD STRATEGY SUITE
------------------------
Factory validation, per-replica flag generation and the pure
update_pod_spec() contract for both strategies.

Author: PropShard Team
Date: 2026-10-19
"""

import pytest

from propshard.core.errors import ConfigurationError, PodSpecError
from propshard.core.models import KeyRange, NamespaceReplica, ShardConfig, ShardType
from propshard.sharding.strategy import (
    NAMESPACE_LABEL_FLAG,
    SHARD_LABEL_FLAG,
    ConsistentHashingShardStrategy,
    NamespaceShardStrategy,
    new_shard_strategy,
)


def hashing(pod_count):
    return new_shard_strategy(ShardConfig(type=ShardType.CONSISTENT_HASHING, pod_count=pod_count))


def namespaced(*groups):
    return new_shard_strategy(ShardConfig(
        type=ShardType.NAMESPACE,
        namespace_replicas=[NamespaceReplica(list(g)) for g in groups],
    ))


# --- Factory validation ---

@pytest.mark.parametrize("pod_count", [0, -1])
def test_pod_count_must_be_positive(pod_count):
    with pytest.raises(ConfigurationError, match=rf"PodCount \({pod_count}\) must be greater than zero"):
        hashing(pod_count)


def test_pod_count_cannot_exceed_keyspace():
    with pytest.raises(ConfigurationError, match=r"PodCount \(33\) is larger than available keyspace size \(32\)"):
        hashing(33)


@pytest.mark.parametrize("pod_count", [1, 32])
def test_pod_count_bounds_are_inclusive(pod_count):
    assert hashing(pod_count).get_pod_count() == pod_count


def test_empty_namespace_group_is_rejected():
    with pytest.raises(ConfigurationError, match=r"0 configured namespace\(s\)"):
        namespaced(["ns-a"], [])


def test_namespace_strategy_needs_a_group():
    with pytest.raises(ConfigurationError, match="at least 1 namespace replica"):
        namespaced()


def test_unknown_strategy_is_named_in_error():
    with pytest.raises(ConfigurationError, match="shard strategy 'bogus' does not exist"):
        new_shard_strategy(ShardConfig(type="bogus"))


def test_string_types_are_accepted():
    strategy = new_shard_strategy(ShardConfig(type="consistent-hashing", pod_count=2))
    assert isinstance(strategy, ConsistentHashingShardStrategy)


# --- Consistent hashing ---

def test_hashing_flags_for_first_of_four_pods():
    strategy = hashing(4)
    args = strategy.shard_args(0)
    assert args[:4] == [SHARD_LABEL_FLAG, "0", SHARD_LABEL_FLAG, "1"]
    assert args[1::2] == [str(t) for t in range(8)]


@pytest.mark.parametrize("pod_count", [1, 3, 5, 9, 31])
def test_hashing_appends_one_pair_per_token(pod_spec, pod_count):
    """CARDINALITY: new args == 2 * tokens owned."""
    strategy = hashing(pod_count)
    before = len(pod_spec["containers"][0]["args"])
    for pod_index in range(pod_count):
        updated = strategy.update_pod_spec(pod_spec, pod_index)
        added = updated["containers"][0]["args"][before:]
        assert len(added) == 2 * strategy.key_range(pod_index).size
        assert added[0::2] == [SHARD_LABEL_FLAG] * strategy.key_range(pod_index).size


def test_hashing_key_ranges_match_partition():
    strategy = hashing(5)
    assert strategy.key_range(1) == KeyRange(7, 14)
    assert strategy.key_range(4) == KeyRange(26, 32)


def test_out_of_range_index_is_rejected():
    strategy = hashing(4)
    with pytest.raises(IndexError):
        strategy.key_range(4)
    with pytest.raises(IndexError):
        strategy.shard_args(-1)


# --- Namespace ---

def test_namespace_pod_count_follows_groups():
    strategy = namespaced(["ns-a"], ["ns-b", "ns-c"])
    assert isinstance(strategy, NamespaceShardStrategy)
    assert strategy.get_pod_count() == 2


def test_namespace_flags_preserve_group_order(pod_spec):
    strategy = namespaced(["ns-a"], ["ns-b", "ns-c"])
    updated = strategy.update_pod_spec(pod_spec, 1)
    assert updated["containers"][0]["args"] == [
        "--config", "/etc/flyte/config/*.yaml",
        NAMESPACE_LABEL_FLAG, "ns-b",
        NAMESPACE_LABEL_FLAG, "ns-c",
    ]


def test_overlapping_namespace_groups_are_allowed():
    strategy = namespaced(["ns-a"], ["ns-a", "ns-b"])
    assert strategy.owned_values(1) == ["ns-a", "ns-b"]


def test_namespace_strategy_copies_its_groups():
    groups = [["ns-a"]]
    strategy = NamespaceShardStrategy(groups)
    groups[0].append("ns-z")
    assert strategy.owned_values(0) == ["ns-a"]


# --- update_pod_spec contract ---

def test_update_pod_spec_leaves_input_untouched(pod_spec):
    original_args = list(pod_spec["containers"][0]["args"])
    updated = hashing(2).update_pod_spec(pod_spec, 0)
    assert pod_spec["containers"][0]["args"] == original_args
    assert updated is not pod_spec


def test_update_pod_spec_only_touches_controller(pod_spec):
    updated = hashing(2).update_pod_spec(pod_spec, 1)
    assert updated["containers"][1] == pod_spec["containers"][1]


def test_feeding_output_back_duplicates_flags(pod_spec):
    """Flags are appended without deduplication: one call per (pod spec, index)."""
    strategy = namespaced(["ns-a"])
    once = strategy.update_pod_spec(pod_spec, 0)
    twice = strategy.update_pod_spec(once, 0)
    assert twice["containers"][0]["args"].count("ns-a") == 2


def test_update_pod_spec_requires_single_controller():
    with pytest.raises(PodSpecError, match="found 0"):
        hashing(2).update_pod_spec({"containers": [{"command": ["envoy"]}]}, 0)
