#!/usr/bin/env python3
"""
PROPSHARD KEYSPACE - Consistent-Hashing Arithmetic
--------------------------------------------------
Splits the fixed token keyspace [0, KEYSPACE_SIZE) into pod_count
contiguous ranges whose sizes differ by at most one. The first
`remainder` replicas take one extra token each.

Author: PropShard Team
Date: 2026-10-19
"""

from typing import List

from propshard.core.models import KeyRange

KEYSPACE_SIZE = 32


def compute_start_key(keys_per_pod: int, remainder: int, pod_index: int) -> int:
    """First token owned by pod_index (also the end of pod_index - 1)."""
    return (min(pod_index, remainder) * (keys_per_pod + 1)) + (max(0, pod_index - remainder) * keys_per_pod)


def compute_key_range(keyspace_size: int, pod_count: int, pod_index: int) -> KeyRange:
    """
    Computes the [start, end) token range owned by pod_index.

    The remainder is the number of tokens left after every replica got
    keys_per_pod of them, i.e. keyspace_size mod pod_count. Using
    keyspace_size mod keys_per_pod instead leaves tokens unowned for
    counts such as 9 (32 // 9 = 3, 32 mod 3 = 2, but 5 tokens are left).
    """
    keys_per_pod = keyspace_size // pod_count
    remainder = keyspace_size - keys_per_pod * pod_count

    return KeyRange(
        compute_start_key(keys_per_pod, remainder, pod_index),
        compute_start_key(keys_per_pod, remainder, pod_index + 1),
    )


def partition_keyspace(pod_count: int, keyspace_size: int = KEYSPACE_SIZE) -> List[KeyRange]:
    """Every replica's range, in replica order."""
    return [compute_key_range(keyspace_size, pod_count, i) for i in range(pod_count)]
