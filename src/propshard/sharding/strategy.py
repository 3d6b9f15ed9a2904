#!/usr/bin/env python3
"""
PROPSHARD SHARD STRATEGIES
--------------------------
A ShardStrategy decides which slice of the workflow population each
controller replica owns, and encodes that slice as command-line flags
on the replica's pod spec.

Two strategies exist:
1. ConsistentHashing: every replica owns a contiguous range of the
   32-token keyspace.
2. Namespace: replica i owns the i-th configured group of namespaces.

Strategies are built once by new_shard_strategy() and never mutated.

Author: PropShard Team
Date: 2026-10-19
"""

import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence, Tuple

from propshard.core.errors import ConfigurationError
from propshard.core.models import KeyRange, NamespaceReplica, ShardConfig, ShardType
from propshard.sharding.keyspace import KEYSPACE_SIZE, compute_key_range
from propshard.sharding.podspec import PROPELLER_BINARY, append_args, get_propeller_container

logger = logging.getLogger("propshard.strategy")

SHARD_LABEL_FLAG = "--propeller.include-shard-label"
NAMESPACE_LABEL_FLAG = "--propeller.include-namespace-label"


class ShardStrategy(ABC):
    """Capability shared by every strategy variant."""

    flag: str = ""

    @abstractmethod
    def get_pod_count(self) -> int:
        """Number of replicas (and therefore pod manifests) this strategy needs."""

    @abstractmethod
    def owned_values(self, pod_index: int) -> List[str]:
        """Tokens or namespaces owned by pod_index, in flag order."""

    def describe(self, pod_index: int) -> str:
        return ", ".join(self.owned_values(pod_index))

    def shard_args(self, pod_index: int) -> List[str]:
        """The flags update_pod_spec() appends for pod_index."""
        args: List[str] = []
        for value in self.owned_values(pod_index):
            args.extend([self.flag, value])
        return args

    def update_pod_spec(self, pod_spec: Dict[str, Any], pod_index: int,
                        binary_name: str = PROPELLER_BINARY) -> Dict[str, Any]:
        """
        Returns a copy of pod_spec whose controller container carries the
        ownership flags of pod_index. The input is left untouched; feeding
        the result back in appends the flags a second time.
        """
        updated = copy.deepcopy(pod_spec)
        container = get_propeller_container(updated, binary_name)
        values = self.owned_values(pod_index)
        append_args(container, self.flag, values)
        logger.debug(f"Replica {pod_index}: appended {len(values)} ownership flag(s)")
        return updated

    def _check_index(self, pod_index: int):
        pod_count = self.get_pod_count()
        if not 0 <= pod_index < pod_count:
            raise IndexError(f"pod index {pod_index} is outside [0, {pod_count})")


class ConsistentHashingShardStrategy(ShardStrategy):
    """
    Load-balances workflow processing by handing each replica an equal
    (within one token) contiguous share of the keyspace. Each token is
    assigned to exactly one replica.
    """

    flag = SHARD_LABEL_FLAG

    def __init__(self, pod_count: int):
        self._pod_count = pod_count

    def get_pod_count(self) -> int:
        return self._pod_count

    def key_range(self, pod_index: int) -> KeyRange:
        self._check_index(pod_index)
        return compute_key_range(KEYSPACE_SIZE, self._pod_count, pod_index)

    def owned_values(self, pod_index: int) -> List[str]:
        return [str(token) for token in self.key_range(pod_index).tokens()]

    def describe(self, pod_index: int) -> str:
        key_range = self.key_range(pod_index)
        return f"{key_range} ({key_range.size} tokens)"

    def __repr__(self) -> str:
        return f"ConsistentHashingShardStrategy(pod_count={self._pod_count})"


class NamespaceShardStrategy(ShardStrategy):
    """
    Distributes workflow processing by namespace: each replica handles the
    workflows defined in its configured namespace group. Groups are taken
    as given; overlap between groups is not checked here.
    """

    flag = NAMESPACE_LABEL_FLAG

    def __init__(self, namespace_replicas: Sequence[Sequence[str]]):
        self._namespace_replicas: Tuple[Tuple[str, ...], ...] = tuple(
            tuple(group) for group in namespace_replicas
        )

    @property
    def namespace_replicas(self) -> Tuple[Tuple[str, ...], ...]:
        return self._namespace_replicas

    def get_pod_count(self) -> int:
        return len(self._namespace_replicas)

    def owned_values(self, pod_index: int) -> List[str]:
        self._check_index(pod_index)
        return [str(namespace) for namespace in self._namespace_replicas[pod_index]]

    def __repr__(self) -> str:
        return f"NamespaceShardStrategy(groups={len(self._namespace_replicas)})"


def new_shard_strategy(config: ShardConfig) -> ShardStrategy:
    """
    Builds the strategy described by config.
    Raises ConfigurationError for any invalid setup; nothing is defaulted.
    """
    shard_type = config.type.value if isinstance(config.type, ShardType) else config.type

    if shard_type == ShardType.CONSISTENT_HASHING.value:
        if config.pod_count <= 0:
            raise ConfigurationError(
                f"configured PodCount ({config.pod_count}) must be greater than zero"
            )
        if config.pod_count > KEYSPACE_SIZE:
            raise ConfigurationError(
                f"configured PodCount ({config.pod_count}) is larger than available keyspace size ({KEYSPACE_SIZE})"
            )

        logger.info(f"Using consistent-hashing strategy across {config.pod_count} replica(s)")
        return ConsistentHashingShardStrategy(config.pod_count)

    if shard_type == ShardType.NAMESPACE.value:
        namespace_replicas = []
        for replica in config.namespace_replicas:
            namespaces = replica.namespaces if isinstance(replica, NamespaceReplica) else replica
            if len(namespaces) == 0:
                raise ConfigurationError("unable to create namespace replica with 0 configured namespace(s)")
            namespace_replicas.append(list(namespaces))

        if not namespace_replicas:
            raise ConfigurationError("namespace shard strategy requires at least 1 namespace replica")

        logger.info(f"Using namespace strategy across {len(namespace_replicas)} replica(s)")
        return NamespaceShardStrategy(namespace_replicas)

    raise ConfigurationError(f"shard strategy '{shard_type}' does not exist")
