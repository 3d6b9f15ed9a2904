#!/usr/bin/env python3
"""
PROPSHARD CORE MODELS
---------------------
Defines the configuration and ownership structures shared by the
strategies, the manifest engine and the CLI.

Author: PropShard Team
Date: 2026-10-19
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Union


class ShardType(str, Enum):
    """Supported ways of splitting ownership across the replica fleet."""
    CONSISTENT_HASHING = "consistent-hashing"
    NAMESPACE = "namespace"

    def __str__(self) -> str:
        return self.value


@dataclass
class NamespaceReplica:
    """A group of namespaces owned by a single replica."""
    namespaces: List[str] = field(default_factory=list)


@dataclass
class ShardConfig:
    """
    How many replicas exist and how ownership is split between them.

    Only one of pod_count / namespace_replicas is used, selected by type.
    The type is kept as configured (str or ShardType) so that unknown
    values survive until the strategy factory rejects them.
    """
    type: Union[ShardType, str] = ShardType.CONSISTENT_HASHING
    pod_count: int = 3
    namespace_replicas: List[NamespaceReplica] = field(default_factory=list)


@dataclass
class ManagerConfig:
    """Deployment-generation settings for the replica fleet."""
    pod_application: str = "flytepropeller"   # Pod name prefix and 'app' label
    pod_namespace: str = "flyte"              # Namespace the replica pods land in
    binary_name: str = "flytepropeller"       # command[0] of the controller container
    shard: ShardConfig = field(default_factory=ShardConfig)


@dataclass(frozen=True)
class KeyRange:
    """Half-open [start, end) slice of the consistent-hashing keyspace."""
    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start

    def tokens(self) -> Iterator[int]:
        return iter(range(self.start, self.end))

    def __contains__(self, token: int) -> bool:
        return self.start <= token < self.end

    def __str__(self) -> str:
        return f"[{self.start}, {self.end})"
