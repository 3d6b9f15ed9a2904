#!/usr/bin/env python3
"""
PROPSHARD OWNERSHIP - The Replica's View
----------------------------------------
Reads generated ownership flags back the way a controller replica
would, and checks a whole strategy for gaps or double ownership before
any manifest is shipped.

Author: PropShard Team
Date: 2026-10-19
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Sequence

from propshard.core.errors import ConfigurationError
from propshard.sharding.keyspace import KEYSPACE_SIZE
from propshard.sharding.strategy import (
    NAMESPACE_LABEL_FLAG,
    SHARD_LABEL_FLAG,
    ConsistentHashingShardStrategy,
    ShardStrategy,
)


@dataclass(frozen=True)
class OwnershipFilter:
    """Shard tokens and namespaces a single replica reconciles."""
    shard_tokens: FrozenSet[int] = frozenset()
    namespaces: FrozenSet[str] = frozenset()

    @classmethod
    def from_args(cls, args: Sequence[str]) -> "OwnershipFilter":
        """
        Collects every --propeller.include-* flag from an argument list.
        Unrelated flags are skipped; a trailing flag without a value is an error.
        """
        tokens, namespaces = set(), set()
        i = 0
        while i < len(args):
            flag = args[i]
            if flag in (SHARD_LABEL_FLAG, NAMESPACE_LABEL_FLAG):
                if i + 1 >= len(args):
                    raise ConfigurationError(f"flag '{flag}' is missing its value")
                value = args[i + 1]
                if flag == SHARD_LABEL_FLAG:
                    try:
                        tokens.add(int(value))
                    except ValueError:
                        raise ConfigurationError(f"shard label '{value}' is not an integer token")
                else:
                    namespaces.add(value)
                i += 2
                continue
            i += 1

        return cls(frozenset(tokens), frozenset(namespaces))

    def owns(self, token: Optional[int] = None, namespace: Optional[str] = None) -> bool:
        if token is not None and token in self.shard_tokens:
            return True
        if namespace is not None and namespace in self.namespaces:
            return True
        return False


@dataclass
class CoverageReport:
    """Outcome of check_coverage() for a whole fleet."""
    pod_count: int
    filters: List[OwnershipFilter] = field(default_factory=list)
    missing_tokens: List[int] = field(default_factory=list)
    overlapping_tokens: Dict[int, int] = field(default_factory=dict)
    shared_namespaces: Dict[str, int] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        """No token is unowned and none is owned twice."""
        return not self.missing_tokens and not self.overlapping_tokens


def check_coverage(strategy: ShardStrategy) -> CoverageReport:
    """
    Renders every replica's flags and checks the resulting ownership.
    Shared namespaces are reported but never make the report incomplete.
    """
    report = CoverageReport(pod_count=strategy.get_pod_count())
    report.filters = [
        OwnershipFilter.from_args(strategy.shard_args(i)) for i in range(report.pod_count)
    ]

    if isinstance(strategy, ConsistentHashingShardStrategy):
        counts = Counter(token for f in report.filters for token in f.shard_tokens)
        report.missing_tokens = [t for t in range(KEYSPACE_SIZE) if counts[t] == 0]
        report.overlapping_tokens = {t: n for t, n in sorted(counts.items()) if n > 1}
    else:
        counts = Counter(ns for f in report.filters for ns in f.namespaces)
        report.shared_namespaces = {ns: n for ns, n in sorted(counts.items()) if n > 1}

    return report
