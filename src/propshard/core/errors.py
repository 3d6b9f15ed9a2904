#!/usr/bin/env python3
"""
PROPSHARD ERRORS
----------------
Both error kinds come from invariant violations in static input, so
neither is retried. Messages carry the offending value verbatim.

Author: PropShard Team
Date: 2026-10-19
"""


class PropShardError(Exception):
    """Base class for every failure raised by PropShard."""


class ConfigurationError(PropShardError):
    """Invalid shard configuration. Fatal before any manifest is produced."""


class PodSpecError(PropShardError):
    """The pod template cannot carry replica ownership arguments."""
