#!/usr/bin/env python3
"""
PROPSHARD CONFIG LOADER
-----------------------
Reads the deployment-generation settings from a YAML file. Shape
problems are reported as ConfigurationError; value checks (pod count
bounds, empty groups, unknown types) are left to the strategy factory.

Author: PropShard Team
Date: 2026-10-19
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from ruamel.yaml import YAML, YAMLError

from propshard.core.errors import ConfigurationError
from propshard.core.models import ManagerConfig, NamespaceReplica, ShardConfig, ShardType

logger = logging.getLogger("propshard.config")


def _require_mapping(value: Any, where: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"'{where}' must be a mapping, got {type(value).__name__}")
    return value


def _require_str(value: Any, where: str) -> str:
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"'{where}' must be a non-empty string, got {value!r}")
    return value


def parse_shard_config(data: Any) -> ShardConfig:
    """Builds a ShardConfig from the `shard` block of a config document."""
    block = _require_mapping(data, "shard")
    config = ShardConfig()

    raw_type = block.get("type", config.type)
    try:
        config.type = ShardType(raw_type)
    except ValueError:
        # Unknown types are rejected by new_shard_strategy() with their name
        config.type = str(raw_type)

    if "podCount" in block:
        pod_count = block["podCount"]
        if isinstance(pod_count, bool) or not isinstance(pod_count, int):
            raise ConfigurationError(f"'shard.podCount' must be an integer, got {pod_count!r}")
        config.pod_count = pod_count

    replicas: List[NamespaceReplica] = []
    for i, entry in enumerate(block.get("namespaceReplicas") or []):
        entry = _require_mapping(entry, f"shard.namespaceReplicas[{i}]")
        namespaces = entry.get("namespaces") or []
        if not isinstance(namespaces, list):
            raise ConfigurationError(
                f"'shard.namespaceReplicas[{i}].namespaces' must be a list, got {namespaces!r}"
            )
        replicas.append(NamespaceReplica(
            [_require_str(ns, f"shard.namespaceReplicas[{i}].namespaces") for ns in namespaces]
        ))
    config.namespace_replicas = replicas

    return config


def parse_manager_config(data: Any) -> ManagerConfig:
    """Accepts either a top-level `manager:` block or a bare `shard:` document."""
    root = _require_mapping(data, "config")
    block = _require_mapping(root.get("manager", root), "manager")

    config = ManagerConfig()
    if "podApplication" in block:
        config.pod_application = _require_str(block["podApplication"], "manager.podApplication")
    if "podNamespace" in block:
        config.pod_namespace = _require_str(block["podNamespace"], "manager.podNamespace")
    if "binaryName" in block:
        config.binary_name = _require_str(block["binaryName"], "manager.binaryName")

    if "shard" not in block:
        raise ConfigurationError("configuration is missing the 'shard' block")
    config.shard = parse_shard_config(block["shard"])
    return config


def load_manager_config(path: Union[str, Path]) -> ManagerConfig:
    """Loads and parses a YAML configuration file."""
    config_path = Path(path)
    yaml = YAML(typ='safe')

    try:
        data = yaml.load(config_path.read_text(encoding='utf-8-sig'))
    except OSError as e:
        raise ConfigurationError(f"unable to read configuration '{config_path}': {e}")
    except YAMLError as e:
        raise ConfigurationError(f"configuration '{config_path}' is not valid YAML: {e}")

    config = parse_manager_config(data)
    logger.info(f"Loaded '{config.shard.type}' shard configuration from {config_path}")
    return config
