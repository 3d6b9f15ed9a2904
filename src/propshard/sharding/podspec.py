#!/usr/bin/env python3
"""
PROPSHARD POD-SPEC HELPERS
--------------------------
Locates the controller container inside a pod spec and appends
ownership flags to its argument list. Pod specs are plain mappings
(dict or ruamel CommentedMap) shaped like the Kubernetes PodSpec.

Author: PropShard Team
Date: 2026-10-19
"""

from typing import Any, Dict, Iterable, List

from propshard.core.errors import PodSpecError

PROPELLER_BINARY = "flytepropeller"


def get_propeller_container(pod_spec: Dict[str, Any], binary_name: str = PROPELLER_BINARY) -> Dict[str, Any]:
    """
    Returns the single container whose command starts with binary_name.
    Raises PodSpecError when zero or several containers qualify.
    """
    containers = []
    for container in pod_spec.get("containers") or []:
        command = container.get("command") or []
        if len(command) > 0 and command[0] == binary_name:
            containers.append(container)

    if len(containers) != 1:
        raise PodSpecError(
            f"expecting 1 {binary_name} container in podtemplate but found {len(containers)}"
        )

    return containers[0]


def append_args(container: Dict[str, Any], flag: str, values: Iterable[Any]) -> List[str]:
    """Appends one `flag value` pair per value. Existing args are left untouched."""
    if container.get("args") is None:
        container["args"] = []

    args = container["args"]
    for value in values:
        args.extend([flag, str(value)])
    return args
