#!/usr/bin/env python3
"""
PROPSHARD EXPORTER - Fleet Manifest Stream
------------------------------------------
Serializes rendered replica Pods into one multi-document YAML stream.
Pod and container keys are put in kubectl order; everything else keeps
the order it had in the pod template.

Author: PropShard Team
Date: 2026-10-19
"""

import io
from typing import Any, Dict, List, Sequence

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

POD_KEY_ORDER = ("apiVersion", "kind", "metadata", "spec")
CONTAINER_KEY_ORDER = ("name", "image", "command", "args")


def reorder(mapping: Dict[str, Any], leading: Sequence[str]) -> CommentedMap:
    """Copy of mapping with the `leading` keys first, others after in original order."""
    ordered = CommentedMap()
    for key in leading:
        if key in mapping:
            ordered[key] = mapping[key]
    for key, value in mapping.items():
        if key not in ordered:
            ordered[key] = value
    return ordered


class ManifestExporter:
    """Dumps replica Pods in kubectl key order with Kubernetes indentation."""

    def __init__(self):
        self.yaml = YAML(typ='rt')
        # Standard K8s: 2 spaces, sequences offset 2 under their key
        self.yaml.indent(mapping=2, sequence=4, offset=2)
        self.yaml.width = 4096

    def _order_pod(self, pod: Dict[str, Any]) -> CommentedMap:
        ordered = reorder(pod, POD_KEY_ORDER)
        spec = ordered.get("spec")
        if isinstance(spec, dict) and isinstance(spec.get("containers"), list):
            spec = reorder(spec, ("containers",))
            spec["containers"] = [
                reorder(c, CONTAINER_KEY_ORDER) if isinstance(c, dict) else c
                for c in spec["containers"]
            ]
            ordered["spec"] = spec
        return ordered

    def export(self, pods: List[Dict[str, Any]]) -> str:
        """Writes every non-empty Pod; documents after the first get a '---' line."""
        stream = io.StringIO()
        self.yaml.dump_all([self._order_pod(pod) for pod in pods if pod], stream)
        return stream.getvalue()
