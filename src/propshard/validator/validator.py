#!/usr/bin/env python3
"""
PROPSHARD VALIDATOR - Template Pre-Flight
-----------------------------------------
Checks that a loaded pod template has the structure the strategies
need before any replica is rendered. Accepts either a PodTemplate
manifest (template.spec) or a bare PodSpec mapping.

Author: PropShard Team
Date: 2026-10-19
"""

import logging
from typing import Any, Dict, Tuple

from ruamel.yaml.comments import CommentedMap

from propshard.core.errors import PodSpecError

logger = logging.getLogger("propshard.validator")


class TemplateValidator:
    """
    Structural gate for pod templates.
    Every failure comes back as (False, message) so the engine can
    surface the message verbatim.
    """

    def validate_template(self, doc: Any) -> Tuple[bool, str]:
        if not isinstance(doc, (dict, CommentedMap)):
            return False, "Template is not a mapping."

        kind = doc.get("kind")
        if kind is not None and kind != "PodTemplate":
            return False, f"Unsupported template kind '{kind}', expected 'PodTemplate'."

        try:
            pod_spec, _ = self._locate_spec(doc)
        except PodSpecError as e:
            return False, str(e)

        return self._validate_pod_spec(pod_spec)

    def extract_pod_spec(self, doc: Any) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """
        Returns (pod_spec, template_metadata) or raises PodSpecError
        with the validation message.
        """
        valid, message = self.validate_template(doc)
        if not valid:
            raise PodSpecError(message)
        return self._locate_spec(doc)

    def _locate_spec(self, doc: Dict[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        if doc.get("kind") == "PodTemplate":
            template = doc.get("template")
            if not isinstance(template, (dict, CommentedMap)):
                raise PodSpecError("Structural Error: 'template' is required but missing.")
            spec = template.get("spec")
            if not isinstance(spec, (dict, CommentedMap)):
                raise PodSpecError("Structural Error: 'template.spec' is required but missing.")
            return spec, template.get("metadata") or {}

        return doc, {}

    def _validate_pod_spec(self, pod_spec: Dict[str, Any]) -> Tuple[bool, str]:
        containers = pod_spec.get("containers")
        if not isinstance(containers, list) or not containers:
            return False, "Structural Error: 'containers' must be a non-empty list."

        for i, container in enumerate(containers):
            path = f"containers[{i}]"
            if not isinstance(container, (dict, CommentedMap)):
                return False, f"Logic Error: '{path}' must be a map/object."
            for key in ("command", "args"):
                value = container.get(key)
                if value is not None and not isinstance(value, list):
                    return False, f"Logic Error: '{path}.{key}' must be a list/sequence."

        logger.debug(f"Template passes structural check ({len(containers)} container(s))")
        return True, "Template passes structural integrity check."
