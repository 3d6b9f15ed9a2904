#!/usr/bin/env python3
"""
PROPSHARD ENGINE - Fleet Manifest Generation
--------------------------------------------
The ShardManifestEngine turns one pod template into one Pod manifest
per controller replica:
1. Build the shard strategy from configuration (once).
2. Validate the pod template.
3. Render each replica: name, labels, template hash, ownership flags.
4. Export and persist atomically, keeping a backup of previous output.

Author: PropShard Team
Date: 2026-10-19
"""

import copy
import hashlib
import json
import logging
import os
import shutil
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from ruamel.yaml import YAML, YAMLError
from ruamel.yaml.comments import CommentedMap

from propshard.core.errors import PodSpecError
from propshard.core.models import ManagerConfig
from propshard.render.exporter import ManifestExporter
from propshard.sharding.strategy import ShardStrategy, new_shard_strategy
from propshard.validator.validator import TemplateValidator

# Setup standardized logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("propshard.engine")

POD_TEMPLATE_HASH_ANNOTATION = "flyte.lyft.com/pod-template-hash"
REPLICA_INDEX_ANNOTATION = "propshard.flyte.org/replica-index"


def compute_template_hash(pod_spec: Dict[str, Any]) -> str:
    """Stable short digest of a pod spec; changes whenever the template does."""
    canonical = json.dumps(pod_spec, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


class ShardManifestEngine:
    """
    Generates the replica fleet for one configuration.
    The strategy is built in __init__, so an invalid configuration
    raises ConfigurationError before any template is touched.
    """

    def __init__(self, config: ManagerConfig):
        self.config = config
        self.strategy: ShardStrategy = new_shard_strategy(config.shard)
        self.validator = TemplateValidator()
        self.exporter = ManifestExporter()

    @property
    def pod_count(self) -> int:
        return self.strategy.get_pod_count()

    def load_template(self, path: Union[str, Path]) -> Any:
        """Reads a pod template with the round-trip loader so comments survive."""
        template_path = Path(path)
        yaml = YAML(typ='rt')
        try:
            return yaml.load(template_path.read_text(encoding='utf-8-sig'))
        except OSError as e:
            raise PodSpecError(f"unable to read pod template '{template_path}': {e}")
        except YAMLError as e:
            raise PodSpecError(f"pod template '{template_path}' is not valid YAML: {e}")

    def render_replica(self, template_doc: Any, pod_index: int) -> CommentedMap:
        """Builds the Pod manifest for a single replica."""
        pod_spec, template_meta = self.validator.extract_pod_spec(template_doc)
        spec = self.strategy.update_pod_spec(pod_spec, pod_index, binary_name=self.config.binary_name)

        labels = CommentedMap(copy.deepcopy(dict(template_meta.get("labels") or {})))
        labels["app"] = self.config.pod_application

        annotations = CommentedMap(copy.deepcopy(dict(template_meta.get("annotations") or {})))
        annotations[POD_TEMPLATE_HASH_ANNOTATION] = compute_template_hash(pod_spec)
        annotations[REPLICA_INDEX_ANNOTATION] = str(pod_index)

        metadata = CommentedMap()
        metadata["name"] = f"{self.config.pod_application}-{pod_index}"
        metadata["namespace"] = self.config.pod_namespace
        metadata["labels"] = labels
        metadata["annotations"] = annotations

        manifest = CommentedMap()
        manifest["apiVersion"] = "v1"
        manifest["kind"] = "Pod"
        manifest["metadata"] = metadata
        manifest["spec"] = spec
        return manifest

    def render_all(self, template_doc: Any,
                   progress_callback: Optional[Callable[[int, int], None]] = None) -> List[CommentedMap]:
        """
        Renders every replica in index order. Any PodSpecError aborts the
        whole fleet; a partial fleet would leave tokens unowned.
        """
        manifests = []
        for pod_index in range(self.pod_count):
            manifests.append(self.render_replica(template_doc, pod_index))
            logger.debug(f"Rendered replica {pod_index}: {self.strategy.describe(pod_index)}")
            if progress_callback:
                progress_callback(pod_index + 1, self.pod_count)

        logger.info(f"Rendered {len(manifests)} replica manifest(s) for '{self.config.pod_application}'")
        return manifests

    def write_manifests(self, manifests: List[CommentedMap], output_path: Union[str, Path],
                        dry_run: bool = False) -> Dict[str, Any]:
        """Exports the stream and, unless dry_run, writes it atomically."""
        target = Path(output_path).resolve()
        content = self.exporter.export(manifests)
        old_content = target.read_text(encoding='utf-8') if target.exists() else ""

        result = {
            "file_path": str(target),
            "content": content,
            "modified": content != old_content,
            "written": False,
            "backup_created": None,
            "timestamp": time.time(),
        }

        if dry_run or not result["modified"]:
            return result

        if target.exists():
            backup_path = self._create_unique_backup(target)
            shutil.copy2(target, backup_path)
            result["backup_created"] = str(backup_path)

        self._atomic_write(target, content)
        result["written"] = True
        logger.info(f"Wrote {len(manifests)} manifest(s) to {target}")
        return result

    def generate_summary(self, manifests: List[CommentedMap], result: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Counts used by the CLI report."""
        arg_count = sum(len(self.strategy.owned_values(i)) for i in range(self.pod_count))
        return {
            "strategy": str(self.config.shard.type),
            "replicas": self.pod_count,
            "rendered": len(manifests),
            "ownership_flags": arg_count,
            "written_to_disk": bool(result and result.get("written")),
            "backup_created": (result or {}).get("backup_created"),
            "summary_timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        }

    def _atomic_write(self, target_path: Path, content: str):
        if not target_path.parent.exists():
            target_path.parent.mkdir(parents=True, exist_ok=True)
        if not os.access(target_path.parent, os.W_OK):
            raise PermissionError(f"No write access to {target_path.parent}")
        temp_file = target_path.with_suffix('.propshard.tmp')
        try:
            temp_file.write_text(content, encoding='utf-8')
            os.replace(temp_file, target_path)
        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            raise IOError(f"Atomic write failed: {str(e)}")

    def _create_unique_backup(self, target_path: Path) -> Path:
        backup_path = target_path.with_suffix('.propshard.backup')
        counter = 1
        while backup_path.exists():
            backup_path = target_path.with_name(f"{target_path.stem}-{counter}.propshard.backup")
            counter += 1
        return backup_path
