"""
Typed view of a pod-templated workload (Deployment, DaemonSet) used by the
structural patcher. Objects are converted into this shape, mutated through
named fields, and converted back, so string path access stays confined to
this module.
"""

# Standard
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import copy

# Local
from ..exceptions import assert_patch
from ..utils import object_identity


@dataclass
class Container:
    name: str
    resources: Optional[Dict[str, Any]] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class PodWorkload:
    kind: str
    name: str
    affinity: Optional[Dict[str, Any]] = None
    security_context: Optional[Dict[str, Any]] = None
    containers: List[Container] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_object(cls, obj: dict) -> "PodWorkload":
        """Convert a rendered workload into the typed shape. The input object
        is not modified.

        Raises:
            PatchError: The object has no pod template spec
        """
        raw = copy.deepcopy(obj)
        pod_spec = ((raw.get("spec") or {}).get("template") or {}).get("spec")
        assert_patch(
            isinstance(pod_spec, dict),
            f"No pod template spec found in {object_identity(obj)}",
        )
        containers = [
            Container(
                name=container.get("name", ""),
                resources=container.get("resources"),
                raw=container,
            )
            for container in pod_spec.get("containers") or []
        ]
        return cls(
            kind=raw.get("kind"),
            name=(raw.get("metadata") or {}).get("name"),
            affinity=pod_spec.get("affinity"),
            security_context=pod_spec.get("securityContext"),
            containers=containers,
            raw=raw,
        )

    def to_object(self) -> dict:
        """Convert back into a plain manifest dict"""
        obj = copy.deepcopy(self.raw)
        pod_spec = obj["spec"]["template"]["spec"]
        _set_or_clear(pod_spec, "affinity", self.affinity)
        _set_or_clear(pod_spec, "securityContext", self.security_context)
        containers = []
        for container in self.containers:
            out = copy.deepcopy(container.raw)
            out["name"] = container.name
            _set_or_clear(out, "resources", container.resources)
            containers.append(out)
        if containers or "containers" in pod_spec:
            pod_spec["containers"] = containers
        return obj

    def container(self, name: str) -> Optional[Container]:
        return next((c for c in self.containers if c.name == name), None)


def _set_or_clear(dct: dict, key: str, value):
    if value is None:
        dct.pop(key, None)
    else:
        dct[key] = copy.deepcopy(value)
