"""
Read-only view of the MetalLB custom resource spec
"""

# Standard
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

# Local
from . import constants


@dataclass(frozen=True)
class WorkloadConfig:
    """Per-workload scheduling and resource overrides"""

    affinity: Optional[Dict[str, Any]] = None
    resources: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, config: Optional[dict]) -> Optional["WorkloadConfig"]:
        if config is None:
            return None
        return cls(affinity=config.get("affinity"), resources=config.get("resources"))


@dataclass(frozen=True)
class MetalLBSpec:
    """The parts of MetalLB.spec the reconciliation core reads"""

    log_level: str = ""
    speaker_node_selector: Optional[Dict[str, str]] = None
    speaker_tolerations: Optional[List[Dict[str, Any]]] = None
    controller_config: Optional[WorkloadConfig] = None
    speaker_config: Optional[WorkloadConfig] = None

    @classmethod
    def from_manifest(cls, cr_manifest: Optional[dict]) -> "MetalLBSpec":
        """Build the spec view from a full MetalLB CR manifest"""
        spec = (cr_manifest or {}).get("spec") or {}
        return cls(
            log_level=spec.get("logLevel") or "",
            speaker_node_selector=spec.get("speakerNodeSelector"),
            speaker_tolerations=spec.get("speakerTolerations"),
            controller_config=WorkloadConfig.from_dict(spec.get("controllerConfig")),
            speaker_config=WorkloadConfig.from_dict(spec.get("speakerConfig")),
        )

    @property
    def effective_log_level(self) -> str:
        """The log level to render, falling back to the default when unset"""
        return self.log_level or constants.DEFAULT_LOG_LEVEL
