"""
Package exports
"""

# Local
from . import config, constants
from .context import ReconcileContext
from .exceptions import (
    CancelledError,
    ConfigError,
    MissingConfigurationError,
    ParseError,
    PatchError,
    RenderError,
    StoreError,
)
from .metallb_cr import MetalLBSpec
from .reconcile import (
    ReconcileOutcome,
    ReconciliationResult,
    apply_objects,
    reconcile_config_artifact,
    reconcile_metallb,
)
from .render import ChartConfig, MetalLBChart, load_chart_config, patch_objects
from .snapshot import ConfigurationSnapshot, build_snapshot
from .store import DryRunStore, OpenshiftStore, StoreBase
