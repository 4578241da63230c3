"""
The MetalLBChart renders the MetalLB chart into the set of objects the
operator applies to the cluster
"""

# Standard
from typing import Iterable, List, Optional, Union

# First Party
import alog

# Local
from .. import config
from ..context import ReconcileContext
from ..metallb_cr import MetalLBSpec
from ..store import StoreBase
from .chart_config import ChartConfig, load_chart_config
from .engine import HelmTemplateEngine, TemplateEngineBase
from .manifest import parse_manifest
from .patch import patch_objects
from .values import ValueSource, build_chart_values

log = alog.use_channel("CHART")


class MetalLBChart:
    """Bundles the chart location, the pass's chart config and the template
    engine used to execute the chart
    """

    def __init__(
        self,
        namespace: str,
        chart_config: ChartConfig,
        chart_path: Optional[str] = None,
        release_name: Optional[str] = None,
        engine: Optional[TemplateEngineBase] = None,
    ):
        """
        Args:
            namespace:  str
                Namespace the chart is rendered into
            chart_config:  ChartConfig
                Environment derived parameters for this pass
            chart_path:  Optional[str]
                Location of the chart. Defaults to config.chart_path
            release_name:  Optional[str]
                Release name. Defaults to config.release_name
            engine:  Optional[TemplateEngineBase]
                The engine that executes the chart. Defaults to helm.
        """
        self.namespace = namespace
        self.chart_config = chart_config
        self.chart_path = chart_path or config.chart_path
        self.release_name = release_name or config.release_name
        self.engine = engine or HelmTemplateEngine(helm_bin=config.helm_bin)

    @classmethod
    def load(
        cls,
        ctx: ReconcileContext,
        store: StoreBase,
        namespace: str,
        is_openshift: bool,
        **kwargs,
    ) -> "MetalLBChart":
        """Load the chart config from the environment and build the chart"""
        chart_config = load_chart_config(
            namespace, is_openshift, store=store, ctx=ctx
        )
        return cls(namespace, chart_config, **kwargs)

    def render(
        self,
        spec: Union[MetalLBSpec, dict],
        overrides: Optional[Iterable[ValueSource]] = None,
    ) -> List[dict]:
        """Execute the chart and parse the output, without structural patches

        Args:
            spec:  Union[MetalLBSpec, dict]
                The MetalLB CR spec view, or the full CR manifest
            overrides:  Optional[Iterable[ValueSource]]
                Value sources merged underneath the operator values. Defaults
                to config.values_files

        Returns:
            objects:  List[dict]
                The rendered objects

        Raises:
            RenderError: The chart failed to execute or its output could not
                be parsed
        """
        spec = _as_spec(spec)
        if overrides is None:
            overrides = list(config.values_files or [])
        values = build_chart_values(self.chart_config, spec, overrides).to_dict()
        log.debug4("Chart values: %s", values)
        manifest = self.engine.template(
            self.chart_path, self.release_name, self.namespace, values
        )
        objects = parse_manifest(manifest)
        log.debug("Rendered %d objects", len(objects))
        return objects

    def get_objects(
        self,
        spec: Union[MetalLBSpec, dict],
        overrides: Optional[Iterable[ValueSource]] = None,
    ) -> List[dict]:
        """Render the chart and apply the structural patches"""
        spec = _as_spec(spec)
        objects = self.render(spec, overrides)
        return patch_objects(
            spec, objects, self.namespace, self.chart_config.is_openshift
        )


def _as_spec(spec: Union[MetalLBSpec, dict]) -> MetalLBSpec:
    if isinstance(spec, MetalLBSpec):
        return spec
    return MetalLBSpec.from_manifest(spec)
