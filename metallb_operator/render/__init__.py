"""
Rendering of the MetalLB chart: chart parameters, values, template execution
and structural patching
"""

# Local
from .chart_config import ChartConfig, ImageInfo, load_chart_config, probe_capability
from .engine import HelmTemplateEngine, TemplateEngineBase
from .manifest import parse_manifest
from .patch import patch_objects
from .renderer import MetalLBChart
from .values import ChartValues, build_chart_values, merge_value_sources
