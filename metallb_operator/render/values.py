"""
Typed chart values for the MetalLB chart.

The chart reads three operator-managed top-level sections: prometheus,
controller and speaker. They are built here as dataclasses and only turned
into the chart's nested dict shape at the boundary in to_dict(). Caller
supplied value sources are merged first and the operator-managed sections
then replace whatever those sources put under the same top-level keys.
"""

# Standard
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union
import copy
import os

# Third Party
import yaml

# First Party
import alog

# Local
from ..exceptions import ParseError
from ..metallb_cr import MetalLBSpec
from ..utils import merge_configs
from .chart_config import ChartConfig, ImageInfo

log = alog.use_channel("VALUS")

# A value source is either a dict of values or the path to a values file
ValueSource = Union[dict, str, os.PathLike]

## Sections ####################################################################


@dataclass
class ImageValues:
    repository: str
    tag: str

    @classmethod
    def from_info(cls, info: ImageInfo) -> "ImageValues":
        return cls(repository=info.repo, tag=info.tag)

    def to_dict(self) -> dict:
        return {"repository": self.repository, "tag": self.tag}


@dataclass
class ServiceAccountValues:
    """The operator manages the service accounts, so the chart never creates
    them
    """

    name: str
    create: bool = False

    def to_dict(self) -> dict:
        return {"create": self.create, "name": self.name}


@dataclass
class PrometheusValues:
    metrics_port: int
    pod_monitor_enabled: bool

    def to_dict(self) -> dict:
        return {
            "metricsPort": self.metrics_port,
            "podMonitor": {"enabled": self.pod_monitor_enabled},
        }


@dataclass
class ControllerValues:
    image: ImageValues
    service_account: ServiceAccountValues
    log_level: str
    security_context: Optional[Dict[str, Any]] = None

    def to_dict(self) -> dict:
        values = {
            "image": self.image.to_dict(),
            "serviceAccount": self.service_account.to_dict(),
            "logLevel": self.log_level,
        }
        # Only present on OpenShift. Elsewhere the chart default stands.
        if self.security_context is not None:
            values["securityContext"] = copy.deepcopy(self.security_context)
        return values


@dataclass
class FrrValues:
    enabled: bool
    image: ImageValues
    metrics_port: int

    def to_dict(self) -> dict:
        return {
            "enabled": self.enabled,
            "image": self.image.to_dict(),
            "metricsPort": self.metrics_port,
        }


@dataclass
class MemberlistValues:
    ml_bind_port: int
    enabled: bool = True

    def to_dict(self) -> dict:
        return {"enabled": self.enabled, "mlBindPort": self.ml_bind_port}


@dataclass
class SpeakerValues:
    image: ImageValues
    service_account: ServiceAccountValues
    frr: FrrValues
    memberlist: MemberlistValues
    log_level: str
    node_selector: Optional[Dict[str, str]] = None
    tolerations: Optional[List[Dict[str, Any]]] = None

    def to_dict(self) -> dict:
        values = {
            "image": self.image.to_dict(),
            "serviceAccount": self.service_account.to_dict(),
            "frr": self.frr.to_dict(),
            "memberlist": self.memberlist.to_dict(),
            "logLevel": self.log_level,
        }
        if self.node_selector is not None:
            values["nodeSelector"] = copy.deepcopy(self.node_selector)
        if self.tolerations is not None:
            values["tolerations"] = copy.deepcopy(self.tolerations)
        return values


@dataclass
class ChartValues:
    prometheus: PrometheusValues
    controller: ControllerValues
    speaker: SpeakerValues
    overrides: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Produce the nested values tree handed to the template engine"""
        values = copy.deepcopy(self.overrides)
        values["prometheus"] = self.prometheus.to_dict()
        values["controller"] = self.controller.to_dict()
        values["speaker"] = self.speaker.to_dict()
        return values


## Builders ####################################################################


def build_chart_values(
    chart_config: ChartConfig,
    spec: MetalLBSpec,
    overrides: Optional[Iterable[ValueSource]] = None,
) -> ChartValues:
    """Assemble the chart values for one render

    Args:
        chart_config:  ChartConfig
            Environment derived parameters
        spec:  MetalLBSpec
            The MetalLB CR spec
        overrides:  Optional[Iterable[ValueSource]]
            Value sources merged in order underneath the operator-managed
            sections

    Returns:
        values:  ChartValues
            The typed values
    """
    log_level = spec.effective_log_level
    security_context = None
    if chart_config.is_openshift:
        security_context = {"runAsNonRoot": True}

    return ChartValues(
        prometheus=PrometheusValues(
            metrics_port=chart_config.metrics_port,
            pod_monitor_enabled=chart_config.enable_pod_monitor,
        ),
        controller=ControllerValues(
            image=ImageValues.from_info(chart_config.controller_image),
            service_account=ServiceAccountValues(name="controller"),
            log_level=log_level,
            security_context=security_context,
        ),
        speaker=SpeakerValues(
            image=ImageValues.from_info(chart_config.speaker_image),
            service_account=ServiceAccountValues(name="speaker"),
            frr=FrrValues(
                enabled=chart_config.is_frr_enabled,
                image=ImageValues.from_info(chart_config.frr_image),
                metrics_port=chart_config.frr_metrics_port,
            ),
            memberlist=MemberlistValues(ml_bind_port=chart_config.ml_bind_port),
            log_level=log_level,
            node_selector=spec.speaker_node_selector,
            tolerations=spec.speaker_tolerations,
        ),
        overrides=merge_value_sources(overrides or []),
    )


def merge_value_sources(sources: Iterable[ValueSource]) -> dict:
    """Deep merge the given value sources in order. Later sources win. The
    sources themselves are never modified.
    """
    merged = {}
    for source in sources:
        if isinstance(source, dict):
            values = copy.deepcopy(source)
        else:
            values = _load_values_file(source)
        log.debug3("Merging value source: %s", values)
        merge_configs(merged, values)
    return merged


def _load_values_file(path: Union[str, os.PathLike]) -> dict:
    log.debug2("Loading values file %s", path)
    try:
        with open(path, encoding="utf-8") as handle:
            values = yaml.safe_load(handle)
    except (OSError, yaml.YAMLError) as err:
        raise ParseError(f"Failed to read values file {path}: {err}", value=path) from err
    if values is None:
        return {}
    if not isinstance(values, dict):
        raise ParseError(f"Values file {path} is not a mapping", value=path)
    return values
