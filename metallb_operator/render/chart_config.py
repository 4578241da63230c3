"""
Load the environment-derived parameters used to render the MetalLB chart
"""

# Standard
from dataclasses import dataclass
from typing import Callable, Mapping, Optional
import os

# First Party
import alog

# Local
from .. import constants
from ..context import ReconcileContext
from ..exceptions import CancelledError, MissingConfigurationError, ParseError
from ..store import StoreBase

log = alog.use_channel("CHCFG")


@dataclass(frozen=True)
class ImageInfo:
    """Image reference split into repository and tag"""

    repo: str = ""
    tag: str = ""

    @classmethod
    def parse(cls, image: str) -> "ImageInfo":
        """Split "repo" or "repo:tag" on the first colon. No colon means an
        empty tag.
        """
        repo, _, tag = image.partition(":")
        return cls(repo=repo, tag=tag)


@dataclass(frozen=True)
class ChartConfig:
    """Parameters for one reconciliation pass. Built once by
    load_chart_config and never changed afterwards.
    """

    is_openshift: bool
    is_frr_enabled: bool
    controller_image: ImageInfo
    speaker_image: ImageInfo
    frr_image: ImageInfo
    ml_bind_port: int = constants.DEFAULT_ML_BIND_PORT
    frr_metrics_port: int = constants.DEFAULT_FRR_METRICS_PORT
    metrics_port: int = constants.DEFAULT_METRICS_PORT
    enable_pod_monitor: bool = False


def load_chart_config(
    namespace: str,
    is_openshift: bool,
    store: Optional[StoreBase] = None,
    ctx: Optional[ReconcileContext] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ChartConfig:
    """Read the chart parameters from the environment

    Args:
        namespace:  str
            Namespace the operator deploys into
        is_openshift:  bool
            Whether the platform flavor is OpenShift
        store:  Optional[StoreBase]
            Store used to probe for the PodMonitor CRD. Without a store the
            probe reports the CRD as unavailable.
        ctx:  Optional[ReconcileContext]
            Cancellation context for the probe
        environ:  Optional[Mapping[str, str]]
            Environment to read from. Defaults to os.environ.

    Returns:
        chart_config:  ChartConfig
            The validated parameters

    Raises:
        MissingConfigurationError: A mandatory image variable is empty
        ParseError: A port variable is set but not an integer
    """
    env = os.environ if environ is None else environ
    log.debug("Loading chart config for namespace [%s]", namespace)

    controller_image = ImageInfo.parse(
        _required(env, constants.CONTROLLER_IMAGE_ENV)
    )
    speaker_image = ImageInfo.parse(_required(env, constants.SPEAKER_IMAGE_ENV))

    is_frr_enabled = env.get(constants.BGP_TYPE_ENV, "") == constants.BGP_TYPE_FRR
    frr_image = ImageInfo()
    if is_frr_enabled:
        frr_image = ImageInfo.parse(_required(env, constants.FRR_IMAGE_ENV))

    ml_bind_port = _int_with_default(
        env, constants.ML_BIND_PORT_ENV, constants.DEFAULT_ML_BIND_PORT
    )
    frr_metrics_port = _int_with_default(
        env, constants.FRR_METRICS_PORT_ENV, constants.DEFAULT_FRR_METRICS_PORT
    )
    metrics_port = _int_with_default(
        env, constants.METRICS_PORT_ENV, constants.DEFAULT_METRICS_PORT
    )

    # Don't spam the api server with PodMonitors if the CRD isn't installed
    enable_pod_monitor = False
    if env.get(constants.DEPLOY_PODMONITORS_ENV, "").lower() == "true":
        enable_pod_monitor = probe_capability(
            lambda: pod_monitor_available(store, ctx or ReconcileContext()),
            "PodMonitor CRD",
        )

    chart_config = ChartConfig(
        is_openshift=is_openshift,
        is_frr_enabled=is_frr_enabled,
        controller_image=controller_image,
        speaker_image=speaker_image,
        frr_image=frr_image,
        ml_bind_port=ml_bind_port,
        frr_metrics_port=frr_metrics_port,
        metrics_port=metrics_port,
        enable_pod_monitor=enable_pod_monitor,
    )
    log.debug2("Loaded chart config: %s", chart_config)
    return chart_config


def probe_capability(check: Callable[[], bool], description: str) -> bool:
    """Run a soft capability check. Any failure of the check itself counts as
    the capability being unavailable and is never raised. Cancellation of
    the pass still propagates.
    """
    try:
        available = bool(check())
    except CancelledError:
        raise
    except Exception as err:  # pylint: disable=broad-except
        log.debug("Probe for %s failed, treating as unavailable: %s", description, err)
        return False
    log.debug2("Probe for %s: %s", description, available)
    return available


def pod_monitor_available(
    store: Optional[StoreBase], ctx: ReconcileContext
) -> bool:
    """Check whether the prometheus-operator PodMonitor CRD is installed"""
    if store is None:
        return False
    crd = store.get_object(
        ctx,
        kind=constants.CRD_KIND,
        name=constants.PODMONITOR_CRD_NAME,
        api_version=constants.CRD_API_VERSION,
    )
    return crd is not None


## Implementation Details ######################################################


def _required(env: Mapping[str, str], name: str) -> str:
    value = env.get(name, "")
    if not value:
        raise MissingConfigurationError(name)
    return value


def _int_with_default(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name, "")
    if not value:
        return default
    try:
        return int(value)
    except ValueError as err:
        raise ParseError(
            f"Invalid value for {name}: {value!r} is not an integer", value=value
        ) from err

