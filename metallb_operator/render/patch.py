"""
Structural patches applied to rendered chart objects. These cover the fields
the chart cannot express through values: namespaces on every namespaced
object, non-table overrides (affinity, resources) from the MetalLB CR, and
OpenShift specific security and monitoring settings.
"""

# Standard
from typing import List, Optional
import copy

# First Party
import alog

# Local
from .. import constants
from ..exceptions import assert_patch
from ..metallb_cr import MetalLBSpec, WorkloadConfig
from ..utils import object_identity
from .workload import PodWorkload

log = alog.use_channel("PATCH")

## Public ######################################################################


def patch_objects(
    spec: MetalLBSpec,
    objects: List[dict],
    namespace: str,
    is_openshift: bool,
) -> List[dict]:
    """Apply every structural patch to the rendered objects

    Args:
        spec:  MetalLBSpec
            The MetalLB CR spec holding the workload overrides
        objects:  List[dict]
            The rendered objects. These are not modified.
        namespace:  str
            Namespace to place namespaced objects in
        is_openshift:  bool
            Whether the OpenShift specific patches apply

    Returns:
        patched:  List[dict]
            New objects in the same order as the input

    Raises:
        PatchError: An object is missing a field that must be patched
    """
    return [patch_object(spec, obj, namespace, is_openshift) for obj in objects]


def patch_object(
    spec: MetalLBSpec,
    obj: dict,
    namespace: str,
    is_openshift: bool,
) -> dict:
    """Apply every structural patch to a single rendered object"""
    obj = copy.deepcopy(obj)

    # helm template does not put the release namespace on every object
    if obj.get("kind") != constants.CLUSTER_SCOPED_POLICY_KIND:
        obj.setdefault("metadata", {})["namespace"] = namespace

    if is_controller_deployment(obj):
        obj = override_workload_parameters(
            obj, spec.controller_config, constants.CONTROLLER_NAME
        )
        if is_openshift:
            obj = force_non_root(obj)

    if is_speaker_daemonset(obj):
        obj = override_workload_parameters(
            obj, spec.speaker_config, constants.SPEAKER_NAME
        )

    if is_service_monitor(obj) and is_openshift:
        obj = disable_tls_verification(obj)

    return obj


## Matchers ####################################################################


def is_controller_deployment(obj: dict) -> bool:
    return obj.get("kind") == constants.CONTROLLER_KIND and _name(obj) == (
        constants.CONTROLLER_NAME
    )


def is_speaker_daemonset(obj: dict) -> bool:
    return obj.get("kind") == constants.SPEAKER_KIND and _name(obj) == (
        constants.SPEAKER_NAME
    )


def is_service_monitor(obj: dict) -> bool:
    return obj.get("kind") == constants.SERVICE_MONITOR_KIND


## Patches #####################################################################


def override_workload_parameters(
    obj: dict,
    workload_config: Optional[WorkloadConfig],
    container_name: str,
) -> dict:
    """Replace the pod affinity and the named container's resources with the
    overrides from the CR. Other containers are left alone.
    """
    if workload_config is None:
        return obj
    workload = PodWorkload.from_object(obj)
    if workload_config.affinity is not None:
        log.debug2("Overriding affinity of %s", object_identity(obj))
        workload.affinity = workload_config.affinity
    if workload_config.resources is not None:
        for container in workload.containers:
            if container.name == container_name:
                log.debug2(
                    "Overriding resources of container [%s] in %s",
                    container_name,
                    object_identity(obj),
                )
                container.resources = workload_config.resources
    return workload.to_object()


def force_non_root(obj: dict) -> dict:
    """Overwrite the pod security context. Chart values are layered on top of
    the chart defaults, so a value like runAsUser cannot be unset from values.
    """
    workload = PodWorkload.from_object(obj)
    workload.security_context = {"runAsNonRoot": True}
    return workload.to_object()


def disable_tls_verification(obj: dict) -> dict:
    """Set tlsConfig.insecureSkipVerify to false on every endpoint of a
    ServiceMonitor

    Raises:
        PatchError: The ServiceMonitor has no spec.endpoints list
    """
    obj = copy.deepcopy(obj)
    endpoints = (obj.get("spec") or {}).get("endpoints")
    assert_patch(
        isinstance(endpoints, list),
        f"failed to find endpoints in ServiceMonitor {_name(obj)}",
    )
    for endpoint in endpoints:
        assert_patch(
            isinstance(endpoint, dict),
            f"malformed endpoint in ServiceMonitor {_name(obj)}",
        )
        tls_config = endpoint.get("tlsConfig")
        if not isinstance(tls_config, dict):
            tls_config = {}
            endpoint["tlsConfig"] = tls_config
        tls_config["insecureSkipVerify"] = False
    return obj


## Implementation Details ######################################################


def _name(obj: dict) -> Optional[str]:
    return (obj.get("metadata") or {}).get("name")
