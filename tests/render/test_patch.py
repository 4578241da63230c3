"""
Tests for the structural patches applied to rendered objects
"""

# Standard
import copy

# Third Party
import pytest

# Local
from metallb_operator.exceptions import PatchError
from metallb_operator.metallb_cr import MetalLBSpec, WorkloadConfig
from metallb_operator.render.manifest import parse_manifest
from metallb_operator.render.patch import (
    disable_tls_verification,
    override_workload_parameters,
    patch_objects,
)
from metallb_operator.render.workload import PodWorkload
from metallb_operator.test_helpers.helpers import (
    CONTROLLER_DEPLOYMENT,
    SAMPLE_MANIFEST,
    SERVICE_MONITOR,
    SPEAKER_DAEMONSET,
    TEST_NAMESPACE,
    setup_cr,
)

## Helpers #####################################################################

AFFINITY = {
    "nodeAffinity": {
        "requiredDuringSchedulingIgnoredDuringExecution": {
            "nodeSelectorTerms": [
                {"matchExpressions": [{"key": "zone", "operator": "In", "values": ["a"]}]}
            ]
        }
    }
}
RESOURCES = {"limits": {"cpu": "200m", "memory": "100Mi"}}


def sample_objects():
    return parse_manifest(SAMPLE_MANIFEST)


def by_kind(objects, kind):
    return next(obj for obj in objects if obj["kind"] == kind)


def spec_with(**kwargs):
    return MetalLBSpec.from_manifest(setup_cr(spec=kwargs))


## patch_objects ###############################################################


def test_namespace_set_except_pod_security_policy():
    patched = patch_objects(MetalLBSpec(), sample_objects(), TEST_NAMESPACE, False)
    for obj in patched:
        if obj["kind"] == "PodSecurityPolicy":
            assert "namespace" not in obj["metadata"]
        else:
            assert obj["metadata"]["namespace"] == TEST_NAMESPACE


def test_input_not_modified():
    objects = sample_objects()
    original = copy.deepcopy(objects)
    patch_objects(
        spec_with(controllerConfig={"affinity": AFFINITY}),
        objects,
        TEST_NAMESPACE,
        True,
    )
    assert objects == original


def test_no_overrides_leaves_workloads_alone():
    objects = sample_objects()
    patched = patch_objects(MetalLBSpec(), objects, TEST_NAMESPACE, False)
    for before, after in zip(objects, patched):
        after = copy.deepcopy(after)
        after["metadata"].pop("namespace", None)
        assert before == after


def test_controller_overrides_target_controller_container():
    spec = spec_with(controllerConfig={"affinity": AFFINITY, "resources": RESOURCES})
    patched = patch_objects(spec, sample_objects(), TEST_NAMESPACE, False)
    workload = PodWorkload.from_object(by_kind(patched, "Deployment"))
    assert workload.affinity == AFFINITY
    assert workload.container("controller").resources == RESOURCES
    assert workload.container("kube-rbac-proxy").resources == {
        "requests": {"cpu": "10m"}
    }
    # The speaker is not touched by controller overrides
    speaker = PodWorkload.from_object(by_kind(patched, "DaemonSet"))
    assert speaker.affinity is None


def test_speaker_overrides_target_speaker_container():
    spec = spec_with(speakerConfig={"affinity": AFFINITY, "resources": RESOURCES})
    patched = patch_objects(spec, sample_objects(), TEST_NAMESPACE, False)
    workload = PodWorkload.from_object(by_kind(patched, "DaemonSet"))
    assert workload.affinity == AFFINITY
    assert workload.container("speaker").resources == RESOURCES
    assert workload.container("frr").resources is None


def test_openshift_security_context_and_tls():
    patched = patch_objects(MetalLBSpec(), sample_objects(), TEST_NAMESPACE, True)
    controller = PodWorkload.from_object(by_kind(patched, "Deployment"))
    assert controller.security_context == {"runAsNonRoot": True}
    endpoints = by_kind(patched, "ServiceMonitor")["spec"]["endpoints"]
    assert [e["tlsConfig"]["insecureSkipVerify"] for e in endpoints] == [False, False]


def test_openshift_security_context_survives_controller_overrides():
    spec = spec_with(controllerConfig={"affinity": AFFINITY, "resources": RESOURCES})
    patched = patch_objects(spec, sample_objects(), TEST_NAMESPACE, True)
    controller = PodWorkload.from_object(by_kind(patched, "Deployment"))
    assert controller.security_context == {"runAsNonRoot": True}
    assert controller.affinity == AFFINITY
    assert controller.container("controller").resources == RESOURCES
    assert controller.container("kube-rbac-proxy").resources == {
        "requests": {"cpu": "10m"}
    }


def test_non_openshift_keeps_chart_settings():
    patched = patch_objects(MetalLBSpec(), sample_objects(), TEST_NAMESPACE, False)
    controller = PodWorkload.from_object(by_kind(patched, "Deployment"))
    assert controller.security_context["runAsUser"] == 65534
    endpoints = by_kind(patched, "ServiceMonitor")["spec"]["endpoints"]
    assert endpoints[0]["tlsConfig"] == {"insecureSkipVerify": True}
    assert "tlsConfig" not in endpoints[1]


def test_unmatched_names_are_not_overridden():
    deployment = parse_manifest(CONTROLLER_DEPLOYMENT)[0]
    deployment["metadata"]["name"] = "something-else"
    spec = spec_with(controllerConfig={"affinity": AFFINITY})
    patched = patch_objects(spec, [deployment], TEST_NAMESPACE, True)[0]
    assert PodWorkload.from_object(patched).affinity is None
    assert PodWorkload.from_object(patched).security_context["runAsUser"] == 65534


## Individual patches ##########################################################


def test_override_without_pod_template():
    obj = parse_manifest(SPEAKER_DAEMONSET)[0]
    del obj["spec"]["template"]
    with pytest.raises(PatchError):
        override_workload_parameters(obj, WorkloadConfig(affinity=AFFINITY), "speaker")


def test_override_with_no_config_is_noop():
    obj = parse_manifest(SPEAKER_DAEMONSET)[0]
    assert override_workload_parameters(obj, None, "speaker") == obj


def test_tls_patch_requires_endpoints():
    monitor = parse_manifest(SERVICE_MONITOR)[0]
    del monitor["spec"]["endpoints"]
    with pytest.raises(PatchError, match="failed to find endpoints"):
        disable_tls_verification(monitor)


def test_tls_patch_is_pure():
    monitor = parse_manifest(SERVICE_MONITOR)[0]
    original = copy.deepcopy(monitor)
    disable_tls_verification(monitor)
    assert monitor == original
