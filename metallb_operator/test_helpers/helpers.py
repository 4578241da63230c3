"""
This module holds common helper functions for making testing easy
"""

# Standard
from typing import List, Optional
from unittest import mock
import copy
import inspect
import os

# First Party
import alog

# Local
from metallb_operator import constants
from metallb_operator.context import ReconcileContext
from metallb_operator.render.chart_config import ChartConfig, ImageInfo
from metallb_operator.render.engine import TemplateEngineBase
from metallb_operator.store.dry_run_store import DryRunStore

log = alog.use_channel("TEST")


def configure_logging():
    alog.configure(
        os.environ.get("LOG_LEVEL", "off"),
        os.environ.get("LOG_FILTERS", ""),
        formatter="json"
        if os.environ.get("LOG_JSON", "").lower() == "true"
        else "pretty",
        thread_id=os.environ.get("LOG_THREAD_ID", "").lower() == "true",
    )


configure_logging()

TEST_NAMESPACE = "metallb-system"
SOME_OTHER_NAMESPACE = "somewhere"
TEST_INSTANCE_UID = "12345678-1234-1234-1234-123456789012"

TEST_ENV = {
    constants.CONTROLLER_IMAGE_ENV: "quay.io/x/c:v1",
    constants.SPEAKER_IMAGE_ENV: "quay.io/x/s:v1",
}

## Resources ###################################################################


def setup_cr(
    name=constants.METALLB_CR_NAME,
    namespace=TEST_NAMESPACE,
    uid=TEST_INSTANCE_UID,
    spec=None,
):
    """Make a MetalLB CR manifest"""
    return {
        "apiVersion": constants.METALLB_API_VERSION,
        "kind": constants.METALLB_KIND,
        "metadata": {"name": name, "namespace": namespace, "uid": uid},
        "spec": copy.deepcopy(spec or {}),
    }


def _metallb_resource(kind, name, namespace, spec):
    return {
        "apiVersion": constants.METALLB_API_VERSION,
        "kind": kind,
        "metadata": {"name": name, "namespace": namespace},
        "spec": spec,
    }


def make_address_pool(name, addresses=None, namespace=TEST_NAMESPACE, **spec):
    spec.setdefault("protocol", "layer2")
    spec["addresses"] = addresses or ["192.168.10.0/24"]
    return _metallb_resource(constants.ADDRESS_POOL_KIND, name, namespace, spec)


def make_bgp_peer(name, peer_address="10.0.0.1", namespace=TEST_NAMESPACE, **spec):
    spec.setdefault("peerASN", 64501)
    spec.setdefault("myASN", 64500)
    spec["peerAddress"] = peer_address
    return _metallb_resource(constants.BGP_PEER_KIND, name, namespace, spec)


def make_bfd_profile(name, namespace=TEST_NAMESPACE, **spec):
    return _metallb_resource(constants.BFD_PROFILE_KIND, name, namespace, spec)


def make_chart_config(**overrides) -> ChartConfig:
    kwargs = {
        "is_openshift": False,
        "is_frr_enabled": False,
        "controller_image": ImageInfo("quay.io/x/c", "v1"),
        "speaker_image": ImageInfo("quay.io/x/s", "v1"),
        "frr_image": ImageInfo(),
    }
    kwargs.update(overrides)
    return ChartConfig(**kwargs)


## Rendered manifests ##########################################################

CONTROLLER_DEPLOYMENT = """
apiVersion: apps/v1
kind: Deployment
metadata:
  name: controller
  labels:
    app: metallb
    component: controller
spec:
  selector:
    matchLabels:
      app: metallb
      component: controller
  template:
    metadata:
      labels:
        app: metallb
        component: controller
    spec:
      serviceAccountName: controller
      securityContext:
        runAsNonRoot: true
        runAsUser: 65534
        fsGroup: 65534
      containers:
      - name: controller
        image: quay.io/x/c:v1
        args:
        - --port=7472
        resources:
          limits:
            cpu: 100m
      - name: kube-rbac-proxy
        image: quay.io/brancz/kube-rbac-proxy:v0.11.0
        resources:
          requests:
            cpu: 10m
"""

SPEAKER_DAEMONSET = """
apiVersion: apps/v1
kind: DaemonSet
metadata:
  name: speaker
  labels:
    app: metallb
    component: speaker
spec:
  selector:
    matchLabels:
      app: metallb
      component: speaker
  template:
    metadata:
      labels:
        app: metallb
        component: speaker
    spec:
      serviceAccountName: speaker
      hostNetwork: true
      containers:
      - name: speaker
        image: quay.io/x/s:v1
      - name: frr
        image: quay.io/frrouting/frr:7.5.1
"""

SERVICE_MONITOR = """
apiVersion: monitoring.coreos.com/v1
kind: ServiceMonitor
metadata:
  name: controller-monitor
spec:
  endpoints:
  - port: metrics
    scheme: https
    tlsConfig:
      insecureSkipVerify: true
  - port: frrmetrics
    scheme: https
  selector:
    matchLabels:
      component: controller
"""

POD_SECURITY_POLICY = """
apiVersion: policy/v1beta1
kind: PodSecurityPolicy
metadata:
  name: metallb-controller
spec:
  privileged: false
"""

SERVICE_ACCOUNT = """
apiVersion: v1
kind: ServiceAccount
metadata:
  name: metallb-extra
"""


def make_manifest(*documents: str) -> str:
    """Join documents the way helm template does"""
    return "".join(f"---\n# Source: metallb/templates/doc.yaml{doc}" for doc in documents)


SAMPLE_MANIFEST = make_manifest(
    POD_SECURITY_POLICY,
    SERVICE_ACCOUNT,
    CONTROLLER_DEPLOYMENT,
    SPEAKER_DAEMONSET,
    SERVICE_MONITOR,
)

## Mocks #######################################################################


class FakeEngine(TemplateEngineBase):
    """Template engine that returns a fixed manifest and records the values it
    was called with
    """

    def __init__(self, manifest: str = SAMPLE_MANIFEST):
        self.manifest = manifest
        self.calls = []

    def template(self, chart_path, release_name, namespace, values):
        self.calls.append(
            {
                "chart_path": chart_path,
                "release_name": release_name,
                "namespace": namespace,
                "values": copy.deepcopy(values),
            }
        )
        return self.manifest

    @property
    def last_values(self) -> Optional[dict]:
        return self.calls[-1]["values"] if self.calls else None


def get_failable_method(fail_flag, method):
    """Wrap the method so that it raises the given exception when fail_flag is
    an exception (instance or class) and passes through otherwise
    """

    def failable_method(*args, **kwargs):
        if isinstance(fail_flag, Exception) or (
            inspect.isclass(fail_flag) and issubclass(fail_flag, Exception)
        ):
            log.debug4("Raising in failable mock")
            raise fail_flag
        if callable(fail_flag):
            res = fail_flag(*args, **kwargs)
            if res is not None:
                return res
        return method(*args, **kwargs)

    return failable_method


class MockStore(DryRunStore):
    """The MockStore wraps a standard DryRunStore and adds configuration
    options to simulate failures in each of its operations. Each fail flag
    may be an exception to raise or a callable run before the real method.
    """

    def __init__(
        self,
        resources: Optional[List[dict]] = None,
        list_fail=None,
        get_fail=None,
        create_fail=None,
        update_fail=None,
    ):
        super().__init__(resources)
        self.list_objects = mock.Mock(
            side_effect=get_failable_method(list_fail, super().list_objects)
        )
        self.get_object = mock.Mock(
            side_effect=get_failable_method(get_fail, super().get_object)
        )
        self.create_object = mock.Mock(
            side_effect=get_failable_method(create_fail, super().create_object)
        )
        self.update_object = mock.Mock(
            side_effect=get_failable_method(update_fail, super().update_object)
        )

    def get_obj(self, kind, name, namespace=TEST_NAMESPACE, api_version=None):
        # Bypass the mock so reads from tests don't show up in call counts
        return DryRunStore.get_object(
            self, ReconcileContext(), kind, name, namespace, api_version
        )

    def has_obj(self, *args, **kwargs):
        return self.get_obj(*args, **kwargs) is not None

