"""
Shared module to hold constant values for the library
"""

# Name and data key of the ConfigMap holding the rendered MetalLB config
CONFIG_MAP_NAME = "config"
CONFIG_DATA_FIELD = "config"

# The MetalLB CR that owns everything the operator deploys
METALLB_CR_NAME = "metallb"
METALLB_API_VERSION = "metallb.io/v1beta1"
METALLB_KIND = "MetalLB"

# Kinds aggregated into the config snapshot
ADDRESS_POOL_KIND = "AddressPool"
BGP_PEER_KIND = "BGPPeer"
BFD_PROFILE_KIND = "BFDProfile"

# Log level rendered when the CR does not set one
DEFAULT_LOG_LEVEL = "info"

# Environment variables read by the chart config loader
CONTROLLER_IMAGE_ENV = "CONTROLLER_IMAGE"
SPEAKER_IMAGE_ENV = "SPEAKER_IMAGE"
FRR_IMAGE_ENV = "FRR_IMAGE"
BGP_TYPE_ENV = "METALLB_BGP_TYPE"
ML_BIND_PORT_ENV = "MEMBER_LIST_BIND_PORT"
FRR_METRICS_PORT_ENV = "FRR_METRICS_PORT"
METRICS_PORT_ENV = "METRICS_PORT"
DEPLOY_PODMONITORS_ENV = "DEPLOY_PODMONITORS"

# Value of METALLB_BGP_TYPE that turns on the FRR speaker sidecars
BGP_TYPE_FRR = "frr"

DEFAULT_ML_BIND_PORT = 7946
DEFAULT_FRR_METRICS_PORT = 7473
DEFAULT_METRICS_PORT = 7472

# CRD whose presence signals the prometheus-operator monitoring types
PODMONITOR_CRD_NAME = "podmonitors.monitoring.coreos.com"
CRD_KIND = "CustomResourceDefinition"
CRD_API_VERSION = "apiextensions.k8s.io/v1"

# Rendered objects that receive structural patches
CONTROLLER_NAME = "controller"
SPEAKER_NAME = "speaker"
CONTROLLER_KIND = "Deployment"
SPEAKER_KIND = "DaemonSet"
SERVICE_MONITOR_KIND = "ServiceMonitor"
CLUSTER_SCOPED_POLICY_KIND = "PodSecurityPolicy"

# Delimiter used for nested dict keys
NESTED_DICT_DELIM = "."
