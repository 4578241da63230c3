"""
The config snapshot aggregates the AddressPool, BGPPeer and BFDProfile
resources into the single MetalLB configuration document stored in the
config ConfigMap.

The snapshot must serialize identically for the same set of resources no
matter what order the API server lists them in. The config reconciler relies
on this to skip updates when nothing changed.
"""

# Standard
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple
import copy

# Third Party
import yaml

# First Party
import alog

# Local
from . import constants
from .context import ReconcileContext
from .exceptions import StoreError
from .store import StoreBase

log = alog.use_channel("SNAPS")

## Snapshot ####################################################################


@dataclass
class ConfigurationSnapshot:
    """Sorted, deep-copied aggregation of the resources that make up the
    MetalLB configuration
    """

    pools: List[dict] = field(default_factory=list)
    peers: List[dict] = field(default_factory=list)
    bfd_profiles: List[dict] = field(default_factory=list)
    namespace: Optional[str] = None
    config_map_name: str = constants.CONFIG_MAP_NAME
    data_field: str = constants.CONFIG_DATA_FIELD

    def to_config(self) -> Dict[str, Any]:
        """Build the MetalLB configuration document. Empty sections are
        omitted.
        """
        config = {}
        peers = [_convert_spec(peer, _PEER_FIELDS) for peer in self.peers]
        if peers:
            config["peers"] = peers
        pools = [
            {"name": _name(pool), **_convert_spec(pool, _POOL_FIELDS)}
            for pool in self.pools
        ]
        if pools:
            config["address-pools"] = pools
        profiles = [
            {"name": _name(profile), **_convert_spec(profile, _BFD_FIELDS)}
            for profile in self.bfd_profiles
        ]
        if profiles:
            config["bfd-profiles"] = profiles
        return config

    def to_config_data(self) -> str:
        """Serialize the configuration document"""
        return yaml.safe_dump(
            self.to_config(), sort_keys=False, default_flow_style=False
        )

    def to_config_map(self) -> dict:
        """Render the ConfigMap artifact holding the serialized configuration"""
        return {
            "apiVersion": "v1",
            "kind": "ConfigMap",
            "metadata": {
                "name": self.config_map_name,
                "namespace": self.namespace,
            },
            "data": {self.data_field: self.to_config_data()},
        }


def build_snapshot(
    ctx: ReconcileContext,
    store: StoreBase,
    namespace: Optional[str] = None,
) -> ConfigurationSnapshot:
    """List the three governed collections and assemble a snapshot

    Args:
        ctx:  ReconcileContext
            Cancellation context for this pass
        store:  StoreBase
            The store to list from
        namespace:  Optional[str]
            Namespace the ConfigMap artifact lives in. Resources are listed
            across all namespaces.

    Returns:
        snapshot:  ConfigurationSnapshot
            The sorted snapshot. None of its contents alias the store's data.
    """
    snapshot = ConfigurationSnapshot(namespace=namespace)
    snapshot.pools = _list_sorted(ctx, store, constants.ADDRESS_POOL_KIND, "address pools")
    snapshot.peers = _list_sorted(ctx, store, constants.BGP_PEER_KIND, "bgp peers")
    snapshot.bfd_profiles = _list_sorted(
        ctx, store, constants.BFD_PROFILE_KIND, "bfd profiles"
    )
    log.debug(
        "Built snapshot with %d pools, %d peers, %d bfd profiles",
        len(snapshot.pools),
        len(snapshot.peers),
        len(snapshot.bfd_profiles),
    )
    return snapshot


## Implementation Details ######################################################


def _list_sorted(
    ctx: ReconcileContext, store: StoreBase, kind: str, description: str
) -> List[dict]:
    try:
        items = store.list_objects(
            ctx, kind=kind, api_version=constants.METALLB_API_VERSION
        )
    except StoreError as err:
        raise StoreError(f"failed to fetch {description}: {err}") from err
    items = copy.deepcopy(items)
    items.sort(key=_sort_key)
    return items


def _name(obj: dict) -> str:
    return (obj.get("metadata") or {}).get("name") or ""


def _sort_key(obj: dict) -> Tuple[str, str]:
    # Names are not unique across namespaces
    return _name(obj), (obj.get("metadata") or {}).get("namespace") or ""


# (CR spec field, config key, nested converter)
FieldMap = Sequence[Tuple[str, str, Optional[Sequence]]]

_ADVERTISEMENT_FIELDS: FieldMap = (
    ("aggregationLength", "aggregation-length", None),
    ("aggregationLengthV6", "aggregation-length-v6", None),
    ("localPref", "localpref", None),
    ("communities", "communities", None),
)

_POOL_FIELDS: FieldMap = (
    ("protocol", "protocol", None),
    ("addresses", "addresses", None),
    ("autoAssign", "auto-assign", None),
    ("avoidBuggyIPs", "avoid-buggy-ips", None),
    ("bgpAdvertisements", "bgp-advertisements", _ADVERTISEMENT_FIELDS),
)

_MATCH_EXPRESSION_FIELDS: FieldMap = (
    ("key", "key", None),
    ("operator", "operator", None),
    ("values", "values", None),
)

_NODE_SELECTOR_FIELDS: FieldMap = (
    ("matchLabels", "match-labels", None),
    ("matchExpressions", "match-expressions", _MATCH_EXPRESSION_FIELDS),
)

_PEER_FIELDS: FieldMap = (
    ("peerAddress", "peer-address", None),
    ("peerASN", "peer-asn", None),
    ("myASN", "my-asn", None),
    ("routerID", "router-id", None),
    ("peerPort", "peer-port", None),
    ("holdTime", "hold-time", None),
    ("keepaliveTime", "keepalive-time", None),
    ("sourceAddress", "source-address", None),
    ("password", "password", None),
    ("bfdProfile", "bfd-profile", None),
    ("ebgpMultiHop", "ebgp-multihop", None),
    ("nodeSelectors", "node-selectors", _NODE_SELECTOR_FIELDS),
)

_BFD_FIELDS: FieldMap = (
    ("receiveInterval", "receive-interval", None),
    ("transmitInterval", "transmit-interval", None),
    ("detectMultiplier", "detect-multiplier", None),
    ("echoInterval", "echo-interval", None),
    ("echoMode", "echo-mode", None),
    ("passiveMode", "passive-mode", None),
    ("minimumTtl", "minimum-ttl", None),
)


def _convert_spec(obj: dict, fields: FieldMap) -> dict:
    return _convert_fields(obj.get("spec") or {}, fields)


def _convert_fields(source: dict, fields: FieldMap) -> dict:
    """Translate camelCase CR fields into MetalLB config keys, dropping unset
    values. Nested lists of dicts are converted with their own field map.
    """
    out = {}
    for src_key, dst_key, nested in fields:
        value = source.get(src_key)
        if value is None:
            continue
        if nested is not None:
            value = [_convert_fields(entry or {}, nested) for entry in value]
        out[dst_key] = value
    return out
