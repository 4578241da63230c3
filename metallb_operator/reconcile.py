"""
Reconciliation of rendered artifacts against live cluster state.

Every write is create-if-absent or update-if-changed. Ownership is decided
only when an object is created: the MetalLB CR becomes its controller. On
update the live object's ownerReferences are carried forward as they are so
that the core never fights whoever re-parented the object.
"""

# Standard
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple
import copy

# First Party
import alog

# Local
from . import constants
from .context import ReconcileContext
from .exceptions import ConfigError, StoreError
from .metallb_cr import MetalLBSpec
from .render import MetalLBChart
from .render.values import ValueSource
from .snapshot import build_snapshot
from .store import StoreBase, carry_owner_references, set_controller_reference
from .utils import object_identity

log = alog.use_channel("RECON")


class ReconcileOutcome(Enum):
    """What a single artifact reconciliation did"""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    # The owning MetalLB CR does not exist so nothing was created. This is
    # success, but callers may want to avoid requeueing on it.
    NO_OWNER = "no_owner"

    @property
    def wrote(self) -> bool:
        return self in (ReconcileOutcome.CREATED, ReconcileOutcome.UPDATED)


@dataclass
class ReconciliationResult:
    """Outcome of a full reconciliation pass"""

    config_outcome: ReconcileOutcome
    object_outcomes: List[Tuple[str, ReconcileOutcome]] = field(default_factory=list)


## Config artifact #############################################################


def reconcile_config_artifact(
    ctx: ReconcileContext,
    store: StoreBase,
    namespace: str,
) -> ReconcileOutcome:
    """Make the config ConfigMap match the current AddressPool, BGPPeer and
    BFDProfile resources

    Args:
        ctx:  ReconcileContext
            Cancellation context for this pass
        store:  StoreBase
            The cluster store
        namespace:  str
            The operator namespace holding the ConfigMap and the MetalLB CR

    Returns:
        outcome:  ReconcileOutcome
            CREATED, UPDATED, UNCHANGED or NO_OWNER

    Raises:
        StoreError: Any store call failed
        CancelledError: The context was cancelled before a store call
    """
    try:
        snapshot = build_snapshot(ctx, store, namespace)
    except StoreError as err:
        raise StoreError(f"failed to collect configmap data: {err}") from err
    rendered = snapshot.to_config_map()

    try:
        existing = store.get_object(
            ctx,
            kind="ConfigMap",
            name=constants.CONFIG_MAP_NAME,
            namespace=namespace,
            api_version="v1",
        )
    except StoreError as err:
        raise StoreError(f"failed to fetch configmap: {err}") from err

    if existing is None:
        return _create_with_owner(ctx, store, namespace, rendered)

    field_name = constants.CONFIG_DATA_FIELD
    existing_data = (existing.get("data") or {}).get(field_name)
    if existing_data == rendered["data"][field_name]:
        log.info("not updating configmap because of no changes")
        return ReconcileOutcome.UNCHANGED

    return _update_keeping_owners(ctx, store, existing, rendered)


## Chart objects ###############################################################


def apply_objects(
    ctx: ReconcileContext,
    store: StoreBase,
    objects: Iterable[dict],
    owner_cr: dict,
) -> List[Tuple[str, ReconcileOutcome]]:
    """Create or update each patched chart object

    Objects in the owner's namespace are created with a controller reference
    to the owner. Cluster-scoped objects are created without one. Existing
    objects are updated only when a field the chart sets differs from the
    live value.

    Returns:
        outcomes:  List[Tuple[str, ReconcileOutcome]]
            Identity and outcome of each object, in input order
    """
    outcomes = []
    for obj in objects:
        identity = object_identity(obj)
        metadata = obj.get("metadata") or {}
        try:
            existing = store.get_object(
                ctx,
                kind=obj.get("kind"),
                name=metadata.get("name"),
                namespace=metadata.get("namespace"),
                api_version=obj.get("apiVersion"),
            )
        except StoreError as err:
            raise StoreError(f"failed to fetch {identity}: {err}") from err

        if existing is None:
            desired = copy.deepcopy(obj)
            if metadata.get("namespace") == owner_cr.get("metadata", {}).get(
                "namespace"
            ):
                _set_owner(owner_cr, desired)
            _write(store.create_object, ctx, desired, "create")
            outcome = ReconcileOutcome.CREATED
        elif _is_subset(_comparable(obj), _comparable(existing)):
            log.debug("not updating %s because of no changes", identity)
            outcome = ReconcileOutcome.UNCHANGED
        else:
            outcome = _update_keeping_owners(ctx, store, existing, obj)
        outcomes.append((identity, outcome))
    return outcomes


## Full pass ###################################################################


def reconcile_metallb(
    ctx: ReconcileContext,
    store: StoreBase,
    namespace: str,
    is_openshift: bool,
    overrides: Optional[Iterable[ValueSource]] = None,
    **chart_kwargs,
) -> ReconciliationResult:
    """Run one full pass: render and apply the chart for the MetalLB CR, then
    reconcile the config ConfigMap. All patching happens before the first
    write.
    """
    owner_cr = _get_owner(ctx, store, namespace)
    object_outcomes = []
    if owner_cr is not None:
        chart = MetalLBChart.load(ctx, store, namespace, is_openshift, **chart_kwargs)
        objects = chart.get_objects(MetalLBSpec.from_manifest(owner_cr), overrides)
        object_outcomes = apply_objects(ctx, store, objects, owner_cr)
    else:
        log.info("not rendering chart because MetalLB resource not found")
    config_outcome = reconcile_config_artifact(ctx, store, namespace)
    return ReconciliationResult(
        config_outcome=config_outcome, object_outcomes=object_outcomes
    )


## Implementation Details ######################################################


def _create_with_owner(
    ctx: ReconcileContext,
    store: StoreBase,
    namespace: str,
    rendered: dict,
) -> ReconcileOutcome:
    """Create state: the artifact is absent. Ownership is computed fresh from
    the MetalLB CR. Without a CR nothing is created.
    """
    owner_cr = _get_owner(ctx, store, namespace)
    if owner_cr is None:
        log.info("not updating configmap because MetalLB resource not found")
        return ReconcileOutcome.NO_OWNER
    _set_owner(owner_cr, rendered)
    _write(store.create_object, ctx, rendered, "create")
    log.info("created %s", object_identity(rendered))
    return ReconcileOutcome.CREATED


def _update_keeping_owners(
    ctx: ReconcileContext,
    store: StoreBase,
    existing: dict,
    rendered: dict,
) -> ReconcileOutcome:
    """Update state: the artifact exists and differs. The live
    ownerReferences replace whatever the rendered object carries.
    """
    desired = copy.deepcopy(rendered)
    carry_owner_references(existing, desired)
    resource_version = (existing.get("metadata") or {}).get("resourceVersion")
    if resource_version:
        desired["metadata"]["resourceVersion"] = resource_version
    _write(store.update_object, ctx, desired, "update")
    log.info("updated %s", object_identity(desired))
    return ReconcileOutcome.UPDATED


def _get_owner(
    ctx: ReconcileContext, store: StoreBase, namespace: str
) -> Optional[dict]:
    try:
        return store.get_object(
            ctx,
            kind=constants.METALLB_KIND,
            name=constants.METALLB_CR_NAME,
            namespace=namespace,
            api_version=constants.METALLB_API_VERSION,
        )
    except StoreError as err:
        raise StoreError(f"failed to fetch MetalLB resource: {err}") from err


def _set_owner(owner_cr: dict, child: dict):
    try:
        set_controller_reference(owner_cr, child)
    except ConfigError as err:
        metadata = child.get("metadata", {})
        raise ConfigError(
            f"Failed to set controller reference to {metadata.get('namespace')} "
            f"{metadata.get('name')}: {err}"
        ) from err


def _write(method, ctx: ReconcileContext, obj: dict, verb: str):
    try:
        method(ctx, obj)
    except StoreError as err:
        raise StoreError(f"failed to {verb} {object_identity(obj)}: {err}") from err


def _comparable(obj: dict) -> dict:
    """Strip the parts of a manifest the server owns"""
    out = {k: v for k, v in obj.items() if k not in ("metadata", "status")}
    metadata = obj.get("metadata") or {}
    out["metadata"] = {
        key: metadata[key] for key in ("labels", "annotations") if key in metadata
    }
    return out


def _is_subset(desired, live) -> bool:
    """Whether every value set in desired is present and equal in live.
    Server-defaulted extras in live are ignored.
    """
    if isinstance(desired, dict):
        return isinstance(live, dict) and all(
            key in live and _is_subset(value, live[key])
            for key, value in desired.items()
        )
    if isinstance(desired, list):
        return (
            isinstance(live, list)
            and len(desired) == len(live)
            and all(_is_subset(want, have) for want, have in zip(desired, live))
        )
    return desired == live
