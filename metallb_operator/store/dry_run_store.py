"""
The DryRunStore implements the store interface but does not actually interact
with the cluster and instead holds the state of the cluster in a local map.
"""

# Standard
from datetime import datetime
from threading import RLock
from typing import List, Optional
import copy
import uuid

# First Party
import alog

# Local
from ..context import ReconcileContext
from ..exceptions import StoreError, assert_cluster
from ..utils import object_identity
from .base import StoreBase

log = alog.use_channel("DRY-RUN")

# Lock to ensure writes are thread safe
DRY_RUN_CLUSTER_LOCK = RLock()


class DryRunStore(StoreBase):
    """
    Store which doesn't actually store anything in a cluster!
    """

    def __init__(self, resources: Optional[List[dict]] = None):
        """Construct with an optional set of resources that are present in the
        cluster before the first call. Seeding does not count as a write.
        """
        # namespace -> kind -> api_version -> name -> object
        self._cluster_content = {}
        self._resource_version = 0
        self.writes = []
        for resource in resources or []:
            self._put(copy.deepcopy(resource))

    ## Interface ###############################################################

    def list_objects(self, ctx, kind, api_version=None, namespace=None):
        ctx.check(f"list {kind}")
        log.info("DRY RUN list_objects of [%s] in [%s]", kind, namespace)
        namespaces = (
            [namespace] if namespace is not None else list(self._cluster_content)
        )
        matches = []
        for ns in namespaces:
            kind_entries = self._cluster_content.get(ns, {}).get(kind, {})
            for api_ver, entries in kind_entries.items():
                log.debug3("Checking api_version [%s // %s]", api_ver, api_version)
                if api_version is not None and api_ver != api_version:
                    continue
                matches.extend(copy.deepcopy(obj) for obj in entries.values())
        log.debug("Found %d objects of kind [%s]", len(matches), kind)
        return matches

    def get_object(self, ctx, kind, name, namespace=None, api_version=None):
        ctx.check(f"get {kind}/{name}")
        log.info("DRY RUN get_object of [%s/%s] in [%s]", kind, name, namespace)
        matches = []
        kind_entries = self._cluster_content.get(namespace, {}).get(kind, {})
        for api_ver, entries in kind_entries.items():
            if name in entries and (api_version is None or api_ver == api_version):
                matches.append(entries[name])
        log.debug(
            "Found %d matches for [%s/%s] in %s", len(matches), kind, name, namespace
        )
        if len(matches) == 1:
            return copy.deepcopy(matches[0])
        return None

    def create_object(self, ctx: ReconcileContext, resource_definition: dict) -> dict:
        ctx.check(f"create {object_identity(resource_definition)}")
        log.info("DRY RUN create [%s]", object_identity(resource_definition))
        with DRY_RUN_CLUSTER_LOCK:
            assert_cluster(
                self._lookup(resource_definition) is None,
                f"{object_identity(resource_definition)} already exists",
            )
            stored = self._put(copy.deepcopy(resource_definition))
            self.writes.append(("create", object_identity(stored)))
        return copy.deepcopy(stored)

    def update_object(self, ctx: ReconcileContext, resource_definition: dict) -> dict:
        ctx.check(f"update {object_identity(resource_definition)}")
        log.info("DRY RUN update [%s]", object_identity(resource_definition))
        with DRY_RUN_CLUSTER_LOCK:
            current = self._lookup(resource_definition)
            if current is None:
                raise StoreError(f"{object_identity(resource_definition)} not found")
            updated = copy.deepcopy(resource_definition)
            metadata = updated.setdefault("metadata", {})
            metadata["uid"] = current["metadata"]["uid"]
            metadata["creationTimestamp"] = current["metadata"]["creationTimestamp"]
            stored = self._put(updated)
            self.writes.append(("update", object_identity(stored)))
        return copy.deepcopy(stored)

    ## Dry Run Methods #########################################################

    @property
    def write_count(self) -> int:
        """Number of create/update calls that reached the store"""
        return len(self.writes)

    ## Implementation Details ##################################################

    @staticmethod
    def _key(resource: dict):
        metadata = resource.get("metadata", {})
        return (
            metadata.get("namespace"),
            resource.get("kind"),
            resource.get("apiVersion"),
            metadata.get("name"),
        )

    def _lookup(self, resource: dict) -> Optional[dict]:
        namespace, kind, api_version, name = self._key(resource)
        return (
            self._cluster_content.get(namespace, {})
            .get(kind, {})
            .get(api_version, {})
            .get(name)
        )

    def _put(self, resource: dict) -> dict:
        namespace, kind, api_version, name = self._key(resource)
        log.debug("DRY RUN put [%s/%s/%s/%s]", namespace, kind, api_version, name)
        with DRY_RUN_CLUSTER_LOCK:
            metadata = resource.setdefault("metadata", {})
            metadata.setdefault("uid", str(uuid.uuid4()))
            metadata.setdefault("creationTimestamp", datetime.now().isoformat())
            self._resource_version += 1
            metadata["resourceVersion"] = str(self._resource_version).zfill(5)
            (
                self._cluster_content.setdefault(namespace, {})
                .setdefault(kind, {})
                .setdefault(api_version, {})
            )[name] = resource
        return resource
