"""
This store is responsible for delegating cluster operations to the openshift
library. It is the one that will be used when the operator is running in the
cluster or outside the cluster making live changes.
"""
# Standard
from typing import List, Optional

# Third Party
from openshift.dynamic import DynamicClient
from openshift.dynamic.exceptions import (
    DynamicApiError,
    NotFoundError,
    ResourceNotFoundError,
    ResourceNotUniqueError,
)
from openshift.dynamic.resource import Resource
import kubernetes

# First Party
import alog

# Local
from ..context import ReconcileContext
from ..exceptions import StoreError
from ..utils import object_identity
from .base import StoreBase

log = alog.use_channel("OSFTS")


class OpenshiftStore(StoreBase):
    """This store uses the openshift DynamicClient to interact with the
    cluster
    """

    def __init__(self, client: Optional[DynamicClient] = None):
        """
        Args:
            client:  Optional[DynamicClient]
                A preconfigured client. If not given, one is created lazily
                from in-cluster config with a kubeconfig fallback.
        """
        self._client = client

    @property
    def client(self) -> DynamicClient:
        """Lazy property access to the client"""
        if self._client is None:
            self._client = self._setup_client()
        return self._client

    ## Interface ###############################################################

    def list_objects(
        self,
        ctx: ReconcileContext,
        kind: str,
        api_version: Optional[str] = None,
        namespace: Optional[str] = None,
    ) -> List[dict]:
        ctx.check(f"list {kind}")
        resources = self._get_resource_handle(kind, api_version)
        if not resources:
            return []

        try:
            list_obj = resources.get(namespace=namespace)
        except NotFoundError:
            log.debug(
                "No objects of kind [%s] found in namespace [%s]", kind, namespace
            )
            return []
        except DynamicApiError as err:
            raise StoreError(
                f"Failed to list {api_version}.{kind} in [{namespace}]: {err.summary()}"
            ) from err

        resource_list = list_obj.to_dict().get("items", [])
        log.debug2("Listed %d objects of kind [%s]", len(resource_list), kind)
        return resource_list

    def get_object(
        self,
        ctx: ReconcileContext,
        kind: str,
        name: str,
        namespace: Optional[str] = None,
        api_version: Optional[str] = None,
    ) -> Optional[dict]:
        ctx.check(f"get {kind}/{name}")
        resources = self._get_resource_handle(kind, api_version)
        if not resources:
            return None

        try:
            resource = resources.get(name=name, namespace=namespace)
        except NotFoundError:
            log.debug(
                "No object named [%s/%s] found in namespace [%s]", kind, name, namespace
            )
            return None
        except DynamicApiError as err:
            raise StoreError(
                f"Failed to get {api_version}.{kind}/{name} in [{namespace}]: {err.summary()}"
            ) from err

        return resource.to_dict()

    def create_object(self, ctx: ReconcileContext, resource_definition: dict) -> dict:
        ctx.check(f"create {object_identity(resource_definition)}")
        resources = self._require_resource_handle(resource_definition)
        namespace = resource_definition.get("metadata", {}).get("namespace")
        log.debug("Creating [%s]", object_identity(resource_definition))
        try:
            return resources.create(
                body=resource_definition, namespace=namespace
            ).to_dict()
        except DynamicApiError as err:
            raise StoreError(
                f"Failed to create {object_identity(resource_definition)}: {err.summary()}"
            ) from err

    def update_object(self, ctx: ReconcileContext, resource_definition: dict) -> dict:
        ctx.check(f"update {object_identity(resource_definition)}")
        resources = self._require_resource_handle(resource_definition)
        namespace = resource_definition.get("metadata", {}).get("namespace")
        log.debug("Replacing [%s]", object_identity(resource_definition))
        try:
            return resources.replace(
                body=resource_definition, namespace=namespace
            ).to_dict()
        except DynamicApiError as err:
            raise StoreError(
                f"Failed to update {object_identity(resource_definition)}: {err.summary()}"
            ) from err

    ## Implementation Helpers ##################################################

    @staticmethod
    def _setup_client():
        """Create a DynamicClient that will work based on where the operator is
        running
        """
        # Try in-cluster config
        try:
            log.debug2("Running with in-cluster config")
            kube_config = kubernetes.client.Configuration()
            kubernetes.config.load_incluster_config(client_configuration=kube_config)
            api_client = kubernetes.client.ApiClient(kube_config)
            return DynamicClient(api_client)

        # Fall back to out-of-cluster config
        except kubernetes.config.ConfigException:
            log.debug2("Running with out-of-cluster config")
            return DynamicClient(kubernetes.config.new_client_from_config())

    def _get_resource_handle(
        self, kind: str, api_version: Optional[str]
    ) -> Optional[Resource]:
        """Get the openshift resource handle for a specified kind and
        api_version. A kind the API server does not serve yields None.
        """
        try:
            return self.client.resources.get(kind=kind, api_version=api_version)
        except (ResourceNotFoundError, ResourceNotUniqueError):
            log.debug(
                "No resource kind [%s/%s] found or multiple kinds matching request found",
                api_version,
                kind,
            )
            return None

    def _require_resource_handle(self, resource_definition: dict) -> Resource:
        resources = self._get_resource_handle(
            resource_definition.get("kind"), resource_definition.get("apiVersion")
        )
        if resources is None:
            raise StoreError(
                f"Resource kind for {object_identity(resource_definition)} is not served by the cluster"
            )
        return resources
