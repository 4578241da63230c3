"""
This defines the base class for all cluster store types. A store is the only
thing the reconciliation core talks to when it reads or writes cluster state.
"""

# Standard
from typing import List, Optional
import abc

# Local
from ..context import ReconcileContext


class StoreBase(abc.ABC):
    """
    Base class for stores which carry out list/get/create/update calls
    against the cluster. Every call takes the pass's ReconcileContext and must
    check it for cancellation before touching the cluster.

    Error semantics shared by all implementations:
        * NotFound on get returns None
        * NotFound on list returns an empty list
        * Any other failure raises StoreError
    """

    @abc.abstractmethod
    def list_objects(
        self,
        ctx: ReconcileContext,
        kind: str,
        api_version: Optional[str] = None,
        namespace: Optional[str] = None,
    ) -> List[dict]:
        """List all objects of the given kind

        Args:
            ctx:  ReconcileContext
                Cancellation context for this pass
            kind:  str
                The kind of the objects to list
            api_version:  Optional[str]
                The api_version of the resource kind to list
            namespace:  Optional[str]
                The namespace to list in, or None for all namespaces

        Returns:
            items:  List[dict]
                The dict representations of all matching objects. These may be
                shared with the store's cache, so callers must copy before
                mutating.
        """

    @abc.abstractmethod
    def get_object(
        self,
        ctx: ReconcileContext,
        kind: str,
        name: str,
        namespace: Optional[str] = None,
        api_version: Optional[str] = None,
    ) -> Optional[dict]:
        """Fetch the current state of a single object by name

        Returns:
            current_state:  Optional[dict]
                The dict representation of the object, or None if not present
        """

    @abc.abstractmethod
    def create_object(self, ctx: ReconcileContext, resource_definition: dict) -> dict:
        """Create the given object. Fails if it already exists.

        Returns:
            created:  dict
                The object as stored by the cluster
        """

    @abc.abstractmethod
    def update_object(self, ctx: ReconcileContext, resource_definition: dict) -> dict:
        """Replace the given object with the provided definition. Fails if it
        does not exist.

        Returns:
            updated:  dict
                The object as stored by the cluster
        """
