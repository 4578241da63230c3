"""
The store is the abstraction in charge of interacting with the kubernetes
cluster to list, look up, create and update resources.
"""

# Local
from .base import StoreBase
from .dry_run_store import DryRunStore
from .openshift_store import OpenshiftStore
from .owner_references import (
    carry_owner_references,
    make_owner_reference,
    set_controller_reference,
)
