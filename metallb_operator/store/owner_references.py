"""
This module holds the ownerReference handling used when writing objects to
the store. Ownership is only ever computed when an object is created; updates
carry the live object's references forward unchanged.
"""

# First Party
import alog

# Local
from ..exceptions import ConfigError, assert_config
from ..utils import object_identity

log = alog.use_channel("OWNRF")


def set_controller_reference(owner_cr: dict, child_obj: dict):
    """Add a controller ownerReference for the owner CR to the child object

    Error Semantics: Raises ConfigError when the reference cannot be set:
    the owner has no uid, the child lives in a different namespace than the
    owner, or the child is already controlled by a different owner.

    Args:
        owner_cr:  dict
            The full CR manifest for the owning resource
        child_obj:  dict
            The object that will be created. Updated in place.
    """
    _validate_object_struct(owner_cr)
    _validate_object_struct(child_obj)
    owner_meta = owner_cr["metadata"]
    child_meta = child_obj["metadata"]

    assert_config(
        bool(owner_meta.get("uid")),
        f"Cannot set owner of {object_identity(child_obj)}: owner has no uid",
    )

    owner_namespace = owner_meta.get("namespace")
    child_namespace = child_meta.get("namespace")
    if owner_namespace and owner_namespace != child_namespace:
        raise ConfigError(
            f"Cross-namespace owner references are disallowed: owner "
            f"{object_identity(owner_cr)}, child {object_identity(child_obj)}"
        )

    owner_refs = list(child_meta.get("ownerReferences") or [])
    log.debug3("Current owner refs: %s", owner_refs)
    new_ref = make_owner_reference(owner_cr)
    for i, ref in enumerate(owner_refs):
        if ref.get("controller") and ref.get("uid") != new_ref["uid"]:
            raise ConfigError(
                f"{object_identity(child_obj)} is already controlled by "
                f"{ref.get('kind')}/{ref.get('name')}"
            )
        if ref.get("uid") == new_ref["uid"]:
            log.debug2("Replacing existing reference to owner %s", new_ref["name"])
            owner_refs[i] = new_ref
            break
    else:
        log.debug2("Adding owner reference for %s", object_identity(child_obj))
        owner_refs.append(new_ref)

    log.debug4("Final owner refs: %s", owner_refs)
    child_meta["ownerReferences"] = owner_refs


def carry_owner_references(existing: dict, desired: dict):
    """Copy the ownerReferences of the live object onto the desired object,
    discarding whatever the desired object carried
    """
    refs = (existing.get("metadata") or {}).get("ownerReferences")
    metadata = desired.setdefault("metadata", {})
    if refs:
        metadata["ownerReferences"] = list(refs)
    else:
        metadata.pop("ownerReferences", None)


def make_owner_reference(owner_cr: dict) -> dict:
    """Make a controller owner reference for the given CR instance

    Args:
        owner_cr:  dict
            The full CR manifest for the owning resource

    Returns:
        owner_reference:  dict
            The dict entry for the `metadata.ownerReferences` entry of the owned
            object
    """
    metadata = owner_cr.get("metadata", {})
    return {
        "apiVersion": owner_cr.get("apiVersion"),
        "kind": owner_cr.get("kind"),
        "name": metadata.get("name"),
        "uid": metadata.get("uid"),
        "controller": True,
        # The parent will not be deleted until this object completes its
        # deletion
        "blockOwnerDeletion": True,
    }


## Implementation Details ######################################################


def _validate_object_struct(obj: dict):
    """Ensure that the required portions of an object are present (kind,
    apiVersion, metadata.name)
    """
    assert "kind" in obj, "Got object without 'kind'"
    assert "apiVersion" in obj, "Got object without 'apiVersion'"
    metadata = obj.get("metadata")
    assert isinstance(metadata, dict), "Got object with non-dict 'metadata'"
    assert "name" in metadata, "Got object without 'metadata.name'"
