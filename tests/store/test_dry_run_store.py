"""Tests for the DryRunStore"""

# Third Party
import pytest

# Local
from metallb_operator.context import ReconcileContext
from metallb_operator.exceptions import CancelledError, StoreError
from metallb_operator.store import DryRunStore
from metallb_operator.test_helpers.helpers import (
    SOME_OTHER_NAMESPACE,
    TEST_NAMESPACE,
    make_address_pool,
)

## Helpers #####################################################################


def make_config_map(name="foobar", namespace=TEST_NAMESPACE, data=None):
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {"name": name, "namespace": namespace},
        "data": data or {"a": "1"},
    }


## Tests #######################################################################


def test_seeded_resources_are_not_writes():
    """Resources given at construction are present but don't count as writes"""
    store = DryRunStore([make_config_map()])
    ctx = ReconcileContext()
    assert store.get_object(ctx, "ConfigMap", "foobar", TEST_NAMESPACE) is not None
    assert store.write_count == 0


def test_get_missing_returns_none():
    store = DryRunStore()
    assert store.get_object(ReconcileContext(), "ConfigMap", "nope", TEST_NAMESPACE) is None


def test_get_returns_copy():
    """Mutating a returned object must not change the stored one"""
    store = DryRunStore([make_config_map()])
    ctx = ReconcileContext()
    obj = store.get_object(ctx, "ConfigMap", "foobar", TEST_NAMESPACE)
    obj["data"]["a"] = "changed"
    assert store.get_object(ctx, "ConfigMap", "foobar", TEST_NAMESPACE)["data"] == {
        "a": "1"
    }


def test_list_all_namespaces_and_filtered():
    store = DryRunStore(
        [
            make_address_pool("a"),
            make_address_pool("b", namespace=SOME_OTHER_NAMESPACE),
        ]
    )
    ctx = ReconcileContext()
    assert len(store.list_objects(ctx, "AddressPool")) == 2
    assert len(store.list_objects(ctx, "AddressPool", namespace=TEST_NAMESPACE)) == 1
    assert store.list_objects(ctx, "AddressPool", api_version="other/v1") == []
    assert store.list_objects(ctx, "BGPPeer") == []


def test_create_assigns_metadata():
    store = DryRunStore()
    created = store.create_object(ReconcileContext(), make_config_map())
    assert created["metadata"]["uid"]
    assert created["metadata"]["resourceVersion"]
    assert created["metadata"]["creationTimestamp"]
    assert store.writes == [("create", "v1.ConfigMap/metallb-system/foobar")]


def test_create_existing_fails():
    store = DryRunStore([make_config_map()])
    with pytest.raises(StoreError, match="already exists"):
        store.create_object(ReconcileContext(), make_config_map())
    assert store.write_count == 0


def test_update_keeps_uid_and_bumps_version():
    store = DryRunStore()
    ctx = ReconcileContext()
    created = store.create_object(ctx, make_config_map())
    updated = store.update_object(ctx, make_config_map(data={"a": "2"}))
    assert updated["metadata"]["uid"] == created["metadata"]["uid"]
    assert updated["metadata"]["resourceVersion"] != created["metadata"]["resourceVersion"]
    assert store.get_object(ctx, "ConfigMap", "foobar", TEST_NAMESPACE)["data"] == {
        "a": "2"
    }
    assert store.write_count == 2


def test_update_missing_fails():
    store = DryRunStore()
    with pytest.raises(StoreError, match="not found"):
        store.update_object(ReconcileContext(), make_config_map())


@pytest.mark.parametrize(
    "call",
    [
        lambda store, ctx: store.list_objects(ctx, "ConfigMap"),
        lambda store, ctx: store.get_object(ctx, "ConfigMap", "foobar", TEST_NAMESPACE),
        lambda store, ctx: store.create_object(ctx, make_config_map(name="new")),
        lambda store, ctx: store.update_object(ctx, make_config_map()),
    ],
)
def test_cancelled_context_aborts(call):
    """Every operation checks for cancellation before touching state"""
    store = DryRunStore([make_config_map()])
    ctx = ReconcileContext()
    ctx.cancel()
    with pytest.raises(CancelledError):
        call(store, ctx)
    assert store.write_count == 0
