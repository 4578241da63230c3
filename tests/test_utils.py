"""
Tests for functions in metallb_operator.utils
"""

# Third Party
import pytest

# Local
from metallb_operator import utils

## merge_configs ###############################################################


def test_merge_configs_nested():
    """Make sure nested dicts are merged and scalars are overwritten"""
    base = {"a": {"b": 1, "c": 2}, "d": 3}
    overrides = {"a": {"c": 4, "e": 5}, "d": 6}
    merged = utils.merge_configs(base, overrides)
    assert merged == {"a": {"b": 1, "c": 4, "e": 5}, "d": 6}
    assert merged is base


def test_merge_configs_lists_replaced():
    """Make sure lists are replaced rather than appended"""
    assert utils.merge_configs({"a": [1, 2]}, {"a": [3]}) == {"a": [3]}


def test_merge_configs_dict_over_scalar():
    """Make sure a dict override replaces a scalar base value"""
    assert utils.merge_configs({"a": 1}, {"a": {"b": 2}}) == {"a": {"b": 2}}


## nested_get ##################################################################


def test_nested_get():
    dct = {"a": {"b": {"c": 1}}}
    assert utils.nested_get(dct, "a.b.c") == 1
    assert utils.nested_get(dct, "a.x.c", "dflt") == "dflt"
    assert utils.nested_get(dct, "a.b.x") is None


## object_identity #############################################################


def test_object_identity():
    obj = {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {"name": "config", "namespace": "ns"},
    }
    assert utils.object_identity(obj) == "v1.ConfigMap/ns/config"


def test_object_identity_cluster_scoped():
    obj = {"apiVersion": "policy/v1beta1", "kind": "PodSecurityPolicy", "metadata": {"name": "p"}}
    assert utils.object_identity(obj) == "policy/v1beta1.PodSecurityPolicy/p"
