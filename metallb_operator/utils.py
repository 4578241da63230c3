"""
Common utilities shared across the library
"""

# Standard
from typing import Any

# First Party
import alog

# Local
from . import constants

log = alog.use_channel("MLUTL")

# Sentinel for missing dict values
__MISSING__ = "__MISSING__"

## Dicts #######################################################################


def merge_configs(base, overrides) -> dict:
    """Helper to perform a deep merge of the overrides into the base. The merge
    is done in place, but the resulting dict is also returned for convenience.

    If both the base and overrides have a key and the value for both is a
    dict, recursively merge, otherwise set the base value to the override
    value. Lists are replaced, not concatenated.

    Args:
        base:  dict
            The base config that will be updated with the overrides
        overrides:  dict
            The override config

    Returns:
        merged:  dict
            The merged results of overrides merged onto base
    """
    for key, value in overrides.items():
        if (
            key not in base
            or not isinstance(base[key], dict)
            or not isinstance(value, dict)
        ):
            base[key] = value
        else:
            base[key] = merge_configs(base[key], value)

    return base



def nested_get(dct: dict, key: str, dflt=None) -> Any:
    """Helper to get values from a dict using 'foo.bar' key notation. Missing
    intermediate dicts yield the default.
    """
    parts = key.split(constants.NESTED_DICT_DELIM)
    for i, part in enumerate(parts[:-1]):
        dct = dct.get(part, __MISSING__)
        if dct is __MISSING__:
            return dflt
        if not isinstance(dct, dict):
            raise TypeError(
                f"Intermediate key {constants.NESTED_DICT_DELIM.join(parts[:i+1])} is not a dict"
            )
    return dct.get(parts[-1], dflt)


## Objects #####################################################################


def object_identity(obj: dict) -> str:
    """Short human readable identifier for a kubernetes manifest"""
    metadata = obj.get("metadata") or {}
    namespace = metadata.get("namespace")
    name = metadata.get("name")
    prefix = f"{namespace}/" if namespace else ""
    return f"{obj.get('apiVersion')}.{obj.get('kind')}/{prefix}{name}"
