"""
Module to validate values in a loaded config against a parallel validation
config. Each leaf of the validation config is a dict with a "type" key and
type-specific constraints.
"""

# Standard
from typing import Any, Dict, List, Optional
import builtins

# First Party
import aconfig
import alog

# Local
from .. import constants
from ..utils import nested_get

log = alog.use_channel("CONFG")

## Public ######################################################################


def get_invalid_params(
    config: aconfig.Config,
    validation_config: aconfig.Config,
) -> List[str]:
    """Get a list of any params that are invalid

    Args:
        config:  aconfig.Config
            The parsed config with any override values
        validation_config:  aconfig.Config
            The parallel config holding validation setup

    Returns:
        invalid_params:  List[str]
            A list of all string keys for parameters that fail validation
    """
    invalid_params = []
    for val_key, param_args in _collect_parameters(validation_config).items():
        if not _validate(nested_get(config, val_key), **param_args):
            log.warning("Found invalid config key [%s]", val_key)
            invalid_params.append(val_key)
    return invalid_params


## Validators ##################################################################


def _in_bounds(value, low, high) -> bool:
    return (low is None or value >= low) and (high is None or value <= high)


def _validate_number(value, *, min=None, max=None, **_):  # pylint: disable=redefined-builtin
    return _in_bounds(value, min, max)


def _validate_str(value, *, min_len=None, max_len=None, **_):
    return _in_bounds(len(value), min_len, max_len)


def _validate_enum(value, *, values=None, **_):
    return value in (values or [])


def _validate_list(value, *, min_len=None, max_len=None, item_type=None, **_):
    if not _in_bounds(len(value), min_len, max_len):
        return False
    if item_type is None:
        return True
    typ = getattr(builtins, item_type, None)
    assert isinstance(typ, type), f"Unsupported item_type: {item_type}"
    return all(isinstance(item, typ) for item in value)


# Map from type key to (valid python types, value validator)
_VALIDATORS: Dict[str, tuple] = {
    "number": ((int, float), _validate_number),
    "int": ((int,), _validate_number),
    "float": ((float,), _validate_number),
    "str": ((str,), _validate_str),
    "bool": ((bool,), lambda value, **_: True),
    "enum": ((str, int, type(None)), _validate_enum),
    "list": ((list,), _validate_list),
}


def _validate(value: Any, type: str, optional: bool = False, **kwargs) -> bool:  # pylint: disable=redefined-builtin
    """Validate a single value against its parsed validation entry"""
    if optional and value is None:
        return True
    valid_types, validator = _VALIDATORS[type]
    # bool is an int subclass, so exclude it from numeric types explicitly
    if isinstance(value, bool) and bool not in valid_types:
        log.warning("Invalid type <%s>", builtins.type(value))
        return False
    if not isinstance(value, valid_types):
        log.warning("Invalid type <%s>", builtins.type(value))
        return False
    valid = validator(value, **kwargs)
    if not valid:
        log.warning("Invalid value [%s]", value)
    return valid


## Parsing #####################################################################


def _collect_parameters(
    validation_config: dict,
    prefix_parts: Optional[List[str]] = None,
) -> Dict[str, dict]:
    """Recursively flatten the validation config into nested keys pointing at
    the validation args for that key
    """
    output_dict = {}
    prefix_parts = prefix_parts or []
    for key, val in validation_config.items():
        assert isinstance(key, str), "Only string keys allowed!"
        if not isinstance(val, dict):
            continue
        key_parts = prefix_parts + [key]
        nested_key = constants.NESTED_DICT_DELIM.join(key_parts)
        if val.get("type") in _VALIDATORS:
            log.debug3("Found parameter at %s", nested_key)
            output_dict[nested_key] = dict(val)
        else:
            log.debug3("Recursing into %s", nested_key)
            output_dict.update(_collect_parameters(val, key_parts))
    return output_dict

