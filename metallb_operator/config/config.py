"""
Load the library config at import time and configure logging from it
"""

# Standard
from typing import Optional
import os

# First Party
import aconfig
import alog

# Local
from ..exceptions import assert_config
from .validation import get_invalid_params

CONFIG_FILE = os.path.join(os.path.dirname(__file__), "config.yaml")
VALIDATION_FILE = os.path.join(os.path.dirname(__file__), "config_validation.yaml")


def load_library_config(
    config_file: str = CONFIG_FILE,
    validation_file: str = VALIDATION_FILE,
) -> aconfig.Config:
    """Read the library config, letting env vars override any key, and check
    it against the validation schema

    Raises:
        ConfigError: One or more keys hold invalid values
    """
    config = aconfig.Config.from_yaml(config_file, override_env_vars=True)
    validation_config = aconfig.Config.from_yaml(
        validation_file, override_env_vars=False
    )
    invalid_params = get_invalid_params(config, validation_config)
    assert_config(
        not invalid_params,
        f"Library configuration found invalid values: {invalid_params}",
    )
    return config


def configure_logging(config: Optional[aconfig.Config] = None):
    """Configure alog from the logging keys of the library config"""
    config = config or library_config
    alog.configure(
        default_level=config.log_level,
        filters=config.log_filters,
        formatter="json" if config.log_json else "pretty",
        thread_id=config.log_thread_id,
    )


library_config = load_library_config()
configure_logging(library_config)
