"""
Library config for the reconciliation core. Keys of config.yaml are readable
as attributes of this module. Per-pass chart parameters are not here; they
come from the environment via metallb_operator.render.chart_config.
"""

# Local
from .config import library_config


def __getattr__(name):
    if name in library_config:
        return getattr(library_config, name)
    raise AttributeError(f"No such config attribute {name}")


__all__ = list(library_config.keys())
