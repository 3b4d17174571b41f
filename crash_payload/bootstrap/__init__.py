"""Bootstrap: configuration loading and truncator construction."""

from .truncation import (
    create_truncator,
    get_truncation_config,
    init_truncation,
    load_config_from_file,
    reset_truncation,
)

__all__ = [
    "create_truncator",
    "get_truncation_config",
    "init_truncation",
    "load_config_from_file",
    "reset_truncation",
]
