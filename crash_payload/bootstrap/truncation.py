"""Truncation system bootstrap.

Loads truncation settings and hands out truncators built from them.
Each truncator owns its budget, so callers get a fresh one rather than
a shared instance.
"""

from pathlib import Path
from typing import Any

import yaml

from ..domain.exceptions import ConfigurationError
from ..domain.value_objects import TruncationConfig
from ..infrastructure.truncation import PayloadTruncator
from ..logging_config import get_logger

logger = get_logger(__name__)

# Global singleton instances
_truncation_config: TruncationConfig | None = None
_log_sink: Any = None


def load_config_from_file(config_path: str | Path) -> dict[str, Any]:
    """Load the full configuration from a YAML file.

    Args:
        config_path: Path to the YAML file.

    Returns:
        Configuration dictionary (empty if the file is empty).

    Raises:
        ConfigurationError: If the file is missing, unreadable or not a mapping.
    """
    path = Path(config_path)
    try:
        with open(path) as f:
            config = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise ConfigurationError(f"config file not found: {path}", {"path": str(path)}) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid YAML in {path}: {e}", {"path": str(path)}) from e

    if not isinstance(config, dict):
        raise ConfigurationError(f"config file {path} must contain a mapping", {"path": str(path)})
    return config


def get_truncation_config() -> TruncationConfig | None:
    """Get the bootstrapped truncation configuration.

    Returns:
        The configuration if initialized, None otherwise.
    """
    return _truncation_config


def create_truncator(config: TruncationConfig | None = None) -> PayloadTruncator:
    """Build a truncator with its own budget.

    Args:
        config: Limits to use. Defaults to the bootstrapped configuration,
            or TruncationConfig() when not initialized.

    Returns:
        A new PayloadTruncator wired to the bootstrapped log sink.
    """
    config = config or _truncation_config or TruncationConfig()
    return PayloadTruncator(config.max_size, _log_sink, max_depth=config.max_depth)


def init_truncation(config: dict[str, Any], logger_sink: Any = None) -> TruncationConfig:
    """Initialize the truncation system.

    Args:
        config: Full application configuration dictionary; the
            ``truncation`` section is used.
        logger_sink: Optional log sink for truncators created afterwards.

    Returns:
        The bootstrapped TruncationConfig.

    Raises:
        ConfigurationError: If the truncation section is invalid.
    """
    global _truncation_config, _log_sink

    try:
        truncation_config = TruncationConfig.from_dict(config.get("truncation"))
    except ValueError as e:
        raise ConfigurationError(str(e), {"section": "truncation"}) from e

    _truncation_config = truncation_config
    _log_sink = logger_sink

    logger.info(
        "truncation_initialized",
        max_size=truncation_config.max_size,
        max_notice_bytes=truncation_config.max_notice_bytes,
        max_depth=truncation_config.max_depth,
    )

    return truncation_config


def reset_truncation() -> None:
    """Reset the truncation system.

    Primarily for testing purposes.
    """
    global _truncation_config, _log_sink
    _truncation_config = None
    _log_sink = None
