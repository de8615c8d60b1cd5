"""
Global configuration dataclasses for imgproc.

This module defines the configuration objects read by the operators, such as
ProcessingConfig and LoggingConfig, and the overarching GlobalConfig.
Configuration is immutable and provided as Python objects, optionally loaded
from a YAML file.
"""

import dataclasses
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from imgproc.constants.constants import (
    DEFAULT_HISTOGRAM_PRECISION,
    DEFAULT_LANCZOS_SIZE,
    DEFAULT_LOG_FORMAT,
    DEFAULT_LOG_LEVEL,
    DEFAULT_NUM_WORKERS,
    DEFAULT_SEPARABILITY_TOLERANCE,
)
from imgproc.core.exceptions import InvalidArgError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessingConfig:
    """Configuration for operator evaluation."""
    num_workers: int = DEFAULT_NUM_WORKERS
    """Number of threads used for independent column strips of the median filters."""

    separability_tolerance: float = DEFAULT_SEPARABILITY_TOLERANCE
    """Singular values below tolerance * largest singular value count as zero."""

    lanczos_size: int = DEFAULT_LANCZOS_SIZE
    """Window half-width of Lanczos scaling."""

    histogram_precision: float = DEFAULT_HISTOGRAM_PRECISION
    """Default L* quantisation used by histogram equalization."""

    def __post_init__(self):
        if self.num_workers < 1:
            raise InvalidArgError(f"num_workers must be at least 1, got {self.num_workers}")
        if self.separability_tolerance < 0:
            raise InvalidArgError("separability_tolerance must be non-negative")
        if self.lanczos_size < 1:
            raise InvalidArgError(f"lanczos_size must be at least 1, got {self.lanczos_size}")
        if self.histogram_precision <= 0:
            raise InvalidArgError("histogram_precision must be positive")


@dataclass(frozen=True)
class LoggingConfig:
    """Configuration for the CLI logging setup."""
    level: str = DEFAULT_LOG_LEVEL
    """Root log level name (DEBUG, INFO, WARNING, ...)."""

    format: str = DEFAULT_LOG_FORMAT
    """Format string handed to logging.basicConfig."""

    def __post_init__(self):
        if not isinstance(logging.getLevelName(self.level.upper()), int):
            raise InvalidArgError(f"unknown log level: {self.level}")


@dataclass(frozen=True)
class GlobalConfig:
    """Root configuration object."""
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_current_config = threading.local()


def set_current_config(config: Optional[GlobalConfig]) -> None:
    """Set the config seen by operators called from this thread (None restores defaults)."""
    _current_config.value = config


def get_current_config() -> GlobalConfig:
    """Get the config for this thread, falling back to the defaults."""
    config = getattr(_current_config, "value", None)
    if config is None:
        return GlobalConfig()
    return config


def get_processing_config() -> ProcessingConfig:
    return get_current_config().processing


def _build_section(section_type: type, values: Optional[Dict[str, Any]], section_name: str) -> Any:
    if values is None:
        return section_type()
    if not isinstance(values, dict):
        raise InvalidArgError(f"config section '{section_name}' must be a mapping")

    known = {f.name for f in dataclasses.fields(section_type)}
    unknown = set(values) - known
    if unknown:
        raise InvalidArgError(f"unknown keys in config section '{section_name}': {sorted(unknown)}")
    return section_type(**values)


def config_from_dict(data: Optional[Dict[str, Any]]) -> GlobalConfig:
    """Build a GlobalConfig from a nested mapping such as a parsed YAML document."""
    if data is None:
        return GlobalConfig()
    if not isinstance(data, dict):
        raise InvalidArgError("config document must be a mapping")

    unknown = set(data) - {"processing", "logging"}
    if unknown:
        raise InvalidArgError(f"unknown config sections: {sorted(unknown)}")

    return GlobalConfig(
        processing=_build_section(ProcessingConfig, data.get("processing"), "processing"),
        logging=_build_section(LoggingConfig, data.get("logging"), "logging"),
    )


def load_config(path: Union[str, Path]) -> GlobalConfig:
    """
    Load a GlobalConfig from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed configuration

    Raises:
        InvalidArgError: If the document has unknown sections or keys
        FileNotFoundError: If the file does not exist
    """
    config_path = Path(path)
    with open(config_path, "r", encoding="utf-8") as f:
        loaded_data = yaml.safe_load(f)

    config = config_from_dict(loaded_data)
    logger.debug(f"Loaded config from {config_path}: {config}")
    return config
