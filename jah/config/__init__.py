"""Configuration loading for jah projects."""

from .loader import (
    CONFIG_FILENAME,
    DEFAULT_CONFIG,
    PACKAGE_FILENAME,
    load_config,
    merge_config,
    read_package_name,
)
from .relaxed import parse_relaxed
from .schema import LibrarySpec, OutputPaths, ProjectConfig

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG",
    "PACKAGE_FILENAME",
    "LibrarySpec",
    "OutputPaths",
    "ProjectConfig",
    "load_config",
    "merge_config",
    "parse_relaxed",
    "read_package_name",
]
