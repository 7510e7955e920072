"""Utility functions for schemacaps."""

from schemacaps.utils.config import ConfigSettings, find_config_file, load_config
from schemacaps.utils.file_utils import read_schema_file

__all__ = [
    "ConfigSettings",
    "find_config_file",
    "load_config",
    "read_schema_file",
]
