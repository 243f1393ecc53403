"""Configuration parsing modules for jpsbuild."""

from .path_variables import PathVariableError, PathVariableExpander, create_path_variables
from .sdk_table import SdkTableError, load_sdk_table, parse_sdk_table, write_sdk_table
from .settings import BuildSettings, SettingsError, parse_properties

__all__ = [
    "BuildSettings",
    "SettingsError",
    "parse_properties",
    "PathVariableError",
    "PathVariableExpander",
    "create_path_variables",
    "SdkTableError",
    "load_sdk_table",
    "parse_sdk_table",
    "write_sdk_table",
]
