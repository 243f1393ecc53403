"""
Build settings for a jpsbuild run.

Settings are collected from three sources, highest priority first:
1. Command-line options (``--module-name app``)
2. Properties (``-D build.moduleName=app``; the ``build.`` prefix is optional)
3. Environment variables (``JPSBUILD_MODULE_NAME=app``)
"""

import re
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional

PROPERTY_PREFIX = "build."
ENV_PREFIX = "JPSBUILD_"

REQUIRED_KEYS = ("moduleName", "projectPath", "classpathOutputFilePath", "dataStorageRoot")
OPTIONAL_KEYS = ("incremental", "jdkTable", "kotlinHome", "mavenRepository", "engineCommand")
KNOWN_KEYS = REQUIRED_KEYS + OPTIONAL_KEYS

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


class SettingsError(Exception):
    """Exception raised for missing or invalid build settings."""

    pass


def env_var_name(key: str) -> str:
    """Environment variable for a settings key (moduleName -> JPSBUILD_MODULE_NAME)."""
    return ENV_PREFIX + re.sub(r"(?<!^)(?=[A-Z])", "_", key).upper()


def parse_bool(key: str, value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise SettingsError(f"Invalid boolean for '{key}': '{value}'")


def parse_properties(definitions: List[str]) -> Dict[str, str]:
    """Parse ``key=value`` property definitions.

    Example:
        ["build.moduleName=app", "incremental=false"]
        # Returns: {"moduleName": "app", "incremental": "false"}

    Raises:
        SettingsError: If a definition has no ``=`` or names an unknown key
    """
    properties: Dict[str, str] = {}
    for definition in definitions:
        key, separator, value = definition.partition("=")
        key = key.strip()
        if not separator or not key:
            raise SettingsError(f"Invalid property definition '{definition}', expected key=value")
        if key.startswith(PROPERTY_PREFIX):
            key = key[len(PROPERTY_PREFIX):]
        if key not in KNOWN_KEYS:
            raise SettingsError(
                f"Unknown property '{key}'. Known properties: {', '.join(KNOWN_KEYS)}"
            )
        properties[key] = value.strip()
    return properties


@dataclass
class BuildSettings:
    """Recognized configuration keys of one build run."""

    module_name: str
    project_path: Path
    classpath_output_file_path: Path
    data_storage_root: Path
    incremental: bool = True
    jdk_table: Optional[Path] = None
    kotlin_home: Optional[str] = None
    maven_repository: Optional[str] = None
    engine_command: List[str] = field(default_factory=list)

    @property
    def force_rebuild(self) -> bool:
        return not self.incremental

    @classmethod
    def from_sources(
        cls,
        cli: Optional[Mapping[str, Optional[str]]] = None,
        properties: Optional[Mapping[str, str]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "BuildSettings":
        """Merge settings sources into a BuildSettings.

        Args:
            cli: Values from command-line options keyed by settings key (None = unset)
            properties: Values from ``-D`` definitions keyed by settings key
            environ: Environment mapping (usually os.environ)

        Raises:
            SettingsError: If a required key is missing or a value is invalid
        """
        cli = cli or {}
        properties = properties or {}
        environ = environ or {}

        values: Dict[str, str] = {}
        for key in KNOWN_KEYS:
            cli_value = cli.get(key)
            if cli_value is not None:
                values[key] = str(cli_value)
            elif key in properties:
                values[key] = properties[key]
            elif env_var_name(key) in environ:
                values[key] = environ[env_var_name(key)]

        missing = [key for key in REQUIRED_KEYS if not values.get(key)]
        if missing:
            hints = ", ".join(f"{key} (or {env_var_name(key)})" for key in missing)
            raise SettingsError(f"Missing required settings: {hints}")

        incremental = parse_bool("incremental", values["incremental"]) if "incremental" in values else True
        jdk_table = values.get("jdkTable")
        engine_command = values.get("engineCommand")

        return cls(
            module_name=values["moduleName"],
            project_path=Path(values["projectPath"]),
            classpath_output_file_path=Path(values["classpathOutputFilePath"]),
            data_storage_root=Path(values["dataStorageRoot"]),
            incremental=incremental,
            jdk_table=Path(jdk_table) if jdk_table else None,
            kotlin_home=values.get("kotlinHome") or None,
            maven_repository=values.get("mavenRepository") or None,
            engine_command=shlex.split(engine_command) if engine_command else [],
        )
