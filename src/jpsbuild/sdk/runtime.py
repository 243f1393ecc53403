"""Discovery of the Java runtime that runs the build.

The runtime home is used as the fallback installation for SDK names that the
SDK table does not map.
"""

import os
import shutil
from pathlib import Path
from typing import Mapping, Optional


class SdkResolutionError(Exception):
    """Raised when an SDK cannot be resolved to any installation."""

    pass


def _normalize_home(home: Path) -> Path:
    # A JRE nested in a JDK reports <jdk>/jre as its home
    if home.name == "jre":
        return home.parent
    return home


def current_runtime_home(environ: Optional[Mapping[str, str]] = None) -> Path:
    """
    Locate the home directory of the current Java runtime.

    Checks JAVA_HOME first, then the ``java`` executable found on PATH
    (``<home>/bin/java``, symlinks resolved).

    Args:
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Runtime home directory

    Raises:
        SdkResolutionError: If no runtime can be found
    """
    environ = os.environ if environ is None else environ

    java_home = environ.get("JAVA_HOME")
    if java_home:
        return _normalize_home(Path(java_home).absolute())

    java_executable = shutil.which("java", path=environ.get("PATH"))
    if java_executable:
        return _normalize_home(Path(java_executable).resolve().parent.parent)

    raise SdkResolutionError(
        "Cannot determine the current Java runtime: set JAVA_HOME or put 'java' on PATH"
    )
