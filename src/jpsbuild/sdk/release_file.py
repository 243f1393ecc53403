"""Java installation release metadata.

Every modular Java installation ships a ``release`` file of key/value pairs:

    JAVA_VERSION="11.0.12"
    MODULES="java.base java.logging java.sql"

The MODULES entry lists the runtime modules the installation provides. Each
module is addressed through the installation's ``jrt`` file system as
``jrt://<home>!/<module>``.
"""

import configparser
from pathlib import Path
from typing import Dict, List

RELEASE_FILE_NAME = "release"
MODULES_PROPERTY = "MODULES"
JRT_PROTOCOL = "jrt"
SCHEME_SEPARATOR = "://"
JAR_SEPARATOR = "!/"

_SECTION = "release"


class ReleaseFileError(Exception):
    """Raised when a release file exists but cannot be parsed."""

    pass


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def jrt_base_url(home: Path) -> str:
    """Module-root prefix of an installation (``jrt://<home>!/``)."""
    system_independent = str(Path(home).absolute()).replace("\\", "/")
    return JRT_PROTOCOL + SCHEME_SEPARATOR + system_independent + JAR_SEPARATOR


def parse_release_properties(content: str, source: str = "<string>") -> Dict[str, str]:
    """Parse release file content into a dictionary of unquoted values.

    Keys may be separated from values by ``=`` or ``:``, keys without a value
    map to an empty string, and the last of duplicate keys wins.

    Raises:
        ReleaseFileError: If the content is not a valid key/value file
    """
    parser = configparser.ConfigParser(
        delimiters=("=", ":"),
        comment_prefixes=("#", "!"),
        interpolation=None,
        strict=False,
        allow_no_value=True,
    )
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    try:
        # Leading whitespace would otherwise mark a continuation line
        lines = "\n".join(line.lstrip() for line in content.splitlines())
        parser.read_string(f"[{_SECTION}]\n{lines}", source=source)
    except configparser.Error as e:
        raise ReleaseFileError(f"Failed to parse release file {source}: {e}") from e
    return {key: _unquote(value or "") for key, value in parser[_SECTION].items()}


def read_module_urls(home: Path) -> List[str]:
    """
    Synthesize one module root URL per module declared by an installation.

    Args:
        home: Installation home directory

    Returns:
        URLs in declaration order; empty if there is no release file or it
        declares no MODULES

    Raises:
        ReleaseFileError: If the release file cannot be parsed
    """
    release_file = Path(home) / RELEASE_FILE_NAME
    if not release_file.is_file():
        return []

    try:
        content = release_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ReleaseFileError(f"Failed to read release file {release_file}: {e}") from e

    properties = parse_release_properties(content, str(release_file))
    modules = properties.get(MODULES_PROPERTY)
    if not modules:
        return []

    base_url = jrt_base_url(home)
    return [base_url + name for name in modules.split(" ") if name]
