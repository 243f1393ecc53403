"""
SDK table file support.

The SDK table maps SDK names used by modules to installation directories.
It is a UTF-8 text file with one ``<name>=<absolute-path>`` entry per line:

    corretto-11=/usr/lib/jvm/java-11-amazon-corretto
    jdk17=/opt/jdk17
"""

from pathlib import Path
from typing import Dict, Mapping


class SdkTableError(Exception):
    """Exception raised for unreadable or malformed SDK table files."""

    pass


def parse_sdk_table(content: str, source: str = "<string>") -> Dict[str, str]:
    """Parse SDK table text.

    Blank lines are ignored and each entry is split on its first ``=``.

    Raises:
        SdkTableError: If a line has no ``=`` or an empty name
    """
    table: Dict[str, str] = {}
    for line_number, raw_line in enumerate(content.splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue
        name, separator, path = line.partition("=")
        name = name.strip()
        if not separator or not name:
            raise SdkTableError(
                f"{source}:{line_number}: expected '<name>=<path>', got '{raw_line}'"
            )
        table[name] = path.strip()
    return table


def load_sdk_table(table_path: Path) -> Dict[str, str]:
    """Load an SDK table file.

    Args:
        table_path: Path to the table file

    Returns:
        Mapping of SDK name to installation path

    Raises:
        SdkTableError: If the file is missing or malformed
    """
    if not table_path.exists():
        raise SdkTableError(f"SDK table not found: {table_path}")

    try:
        content = table_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SdkTableError(f"Failed to read SDK table {table_path}: {e}") from e

    return parse_sdk_table(content, str(table_path))


def write_sdk_table(table_path: Path, table: Mapping[str, str]) -> None:
    """Write an SDK table file, replacing any existing content."""
    for name in table:
        if not name or "=" in name:
            raise SdkTableError(f"Invalid SDK name: '{name}'")
    table_path.parent.mkdir(parents=True, exist_ok=True)
    content = "\n".join(f"{name}={path}" for name, path in table.items())
    table_path.write_text(content, encoding="utf-8")
