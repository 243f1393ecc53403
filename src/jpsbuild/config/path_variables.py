"""
Path variable expansion for project files.

Project and module files reference locations through ``$NAME$`` macros, e.g.:
    jar://$MAVEN_REPOSITORY$/org/example/lib/1.0/lib-1.0.jar!/
    file://$MODULE_DIR$/src

Built-in variables (PROJECT_DIR, MODULE_DIR, USER_HOME) are filled in by the
loader; user variables such as KOTLIN_BUNDLED and MAVEN_REPOSITORY come from
the build settings.
"""

import re
from pathlib import Path
from typing import Dict, Mapping, Optional

KOTLIN_BUNDLED = "KOTLIN_BUNDLED"
MAVEN_REPOSITORY = "MAVEN_REPOSITORY"
PROJECT_DIR = "PROJECT_DIR"
MODULE_DIR = "MODULE_DIR"
USER_HOME = "USER_HOME"

_MACRO_PATTERN = re.compile(r"\$([A-Za-z_][A-Za-z0-9_.\-]*)\$")


class PathVariableError(Exception):
    """Raised when a project file uses a path variable with no value."""

    def __init__(self, variable: str, text: str, source: Optional[Path] = None):
        self.variable = variable
        self.text = text
        self.source = source
        location = f" in {source}" if source else ""
        super().__init__(
            f"Unresolved path variable '${variable}$'{location} (while expanding '{text}'). "
            + f"Define {variable} before loading the project."
        )


def default_maven_repository() -> Path:
    """Default local dependency repository (~/.m2/repository)."""
    return Path.home() / ".m2" / "repository"


def create_path_variables(
    kotlin_home: Optional[str] = None,
    maven_repository: Optional[str] = None,
) -> Dict[str, str]:
    """Build the user path variables for a project load.

    Args:
        kotlin_home: Compiler toolchain home; KOTLIN_BUNDLED points at its kotlinc dir
        maven_repository: Local dependency repository root (default ~/.m2/repository)

    Returns:
        Mapping of variable name to absolute, forward-slash path
    """
    variables = {
        MAVEN_REPOSITORY: _system_independent(
            Path(maven_repository).absolute() if maven_repository else default_maven_repository()
        ),
    }
    if kotlin_home:
        variables[KOTLIN_BUNDLED] = _system_independent(Path(kotlin_home).absolute() / "kotlinc")
    return variables


def _system_independent(path: Path) -> str:
    return str(path).replace("\\", "/")


class PathVariableExpander:
    """Expands ``$NAME$`` macros from a fixed set of variables."""

    def __init__(self, variables: Mapping[str, str], source: Optional[Path] = None):
        self.variables = dict(variables)
        self.source = source

    def with_variables(self, source: Optional[Path] = None, **extra: str) -> "PathVariableExpander":
        """Return a copy with extra variables (e.g. MODULE_DIR for one module file)."""
        merged = dict(self.variables)
        merged.update(extra)
        return PathVariableExpander(merged, source or self.source)

    def expand(self, text: str) -> str:
        """Expand every macro in text.

        Raises:
            PathVariableError: If a macro has no value
        """

        def replace(match: "re.Match[str]") -> str:
            name = match.group(1)
            if name not in self.variables:
                raise PathVariableError(name, text, self.source)
            return self.variables[name]

        return _MACRO_PATTERN.sub(replace, text)
