"""
In-memory project model for jpsbuild.

This module defines the module graph a build works on:
- ProjectModel: root aggregate created fresh for every build
- GlobalScope: SDK registry and path variables
- ProjectScope: modules, project libraries, project SDK and output directory
- Module, Dependency, Library, Sdk: the graph elements

The model is owned by the BuildOrchestrator for the duration of one run and
passed by reference to every stage. Nothing here is process-global.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Set


class ClasspathKind(Enum):
    """Classpath a dependency edge can be included in."""

    PRODUCTION_COMPILE = "production_compile"
    PRODUCTION_RUNTIME = "production_runtime"
    TEST_COMPILE = "test_compile"
    TEST_RUNTIME = "test_runtime"


class DependencyScope(Enum):
    """Scope of a dependency edge as declared in a module file."""

    COMPILE = "COMPILE"
    TEST = "TEST"
    RUNTIME = "RUNTIME"
    PROVIDED = "PROVIDED"

    @classmethod
    def from_string(cls, value: Optional[str]) -> "DependencyScope":
        """Convert a module file scope attribute, defaulting to COMPILE."""
        if not value:
            return cls.COMPILE
        try:
            return cls(value.upper())
        except ValueError:
            return cls.COMPILE

    def is_included_in(self, kind: ClasspathKind) -> bool:
        """Check whether edges with this scope belong to the given classpath."""
        return kind in _SCOPE_CLASSPATHS[self]


_SCOPE_CLASSPATHS = {
    DependencyScope.COMPILE: set(ClasspathKind),
    DependencyScope.TEST: {ClasspathKind.TEST_COMPILE, ClasspathKind.TEST_RUNTIME},
    DependencyScope.RUNTIME: {ClasspathKind.PRODUCTION_RUNTIME, ClasspathKind.TEST_RUNTIME},
    DependencyScope.PROVIDED: {
        ClasspathKind.PRODUCTION_COMPILE,
        ClasspathKind.TEST_COMPILE,
        ClasspathKind.TEST_RUNTIME,
    },
}


class DependencyKind(Enum):
    """Kind of target a dependency edge points at."""

    MODULE_SOURCE = "module_source"
    MODULE = "module"
    LIBRARY = "library"
    SDK = "sdk"


def url_to_path(url: str) -> Path:
    """Convert a compiled root URL to a filesystem path.

    Handles ``jar://<path>!/``, ``jrt://<path>!/<module>`` and ``file://<path>``
    URLs; anything else is treated as a plain path.
    """
    for prefix in ("jar://", "jrt://", "file://"):
        if url.startswith(prefix):
            url = url[len(prefix):]
            break
    separator = url.find("!/")
    if separator != -1:
        url = url[:separator]
    return Path(url)


@dataclass
class Library:
    """External dependency contributing compiled roots.

    Attributes:
        name: Library name (empty for unnamed module-level libraries)
        roots: Ordered compiled root URLs
        jar_directories: Directory URLs whose jars are part of the library,
            mapped to whether the directory is scanned recursively
    """

    name: str
    roots: List[str] = field(default_factory=list)
    jar_directories: Dict[str, bool] = field(default_factory=dict)

    def get_files(self) -> List[Path]:
        """Return the files behind the library's compiled roots.

        Jar directories are expanded into the ``*.jar`` files they contain;
        missing directories contribute nothing.
        """
        files = [url_to_path(url) for url in self.roots]
        for url, recursive in self.jar_directories.items():
            directory = url_to_path(url)
            if not directory.is_dir():
                continue
            pattern = "**/*.jar" if recursive else "*.jar"
            files.extend(sorted(directory.glob(pattern)))
        return files

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "roots": list(self.roots),
            "jar_directories": dict(self.jar_directories),
        }


class Sdk:
    """Named SDK registered in the global scope.

    Roots are kept in insertion order and backed by a set keyed by URL, so
    registering the same root twice is a no-op.
    """

    def __init__(self, name: str, home_path: Path):
        self.name = name
        self.home_path = home_path
        self._roots: List[str] = []
        self._root_set: Set[str] = set()

    @property
    def roots(self) -> List[str]:
        """Compiled root URLs in registration order."""
        return list(self._roots)

    def has_root(self, url: str) -> bool:
        return url in self._root_set

    def add_root(self, url: str) -> bool:
        """Append a compiled root URL unless it is already registered.

        Returns:
            True if the root was added, False if it was already present
        """
        if url in self._root_set:
            return False
        self._root_set.add(url)
        self._roots.append(url)
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"name": self.name, "home_path": str(self.home_path), "roots": self.roots}

    def __repr__(self) -> str:
        return f"Sdk(name={self.name!r}, home_path={str(self.home_path)!r}, roots={len(self._roots)})"


@dataclass
class Dependency:
    """Typed dependency edge of a module.

    Attributes:
        kind: What the edge points at
        scope: Declared dependency scope
        exported: Whether dependents of the owning module see this edge
        module_name: Target module (MODULE edges)
        library_name: Target project library (LIBRARY edges)
        library: Module-level library owned by this edge (LIBRARY edges)
        sdk_name: Target SDK (SDK edges; None means the project SDK)
    """

    kind: DependencyKind
    scope: DependencyScope = DependencyScope.COMPILE
    exported: bool = False
    module_name: Optional[str] = None
    library_name: Optional[str] = None
    library: Optional[Library] = None
    sdk_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "kind": self.kind.value,
            "scope": self.scope.value,
            "exported": self.exported,
            "module_name": self.module_name,
            "library_name": self.library_name,
            "library": self.library.to_dict() if self.library else None,
            "sdk_name": self.sdk_name,
        }


@dataclass
class Module:
    """Named compilation unit of the project."""

    name: str
    module_file: Optional[Path] = None
    content_roots: List[Path] = field(default_factory=list)
    source_roots: List[Path] = field(default_factory=list)
    test_source_roots: List[Path] = field(default_factory=list)
    output_dir: Optional[Path] = None
    test_output_dir: Optional[Path] = None
    dependencies: List[Dependency] = field(default_factory=list)
    inherited_sdk_name: Optional[str] = None

    @property
    def sdk_name(self) -> Optional[str]:
        """Name of the SDK this module compiles against, if any."""
        for dependency in self.dependencies:
            if dependency.kind is DependencyKind.SDK:
                return dependency.sdk_name or self.inherited_sdk_name
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "module_file": str(self.module_file) if self.module_file else None,
            "content_roots": [str(p) for p in self.content_roots],
            "source_roots": [str(p) for p in self.source_roots],
            "test_source_roots": [str(p) for p in self.test_source_roots],
            "output_dir": str(self.output_dir) if self.output_dir else None,
            "test_output_dir": str(self.test_output_dir) if self.test_output_dir else None,
            "sdk_name": self.sdk_name,
            "dependencies": [d.to_dict() for d in self.dependencies],
        }


class DuplicateModuleError(Exception):
    """Raised when two modules with the same name are added to a project."""

    pass


@dataclass
class GlobalScope:
    """SDK registry and path variables shared by all modules."""

    path_variables: Dict[str, str] = field(default_factory=dict)
    sdks: Dict[str, Sdk] = field(default_factory=dict)

    def add_sdk(self, name: str, home_path: Path) -> Sdk:
        """Register an SDK, reusing an existing entry with the same name."""
        sdk = self.sdks.get(name)
        if sdk is None:
            sdk = Sdk(name, home_path)
            self.sdks[name] = sdk
        return sdk

    def find_sdk(self, name: str) -> Optional[Sdk]:
        return self.sdks.get(name)


@dataclass
class ProjectScope:
    """Module graph of the project."""

    name: str = ""
    project_dir: Optional[Path] = None
    output_dir: Optional[Path] = None
    sdk_name: Optional[str] = None
    libraries: Dict[str, Library] = field(default_factory=dict)
    _modules: Dict[str, Module] = field(default_factory=dict)

    @property
    def modules(self) -> List[Module]:
        return list(self._modules.values())

    def add_module(self, module: Module) -> None:
        if module.name in self._modules:
            raise DuplicateModuleError(f"Duplicate module name '{module.name}'")
        self._modules[module.name] = module

    def find_module(self, name: str) -> Optional[Module]:
        return self._modules.get(name)

    def module_names(self) -> List[str]:
        return list(self._modules.keys())

    def __iter__(self) -> Iterator[Module]:
        return iter(self._modules.values())


@dataclass
class ProjectModel:
    """Root aggregate of one build invocation."""

    global_scope: GlobalScope = field(default_factory=GlobalScope)
    project: ProjectScope = field(default_factory=ProjectScope)

    def find_library(self, dependency: Dependency) -> Optional[Library]:
        """Resolve the library a LIBRARY edge points at."""
        if dependency.library is not None:
            return dependency.library
        if dependency.library_name is None:
            return None
        return self.project.libraries.get(dependency.library_name)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "project": {
                "name": self.project.name,
                "project_dir": str(self.project.project_dir) if self.project.project_dir else None,
                "output_dir": str(self.project.output_dir) if self.project.output_dir else None,
                "sdk_name": self.project.sdk_name,
                "modules": [m.to_dict() for m in self.project.modules],
                "libraries": [lib.to_dict() for lib in self.project.libraries.values()],
            },
            "global": {
                "path_variables": dict(self.global_scope.path_variables),
                "sdks": [sdk.to_dict() for sdk in self.global_scope.sdks.values()],
            },
        }
