"""
Runtime classpath resolution.

After a successful build, the classpath needed to run an entry module is
computed by walking its dependency graph depth-first with an explicit stack:
- only edges included in the requested classpath kind are followed
- SDK edges are never followed
- a module's own source edge contributes its compiled output directory
- library edges contribute the library's ``.jar`` files

Module outputs come first, in traversal order, followed by library archives.
Both lists are deduplicated by absolute path.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Set, Tuple

from ..model.project_model import (
    ClasspathKind,
    Dependency,
    DependencyKind,
    Module,
    ProjectModel,
)

ARCHIVE_EXTENSION = ".jar"

_TEST_KINDS = (ClasspathKind.TEST_COMPILE, ClasspathKind.TEST_RUNTIME)


class EntryModuleNotFoundError(Exception):
    """Raised when the entry module is not part of the project."""

    def __init__(self, module_name: str, available: Optional[List[str]] = None):
        self.module_name = module_name
        names = ", ".join(available or []) or "none"
        super().__init__(f"Module {module_name} not found. Available modules: {names}")


@dataclass
class RuntimeClasspath:
    """Ordered, deduplicated classpath of one module."""

    module_outputs: List[Path] = field(default_factory=list)
    library_archives: List[Path] = field(default_factory=list)

    @property
    def entries(self) -> List[Path]:
        return self.module_outputs + self.library_archives

    def to_string(self, separator: str = os.pathsep) -> str:
        return separator.join(str(entry) for entry in self.entries)


class _OrderedPathSet:
    def __init__(self) -> None:
        self.items: List[Path] = []
        self._seen: Set[Path] = set()

    def add(self, path: Path) -> None:
        path = Path(os.path.abspath(path))
        if path not in self._seen:
            self._seen.add(path)
            self.items.append(path)


class RuntimeClasspathResolver:
    """
    Computes the runtime classpath of an entry module.

    The model is only read, never modified.

    Example usage:
        resolver = RuntimeClasspathResolver(model)
        classpath = resolver.resolve("app")
        resolver.write(classpath, Path("build/classpath.txt"))
    """

    def __init__(
        self,
        model: ProjectModel,
        kind: ClasspathKind = ClasspathKind.PRODUCTION_RUNTIME,
        exported_only: bool = False,
    ):
        """
        Initialize the resolver.

        Args:
            model: Loaded project model
            kind: Classpath kind whose edges are followed
            exported_only: Only follow exported edges of transitive dependencies
        """
        self.model = model
        self.kind = kind
        self.exported_only = exported_only

    def resolve(self, module_name: str) -> RuntimeClasspath:
        """
        Resolve the classpath of module_name.

        Raises:
            EntryModuleNotFoundError: If the module does not exist
        """
        entry = self.model.project.find_module(module_name)
        if entry is None:
            raise EntryModuleNotFoundError(module_name, self.model.project.module_names())

        outputs = _OrderedPathSet()
        archives = _OrderedPathSet()
        visited: Set[str] = {entry.name}
        # Each frame is (module, is_entry, remaining dependency edges)
        stack: List[Tuple[Module, bool, Iterator[Dependency]]] = [(entry, True, iter(entry.dependencies))]

        while stack:
            module, is_entry, dependencies = stack[-1]
            dependency = next(dependencies, None)
            if dependency is None:
                stack.pop()
                continue

            if dependency.kind is DependencyKind.SDK:
                continue

            if dependency.kind is DependencyKind.MODULE_SOURCE:
                self._add_module_output(module, outputs)
                continue

            if not dependency.scope.is_included_in(self.kind):
                continue
            if self.exported_only and not is_entry and not dependency.exported:
                continue

            if dependency.kind is DependencyKind.MODULE:
                target = self.model.project.find_module(dependency.module_name or "")
                if target is None:
                    logging.warning(
                        f"Module '{module.name}' depends on unknown module '{dependency.module_name}'"
                    )
                    continue
                if target.name not in visited:
                    visited.add(target.name)
                    stack.append((target, False, iter(target.dependencies)))

            elif dependency.kind is DependencyKind.LIBRARY:
                library = self.model.find_library(dependency)
                if library is None:
                    logging.warning(
                        f"Module '{module.name}' depends on unknown library '{dependency.library_name}'"
                    )
                    continue
                for file in library.get_files():
                    if file.name.endswith(ARCHIVE_EXTENSION):
                        archives.add(file)

        return RuntimeClasspath(module_outputs=outputs.items, library_archives=archives.items)

    def _add_module_output(self, module: Module, outputs: _OrderedPathSet) -> None:
        if self.kind in _TEST_KINDS and module.test_output_dir is not None:
            outputs.add(module.test_output_dir)
        if module.output_dir is not None:
            outputs.add(module.output_dir)

    @staticmethod
    def write(classpath: RuntimeClasspath, output_path: Path, separator: str = os.pathsep) -> None:
        """Write the classpath as a single line, replacing existing content.

        The file is written to a temporary sibling first, so a failed write
        never leaves a partial classpath behind.
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = output_path.with_name(output_path.name + ".tmp")
        temp_path.write_text(classpath.to_string(separator), encoding="utf-8")
        temp_path.replace(output_path)
