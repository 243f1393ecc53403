"""Project model and loader for jpsbuild."""

from .project_loader import ProjectLoader, ProjectLoadError
from .project_model import (
    ClasspathKind,
    Dependency,
    DependencyKind,
    DependencyScope,
    DuplicateModuleError,
    GlobalScope,
    Library,
    Module,
    ProjectModel,
    ProjectScope,
    Sdk,
    url_to_path,
)

__all__ = [
    "ProjectLoader",
    "ProjectLoadError",
    "ClasspathKind",
    "Dependency",
    "DependencyKind",
    "DependencyScope",
    "DuplicateModuleError",
    "GlobalScope",
    "Library",
    "Module",
    "ProjectModel",
    "ProjectScope",
    "Sdk",
    "url_to_path",
]
