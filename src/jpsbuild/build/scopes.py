"""Build scopes requested from the build engine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List

from ..model.project_model import ProjectModel


class TargetType(Enum):
    """Known build target types."""

    MODULE_PRODUCTION = "java-production"
    MODULE_TEST = "java-test"

    @property
    def type_id(self) -> str:
        return self.value


@dataclass
class BuildScope:
    """Unit of work for the build engine.

    Attributes:
        type_id: Target type identifier
        target_ids: Targets of that type to build
        force_build: Rebuild targets even if up to date
    """

    type_id: str
    target_ids: List[str] = field(default_factory=list)
    force_build: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"type_id": self.type_id, "target_ids": list(self.target_ids), "force_build": self.force_build}


def build_scopes(model: ProjectModel, force_build: bool = False) -> List[BuildScope]:
    """Create one whole-project scope per target type.

    Every scope covers all modules of the project; narrowing to what actually
    needs compiling is left to the engine.
    """
    module_names = model.project.module_names()
    return [
        BuildScope(type_id=target_type.type_id, target_ids=list(module_names), force_build=force_build)
        for target_type in TargetType
    ]
