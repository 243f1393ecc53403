"""
Project definition loader.

This module parses an IntelliJ-style project definition into a ProjectModel.
Two layouts are supported:

Directory-based:
    <project>/
    ├── .idea/
    │   ├── misc.xml            # project SDK and output directory
    │   ├── modules.xml         # module file list
    │   └── libraries/*.xml     # project libraries
    └── app/app.iml             # one module file per module

File-based:
    <project>/project.ipr       # all project components in one file

Every URL in these files may use ``$NAME$`` path variables. Loading is never
incremental: each call performs a full parse.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Mapping, Optional

from ..config.path_variables import (
    MODULE_DIR,
    PROJECT_DIR,
    USER_HOME,
    PathVariableExpander,
)
from .project_model import (
    Dependency,
    DependencyKind,
    DependencyScope,
    DuplicateModuleError,
    Library,
    Module,
    ProjectModel,
    url_to_path,
)

IDEA_DIR = ".idea"
PROJECT_FILE_EXTENSION = ".ipr"


class ProjectLoadError(Exception):
    """Exception raised when a project definition cannot be loaded."""

    pass


def _parse_xml(path: Path) -> ET.Element:
    if not path.exists():
        raise ProjectLoadError(f"Project file not found: {path}")
    try:
        return ET.parse(path).getroot()
    except ET.ParseError as e:
        raise ProjectLoadError(f"Failed to parse {path}: {e}") from e


def _find_component(root: ET.Element, name: str) -> Optional[ET.Element]:
    for component in root.iter("component"):
        if component.get("name") == name:
            return component
    return None


def _is_true(value: Optional[str]) -> bool:
    return (value or "").strip().lower() == "true"


class ProjectLoader:
    """
    Loads a project definition into a fresh ProjectModel.

    Usage:
        loader = ProjectLoader({"MAVEN_REPOSITORY": "/home/me/.m2/repository"})
        model = loader.load(Path("~/src/myproject"))
        for module in model.project.modules:
            print(module.name, module.sdk_name)
    """

    def __init__(self, path_variables: Mapping[str, str]):
        """
        Initialize the loader.

        Args:
            path_variables: User path variables (KOTLIN_BUNDLED, MAVEN_REPOSITORY, ...)
        """
        self.path_variables = dict(path_variables)

    def load(self, project_path: Path) -> ProjectModel:
        """
        Load the project at project_path.

        Args:
            project_path: Directory containing .idea/, the .idea/ directory itself,
                or an .ipr project file

        Returns:
            Populated ProjectModel

        Raises:
            ProjectLoadError: If the project cannot be found or parsed
            PathVariableError: If a file uses an undefined path variable
        """
        project_path = Path(project_path).expanduser().absolute()

        model = ProjectModel()
        model.global_scope.path_variables.update(self.path_variables)

        if project_path.is_file() and project_path.suffix == PROJECT_FILE_EXTENSION:
            self._load_file_based(model, project_path)
        elif project_path.is_dir() and project_path.name == IDEA_DIR:
            self._load_directory_based(model, project_path.parent)
        elif (project_path / IDEA_DIR).is_dir():
            self._load_directory_based(model, project_path)
        else:
            raise ProjectLoadError(
                f"No project found at {project_path}: expected a directory with "
                + f"{IDEA_DIR}/ or an {PROJECT_FILE_EXTENSION} file"
            )

        logging.debug(
            f"Loaded project '{model.project.name}' with {len(model.project.modules)} modules "
            + f"and {len(model.project.libraries)} libraries"
        )
        return model

    def _project_expander(self, project_dir: Path, source: Path) -> PathVariableExpander:
        variables = {
            PROJECT_DIR: str(project_dir).replace("\\", "/"),
            USER_HOME: str(Path.home()).replace("\\", "/"),
        }
        variables.update(self.path_variables)
        return PathVariableExpander(variables, source)

    def _load_directory_based(self, model: ProjectModel, project_dir: Path) -> None:
        idea_dir = project_dir / IDEA_DIR
        project = model.project
        project.project_dir = project_dir

        name_file = idea_dir / ".name"
        if name_file.exists():
            project.name = name_file.read_text(encoding="utf-8").strip()
        else:
            project.name = project_dir.name

        misc_file = idea_dir / "misc.xml"
        expander = self._project_expander(project_dir, misc_file)
        if misc_file.exists():
            self._load_root_manager(model, _parse_xml(misc_file), expander)
        self._apply_default_output(model)

        libraries_dir = idea_dir / "libraries"
        if libraries_dir.is_dir():
            for library_file in sorted(libraries_dir.glob("*.xml")):
                table = _parse_xml(library_file)
                self._load_libraries(
                    model, table, self._project_expander(project_dir, library_file)
                )

        modules_file = idea_dir / "modules.xml"
        self._load_module_list(
            model, _parse_xml(modules_file), self._project_expander(project_dir, modules_file)
        )

    def _load_file_based(self, model: ProjectModel, project_file: Path) -> None:
        project = model.project
        project.project_dir = project_file.parent
        project.name = project_file.stem

        root = _parse_xml(project_file)
        expander = self._project_expander(project_file.parent, project_file)

        self._load_root_manager(model, root, expander)
        self._apply_default_output(model)
        self._load_libraries(model, root, expander)
        self._load_module_list(model, root, expander)

    def _load_root_manager(
        self, model: ProjectModel, root: ET.Element, expander: PathVariableExpander
    ) -> None:
        component = _find_component(root, "ProjectRootManager")
        if component is None:
            return
        model.project.sdk_name = component.get("project-jdk-name") or None
        output = component.find("output")
        if output is not None and output.get("url"):
            model.project.output_dir = url_to_path(expander.expand(output.get("url", "")))

    def _apply_default_output(self, model: ProjectModel) -> None:
        project = model.project
        if project.output_dir is None and project.project_dir is not None:
            project.output_dir = project.project_dir / "out"

    def _load_libraries(
        self, model: ProjectModel, root: ET.Element, expander: PathVariableExpander
    ) -> None:
        table = root if root.get("name") == "libraryTable" else _find_component(root, "libraryTable")
        if table is None:
            return
        for element in table.findall("library"):
            library = self._parse_library(element, expander)
            if not library.name:
                raise ProjectLoadError(f"Project library without a name in {expander.source}")
            model.project.libraries[library.name] = library

    def _parse_library(self, element: ET.Element, expander: PathVariableExpander) -> Library:
        library = Library(name=element.get("name", ""))
        classes = element.find("CLASSES")
        if classes is not None:
            for root in classes.findall("root"):
                url = root.get("url")
                if url:
                    library.roots.append(expander.expand(url))
        for jar_directory in element.findall("jarDirectory"):
            if jar_directory.get("type", "CLASSES") != "CLASSES":
                continue
            url = jar_directory.get("url")
            if url:
                library.jar_directories[expander.expand(url)] = _is_true(jar_directory.get("recursive"))
        return library

    def _load_module_list(
        self, model: ProjectModel, root: ET.Element, expander: PathVariableExpander
    ) -> None:
        component = _find_component(root, "ProjectModuleManager")
        if component is None:
            raise ProjectLoadError(f"No module list (ProjectModuleManager) in {expander.source}")

        for element in component.iter("module"):
            file_path = element.get("filepath")
            if file_path:
                module_file = Path(expander.expand(file_path))
            elif element.get("fileurl"):
                module_file = url_to_path(expander.expand(element.get("fileurl", "")))
            else:
                continue
            module = self._load_module(model, module_file)
            try:
                model.project.add_module(module)
            except DuplicateModuleError as e:
                raise ProjectLoadError(f"{e} (from {module_file})") from e

    def _load_module(self, model: ProjectModel, module_file: Path) -> Module:
        root = _parse_xml(module_file)
        expander = self._project_expander(model.project.project_dir or module_file.parent, module_file)
        expander = expander.with_variables(
            source=module_file, **{MODULE_DIR: str(module_file.parent).replace("\\", "/")}
        )

        module = Module(name=module_file.stem, module_file=module_file)
        module.inherited_sdk_name = model.project.sdk_name

        component = _find_component(root, "NewModuleRootManager")
        if component is None:
            # Module without roots or dependencies (e.g. a grouping module)
            self._apply_module_output(model, module, None, expander)
            return module

        self._apply_module_output(model, module, component, expander)

        for content in component.findall("content"):
            if content.get("url"):
                module.content_roots.append(url_to_path(expander.expand(content.get("url", ""))))
            for source_folder in content.findall("sourceFolder"):
                url = source_folder.get("url")
                if not url:
                    continue
                path = url_to_path(expander.expand(url))
                if _is_true(source_folder.get("isTestSource")):
                    module.test_source_roots.append(path)
                else:
                    module.source_roots.append(path)

        for entry in component.findall("orderEntry"):
            dependency = self._parse_order_entry(entry, expander, module_file)
            if dependency is not None:
                module.dependencies.append(dependency)

        return module

    def _apply_module_output(
        self,
        model: ProjectModel,
        module: Module,
        component: Optional[ET.Element],
        expander: PathVariableExpander,
    ) -> None:
        output_root = model.project.output_dir
        if output_root is not None:
            module.output_dir = output_root / "production" / module.name
            module.test_output_dir = output_root / "test" / module.name

        if component is None or _is_true(component.get("inherit-compiler-output")):
            return

        output = component.find("output")
        if output is not None and output.get("url"):
            module.output_dir = url_to_path(expander.expand(output.get("url", "")))
        output_test = component.find("output-test")
        if output_test is not None and output_test.get("url"):
            module.test_output_dir = url_to_path(expander.expand(output_test.get("url", "")))

    def _parse_order_entry(
        self, entry: ET.Element, expander: PathVariableExpander, module_file: Path
    ) -> Optional[Dependency]:
        entry_type = entry.get("type")
        scope = DependencyScope.from_string(entry.get("scope"))
        exported = entry.get("exported") is not None

        if entry_type == "sourceFolder":
            return Dependency(kind=DependencyKind.MODULE_SOURCE)
        if entry_type == "inheritedJdk":
            return Dependency(kind=DependencyKind.SDK)
        if entry_type == "jdk":
            return Dependency(kind=DependencyKind.SDK, sdk_name=entry.get("jdkName"))
        if entry_type == "module":
            name = entry.get("module-name")
            if not name:
                raise ProjectLoadError(f"Module dependency without module-name in {module_file}")
            return Dependency(kind=DependencyKind.MODULE, scope=scope, exported=exported, module_name=name)
        if entry_type == "library":
            name = entry.get("name")
            if not name:
                raise ProjectLoadError(f"Library dependency without name in {module_file}")
            return Dependency(kind=DependencyKind.LIBRARY, scope=scope, exported=exported, library_name=name)
        if entry_type == "module-library":
            element = entry.find("library")
            if element is None:
                raise ProjectLoadError(f"Module library entry without <library> in {module_file}")
            return Dependency(
                kind=DependencyKind.LIBRARY,
                scope=scope,
                exported=exported,
                library=self._parse_library(element, expander),
            )

        logging.debug(f"Skipping unsupported order entry type '{entry_type}' in {module_file}")
        return None
