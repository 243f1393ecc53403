"""
Build orchestration for jpsbuild projects.

This module coordinates one build run, from loading the project definition to
writing the runtime classpath of the entry module:
- Project loading (modules, libraries, path variables)
- SDK resolution (SDK table, runtime fallback, release file modules)
- Build scope construction
- The incremental build itself (delegated to a BuildEngine)
- Runtime classpath resolution

Every phase runs sequentially on a ProjectModel created at the start of the
run and passed by reference; nothing is shared between runs.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Mapping, Optional

from ..config.path_variables import PathVariableError, create_path_variables
from ..config.sdk_table import SdkTableError, load_sdk_table
from ..config.settings import BuildSettings
from ..model.project_loader import ProjectLoader, ProjectLoadError
from ..sdk.release_file import ReleaseFileError
from ..sdk.resolver import SdkResolver
from ..sdk.runtime import SdkResolutionError
from .classpath import EntryModuleNotFoundError, RuntimeClasspathResolver
from .engine import BuildEngine, BuildEngineError, SubprocessBuildEngine
from .message_sink import BuildFailedError, MessageSink
from .scopes import build_scopes


@dataclass
class BuildResult:
    """Result of a complete build operation."""

    success: bool
    classpath_file: Optional[Path]
    classpath: List[Path] = field(default_factory=list)
    build_time: float = 0.0
    message: str = ""
    warning_count: int = 0


class BuildOrchestratorError(Exception):
    """Exception raised for build orchestration errors."""

    pass


class BuildOrchestrator:
    """
    Orchestrates one build of a multi-module project.

    Phases:
    1. Load the project definition with path variables
    2. Resolve and register the SDKs referenced by modules
    3. Build one whole-project scope per target type
    4. Run the build engine, stopping at the first fatal message
    5. Resolve the entry module's runtime classpath and write it to a file

    Example usage:
        settings = BuildSettings.from_sources(cli={...}, environ=os.environ)
        orchestrator = BuildOrchestrator(settings)
        result = orchestrator.build()
        if result.success:
            print(f"Classpath: {result.classpath_file}")
    """

    def __init__(
        self,
        settings: BuildSettings,
        engine: Optional[BuildEngine] = None,
        runtime_home: Optional[Callable[[], Path]] = None,
        printer: Optional[Callable[[str], None]] = None,
        verbose: bool = False,
    ):
        """
        Initialize build orchestrator.

        Args:
            settings: Build settings for this run
            engine: Build engine (defaults to SubprocessBuildEngine with settings.engine_command)
            runtime_home: Fallback runtime home provider for unmapped SDKs
            printer: Output function for build messages (defaults to print)
            verbose: Enable verbose output
        """
        self.settings = settings
        self.engine = engine or SubprocessBuildEngine(settings.engine_command, verbose=verbose)
        self.runtime_home = runtime_home
        self.printer = printer or print
        self.verbose = verbose

    def _load_sdk_table(self) -> Mapping[str, str]:
        if self.settings.jdk_table is None:
            return {}
        return load_sdk_table(self.settings.jdk_table)

    def build(self) -> BuildResult:
        """
        Execute the complete build.

        Returns:
            BuildResult with build status and the written classpath.
            On failure no classpath file is written.
        """
        start_time = time.time()
        settings = self.settings
        sink = MessageSink(printer=self.printer)

        try:
            # Phase 1: Load project
            if self.verbose:
                print("[1/5] Loading project...")

            path_variables = create_path_variables(settings.kotlin_home, settings.maven_repository)
            model = ProjectLoader(path_variables).load(settings.project_path)

            if self.verbose:
                print(f"      Project: {model.project.name}")
                print(f"      Modules: {len(model.project.modules)}")
                print(f"      Libraries: {len(model.project.libraries)}")

            # Phase 2: Resolve SDKs
            if self.verbose:
                print("[2/5] Resolving SDKs...")

            resolver = SdkResolver(self._load_sdk_table(), runtime_home=self.runtime_home)
            resolutions = resolver.resolve(model)

            if self.verbose:
                for resolution in resolutions:
                    source = "table" if resolution.from_table else "fallback"
                    print(
                        f"      {resolution.name}: {resolution.home_path} "
                        + f"({source}, {len(resolution.sdk.roots)} roots)"
                    )

            # Phase 3: Build scopes
            if self.verbose:
                print("[3/5] Preparing build scopes...")

            if settings.data_storage_root.exists() and not settings.data_storage_root.is_dir():
                raise BuildOrchestratorError(
                    f"Data storage root is not a directory: {settings.data_storage_root}"
                )

            scopes = build_scopes(model, force_build=settings.force_rebuild)

            if self.verbose:
                for scope in scopes:
                    print(f"      {scope.type_id}: {len(scope.target_ids)} targets (force={scope.force_build})")

            # Phase 4: Build
            if self.verbose:
                print("[4/5] Building...")

            self.engine.run(model, settings.data_storage_root, sink, scopes, True)
            # The engine may have swallowed BuildFailedError
            sink.check()

            # Phase 5: Runtime classpath
            if self.verbose:
                print("[5/5] Resolving runtime classpath...")

            classpath_resolver = RuntimeClasspathResolver(model)
            classpath = classpath_resolver.resolve(settings.module_name)
            classpath_resolver.write(classpath, settings.classpath_output_file_path)

            if self.verbose:
                print(f"      Module outputs: {len(classpath.module_outputs)}")
                print(f"      Library archives: {len(classpath.library_archives)}")

            return BuildResult(
                success=True,
                classpath_file=settings.classpath_output_file_path,
                classpath=classpath.entries,
                build_time=time.time() - start_time,
                message="Build successful",
                warning_count=sink.warning_count,
            )

        except (
            BuildFailedError,
            BuildEngineError,
            BuildOrchestratorError,
            EntryModuleNotFoundError,
            PathVariableError,
            ProjectLoadError,
            ReleaseFileError,
            SdkResolutionError,
            SdkTableError,
        ) as e:
            return BuildResult(
                success=False,
                classpath_file=None,
                build_time=time.time() - start_time,
                message=str(e),
                warning_count=sink.warning_count,
            )
        except Exception as e:
            logging.exception("Unexpected error during build")
            return BuildResult(
                success=False,
                classpath_file=None,
                build_time=time.time() - start_time,
                message=f"Unexpected error: {e}",
                warning_count=sink.warning_count,
            )
