"""SDK resolution for loaded projects.

Modules refer to SDKs by name only. The resolver maps every referenced name
to an installation directory and registers it in the model's global scope:

1. Look the name up in the SDK table
2. Fall back to the running Java runtime (with a warning) if unmapped
3. Register the SDK, adding ``lib/tools.jar`` as a root when present
4. Append the runtime module roots declared by the installation's release file
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Mapping, Optional

from ..model.project_model import ProjectModel, Sdk
from .release_file import JAR_SEPARATOR, read_module_urls
from .runtime import current_runtime_home

TOOLS_JAR = Path("lib") / "tools.jar"


def jar_url(path: Path) -> str:
    """Root URL of an archive file (``jar://<path>!/``)."""
    return "jar://" + str(Path(path).absolute()).replace("\\", "/") + JAR_SEPARATOR


@dataclass
class SdkResolution:
    """Outcome of resolving one SDK name.

    Attributes:
        name: SDK name referenced by modules
        home_path: Installation directory used
        from_table: False if the running runtime was used as a fallback
        sdk: Registered SDK entry
    """

    name: str
    home_path: Path
    from_table: bool
    sdk: Sdk


class SdkResolver:
    """Resolves module SDK references against an SDK table.

    Example usage:
        resolver = SdkResolver({"jdk11": "/opt/jdk11"})
        for resolution in resolver.resolve(model):
            print(resolution.name, resolution.home_path)
    """

    def __init__(
        self,
        sdk_table: Mapping[str, str],
        runtime_home: Optional[Callable[[], Path]] = None,
    ):
        """
        Initialize the resolver.

        Args:
            sdk_table: SDK name to installation path
            runtime_home: Callable returning the fallback runtime home
                (defaults to current_runtime_home); called at most once
        """
        self.sdk_table = dict(sdk_table)
        self._runtime_home_provider = runtime_home or current_runtime_home
        self._runtime_home: Optional[Path] = None

    @property
    def runtime_home(self) -> Path:
        if self._runtime_home is None:
            self._runtime_home = self._runtime_home_provider()
        return self._runtime_home

    @staticmethod
    def referenced_sdk_names(model: ProjectModel) -> List[str]:
        """Distinct SDK names referenced by modules, in first-seen order."""
        names: List[str] = []
        for module in model.project:
            sdk_name = module.sdk_name
            if sdk_name and sdk_name not in names:
                names.append(sdk_name)
        return names

    def resolve(self, model: ProjectModel) -> List[SdkResolution]:
        """
        Resolve and register every SDK referenced by the model's modules.

        Returns:
            One SdkResolution per distinct SDK name

        Raises:
            ReleaseFileError: If an installation's release file is malformed
            SdkResolutionError: If a fallback is needed but no runtime is found
        """
        resolutions = []
        for sdk_name in self.referenced_sdk_names(model):
            table_path = self.sdk_table.get(sdk_name)
            if table_path is None:
                home_path = self.runtime_home
                logging.warning(
                    f"SDK '{sdk_name}' not specified. Using current JDK ({home_path}) as fallback."
                )
            else:
                home_path = Path(table_path)
                logging.info(f"Using {home_path} for '{sdk_name}' jdk.")

            sdk = self.register_sdk(model, sdk_name, home_path)
            resolutions.append(
                SdkResolution(name=sdk_name, home_path=home_path, from_table=table_path is not None, sdk=sdk)
            )
        return resolutions

    def register_sdk(self, model: ProjectModel, sdk_name: str, home_path: Path) -> Sdk:
        """
        Register an SDK and its roots in the model's global scope.

        Calling this again for the same name and installation adds nothing new.
        """
        sdk = model.global_scope.add_sdk(sdk_name, home_path)

        tools_jar = home_path / TOOLS_JAR
        if tools_jar.is_file():
            sdk.add_root(jar_url(tools_jar))

        added = 0
        for url in read_module_urls(home_path):
            if sdk.add_root(url):
                added += 1
        if added:
            logging.debug(f"Added {added} runtime module roots to SDK '{sdk_name}'")

        return sdk
