"""Shared fixtures for jpsbuild tests."""

from pathlib import Path
from typing import Dict, List, Optional

import pytest

from jpsbuild.build.engine import BuildEngine
from jpsbuild.build.messages import BuildMessage, MessageKind


def write_project(
    root: Path,
    modules: Dict[str, List[str]],
    libraries: Optional[Dict[str, List[str]]] = None,
    project_sdk: Optional[str] = "jdk11",
    output_url: str = "file://$PROJECT_DIR$/out",
) -> Path:
    """Write a directory-based project.

    Args:
        root: Project directory
        modules: Module name -> raw <orderEntry .../> elements of its .iml file
        libraries: Library name -> root URLs of its CLASSES
        project_sdk: Project SDK name (None for no project SDK)
        output_url: Project compiler output URL

    Returns:
        The project directory
    """
    idea = root / ".idea"
    idea.mkdir(parents=True, exist_ok=True)

    sdk_attributes = f' project-jdk-name="{project_sdk}" project-jdk-type="JavaSDK"' if project_sdk else ""
    (idea / "misc.xml").write_text(
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<project version="4">\n'
        f'  <component name="ProjectRootManager" version="2"{sdk_attributes}>\n'
        f'    <output url="{output_url}" />\n'
        "  </component>\n"
        "</project>\n"
    )

    module_lines = "\n".join(
        f'      <module fileurl="file://$PROJECT_DIR$/{name}/{name}.iml" '
        f'filepath="$PROJECT_DIR$/{name}/{name}.iml" />'
        for name in modules
    )
    (idea / "modules.xml").write_text(
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<project version="4">\n'
        '  <component name="ProjectModuleManager">\n'
        "    <modules>\n"
        f"{module_lines}\n"
        "    </modules>\n"
        "  </component>\n"
        "</project>\n"
    )

    for name, entries in (libraries or {}).items():
        library_dir = idea / "libraries"
        library_dir.mkdir(exist_ok=True)
        roots = "\n".join(f'      <root url="{url}" />' for url in entries)
        (library_dir / f"{name.replace('-', '_').replace('.', '_')}.xml").write_text(
            '<component name="libraryTable">\n'
            f'  <library name="{name}">\n'
            "    <CLASSES>\n"
            f"{roots}\n"
            "    </CLASSES>\n"
            "    <JAVADOC />\n"
            "    <SOURCES />\n"
            "  </library>\n"
            "</component>\n"
        )

    for name, entries in modules.items():
        module_dir = root / name
        (module_dir / "src").mkdir(parents=True, exist_ok=True)
        order_entries = "\n".join(f"    {entry}" for entry in entries)
        (module_dir / f"{name}.iml").write_text(
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<module type="JAVA_MODULE" version="4">\n'
            '  <component name="NewModuleRootManager" inherit-compiler-output="true">\n'
            '    <content url="file://$MODULE_DIR$">\n'
            '      <sourceFolder url="file://$MODULE_DIR$/src" isTestSource="false" />\n'
            "    </content>\n"
            f"{order_entries}\n"
            "  </component>\n"
            "</module>\n"
        )

    return root


def make_jdk(home: Path, modules: Optional[List[str]] = None, tools_jar: bool = False) -> Path:
    """Create a fake Java installation directory."""
    (home / "bin").mkdir(parents=True, exist_ok=True)
    if modules is not None:
        (home / "release").write_text(f'JAVA_VERSION="11.0.2"\nMODULES="{" ".join(modules)}"\n')
    if tools_jar:
        (home / "lib").mkdir(parents=True, exist_ok=True)
        (home / "lib" / "tools.jar").write_bytes(b"PK")
    return home


class FakeBuildEngine(BuildEngine):
    """In-process engine that replays a fixed list of messages."""

    def __init__(self, messages: Optional[List[BuildMessage]] = None, swallow_errors: bool = False):
        self.messages = messages or [BuildMessage(MessageKind.INFO, "Build completed")]
        self.swallow_errors = swallow_errors
        self.calls: List[dict] = []
        self.delivered: List[BuildMessage] = []

    def run(self, model, data_storage_root, on_message, scopes, allow_parallel=True):
        self.calls.append(
            {
                "model": model,
                "data_storage_root": data_storage_root,
                "scopes": list(scopes),
                "allow_parallel": allow_parallel,
            }
        )
        for message in self.messages:
            try:
                on_message(message)
            except Exception:
                if not self.swallow_errors:
                    raise
            self.delivered.append(message)


@pytest.fixture
def fake_engine():
    return FakeBuildEngine()


@pytest.fixture
def project_writer():
    """Return the write_project helper."""
    return write_project


@pytest.fixture
def jdk_factory():
    """Return the make_jdk helper."""
    return make_jdk


@pytest.fixture
def engine_factory():
    """Return the FakeBuildEngine class."""
    return FakeBuildEngine
