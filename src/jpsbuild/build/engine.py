"""Build engine contract and subprocess implementation.

The incremental compiler is an opaque engine. The orchestrator only hands it
the resolved model, a data storage directory and the requested scopes, and
listens to the messages it reports:

    engine.run(model, data_storage_root, on_message, scopes, allow_parallel)

Reusing the same data storage directory between runs is what makes builds
incremental; an empty directory always produces a full build.

SubprocessBuildEngine runs an external command (for example a JPS standalone
wrapper) with a JSON build request and reads one message per output line.
"""

import json
import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, List, Sequence

import psutil

from ..model.project_model import ProjectModel
from .messages import BuildMessage
from .scopes import BuildScope

MessageHandler = Callable[[BuildMessage], None]

REQUEST_FILE_NAME = "build-request.json"
TERMINATE_TIMEOUT = 3.0


class BuildEngineError(Exception):
    """Raised when the build engine cannot be run or fails unexpectedly."""

    pass


class BuildEngine(ABC):
    """Contract of an incremental build engine."""

    @abstractmethod
    def run(
        self,
        model: ProjectModel,
        data_storage_root: Path,
        on_message: MessageHandler,
        scopes: Sequence[BuildScope],
        allow_parallel: bool = True,
    ) -> None:
        """Build the requested scopes.

        on_message is called synchronously, zero or more times, before this
        method returns. Exceptions raised by on_message must propagate.
        """


def build_request(
    model: ProjectModel,
    data_storage_root: Path,
    scopes: Sequence[BuildScope],
    allow_parallel: bool,
) -> dict[str, Any]:
    """Serializable build request handed to external engines."""
    return {
        "data_storage_root": str(Path(data_storage_root).absolute()),
        "allow_parallel": allow_parallel,
        "scopes": [scope.to_dict() for scope in scopes],
        "model": model.to_dict(),
    }


def terminate_process_tree(pid: int, timeout: float = TERMINATE_TIMEOUT) -> int:
    """Terminate a process and all of its children.

    Children are terminated before their parents; processes still alive after
    the timeout are killed.

    Returns:
        Number of processes signalled
    """
    try:
        root = psutil.Process(pid)
    except psutil.NoSuchProcess:
        return 0

    try:
        processes = root.children(recursive=True)
    except psutil.NoSuchProcess:
        processes = []
    processes.append(root)

    signalled: List[psutil.Process] = []
    for proc in reversed(processes):
        try:
            proc.terminate()
            signalled.append(proc)
        except psutil.NoSuchProcess:
            pass  # Already dead

    _gone, alive = psutil.wait_procs(signalled, timeout=timeout)
    for proc in alive:
        try:
            proc.kill()
            logging.warning(f"Force killed build engine process {proc.pid}")
        except psutil.NoSuchProcess:
            pass

    return len(signalled)


class SubprocessBuildEngine(BuildEngine):
    """Runs an external engine command and relays its messages.

    The command receives the path of a JSON build request as its last
    argument and reports messages on stdout, one per line.

    Example usage:
        engine = SubprocessBuildEngine(["java", "-jar", "jps-wrapper.jar"])
        engine.run(model, Path("build/out"), sink, scopes)
    """

    def __init__(self, command: Sequence[str], verbose: bool = False):
        """
        Initialize the engine.

        Args:
            command: Engine command line (request path is appended)
            verbose: Log the full command before running it
        """
        self.command = list(command)
        self.verbose = verbose

    def write_request(
        self,
        model: ProjectModel,
        data_storage_root: Path,
        scopes: Sequence[BuildScope],
        allow_parallel: bool,
    ) -> Path:
        """Write the build request into the data storage root atomically."""
        data_storage_root.mkdir(parents=True, exist_ok=True)
        request_path = data_storage_root / REQUEST_FILE_NAME
        temp_path = request_path.with_suffix(".tmp")
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(build_request(model, data_storage_root, scopes, allow_parallel), f, indent=2)
        temp_path.replace(request_path)
        return request_path

    def run(
        self,
        model: ProjectModel,
        data_storage_root: Path,
        on_message: MessageHandler,
        scopes: Sequence[BuildScope],
        allow_parallel: bool = True,
    ) -> None:
        if not self.command:
            raise BuildEngineError("No build engine command configured (set engineCommand)")

        request_path = self.write_request(model, Path(data_storage_root), scopes, allow_parallel)
        cmd = self.command + [str(request_path)]
        if self.verbose:
            logging.debug(f"Running build engine: {' '.join(cmd)}")

        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise BuildEngineError(f"Failed to start build engine '{self.command[0]}': {e}") from e

        with process:
            try:
                for line in process.stdout:  # type: ignore[union-attr]
                    if not line.strip():
                        continue
                    on_message(BuildMessage.from_line(line))
            except BaseException:
                # Fatal message or interrupt: stop the engine before propagating
                terminate_process_tree(process.pid)
                raise
            returncode = process.wait()

        if returncode != 0:
            raise BuildEngineError(f"Build engine exited with code {returncode}")
