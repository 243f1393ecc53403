"""
Build system components for jpsbuild.

This module provides the build pipeline including:
- Build scopes requested from the engine
- The build engine contract and subprocess engine
- Fail-fast message handling
- Runtime classpath resolution
- Build orchestration
"""

from .classpath import EntryModuleNotFoundError, RuntimeClasspath, RuntimeClasspathResolver
from .engine import BuildEngine, BuildEngineError, SubprocessBuildEngine, terminate_process_tree
from .message_sink import BuildFailedError, MessageSink, SinkState
from .messages import BuildMessage, MessageKind
from .orchestrator import BuildOrchestrator, BuildOrchestratorError, BuildResult
from .scopes import BuildScope, TargetType, build_scopes

__all__ = [
    "EntryModuleNotFoundError",
    "RuntimeClasspath",
    "RuntimeClasspathResolver",
    "BuildEngine",
    "BuildEngineError",
    "SubprocessBuildEngine",
    "terminate_process_tree",
    "BuildFailedError",
    "MessageSink",
    "SinkState",
    "BuildMessage",
    "MessageKind",
    "BuildOrchestrator",
    "BuildOrchestratorError",
    "BuildResult",
    "BuildScope",
    "TargetType",
    "build_scopes",
]
