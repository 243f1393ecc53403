"""SDK resolution for jpsbuild.

This package maps module SDK references to Java installations, including
fallback to the running runtime and runtime-module discovery from the
installation's release file.
"""

from .release_file import ReleaseFileError, jrt_base_url, parse_release_properties, read_module_urls
from .resolver import SdkResolution, SdkResolver, jar_url
from .runtime import SdkResolutionError, current_runtime_home

__all__ = [
    "ReleaseFileError",
    "jrt_base_url",
    "parse_release_properties",
    "read_module_urls",
    "SdkResolution",
    "SdkResolver",
    "jar_url",
    "SdkResolutionError",
    "current_runtime_home",
]
