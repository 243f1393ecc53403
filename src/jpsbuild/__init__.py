"""jpsbuild - incremental multi-module builds and runtime classpath resolution."""

__version__ = "0.1.0"
