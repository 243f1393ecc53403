"""
Command-line interface for jpsbuild.

This module provides the `jpsbuild` CLI tool for building multi-module
projects and writing the runtime classpath of an entry module.
"""

import argparse
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from jpsbuild import __version__
from jpsbuild.build import BuildOrchestrator
from jpsbuild.cli_utils import ErrorFormatter, setup_logging
from jpsbuild.config import BuildSettings, SettingsError, parse_properties
from jpsbuild.config.sdk_table import SdkTableError, write_sdk_table


@dataclass
class BuildArgs:
    """Arguments for the build command."""

    module_name: Optional[str] = None
    project_path: Optional[str] = None
    classpath_output_file_path: Optional[str] = None
    data_storage_root: Optional[str] = None
    jdk_table: Optional[str] = None
    kotlin_home: Optional[str] = None
    maven_repository: Optional[str] = None
    engine_command: Optional[str] = None
    incremental: Optional[bool] = None
    properties: List[str] = field(default_factory=list)
    log_file: Optional[Path] = None
    verbose: bool = False

    def cli_values(self) -> Dict[str, Optional[str]]:
        """Command-line values keyed by settings key."""
        return {
            "moduleName": self.module_name,
            "projectPath": self.project_path,
            "classpathOutputFilePath": self.classpath_output_file_path,
            "dataStorageRoot": self.data_storage_root,
            "jdkTable": self.jdk_table,
            "kotlinHome": self.kotlin_home,
            "mavenRepository": self.maven_repository,
            "engineCommand": self.engine_command,
            "incremental": None if self.incremental is None else str(self.incremental).lower(),
        }


@dataclass
class SdkTableArgs:
    """Arguments for the sdk-table command."""

    entries: List[str]
    output: Path


def build_command(args: BuildArgs) -> None:
    """Build the project and write the entry module's runtime classpath.

    Examples:
        jpsbuild build -m app -p . -o build/classpath.txt -d build/out --engine-command "java -jar jps.jar"
        jpsbuild build -D build.moduleName=app -D build.incremental=false ...
        JPSBUILD_MODULE_NAME=app jpsbuild build ...
    """
    print(f"jpsbuild v{__version__}")
    print()

    setup_logging(verbose=args.verbose, log_file=args.log_file)

    try:
        settings = BuildSettings.from_sources(
            cli=args.cli_values(),
            properties=parse_properties(args.properties),
            environ=os.environ,
        )
    except SettingsError as e:
        ErrorFormatter.handle_configuration_error(e)
        return

    try:
        if args.verbose:
            print(f"Project: {settings.project_path}")
            print(f"Module: {settings.module_name}")
            print(f"Incremental: {settings.incremental}")
            print()
        else:
            print(f"Building module: {settings.module_name}...")

        orchestrator = BuildOrchestrator(settings, verbose=args.verbose)
        result = orchestrator.build()

        if result.success:
            ErrorFormatter.print_success("Build successful!")
            print()
            print(f"Classpath: {result.classpath_file} ({len(result.classpath)} entries)")
            if result.warning_count:
                print(f"Warnings: {result.warning_count}")
            print(f"Build time: {result.build_time:.2f}s")
            sys.exit(0)
        else:
            ErrorFormatter.print_error("Build failed!", result.message)
            sys.exit(1)

    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def sdk_table_command(args: SdkTableArgs) -> None:
    """Write an SDK table file from NAME=PATH entries.

    Examples:
        jpsbuild sdk-table jdk11=/opt/jdk11 corretto-17=/opt/corretto17 -o build/jdkTable.txt
    """
    try:
        table: Dict[str, str] = {}
        for entry in args.entries:
            name, separator, path = entry.partition("=")
            if not separator or not name:
                raise SdkTableError(f"Invalid SDK entry '{entry}', expected NAME=PATH")
            table[name] = path
        write_sdk_table(args.output, table)
    except SdkTableError as e:
        ErrorFormatter.handle_configuration_error(e)
        return

    ErrorFormatter.print_success(f"Wrote {len(table)} SDK entries to {args.output}")
    sys.exit(0)


def main() -> None:
    """jpsbuild - incremental multi-module build and runtime classpath tool."""
    parser = argparse.ArgumentParser(
        prog="jpsbuild",
        description="jpsbuild - incremental multi-module build and runtime classpath tool",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"jpsbuild {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Build command
    build_parser = subparsers.add_parser(
        "build",
        help="Build the project and write the runtime classpath of a module",
    )
    build_parser.add_argument("-m", "--module-name", default=None, help="Entry module name")
    build_parser.add_argument(
        "-p", "--project-path", default=None, help="Project directory or .ipr file"
    )
    build_parser.add_argument(
        "-o",
        "--classpath-output",
        dest="classpath_output_file_path",
        default=None,
        help="File to write the runtime classpath to",
    )
    build_parser.add_argument(
        "-d",
        "--data-storage-root",
        default=None,
        help="Directory holding incremental build state",
    )
    build_parser.add_argument("--jdk-table", default=None, help="SDK table file (name=path lines)")
    build_parser.add_argument(
        "--kotlin-home", default=None, help="Kotlin toolchain home (defines KOTLIN_BUNDLED)"
    )
    build_parser.add_argument(
        "--maven-repository",
        default=None,
        help="Local dependency repository (default: ~/.m2/repository)",
    )
    build_parser.add_argument(
        "--engine-command", default=None, help="Build engine command line"
    )
    build_parser.add_argument(
        "--no-incremental",
        dest="incremental",
        action="store_const",
        const=False,
        default=None,
        help="Force a full rebuild of every target",
    )
    build_parser.add_argument(
        "-D",
        dest="properties",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Set a build property (e.g. -D build.moduleName=app)",
    )
    build_parser.add_argument("--log-file", type=Path, default=None, help="Also log to this file")
    build_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose build output",
    )

    # SDK table command
    sdk_parser = subparsers.add_parser(
        "sdk-table",
        help="Write an SDK table file",
    )
    sdk_parser.add_argument("entries", nargs="*", metavar="NAME=PATH", help="SDK entries")
    sdk_parser.add_argument("-o", "--output", type=Path, required=True, help="SDK table file to write")

    # Parse arguments
    parsed_args = parser.parse_args()

    # If no command specified, show help
    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    # Execute command
    if parsed_args.command == "build":
        build_args = BuildArgs(
            module_name=parsed_args.module_name,
            project_path=parsed_args.project_path,
            classpath_output_file_path=parsed_args.classpath_output_file_path,
            data_storage_root=parsed_args.data_storage_root,
            jdk_table=parsed_args.jdk_table,
            kotlin_home=parsed_args.kotlin_home,
            maven_repository=parsed_args.maven_repository,
            engine_command=parsed_args.engine_command,
            incremental=parsed_args.incremental,
            properties=parsed_args.properties,
            log_file=parsed_args.log_file,
            verbose=parsed_args.verbose,
        )
        build_command(build_args)
    elif parsed_args.command == "sdk-table":
        sdk_table_command(SdkTableArgs(entries=parsed_args.entries, output=parsed_args.output))


if __name__ == "__main__":
    main()
