"""Unit tests for build settings."""

from pathlib import Path

import pytest

from jpsbuild.config.settings import (
    BuildSettings,
    SettingsError,
    env_var_name,
    parse_bool,
    parse_properties,
)

REQUIRED = {
    "moduleName": "app",
    "projectPath": "/work/project",
    "classpathOutputFilePath": "/work/classpath.txt",
    "dataStorageRoot": "/work/out",
}


class TestParseProperties:
    """Test cases for -D property parsing."""

    def test_strips_build_prefix(self):
        """Test that the build. prefix is optional."""
        properties = parse_properties(["build.moduleName=app", "incremental=false"])
        assert properties == {"moduleName": "app", "incremental": "false"}

    def test_rejects_unknown_key(self):
        """Test that unknown keys are reported."""
        with pytest.raises(SettingsError, match="Unknown property 'colour'"):
            parse_properties(["build.colour=blue"])

    def test_rejects_missing_value_separator(self):
        """Test that definitions need key=value."""
        with pytest.raises(SettingsError, match="expected key=value"):
            parse_properties(["moduleName"])


class TestBuildSettings:
    """Test cases for BuildSettings.from_sources."""

    def test_env_var_name(self):
        """Test environment variable naming."""
        assert env_var_name("moduleName") == "JPSBUILD_MODULE_NAME"
        assert env_var_name("classpathOutputFilePath") == "JPSBUILD_CLASSPATH_OUTPUT_FILE_PATH"
        assert env_var_name("jdkTable") == "JPSBUILD_JDK_TABLE"

    def test_from_properties(self):
        """Test building settings from properties only."""
        settings = BuildSettings.from_sources(properties=REQUIRED)

        assert settings.module_name == "app"
        assert settings.project_path == Path("/work/project")
        assert settings.classpath_output_file_path == Path("/work/classpath.txt")
        assert settings.data_storage_root == Path("/work/out")
        assert settings.incremental is True
        assert settings.force_rebuild is False
        assert settings.jdk_table is None
        assert settings.kotlin_home is None
        assert settings.engine_command == []

    def test_priority_cli_over_properties_over_env(self):
        """Test that CLI beats properties, which beat the environment."""
        environ = {
            "JPSBUILD_MODULE_NAME": "from-env",
            "JPSBUILD_PROJECT_PATH": "/env/project",
            "JPSBUILD_CLASSPATH_OUTPUT_FILE_PATH": "/env/cp.txt",
            "JPSBUILD_DATA_STORAGE_ROOT": "/env/out",
        }
        properties = {"moduleName": "from-props", "projectPath": "/props/project"}
        cli = {"moduleName": "from-cli", "projectPath": None}

        settings = BuildSettings.from_sources(cli=cli, properties=properties, environ=environ)

        assert settings.module_name == "from-cli"
        assert settings.project_path == Path("/props/project")
        assert settings.data_storage_root == Path("/env/out")

    def test_missing_required_keys(self):
        """Test that every missing required key is named."""
        with pytest.raises(SettingsError) as exc_info:
            BuildSettings.from_sources(properties={"moduleName": "app"})

        message = str(exc_info.value)
        assert "projectPath" in message
        assert "dataStorageRoot" in message
        assert "JPSBUILD_CLASSPATH_OUTPUT_FILE_PATH" in message
        assert "moduleName (or" not in message

    def test_incremental_false_forces_rebuild(self):
        """Test the incremental flag."""
        settings = BuildSettings.from_sources(properties={**REQUIRED, "incremental": "false"})
        assert settings.incremental is False
        assert settings.force_rebuild is True

    def test_invalid_boolean(self):
        """Test that bad booleans are rejected."""
        with pytest.raises(SettingsError, match="Invalid boolean for 'incremental'"):
            BuildSettings.from_sources(properties={**REQUIRED, "incremental": "maybe"})

    def test_engine_command_is_shell_split(self):
        """Test engine command splitting."""
        settings = BuildSettings.from_sources(
            properties={**REQUIRED, "engineCommand": "java -jar 'jps wrapper.jar'"}
        )
        assert settings.engine_command == ["java", "-jar", "jps wrapper.jar"]

    def test_optional_paths(self):
        """Test optional jdkTable and kotlinHome."""
        settings = BuildSettings.from_sources(
            properties={**REQUIRED, "jdkTable": "/work/jdkTable.txt", "kotlinHome": "/opt/kotlin"}
        )
        assert settings.jdk_table == Path("/work/jdkTable.txt")
        assert settings.kotlin_home == "/opt/kotlin"

    @pytest.mark.parametrize("value,expected", [("true", True), ("YES", True), ("0", False), ("off", False)])
    def test_parse_bool(self, value, expected):
        """Test accepted boolean spellings."""
        assert parse_bool("incremental", value) is expected
