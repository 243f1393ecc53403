"""Unit tests for path variable expansion."""

from pathlib import Path

import pytest

from jpsbuild.config.path_variables import (
    KOTLIN_BUNDLED,
    MAVEN_REPOSITORY,
    PathVariableError,
    PathVariableExpander,
    create_path_variables,
    default_maven_repository,
)


class TestCreatePathVariables:
    """Test cases for create_path_variables."""

    def test_defaults(self):
        """Test that only MAVEN_REPOSITORY is defined without a Kotlin home."""
        variables = create_path_variables()

        assert KOTLIN_BUNDLED not in variables
        assert variables[MAVEN_REPOSITORY] == str(default_maven_repository()).replace("\\", "/")

    def test_default_maven_repository_is_under_home(self):
        """Test the default repository location."""
        assert default_maven_repository() == Path.home() / ".m2" / "repository"

    def test_kotlin_home_points_at_kotlinc(self, tmp_path):
        """Test KOTLIN_BUNDLED derivation."""
        variables = create_path_variables(kotlin_home=str(tmp_path / "kotlin"))
        assert variables[KOTLIN_BUNDLED].endswith("/kotlin/kotlinc")

    def test_custom_maven_repository(self, tmp_path):
        """Test overriding the repository."""
        variables = create_path_variables(maven_repository=str(tmp_path / "repo"))
        assert variables[MAVEN_REPOSITORY].endswith("/repo")


class TestPathVariableExpander:
    """Test cases for PathVariableExpander."""

    def test_expand_known_variables(self):
        """Test expanding several macros in one string."""
        expander = PathVariableExpander({"MAVEN_REPOSITORY": "/m2", "PROJECT_DIR": "/p"})
        assert (
            expander.expand("jar://$MAVEN_REPOSITORY$/a.jar!/ file://$PROJECT_DIR$/out")
            == "jar:///m2/a.jar!/ file:///p/out"
        )

    def test_text_without_macros_is_unchanged(self):
        """Test that plain text passes through."""
        expander = PathVariableExpander({})
        assert expander.expand("file:///opt/lib.jar") == "file:///opt/lib.jar"

    def test_unresolved_variable_names_the_variable(self):
        """Test the error raised for an undefined variable."""
        expander = PathVariableExpander({}, source=Path("app.iml"))

        with pytest.raises(PathVariableError) as exc_info:
            expander.expand("jar://$KOTLIN_BUNDLED$/lib/kotlin-stdlib.jar!/")

        assert exc_info.value.variable == "KOTLIN_BUNDLED"
        assert "$KOTLIN_BUNDLED$" in str(exc_info.value)
        assert "app.iml" in str(exc_info.value)

    def test_with_variables_does_not_modify_original(self):
        """Test that extra variables go into a copy."""
        expander = PathVariableExpander({"PROJECT_DIR": "/p"})
        module_expander = expander.with_variables(MODULE_DIR="/p/app")

        assert module_expander.expand("$MODULE_DIR$/src") == "/p/app/src"
        with pytest.raises(PathVariableError):
            expander.expand("$MODULE_DIR$/src")
