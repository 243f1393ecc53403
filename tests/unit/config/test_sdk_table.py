"""Unit tests for SDK table files."""

import pytest

from jpsbuild.config.sdk_table import (
    SdkTableError,
    load_sdk_table,
    parse_sdk_table,
    write_sdk_table,
)


class TestSdkTable:
    """Test cases for SDK table parsing and writing."""

    def test_parse_entries(self):
        """Test parsing name=path lines."""
        table = parse_sdk_table("jdk11=/opt/jdk11\ncorretto-17=/opt/corretto17\n")
        assert table == {"jdk11": "/opt/jdk11", "corretto-17": "/opt/corretto17"}

    def test_parse_ignores_blank_lines(self):
        """Test that blank lines are skipped."""
        table = parse_sdk_table("\njdk11=/opt/jdk11\n\n   \n")
        assert table == {"jdk11": "/opt/jdk11"}

    def test_parse_splits_on_first_equals(self):
        """Test that paths may contain '='."""
        table = parse_sdk_table("odd=/opt/a=b")
        assert table == {"odd": "/opt/a=b"}

    def test_parse_rejects_line_without_separator(self):
        """Test that a line without '=' is an error naming the line."""
        with pytest.raises(SdkTableError, match="table.txt:2"):
            parse_sdk_table("jdk11=/opt/jdk11\nbroken\n", "table.txt")

    def test_parse_rejects_empty_name(self):
        """Test that an entry needs a name."""
        with pytest.raises(SdkTableError, match="expected"):
            parse_sdk_table("=/opt/jdk11")

    def test_load_missing_file(self, tmp_path):
        """Test error when the table file does not exist."""
        with pytest.raises(SdkTableError, match="not found"):
            load_sdk_table(tmp_path / "missing.txt")

    def test_write_then_load(self, tmp_path):
        """Test that a written table loads back unchanged."""
        table_path = tmp_path / "build" / "jdkTable.txt"
        write_sdk_table(table_path, {"jdk11": "/opt/jdk11", "jdk17": "/opt/jdk17"})

        assert table_path.read_text(encoding="utf-8") == "jdk11=/opt/jdk11\njdk17=/opt/jdk17"
        assert load_sdk_table(table_path) == {"jdk11": "/opt/jdk11", "jdk17": "/opt/jdk17"}

    def test_write_rejects_name_with_separator(self, tmp_path):
        """Test that names containing '=' cannot be written."""
        with pytest.raises(SdkTableError, match="Invalid SDK name"):
            write_sdk_table(tmp_path / "t.txt", {"a=b": "/opt"})
