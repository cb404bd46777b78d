"""Tests for the settings file parser and defaults source."""

import json
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
from workspace_config import ConfigFileError
from workspace_config import ErrorItem
from workspace_config.parser import load_default_configuration
from workspace_config.parser import parse_file


class TestParseFile:
    """Test parse_file."""

    @pytest.fixture
    def tmp(self):
        with TemporaryDirectory() as tmpdir:
            yield Path(tmpdir)

    def test_none_and_missing_file(self, tmp):
        assert parse_file(None) == ({}, [])
        assert parse_file(tmp / "missing.json") == ({}, [])

    def test_json_with_dotted_keys(self, tmp):
        """Test flat dotted keys are expanded into a tree."""
        path = tmp / "settings.json"
        path.write_text('{"editor.fontSize": 14, "editor.tabSize": 2, "files": {"watch": false}}')

        contents, errors = parse_file(path)

        assert errors == []
        assert contents == {"editor": {"fontSize": 14, "tabSize": 2}, "files": {"watch": False}}

    def test_tab_indented_json(self, tmp):
        """Test JSON indented with tabs is read as JSON."""
        path = tmp / "settings.json"
        path.write_text(json.dumps({"a": 1, "b": {"c": 2}}, indent="\t"))

        assert parse_file(path) == ({"a": 1, "b": {"c": 2}}, [])

    def test_json_numbers_pass_through(self, tmp):
        path = tmp / "settings.json"
        path.write_text('{"a": 1e3, "b": -2.5E-1, "c": 7}')

        contents, errors = parse_file(path)

        assert errors == []
        assert contents == {"a": 1000.0, "b": -0.25, "c": 7}
        assert type(contents["a"]) is float

    def test_json_error_location(self, tmp):
        """Test JSON syntax errors carry zero-based line and column."""
        path = tmp / "settings.json"
        path.write_text('{\n  "a": 1,\n  "b": ]\n}')

        contents, errors = parse_file(path)

        assert contents == {}
        assert len(errors) == 1
        assert (errors[0].line, errors[0].column) == (2, 7)

    def test_yaml(self, tmp):
        path = tmp / "settings.yaml"
        path.write_text("editor:\n  fontSize: 14\nlint.enabled: true\n")

        contents, errors = parse_file(str(path))

        assert errors == []
        assert contents == {"editor": {"fontSize": 14}, "lint": {"enabled": True}}

    def test_empty_file(self, tmp):
        path = tmp / "settings.json"
        path.write_text("")
        assert parse_file(path) == ({}, [])

    def test_malformed_file(self, tmp):
        """Test syntax errors become error items and an empty tree."""
        path = tmp / "settings.json"
        path.write_text('{"a": 1,\n "b": [1, 2\n')

        contents, errors = parse_file(path)

        assert contents == {}
        assert len(errors) == 1
        error = errors[0]
        assert isinstance(error, ErrorItem)
        assert error.path == str(path)
        assert error.message
        assert error.line >= 0

    def test_non_mapping_document(self, tmp):
        path = tmp / "settings.yaml"
        path.write_text("- 1\n- 2\n")

        contents, errors = parse_file(path)

        assert contents == {}
        assert len(errors) == 1
        assert "mapping" in errors[0].message


class TestLoadDefaultConfiguration:
    """Test load_default_configuration."""

    def test_bundled_schema(self):
        assert load_default_configuration() == {"files": {"watch": True}}

    def test_custom_schema(self):
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "schema.yaml"
            path.write_text(
                "properties:\n"
                "  editor.fontSize:\n"
                "    type: number\n"
                "    default: 12\n"
                "  editor.theme:\n"
                "    description: no default here\n"
                "  list.items:\n"
                "    default: [a, b]\n"
            )
            assert load_default_configuration(path) == {"editor": {"fontSize": 12}, "list": {"items": ["a", "b"]}}

    def test_invalid_schema_raises(self):
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "schema.yaml"
            path.write_text("properties: [unclosed\n")
            with pytest.raises(ConfigFileError):
                load_default_configuration(path)
