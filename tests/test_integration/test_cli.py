"""End-to-end tests for the specform CLI (compile, resources, operations)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from specform import __version__
from specform.app import app
from specform.exit_codes import (
    EXIT_BROKEN_REFERENCE,
    EXIT_CONFIG_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_SUCCESS,
    EXIT_UNSUPPORTED,
)

runner = CliRunner()

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"
PETSTORE = str(FIXTURES_DIR / "petstore.json")
MESSAGING = str(FIXTURES_DIR / "messaging.json")


def _write_document(directory: Path, paths: dict, **components) -> str:
    target = directory / "openapi.json"
    target.write_text(
        json.dumps(
            {
                "openapi": "3.0.3",
                "info": {"title": "T", "version": "1"},
                "paths": paths,
                "components": components,
            }
        )
    )
    return str(target)


# ---------------------------------------------------------------------------
# Global options
# ---------------------------------------------------------------------------


class TestGlobalOptions:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == EXIT_SUCCESS
        assert f"specform {__version__}" in result.output

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("compile", "resources", "operations"):
            assert command in result.output


# ---------------------------------------------------------------------------
# compile
# ---------------------------------------------------------------------------


class TestCompile:
    def test_stdout_json(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["compile", PETSTORE])
        assert result.exit_code == EXIT_SUCCESS, result.output
        properties = json.loads(result.stdout)
        assert properties[0]["name"] == "resource"
        assert [p["name"] for p in properties[1:4]] == ["operation"] * 3
        assert properties[4] == {
            "displayName": "POST /pet",
            "name": "notice",
            "type": "notice",
            "typeOptions": {"theme": "info"},
            "displayOptions": {"show": {"resource": ["pet"], "operation": ["Add Pet"]}},
            "default": "",
        }

    def test_no_uri_notice_flag(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["compile", PETSTORE, "--no-uri-notice"])
        assert result.exit_code == EXIT_SUCCESS
        names = [p["name"] for p in json.loads(result.stdout)]
        assert "notice" not in names

    def test_env_disables_notice(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SPECFORM_ADD_URI_AFTER_OPERATION", "false")
        result = runner.invoke(app, ["compile", PETSTORE])
        assert "notice" not in [p["name"] for p in json.loads(result.stdout)]

    def test_cli_flag_beats_project_file(self, isolated_config: Path) -> None:
        (isolated_config / "specform.json").write_text('{"add_uri_after_operation": false}')
        result = runner.invoke(app, ["compile", PETSTORE, "--uri-notice"])
        assert "notice" in [p["name"] for p in json.loads(result.stdout)]

    def test_output_file(self, isolated_config: Path) -> None:
        target = isolated_config / "build" / "properties.json"
        result = runner.invoke(app, ["compile", PETSTORE, "-o", str(target)])
        assert result.exit_code == EXIT_SUCCESS
        written = json.loads(target.read_text(encoding="utf-8"))
        assert written[0]["name"] == "resource"
        assert "Wrote" in result.output

    def test_output_file_quiet(self, isolated_config: Path) -> None:
        target = isolated_config / "properties.json"
        result = runner.invoke(app, ["--quiet", "compile", PETSTORE, "-o", str(target)])
        assert result.exit_code == EXIT_SUCCESS
        assert result.output == ""
        assert target.is_file()

    def test_output_path_is_directory(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["compile", PETSTORE, "-o", str(isolated_config)])
        assert result.exit_code == EXIT_INVALID_USAGE
        assert "directory" in result.output

    def test_stdin(self, isolated_config: Path) -> None:
        document = (FIXTURES_DIR / "petstore.json").read_text()
        result = runner.invoke(app, ["compile", "-", "--no-uri-notice"], input=document)
        assert result.exit_code == EXIT_SUCCESS
        assert json.loads(result.stdout)[0]["default"] == "pet"

    def test_missing_file(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["compile", "nope.json"])
        assert result.exit_code == EXIT_SPEC_PARSE_ERROR
        assert "Error:" in result.output
        assert "not found" in result.output

    def test_swagger_document(self, isolated_config: Path) -> None:
        source = isolated_config / "swagger.json"
        source.write_text(json.dumps({"swagger": "2.0", "paths": {}}))
        result = runner.invoke(app, ["compile", str(source)])
        assert result.exit_code == EXIT_SPEC_PARSE_ERROR

    def test_unsupported_parameter(self, isolated_config: Path) -> None:
        source = _write_document(
            isolated_config,
            {"/me": {"get": {"operationId": "me", "parameters": [{"name": "sid", "in": "cookie"}]}}},
        )
        result = runner.invoke(app, ["compile", source])
        assert result.exit_code == EXIT_UNSUPPORTED
        assert "GET /me (me)" in result.output

    def test_broken_reference(self, isolated_config: Path) -> None:
        source = _write_document(
            isolated_config,
            {"/pets": {"post": {"requestBody": {"$ref": "#/components/requestBodies/Gone"}}}},
        )
        result = runner.invoke(app, ["compile", source])
        assert result.exit_code == EXIT_BROKEN_REFERENCE

    def test_invalid_env_config(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SPECFORM_ADD_URI_AFTER_OPERATION", "perhaps")
        result = runner.invoke(app, ["compile", PETSTORE])
        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_verbose_logs_to_stderr(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--verbose", "compile", PETSTORE])
        assert result.exit_code == EXIT_SUCCESS
        assert "Loaded OpenAPI" in result.output


# ---------------------------------------------------------------------------
# resources / operations
# ---------------------------------------------------------------------------


class TestResources:
    def test_json_table(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--json", "resources", PETSTORE])
        assert result.exit_code == EXIT_SUCCESS
        rows = json.loads(result.stdout)
        assert rows == [
            {
                "Resource": "pet",
                "Display Name": "Pet",
                "Operations": "6",
                "Description": "Everything about your Pets",
            },
            {
                "Resource": "store",
                "Display Name": "Store",
                "Operations": "2",
                "Description": "Access to Petstore orders",
            },
            {"Resource": "users", "Display Name": "Users", "Operations": "1", "Description": "-"},
        ]

    def test_empty_document(self, isolated_config: Path) -> None:
        source = _write_document(isolated_config, {})
        result = runner.invoke(app, ["resources", source])
        assert result.exit_code == EXIT_SUCCESS
        assert "No operations found" in result.output


class TestOperations:
    def test_plain_table(self, isolated_config: Path) -> None:
        result = runner.invoke(
            app, ["--plain", "operations", PETSTORE, "--resource", "store"]
        )
        assert result.exit_code == EXIT_SUCCESS
        assert result.stdout.splitlines() == [
            "Resource\tOperation\tMethod\tURL\tFields",
            "store\tGet Inventory\tGET\t=/store/inventory\t1",
            "store\tPlace Order\tPOST\t=/store/order\t6",
        ]

    def test_path_placeholders_in_url(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--json", "--quiet", "operations", MESSAGING])
        assert result.exit_code == EXIT_SUCCESS
        rows = json.loads(result.stdout)
        get_messages = next(row for row in rows if row["Operation"] == "Get Messages")
        assert get_messages["URL"] == '=/api/{{$parameter["chatId"]}}/messages'
        assert [row["Operation"] for row in rows if row["Resource"] == "chats"] == [
            "List",
            "List GET",
        ]

    def test_unknown_resource(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["operations", PETSTORE, "-r", "owners"])
        assert result.exit_code == EXIT_GENERIC_FAILURE
        assert "Resource not found: owners" in result.output
