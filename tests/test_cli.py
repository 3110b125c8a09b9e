"""Integration tests for the command line."""

import json

import pytest
from click.testing import CliRunner

from vuetiful.cli import cli
from vuetiful.config_runtime import load_settings
from vuetiful.utils.constants import COMMAND_REFRESH_UTILITIES
from vuetiful.utils.exit_codes import ExitCodes

from .conftest import write_project


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, root, *args):
    return runner.invoke(cli, ["--root", str(root), *args])


class TestHelp:
    def test_help_lists_categories(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "EXTRACTION" in result.output
        assert "--root" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "vuetiful" in result.output


class TestExtract:
    """extract and refresh commands."""

    def test_extract_writes_cache(self, runner, project):
        result = invoke(runner, project, "extract")

        assert result.exit_code == ExitCodes.SUCCESS, result.output
        cache_files = list((project / ".vuetiful" / "cache").glob("vuetify-cache-*.json"))
        assert len(cache_files) == 1
        assert (project / ".vuetiful" / "logs" / "vuetiful.log").exists()

    def test_not_detected_exit_code(self, runner, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()

        result = invoke(runner, empty, "extract")

        assert result.exit_code == ExitCodes.NOT_DETECTED
        assert "not detected" in result.output
        assert ExitCodes.get_description(ExitCodes.NOT_DETECTED) in result.output

    def test_success_prints_no_exit_warning(self, runner, project):
        result = invoke(runner, project, "extract")

        assert result.exit_code == ExitCodes.SUCCESS, result.output
        for code in (ExitCodes.NOT_DETECTED, ExitCodes.PARTIAL_FAILURE, ExitCodes.CRITICAL):
            assert ExitCodes.get_description(code) not in result.output

    def test_partial_failure_exit_code(self, runner, tmp_path):
        good = tmp_path / "good"
        bad = tmp_path / "bad"
        write_project(good)
        write_project(bad, css=".pa-4 .ma-2")

        result = runner.invoke(cli, ["--root", str(good), "--root", str(bad), "extract"])

        assert result.exit_code == ExitCodes.PARTIAL_FAILURE

    def test_refresh(self, runner, project):
        result = invoke(runner, project, "refresh")

        assert result.exit_code == ExitCodes.SUCCESS, result.output
        assert "Vuetify utilities refreshed!" in result.output

    def test_refresh_by_command_id(self, runner, project):
        result = invoke(runner, project, COMMAND_REFRESH_UTILITIES)

        assert result.exit_code == ExitCodes.SUCCESS, result.output
        assert "Vuetify utilities refreshed!" in result.output

    def test_command_id_hidden_from_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert COMMAND_REFRESH_UTILITIES not in result.output


class TestQueries:
    """list and show commands."""

    def test_list_json_with_prefix(self, runner, project):
        result = invoke(runner, project, "list", "--prefix", "ma-", "--json")

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [item["name"] for item in data] == ["ma-2"]
        assert data[0]["properties"] == {"margin": "8px"}
        assert data[0]["category"] == "spacing"

    def test_list_by_category(self, runner, project):
        result = invoke(runner, project, "list", "--category", "display", "--json")

        assert result.exit_code == 0, result.output
        assert [item["name"] for item in json.loads(result.stdout)] == ["d-flex", "d-md-flex"]

    def test_show(self, runner, project):
        result = invoke(runner, project, "show", "pa-4")

        assert result.exit_code == 0, result.output
        assert "Apply padding 16px on all sides" in result.output

    def test_show_unknown(self, runner, project):
        result = invoke(runner, project, "show", "v-btn")

        assert result.exit_code == 1
        assert "Unknown utility class" in result.output


class TestCacheCommands:
    def test_stats_and_clear(self, runner, project):
        invoke(runner, project, "extract")

        stats = invoke(runner, project, "cache", "stats")
        assert stats.exit_code == 0, stats.output
        assert "1 stored entry" in stats.output

        cleared = invoke(runner, project, "cache", "clear")
        assert cleared.exit_code == 0, cleared.output
        assert list((project / ".vuetiful" / "cache").glob("vuetify-cache-*.json")) == []


class TestConfigCommands:
    def test_set_persists(self, runner, tmp_path):
        result = invoke(runner, tmp_path, "config", "set", "showWarnings", "false")

        assert result.exit_code == 0, result.output
        assert load_settings(tmp_path).show_warnings is False

    def test_set_invalid_value(self, runner, tmp_path):
        result = invoke(runner, tmp_path, "config", "set", "debounceMs", "soon")
        assert result.exit_code == 2

    def test_set_unknown_key(self, runner, tmp_path):
        result = invoke(runner, tmp_path, "config", "set", "colour", "blue")
        assert result.exit_code == 2

    def test_show(self, runner, tmp_path):
        result = invoke(runner, tmp_path, "config", "show")
        assert result.exit_code == 0
        assert "showWarnings" in result.output

    def test_silenced_warning(self, runner, tmp_path):
        empty = tmp_path / "quiet"
        empty.mkdir()
        invoke(runner, empty, "config", "set", "showWarnings", "false")

        result = invoke(runner, empty, "extract")

        assert result.exit_code == ExitCodes.NOT_DETECTED
        assert "Don't Show Again" not in result.output


class TestErrorHandling:
    def test_unexpected_error_logged(self, runner, project, monkeypatch):
        def explode(obj, **kwargs):
            raise RuntimeError("wiring failed")

        monkeypatch.setattr("vuetiful.commands.extract.build_runtime", explode)

        result = invoke(runner, project, "extract")

        assert result.exit_code == 1
        assert "RuntimeError: wiring failed" in result.output
        assert "wiring failed" in (project / ".vuetiful" / "error.log").read_text()
