"""
Tests for the search-aggregator CLI.

ripgrep resolution and execution are patched so the commands can be
exercised without a ripgrep install.
"""

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from conftest import rg_file
from search_aggregator.cli import cli, run_async
from search_aggregator.errors import BinaryNotFoundError, ExecError

LOCATE_PATH = "search_aggregator.cli.locate_ripgrep"
RUN_PATH = "search_aggregator.services.ripgrep_search.process_executor.run"


@pytest.fixture
def workspace(tmp_path):
    root = tmp_path.resolve()
    (root / "a.txt").write_text("TODO: fix\nnext line\n")
    return root


def _invoke(workspace: Path, *args: str):
    runner = CliRunner()
    config_path = workspace / ".search-aggregator" / "config.json"
    return runner.invoke(cli, ["--config", str(config_path), *args])


class TestSearchCommand:
    def test_prints_report(self, workspace, rg_output):
        raw = rg_output(
            *rg_file(
                str(workspace / "a.txt"), [(1, "TODO: fix", True), (2, "next line", False)]
            )
        )

        with patch(LOCATE_PATH, return_value=Path("/usr/bin/rg")), patch(
            RUN_PATH, new=AsyncMock(return_value=raw)
        ):
            result = _invoke(workspace, "search", "TODO", str(workspace))

        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == [
            "Found 1 result.",
            "",
            "# a.txt",
            "  1 | TODO: fix",
            "  2 | next line",
            "----",
        ]

    def test_ignore_file_hides_results(self, workspace, rg_output):
        (workspace / ".searchignore").write_text("secret.txt\n")
        raw = rg_output(
            *rg_file(str(workspace / "a.txt"), [(1, "TODO", True)]),
            *rg_file(str(workspace / "secret.txt"), [(1, "TODO", True)]),
        )

        with patch(LOCATE_PATH, return_value=Path("/usr/bin/rg")), patch(
            RUN_PATH, new=AsyncMock(return_value=raw)
        ):
            result = _invoke(workspace, "search", "TODO", str(workspace))
            unfiltered = _invoke(workspace, "search", "TODO", str(workspace), "--no-ignore")

        assert "secret.txt" not in result.output
        assert "Found 1 result." in result.output
        assert "# secret.txt" in unfiltered.output

    def test_options_reach_ripgrep(self, workspace):
        mock_run = AsyncMock(return_value="")

        with patch(LOCATE_PATH, return_value=Path("/usr/bin/rg")), patch(RUN_PATH, new=mock_run):
            result = _invoke(
                workspace,
                "search",
                "def \\w+",
                str(workspace),
                "--glob",
                "*.py",
                "--context",
                "3",
                "--max-results",
                "7",
            )

        assert result.exit_code == 0, result.output
        args = mock_run.call_args[0][1]
        assert args[args.index("--glob") + 1] == "*.py"
        assert args[args.index("--context") + 1] == "3"
        assert mock_run.call_args[1]["max_lines"] == 35

    def test_max_results_keeps_explicit_line_cap(self, workspace):
        config_path = workspace / ".search-aggregator" / "config.json"
        config_path.parent.mkdir()
        config_path.write_text(json.dumps({"max_lines": 9}))
        mock_run = AsyncMock(return_value="")

        with patch(LOCATE_PATH, return_value=Path("/usr/bin/rg")), patch(RUN_PATH, new=mock_run):
            result = _invoke(workspace, "search", "TODO", str(workspace), "--max-results", "7")

        assert result.exit_code == 0, result.output
        assert mock_run.call_args[1]["max_lines"] == 9

    def test_single_file_header_is_file_name(self, workspace, rg_output):
        raw = rg_output(*rg_file(str(workspace / "a.txt"), [(1, "TODO: fix", True)]))

        with patch(LOCATE_PATH, return_value=Path("/usr/bin/rg")), patch(
            RUN_PATH, new=AsyncMock(return_value=raw)
        ):
            result = _invoke(workspace, "search", "TODO", str(workspace / "a.txt"))

        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == [
            "Found 1 result.",
            "",
            "# a.txt",
            "  1 | TODO: fix",
            "----",
        ]

    def test_missing_binary_fails_cleanly(self, workspace):
        with patch(LOCATE_PATH, side_effect=BinaryNotFoundError("ripgrep binary not found")):
            result = _invoke(workspace, "search", "TODO", str(workspace))

        assert result.exit_code == 1
        assert "search failed" in result.output
        assert "search capability unavailable" in result.output

    def test_exec_error_fails_cleanly(self, workspace):
        with patch(LOCATE_PATH, return_value=Path("/usr/bin/rg")), patch(
            RUN_PATH, new=AsyncMock(side_effect=ExecError("regex parse error"))
        ):
            result = _invoke(workspace, "search", "(", str(workspace))

        assert result.exit_code == 1
        assert "search failed: regex parse error" in result.output

    def test_invalid_config_file_fails_cleanly(self, workspace):
        config_path = workspace / ".search-aggregator" / "config.json"
        config_path.parent.mkdir()
        config_path.write_text(json.dumps({"max_results": 0}))

        result = _invoke(workspace, "search", "TODO", str(workspace))

        assert result.exit_code == 1
        assert "Failed to load config" in result.output


class TestLocateCommand:
    def test_prints_resolved_path(self, workspace):
        with patch(LOCATE_PATH, return_value=Path("/usr/bin/rg")):
            result = _invoke(workspace, "locate")

        assert result.exit_code == 0
        assert result.output.strip() == str(Path("/usr/bin/rg"))

    def test_not_found(self, workspace):
        with patch(LOCATE_PATH, side_effect=BinaryNotFoundError("ripgrep binary not found")):
            result = _invoke(workspace, "locate")

        assert result.exit_code == 1
        assert "ripgrep binary not found" in result.output


class TestInitConfigCommand:
    def test_writes_default_config(self, workspace):
        result = _invoke(workspace, "init-config")

        config_path = workspace / ".search-aggregator" / "config.json"
        assert result.exit_code == 0
        assert json.loads(config_path.read_text())["max_results"] == 300

    def test_existing_config_needs_force(self, workspace):
        config_path = workspace / ".search-aggregator" / "config.json"
        config_path.parent.mkdir()
        config_path.write_text(json.dumps({"max_results": 5}))

        result = _invoke(workspace, "init-config")
        assert json.loads(config_path.read_text())["max_results"] == 5

        result = _invoke(workspace, "init-config", "--force")
        assert result.exit_code == 0
        assert json.loads(config_path.read_text())["max_results"] == 300

    def test_writes_under_given_path(self, workspace):
        project = workspace / "project"
        project.mkdir()

        result = _invoke(workspace, "init-config", str(project))

        config_path = project / ".search-aggregator" / "config.json"
        assert result.exit_code == 0, result.output
        assert json.loads(config_path.read_text())["max_results"] == 300
        assert not (workspace / ".search-aggregator" / "config.json").exists()

    def test_missing_path_is_rejected(self, workspace):
        result = _invoke(workspace, "init-config", str(workspace / "nope"))

        assert result.exit_code == 2


class TestRunAsync:
    def test_runs_without_loop(self):
        async def answer():
            return 42

        assert run_async(answer()) == 42

    @pytest.mark.asyncio
    async def test_runs_inside_running_loop(self):
        async def answer():
            return 7

        assert run_async(answer()) == 7
