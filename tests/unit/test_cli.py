"""Unit tests for the command line entry point."""
from unittest.mock import AsyncMock, patch

import pytest

from emdn_matching import cli


class TestParser:
    """Tests for argument parsing."""

    def test_dry_run_is_default(self):
        args = cli.build_parser().parse_args(["match-prices"])
        assert args.apply is False
        assert args.enqueue is False

    def test_recategorize_options(self):
        args = cli.build_parser().parse_args(
            ["recategorize", "--apply", "--csv", "out.csv", "--task-id", "t1", "--log-level", "debug"]
        )
        assert args.apply is True
        assert args.csv_path == "out.csv"
        assert args.log_level == "DEBUG"
        assert cli.task_kwargs(args) == {"task_id": "t1", "apply": True, "csv_path": "out.csv"}

    def test_csv_only_on_recategorize(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["match-prices", "--csv", "x.csv"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])


class TestExitCode:
    """Tests for status to exit code mapping."""

    @pytest.mark.parametrize(
        "status,code",
        [("success", 0), ("partial_success", 1), ("config_error", 2)],
    )
    def test_mapping(self, status, code):
        assert cli.exit_code({"status": status}) == code


class TestRun:
    """Tests for running a command in-process."""

    @pytest.mark.asyncio
    async def test_report_and_persistence_on_stdout(self, capsys):
        task = AsyncMock(return_value={
            "status": "partial_success",
            "report": "=== Report ===\n",
            "persistence": "=== Persistence: replace_matches ===\n",
        })
        args = cli.build_parser().parse_args(["match-prices", "--apply", "--task-id", "t1"])

        with patch.dict(cli.COMMANDS, {"match-prices": task}):
            code = await cli.run(args)

        out = capsys.readouterr().out
        assert code == 1
        assert out == "=== Report ===\n\n=== Persistence: replace_matches ===\n"
        task.assert_awaited_once_with({}, task_id="t1", apply=True)

    @pytest.mark.asyncio
    async def test_config_error_on_stderr(self, capsys):
        task = AsyncMock(return_value={
            "status": "config_error",
            "error": "2 rule(s) reference unknown categories",
            "error_type": "ConfigError",
        })
        args = cli.build_parser().parse_args(["recategorize", "--task-id", "t1"])

        with patch.dict(cli.COMMANDS, {"recategorize": task}):
            code = await cli.run(args)

        captured = capsys.readouterr()
        assert code == 2
        assert captured.out == ""
        assert "Configuration error (ConfigError)" in captured.err

    @pytest.mark.asyncio
    async def test_enqueue(self, capsys):
        args = cli.build_parser().parse_args(["map-leaf-categories", "--enqueue", "--task-id", "t1"])

        with patch.object(cli, "enqueue", AsyncMock(return_value="job-1")) as mock_enqueue:
            code = await cli.run(args)

        assert code == 0
        mock_enqueue.assert_awaited_once_with("map_leaf_categories_task", {"task_id": "t1", "apply": False})
        assert "job-1" in capsys.readouterr().out
