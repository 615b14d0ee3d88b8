"""Unit tests for the stageplan CLI.

Tests cover:
- Exit code values
- Output helpers
- plan command table and JSON output
- Error exit codes for bad plan files and environments
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner


@pytest.fixture
def plan_file(tmp_path: Path, plan_file_content: str) -> Path:
    """Write the shared plan file to disk."""
    path = tmp_path / "plan.yaml"
    path.write_text(plan_file_content)
    return path


class TestExitCodeEnum:
    """Tests for the ExitCode enum."""

    @pytest.mark.requirement("FR-031")
    def test_exit_codes_match_errors(self) -> None:
        """Test exit codes line up with the exception hierarchy."""
        from stageplan.cli.utils import ExitCode
        from stageplan.errors import (
            ConfigurationError,
            PlanFileError,
            StageplanError,
            StrategyResolutionError,
        )

        assert ExitCode.SUCCESS == 0
        assert ExitCode.GENERAL_ERROR == StageplanError.exit_code
        assert ExitCode.CONFIGURATION_ERROR == ConfigurationError.exit_code
        assert ExitCode.STRATEGY_ERROR == StrategyResolutionError.exit_code
        assert ExitCode.PLAN_FILE_ERROR == PlanFileError.exit_code


class TestOutputHelpers:
    """Tests for the stderr/stdout helpers."""

    @pytest.mark.requirement("FR-031")
    def test_error_with_context(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test error() writes to stderr with context."""
        from stageplan.cli.utils import error

        error("Plan file not found", path="plan.yaml", line=None)

        captured = capsys.readouterr()
        assert captured.err.strip() == "Error: Plan file not found (path=plan.yaml)"
        assert captured.out == ""

    @pytest.mark.requirement("FR-031")
    def test_warn_and_success(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test warnings go to stderr and results to stdout."""
        from stageplan.cli.utils import success, warn

        warn("Production lacks rollback")
        success("done")

        captured = capsys.readouterr()
        assert captured.err.strip() == "Warning: Production lacks rollback"
        assert captured.out.strip() == "done"

    @pytest.mark.requirement("FR-031")
    def test_error_exit(self) -> None:
        """Test error_exit() exits with the given code."""
        from stageplan.cli.utils import ExitCode, error_exit

        with pytest.raises(SystemExit) as exc_info:
            error_exit("boom", exit_code=ExitCode.STRATEGY_ERROR)

        assert exc_info.value.code == 3


class TestPlanCommand:
    """Tests for `stageplan plan`."""

    @pytest.mark.requirement("FR-031")
    def test_table_output(self, plan_file: Path) -> None:
        """Test the default table lists environments in promotion order."""
        from stageplan.cli.main import cli

        runner = CliRunner()
        result = runner.invoke(cli, ["plan", "--config", str(plan_file)])

        assert result.exit_code == 0, result.output
        lines = result.stdout.splitlines()
        assert lines[0].split() == ["ENVIRONMENT", "TYPE", "STRATEGY", "APPROVALS", "ROLLBACK"]
        assert lines[1].split() == ["dev", "development", "rolling", "-", "-"]
        assert lines[2].split() == ["staging", "staging", "blue-green", "-", "immediate"]
        assert lines[3].split() == ["prod", "production", "canary", "2", "gradual"]
        assert "  staging -> prod [manual] health_check, test_success, " in result.stdout

    @pytest.mark.requirement("FR-031")
    def test_json_output(self, plan_file: Path) -> None:
        """Test JSON output is the serialized topology."""
        from stageplan.cli.main import cli

        runner = CliRunner()
        result = runner.invoke(cli, ["plan", "--config", str(plan_file), "--output", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["promotion_order"] == ["dev", "staging", "prod"]
        assert data["gates"]["prod"]["approvers"] == ["release-managers", "sre"]
        assert data["strategies"]["prod"]["type"] == "canary"
        assert [e["target"] for e in data["promotion_edges"]] == ["staging", "prod"]

    @pytest.mark.requirement("FR-031")
    def test_warnings_on_stderr(self, tmp_path: Path) -> None:
        """Test topology warnings are printed to stderr only."""
        from stageplan.cli.main import cli

        plan = tmp_path / "plan.yaml"
        plan.write_text("environments:\n  - name: prod\n    type: production\n")

        runner = CliRunner()
        result = runner.invoke(cli, ["plan", "--config", str(plan), "--output", "json"])

        assert result.exit_code == 0
        assert "Warning: Production environment 'prod' has rollback disabled" in result.stderr
        json.loads(result.stdout)

    @pytest.mark.requirement("FR-031")
    def test_missing_plan_file(self, tmp_path: Path) -> None:
        """Test a missing plan file exits with the plan file error code."""
        from stageplan.cli.main import cli

        runner = CliRunner()
        result = runner.invoke(cli, ["plan", "--config", str(tmp_path / "nope.yaml")])

        assert result.exit_code == 4
        assert "Error: Cannot load plan file" in result.stderr

    @pytest.mark.requirement("FR-031")
    def test_non_utf8_plan_file(self, tmp_path: Path) -> None:
        """Test an undecodable plan file exits with the plan file error code."""
        from stageplan.cli.main import cli

        plan = tmp_path / "plan.yaml"
        plan.write_bytes(b"environments:\n  - name: \xff\xfe\n    type: staging\n")

        runner = CliRunner()
        result = runner.invoke(cli, ["plan", "--config", str(plan)])

        assert result.exit_code == 4
        assert "not valid UTF-8" in result.stderr
        assert result.exception is None or isinstance(result.exception, SystemExit)

    @pytest.mark.requirement("FR-031")
    def test_invalid_environment(self, tmp_path: Path) -> None:
        """Test a duplicate environment exits with the configuration error code."""
        from stageplan.cli.main import cli

        plan = tmp_path / "plan.yaml"
        plan.write_text(
            "environments:\n"
            "  - {name: dev, type: development}\n"
            "  - {name: dev, type: staging}\n"
        )

        runner = CliRunner()
        result = runner.invoke(cli, ["plan", "--config", str(plan)])

        assert result.exit_code == 2
        assert "Invalid environment 'dev': name: duplicate environment name" in result.stderr

    @pytest.mark.requirement("FR-031")
    def test_unknown_strategy(self, tmp_path: Path) -> None:
        """Test an unknown strategy exits with the strategy error code."""
        from stageplan.cli.main import cli

        plan = tmp_path / "plan.yaml"
        plan.write_text(
            "environments:\n  - {name: prod, type: production, deploymentStrategy: shadow}\n"
        )

        runner = CliRunner()
        result = runner.invoke(cli, ["plan", "--config", str(plan)])

        assert result.exit_code == 3
        assert "unknown strategy 'shadow'" in result.stderr

    @pytest.mark.requirement("FR-031")
    def test_warnings_printed_before_error(self, tmp_path: Path) -> None:
        """Test warnings found before a fatal error still reach stderr."""
        from stageplan.cli.main import cli

        plan = tmp_path / "plan.yaml"
        plan.write_text(
            "environments:\n  - {name: prod, type: production, deploymentStrategy: shadow}\n"
        )

        runner = CliRunner()
        result = runner.invoke(cli, ["plan", "--config", str(plan)])

        assert result.exit_code == 3
        warning = "Warning: Production environment 'prod' has rollback disabled"
        assert warning in result.stderr
        assert result.stderr.index(warning) < result.stderr.index("Error:")
        assert result.stdout == ""

    @pytest.mark.requirement("FR-031")
    def test_config_is_required(self) -> None:
        """Test omitting --config is a usage error."""
        from stageplan.cli.main import cli

        runner = CliRunner()
        result = runner.invoke(cli, ["plan"])

        assert result.exit_code == 2
        assert "--config" in result.output


class TestMain:
    """Tests for the main() entry point."""

    @pytest.mark.requirement("FR-031")
    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test --version prints the program name."""
        from stageplan.cli.main import main

        main(["--version"])

        assert capsys.readouterr().out.startswith("stageplan ")

    @pytest.mark.requirement("FR-031")
    def test_usage_error_exit_code(self) -> None:
        """Test usage errors exit with code 2."""
        from stageplan.cli.main import main

        with pytest.raises(SystemExit) as exc_info:
            main(["plan"])

        assert exc_info.value.code == 2
