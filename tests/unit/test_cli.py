"""Tests for CLI module."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from security_test_runner.cli import UsageError, main, parse_config, run
from security_test_runner.models.config import RunConfig


class TestParseConfig:
    """Tests for parse_config function."""

    def test_defaults(self) -> None:
        """No arguments gives the documented defaults."""
        config = parse_config([], environ={})

        assert config == RunConfig(project_root=config.project_root)

    def test_all_flags(self) -> None:
        """Every flag maps onto RunConfig."""
        config = parse_config(
            [
                "--quick",
                "--fix",
                "--ci",
                "--skip-snyk",
                "--skip-cache",
                "--fail-fast",
                "--json",
                "--no-parallel",
                "--max-parallel",
                "2",
                "--timeout",
                "60",
                "--output-dir",
                "out",
            ],
            environ={},
        )

        assert config.quick is True
        assert config.fix is True
        assert config.ci is True
        assert config.skip_snyk is True
        assert config.skip_cache is True
        assert config.fail_fast is True
        assert config.json_output is True
        assert config.parallel is False
        assert config.max_parallel == 2
        assert config.timeout == 60
        assert config.output_dir == Path("out")
        assert config.install is False

    def test_reads_environment(self) -> None:
        """SNYK_TOKEN and SECURITY_SCAN_CACHE are honoured."""
        config = parse_config(
            [], environ={"SNYK_TOKEN": "tok", "SECURITY_SCAN_CACHE": "0"}
        )

        assert config.snyk_token is not None
        assert config.snyk_token.get_secret_value() == "tok"
        assert config.use_cache is False

    @pytest.mark.parametrize(
        "argv",
        [
            ["--bogus"],
            ["--qui"],
            ["--max-parallel", "many"],
            ["--max-parallel", "0"],
            ["--timeout", "-1"],
        ],
    )
    def test_invalid_arguments_raise_usage_error(self, argv: list[str]) -> None:
        """Unknown or invalid arguments are usage errors."""
        with pytest.raises(UsageError):
            parse_config(argv, environ={})

    def test_invalid_cache_toggle(self) -> None:
        """A malformed cache toggle is a usage error."""
        with pytest.raises(UsageError, match="maybe"):
            parse_config([], environ={"SECURITY_SCAN_CACHE": "maybe"})


class TestRun:
    """Tests for run function."""

    async def test_runs_security_tests(self, tmp_path: Path) -> None:
        """Delegates to SecurityTestRunner and returns its exit code."""
        config = RunConfig(output_dir=tmp_path)

        with (
            patch("security_test_runner.cli.load_tools", return_value=[]),
            patch("security_test_runner.cli.SecurityTestRunner") as mock_runner_cls,
        ):
            mock_runner_cls.return_value.run = AsyncMock(return_value=1)
            exit_code = await run(config)

        assert exit_code == 1
        assert mock_runner_cls.call_args.kwargs["config"] is config

    async def test_install_mode(self) -> None:
        """--install installs tools and exits 0."""
        with (
            patch(
                "security_test_runner.cli.get_package_manager", return_value="npm"
            ),
            patch(
                "security_test_runner.cli.install_security_tools",
                new_callable=AsyncMock,
                return_value=3,
            ) as mock_install,
            patch("security_test_runner.cli.SecurityTestRunner") as mock_runner_cls,
        ):
            exit_code = await run(RunConfig(install=True))

        assert exit_code == 0
        mock_install.assert_awaited_once_with("npm")
        mock_runner_cls.assert_not_called()

    async def test_install_mode_without_package_manager(self) -> None:
        """--install without a package manager fails."""
        with patch("security_test_runner.cli.get_package_manager", return_value=None):
            exit_code = await run(RunConfig(install=True))

        assert exit_code == 1


class TestMain:
    """Tests for main CLI entry point."""

    def test_exits_with_run_result(self) -> None:
        """Main function exits with the result from run()."""
        with (
            patch("sys.argv", ["security-test-runner", "--quick"]),
            patch("security_test_runner.cli.configure_logging"),
            patch("security_test_runner.cli.asyncio.run", return_value=0) as mock_run,
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 0
        mock_run.assert_called_once()
        mock_run.call_args.args[0].close()

    def test_exits_with_failure_code(self) -> None:
        """Main function exits with code 1 on test failures."""
        with (
            patch("sys.argv", ["security-test-runner"]),
            patch("security_test_runner.cli.configure_logging"),
            patch("security_test_runner.cli.asyncio.run", return_value=1) as mock_run,
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 1
        mock_run.call_args.args[0].close()

    def test_unknown_argument_exits_one(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Unknown arguments exit 1, not argparse's 2."""
        with (
            patch("sys.argv", ["security-test-runner", "--nope"]),
            patch("security_test_runner.cli.asyncio.run") as mock_run,
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 1
        mock_run.assert_not_called()
        assert "Use --help" in capsys.readouterr().err

    def test_help_exits_zero(self, capsys: pytest.CaptureFixture[str]) -> None:
        """--help prints usage and exits 0."""
        with (
            patch("sys.argv", ["security-test-runner", "--help"]),
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 0
        out = capsys.readouterr().out
        assert "--max-parallel N" in out
        assert "SNYK_TOKEN" in out
