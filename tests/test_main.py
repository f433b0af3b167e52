"""Unit tests for the main entry point.

Tests the main() function including:
- CLI argument parsing
- Configuration loading with priority (CLI > env > config)
- Pipeline wiring from configuration
- Exit code handling
- Error handling
"""

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from patchworks.config.environment import EnvironmentConfig
from patchworks.config.exceptions import ConfigurationError
from patchworks.config.models import AppConfig, LoggingConfig, ReportConfig
from patchworks.main import (
    EXIT_CANCELLED,
    EXIT_ERROR,
    EXIT_OK,
    build_parser,
    build_pipeline,
    load_runtime_config,
    main,
)
from patchworks.pipeline import PipelineCancelledError, PipelineRunResult

RUN_TIME = datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def candidates_file(tmp_path):
    path = tmp_path / "candidates.yaml"
    path.write_text(
        "packages:\n"
        "  - package_name: left-pad\n"
        "    metadata:\n"
        "      current: '1.0.0'\n"
        "      latest: '1.3.0'\n"
    )
    return path


@pytest.fixture
def mock_runtime():
    """Patch configuration, logging and pipeline construction in main."""
    with patch("patchworks.main.load_dotenv"), patch(
        "patchworks.main.configure_logging"
    ) as mock_logging, patch("patchworks.main.load_config") as mock_load, patch(
        "patchworks.main.build_pipeline"
    ) as mock_build:
        mock_load.return_value = (AppConfig(), EnvironmentConfig())
        pipeline = Mock()
        pipeline.run.return_value = PipelineRunResult(
            run_started_at=RUN_TIME,
            run_finished_at=RUN_TIME,
            total_packages=1,
            total_unknown=1,
            report_paths=[Path("reports/patchworks-report.md")],
        )
        mock_build.return_value = pipeline
        yield {
            "configure_logging": mock_logging,
            "load_config": mock_load,
            "build_pipeline": mock_build,
            "pipeline": pipeline,
        }


class TestLoadRuntimeConfig:
    """Test suite for load_runtime_config helper."""

    def test_cli_level_wins(self):
        with patch("patchworks.main.load_config") as mock_load:
            mock_load.return_value = (AppConfig(), EnvironmentConfig(log_level="WARNING"))

            _, env_config = load_runtime_config(None, "DEBUG")

        assert env_config.log_level == "DEBUG"

    def test_environment_level_beats_config(self):
        app_config = AppConfig(logging=LoggingConfig(level="ERROR"))
        with patch("patchworks.main.load_config") as mock_load:
            mock_load.return_value = (app_config, EnvironmentConfig(log_level="WARNING"))

            _, env_config = load_runtime_config(None, None)

        assert env_config.log_level == "WARNING"

    def test_config_level_as_fallback(self):
        app_config = AppConfig(logging=LoggingConfig(level="ERROR"))
        with patch("patchworks.main.load_config") as mock_load:
            mock_load.return_value = (app_config, EnvironmentConfig())

            _, env_config = load_runtime_config(Path("custom.yaml"), None)

        mock_load.assert_called_once_with(Path("custom.yaml"))
        assert env_config.log_level == "ERROR"


class TestArgumentParsing:
    """Test CLI argument parsing."""

    def test_defaults(self):
        args = build_parser().parse_args(["candidates.yaml"])

        assert args.candidates == Path("candidates.yaml")
        assert args.config is None
        assert args.log_level is None
        assert args.report_dir is None
        assert args.yes is False
        assert args.ai_summary is False

    def test_all_options(self):
        args = build_parser().parse_args(
            [
                "in.json",
                "--config",
                "cfg.yaml",
                "--log-level",
                "DEBUG",
                "--report-dir",
                "out",
                "--yes",
                "--ai-summary",
            ]
        )

        assert args.config == Path("cfg.yaml")
        assert args.log_level == "DEBUG"
        assert args.report_dir == Path("out")
        assert args.yes and args.ai_summary

    def test_invalid_log_level(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["in.json", "--log-level", "LOUD"])

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--version"])

        assert exc_info.value.code == 0
        assert "patchworks 1.0.0" in capsys.readouterr().out


class TestBuildPipeline:
    """Test pipeline wiring."""

    def test_collaborators_follow_config(self, tmp_path):
        app_config = AppConfig(reports=ReportConfig(formats=["json"]))
        app_config.categorization.term_limit = 4

        pipeline = build_pipeline(
            app_config,
            EnvironmentConfig(github_token="ghp_x"),
            tmp_path,
            auto_confirm=True,
            ai_summary=True,
        )

        assert pipeline.directory_provider.path == tmp_path
        assert pipeline.confirmation.auto_confirm is True
        assert pipeline.categorizer.term_limit == 4
        assert [fmt.value for fmt in pipeline.reporter.formats] == ["json"]
        assert pipeline.options.reports_only is True
        assert pipeline.options.ai_summary is True
        assert all(f.github_token == "ghp_x" for f in pipeline.resolver.fetchers)


class TestMain:
    """Test main() exit codes and error handling."""

    def test_successful_run(self, mock_runtime, candidates_file, capsys):
        exit_code = main([str(candidates_file), "--yes"])

        assert exit_code == EXIT_OK
        out = capsys.readouterr().out
        assert "Reviewed 1 packages: 0 with release data, 1 unknown" in out
        assert "Report written: reports/patchworks-report.md" in out

        candidates = mock_runtime["pipeline"].run.call_args.args[0]
        assert [c.package_name for c in candidates] == ["left-pad"]
        _, kwargs = mock_runtime["build_pipeline"].call_args
        assert kwargs["auto_confirm"] is True
        assert kwargs["ai_summary"] is False

    def test_logging_configured_from_config(self, mock_runtime, candidates_file):
        main([str(candidates_file), "--log-level", "DEBUG"])

        mock_runtime["configure_logging"].assert_called_once_with(
            level="DEBUG", format_type="key-value", environment="local"
        )

    def test_report_dir_defaults_to_config(self, mock_runtime, candidates_file):
        main([str(candidates_file)])

        report_dir = mock_runtime["build_pipeline"].call_args.args[2]
        assert report_dir == Path("patchworks-reports")

    def test_report_dir_override(self, mock_runtime, candidates_file, tmp_path):
        main([str(candidates_file), "--report-dir", str(tmp_path)])

        assert mock_runtime["build_pipeline"].call_args.args[2] == tmp_path

    def test_cancelled(self, mock_runtime, candidates_file, capsys):
        mock_runtime["pipeline"].run.side_effect = PipelineCancelledError()

        assert main([str(candidates_file)]) == EXIT_CANCELLED
        assert "Operation cancelled by the user." in capsys.readouterr().err

    def test_configuration_error(self, mock_runtime, candidates_file, capsys):
        mock_runtime["load_config"].side_effect = ConfigurationError(
            "Configuration validation failed", errors=["fetch -> user_agent: empty"]
        )

        assert main([str(candidates_file)]) == EXIT_ERROR
        err = capsys.readouterr().err
        assert "Configuration Error: Configuration validation failed" in err
        mock_runtime["build_pipeline"].assert_not_called()

    def test_missing_candidates_file(self, mock_runtime, tmp_path, capsys):
        assert main([str(tmp_path / "missing.yaml")]) == EXIT_ERROR
        assert "Candidate file not found" in capsys.readouterr().err

    def test_unexpected_error(self, mock_runtime, candidates_file, capsys):
        mock_runtime["pipeline"].run.side_effect = OSError("disk full")

        assert main([str(candidates_file)]) == EXIT_ERROR
        assert "Fatal error: disk full" in capsys.readouterr().err

    def test_keyboard_interrupt(self, mock_runtime, candidates_file):
        mock_runtime["pipeline"].run.side_effect = KeyboardInterrupt()

        assert main([str(candidates_file)]) == EXIT_CANCELLED


class TestEndToEnd:
    """Run main() with real collaborators on a package that needs no network."""

    def test_reports_written(self, candidates_file, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        for name in ("LOG_LEVEL", "ANTHROPIC_API_KEY", "OPENAI_API_KEY", "GEMINI_API_KEY"):
            monkeypatch.delenv(name, raising=False)
        report_dir = tmp_path / "reports"

        with patch("patchworks.main.load_dotenv"), patch("patchworks.main.configure_logging"):
            exit_code = main([str(candidates_file), "--yes", "--report-dir", str(report_dir)])

        assert exit_code == EXIT_OK
        written = sorted(p.suffix for p in report_dir.iterdir())
        assert written == [".json", ".md"]
        out = capsys.readouterr().out
        assert "Results:" in out
        assert "0 of 1 packages have release data." in out
