"""Command-line entry point for Patchworks."""

import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from patchworks import __version__
from patchworks.categorization import NoteCategorizer
from patchworks.config.environment import EnvironmentConfig
from patchworks.config.exceptions import ConfigurationError
from patchworks.config.loader import load_config
from patchworks.config.models import AppConfig
from patchworks.domain.loader import load_candidates
from patchworks.fetchers import build_resolver
from patchworks.logging import get_logger
from patchworks.logging.config import configure_logging
from patchworks.pipeline import PipelineCancelledError, PipelineOptions, UpgradePipeline
from patchworks.reports import ConsoleConfirmation, FileReporter, ReportDirectory

logger = get_logger(__name__, component="cli")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CANCELLED = 130


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and settle the effective log level.

    Log level priority: CLI > environment > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level

    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="patchworks",
        description=(
            "Patchworks - fetch and categorize release notes for outdated dependencies"
        ),
    )
    parser.add_argument(
        "candidates",
        type=Path,
        help="YAML or JSON file listing the outdated packages to review",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: patchworks.yaml or config/patchworks.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    parser.add_argument(
        "--report-dir",
        type=Path,
        default=None,
        help="Directory for report files (overrides reports.directory)",
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Answer yes at the confirmation prompt",
    )
    parser.add_argument(
        "--ai-summary",
        action="store_true",
        help="Request an AI summary even if ai.enabled is false",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def build_pipeline(
    app_config: AppConfig,
    env_config: EnvironmentConfig,
    report_dir: Path,
    auto_confirm: bool = False,
    ai_summary: bool = False,
) -> UpgradePipeline:
    """Wire the pipeline with the console and file collaborators."""
    return UpgradePipeline(
        app_config=app_config,
        resolver=build_resolver(app_config.fetch, github_token=env_config.github_token),
        categorizer=NoteCategorizer(term_limit=app_config.categorization.term_limit),
        directory_provider=ReportDirectory(report_dir),
        confirmation=ConsoleConfirmation(auto_confirm=auto_confirm),
        reporter=FileReporter(formats=app_config.reports.formats),
        options=PipelineOptions(reports_only=True, ai_summary=ai_summary),
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for Patchworks.

    Returns:
        Exit code (0 for success, 1 for configuration or fatal errors,
        130 when the run is cancelled).
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)
    load_dotenv()

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)

        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        logger.info(
            "Patchworks starting",
            extra={
                "event": "service.starting",
                "version": __version__,
                "candidates_path": str(args.candidates),
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
            },
        )

        candidates = load_candidates(args.candidates)
        report_dir = args.report_dir or Path(app_config.reports.directory)

        pipeline = build_pipeline(
            app_config,
            env_config,
            report_dir,
            auto_confirm=args.yes,
            ai_summary=args.ai_summary,
        )
        result = pipeline.run(candidates)

        print(
            f"Reviewed {result.total_packages} packages: "
            f"{result.total_with_notes} with release data, "
            f"{result.total_unknown} unknown"
        )
        for path in result.report_paths:
            print(f"Report written: {path}")

        logger.info(
            "Patchworks finished",
            extra={
                "event": "service.stopping",
                "uptime_seconds": round(time.time() - start_time, 2),
                "had_errors": result.had_errors,
            },
        )
        return EXIT_OK

    except PipelineCancelledError as e:
        print(str(e), file=sys.stderr)
        return EXIT_CANCELLED
    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e.message}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return EXIT_ERROR
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return EXIT_CANCELLED
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error during run",
            extra={
                "event": "service.run.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
