#!/usr/bin/env python3
"""
Command line entry point for the runtime regression.

Configuration comes from config_yaml/config.yaml (plus config_<env>.yaml);
flags given on the command line override it.
"""
import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from runtime_regression.config.config_loader import ConfigLoader, default_config_path
from runtime_regression.config.regression_config import RegressionConfig
from runtime_regression.errors import RegressionError
from runtime_regression.service.discovery.benchmark_provider import (
    BenchmarkProvider,
    SourceTreeBenchmarkProvider,
    StaticBenchmarkProvider,
)
from runtime_regression.service.notification.notifier import build_notifier
from runtime_regression.service.regression_app.regression_app import RuntimeRegressionApp
from runtime_regression.service.runner.jmh_runner import JmhRunner
from runtime_regression.util.file_utils import project_relative_path, project_root
from runtime_regression.util.log_config import setup_logger

logger = setup_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run the benchmarks, compare against the baseline and re-run regressions to rule out noise"
    )
    parser.add_argument(
        "--env",
        type=str,
        default=None,
        help=(
            "Environment name for configuration override (e.g., 'dev', 'prod'). "
            "Loads config_<env>.yaml in addition to the base config.yaml."
        ),
    )
    parser.add_argument("--config-dir", type=Path, default=None,
                        help="Directory holding config.yaml (default: the bundled config_yaml)")
    parser.add_argument("--summary-only", action="store_true",
                        help="Only print out the summary from the last time it ran")
    parser.add_argument("--minimum-only", action="store_true",
                        help="Don't run all benchmarks, only re-run minimum finding on the last run")
    parser.add_argument("-e", "--email-path", type=str, default=None,
                        help="Path to email login. If relative, relative to project.")
    parser.add_argument("-r", "--results-path", type=str, default=None,
                        help="Path to results directory. If relative, relative to project.")
    parser.add_argument("--timeout", type=float, default=None,
                        help="JMH timeout in minutes")
    parser.add_argument("-b", "--benchmark", nargs="+", default=None, dest="benchmarks",
                        help="Subset of benchmarks to run. Default is to run them all.")
    parser.add_argument("--tolerance", type=float, default=None,
                        help="Fractional slowdown considered significant, e.g. 0.4")
    parser.add_argument("--max-iterations", type=int, default=None,
                        help="Maximum number of times a flagged benchmark is re-run")
    parser.add_argument("--project-root", type=Path, default=None,
                        help="Root relative paths are resolved against (default: enclosing git repository)")
    return parser


def apply_overrides(config: RegressionConfig, args: argparse.Namespace) -> RegressionConfig:
    overrides = {
        "summary_only": args.summary_only or config.summary_only,
        "minimum_only": args.minimum_only or config.minimum_only,
    }
    if args.email_path is not None:
        overrides["email_path"] = args.email_path
    if args.results_path is not None:
        overrides["results_path"] = args.results_path
    if args.timeout is not None:
        overrides["timeout_min"] = args.timeout
    if args.benchmarks:
        overrides["benchmark_names"] = list(args.benchmarks)
    if args.tolerance is not None:
        overrides["tolerance"] = args.tolerance
    if args.max_iterations is not None:
        overrides["max_iterations"] = args.max_iterations
    return replace(config, **overrides)


def resolve_paths(config: RegressionConfig, root: Path) -> RegressionConfig:
    return replace(
        config,
        results_path=str(project_relative_path(config.results_path, root)),
        email_path=str(project_relative_path(config.email_path, root)),
        benchmark_jar=str(project_relative_path(config.benchmark_jar, root)),
        main_path=str(project_relative_path(config.main_path, root)),
    )


def build_provider(config: RegressionConfig) -> BenchmarkProvider:
    if config.benchmark_names:
        return StaticBenchmarkProvider(config.benchmark_names)
    return SourceTreeBenchmarkProvider(Path(config.main_path), config.blacklist_modules)


def build_app(config: RegressionConfig) -> RuntimeRegressionApp:
    engine = JmhRunner(
        benchmark_jar=Path(config.benchmark_jar),
        output_dir=Path(config.results_path),
        cmd=config.java_cmd,
    )
    return RuntimeRegressionApp(
        config,
        engine=engine,
        provider=build_provider(config),
        notifier=build_notifier(Path(config.email_path)),
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        loader = ConfigLoader(args.config_dir or default_config_path(), env=args.env)
        if args.env:
            logger.info(f"Loaded configuration with environment override: {args.env}")
        root = args.project_root or project_root()
        config = resolve_paths(apply_overrides(loader.config_data, args), root)
        ConfigLoader.validate(config)
        outcome = build_app(config).perform_regression()
    except (RegressionError, FileNotFoundError) as e:
        logger.error(str(e))
        return 2

    if outcome.exceptions:
        logger.warning(f"{len(outcome.exceptions)} runtime regression(s) confirmed")
        return 1
    logger.info("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
