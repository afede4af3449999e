#!/usr/bin/env python3
"""Command-line interface for kpackager.

This module provides the CLI for resolving knowledge resources:
- Argument parsing and validation
- Configuration file loading and merging
- Logging setup
- Report output (text or YAML)

Example:
    >>> from kpackager.cli import parse_arguments
    >>> args = parse_arguments(['--archive', 'rules.jar', '--pattern', '**.drl'])
"""

import argparse
import sys
import traceback
from pathlib import Path
from typing import Any, Dict, List, Optional

from kpackager.core.constants import DEFAULT_LOG_FORMAT, KPACKAGER_VERSION, ConfigKey
from kpackager.core.validators import ValidationError, validate_config
from kpackager.infrastructure.config_manager import (
    ConfigError,
    ConfigManager,
    ConfigSource,
    set_global_config,
)
from kpackager.infrastructure.logger import Logger, set_global_logger
from kpackager.packager import KnowledgePackager, build_sources
from kpackager.report import RENDERERS

DESCRIPTION = "kpackager - knowledge resource resolver for rule package builds"


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


def parse_arguments(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args: Argument list to parse (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace

    Raises:
        SystemExit: On invalid arguments or --help/--version
        CLIError: If argument validation fails
    """
    parser = argparse.ArgumentParser(
        prog="kpackager",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Resolve rules from a single archive
  kpackager --archive target/rules.jar --pattern '**.drl' --pattern '**.bpmn'

  # Resolve using a configuration file
  kpackager --config kpackager.yaml

  # Exclude resources and print the plan as YAML
  kpackager --config kpackager.yaml --exclude legacy.drl --format yaml
        """,
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {KPACKAGER_VERSION}",
    )

    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        type=str,
        help="Configuration file path (YAML format)",
    )

    # Resolution options
    resolve_group = parser.add_argument_group("resolution options")

    resolve_group.add_argument(
        "-a",
        "--archive",
        metavar="PATH",
        action="append",
        dest="archives",
        help="Archive to scan (can be specified multiple times)",
    )

    resolve_group.add_argument(
        "-p",
        "--pattern",
        metavar="GLOB",
        action="append",
        dest="patterns",
        help="Entry pattern applied to every archive (can be specified multiple times)",
    )

    resolve_group.add_argument(
        "-x",
        "--exclude",
        metavar="SUFFIX",
        action="append",
        dest="exclusions",
        help="Drop entries ending with SUFFIX (can be specified multiple times)",
    )

    resolve_group.add_argument(
        "-n",
        "--package-name",
        metavar="NAME",
        type=str,
        help="Target package name",
    )

    resolve_group.add_argument(
        "--config-entry",
        metavar="NAME",
        type=str,
        help="Compiler configuration entry name",
    )

    # Output options
    output_group = parser.add_argument_group("output options")

    output_group.add_argument(
        "-f",
        "--format",
        choices=sorted(RENDERERS),
        default="text",
        help="Report format (default: text)",
    )

    output_group.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    output_group.add_argument(
        "--log-file",
        metavar="FILE",
        type=str,
        help="Also write logs to FILE",
    )

    parsed = parser.parse_args(args)

    _validate_arguments(parsed)

    return parsed


def _validate_arguments(args: argparse.Namespace) -> None:
    """
    Validate parsed arguments.

    Args:
        args: Parsed arguments namespace

    Raises:
        CLIError: If validation fails
    """
    if not args.config and not args.archives:
        raise CLIError(
            "Either --config or --archive must be specified\n" "Use --help for usage information"
        )

    if args.config:
        config_path = Path(args.config)

        if not config_path.exists():
            raise CLIError(f"Configuration file does not exist: {args.config}")

        if not config_path.is_file():
            raise CLIError(f"Configuration path is not a file: {args.config}")


def build_config_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Build configuration dictionary from command-line arguments.

    Only options given on the command line are included, so they override
    the configuration file without erasing the rest of it.

    Args:
        args: Parsed arguments namespace

    Returns:
        Configuration dictionary for ConfigManager
    """
    section: Dict[str, Any] = {}

    if args.archives:
        section[ConfigKey.ARCHIVES] = [{ConfigKey.ARCHIVE_PATH: path} for path in args.archives]

    if args.patterns:
        section[ConfigKey.PATTERNS] = list(args.patterns)

    if args.exclusions:
        section[ConfigKey.EXCLUSIONS] = list(args.exclusions)

    if args.package_name:
        section[ConfigKey.PACKAGE] = {ConfigKey.PACKAGE_NAME: args.package_name}

    if args.config_entry:
        section[ConfigKey.CONFIG_ENTRY] = args.config_entry

    logging_config = {}
    if args.debug:
        logging_config["level"] = "DEBUG"
    if args.log_file:
        logging_config["file"] = args.log_file
    if logging_config:
        section[ConfigKey.LOGGING] = logging_config

    return {ConfigKey.ROOT: section}


def load_configuration(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Load and validate the merged ``kpackager`` configuration section.

    Args:
        args: Parsed arguments namespace

    Returns:
        Merged ``kpackager`` section

    Raises:
        CLIError: If the configuration cannot be loaded or is invalid
    """
    manager = ConfigManager()

    try:
        if args.config:
            manager.load_file(args.config)
    except ConfigError as e:
        raise CLIError(e.message)

    manager.load_dict(build_config_from_args(args), ConfigSource.CLI_ARGS)
    set_global_config(manager)
    section = manager.get_section()

    try:
        validate_config(section)
    except ValidationError as e:
        raise CLIError(f"Invalid configuration: {e.message}")

    if not section.get(ConfigKey.ARCHIVES):
        raise CLIError("No archives configured")

    return section


def setup_logging(config: Dict[str, Any]) -> Logger:
    """
    Setup logging based on the merged configuration.

    Args:
        config: ``kpackager`` configuration section

    Returns:
        Configured logger instance, also installed as the global logger
    """
    logging_config = config.get(ConfigKey.LOGGING) or {}
    logger = Logger(
        "kpackager",
        level=logging_config.get("level", "INFO"),
        fmt=logging_config.get("format") or DEFAULT_LOG_FORMAT,
    )

    log_file = logging_config.get("file")
    if log_file:
        logger.add_handler(logger.create_file_handler(log_file))

    set_global_logger(logger)
    return logger


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Resolves and classifies the configured archives and prints the
    resulting resource plan.

    Returns:
        Process exit code
    """
    try:
        args = parse_arguments(argv)
        config = load_configuration(args)
        logger = setup_logging(config)

        packager = KnowledgePackager(logger=logger)
        report = packager.run(
            build_sources(config),
            package_name=(config.get(ConfigKey.PACKAGE) or {}).get(ConfigKey.PACKAGE_NAME),
            exclusions=config.get(ConfigKey.EXCLUSIONS) or [],
            config_entry=config[ConfigKey.CONFIG_ENTRY],
        )

        if not report.ok:
            for error in report.errors:
                print(f"Error: {error}", file=sys.stderr)
            return 1

        sys.stdout.write(RENDERERS[args.format](report))
        return 0

    except CLIError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130

    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
