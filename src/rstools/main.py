"""
Command-line interface for Reporting Services administration.

This module builds the ``rstools`` CLI from the registered commands.
"""

import argparse
import logging
import sys
from typing import NoReturn

from pydantic import ValidationError as PydanticValidationError

from rstools.core.command_registry import (
    get_global_registry,
    register_builtin_commands,
)
from rstools.exceptions import (
    ConfigurationError,
    LinkedReportCreationError,
    ProxyCreationError,
    ReportingServicesError,
    ValidationError,
)


def configure_logging(debug: bool = False, verbose: bool = False) -> None:
    """Configure application logging.

    Args:
        debug: Enable debug-level logging if True.
        verbose: Enable verbose logging from the proxy and commands if True.
    """
    if debug:
        level = logging.DEBUG
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    elif verbose:
        level = logging.INFO
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    else:
        level = logging.INFO
        format_str = "%(levelname)s: %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        stream=sys.stdout,
        force=True,  # Override existing configuration
    )

    if not verbose and not debug:
        # Quiet mode: only command results and warnings
        logging.getLogger().setLevel(logging.WARNING)
        logging.getLogger("rstools.commands").setLevel(logging.INFO)
        logging.getLogger(__name__).setLevel(logging.INFO)
        # urllib3 logs every connection at DEBUG/INFO
        logging.getLogger("urllib3").setLevel(logging.WARNING)


def show_available_commands() -> NoReturn:
    """Show available commands and exit."""
    register_builtin_commands()
    registry = get_global_registry()
    available = registry.get_available_commands()

    print("Available Commands:")
    print("=" * 50)

    if not available:
        print("No commands registered.")
        sys.exit(0)

    for command_name in available:
        info = registry.get_command_info(command_name)
        description = info.get("description") or "No description available"
        print(f"  {command_name:<20} - {description}")

    sys.exit(0)


def add_global_options(
    parser: argparse.ArgumentParser, keep_defaults: bool = True
) -> None:
    """Add the options accepted both before and after the command name.

    Args:
        parser: Parser to extend.
        keep_defaults: Set defaults on the namespace. Subparsers pass False so
            they do not overwrite values parsed by the top-level parser.
    """
    extra = {} if keep_defaults else {"default": argparse.SUPPRESS}

    parser.add_argument(
        "--config",
        metavar="FILE",
        help="YAML file with connection settings (default: ~/.rstools.yaml)",
        **extra,
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging for detailed output",
        **extra,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging (shows proxy and request activity)",
        **extra,
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subparser per registered command."""
    register_builtin_commands()
    registry = get_global_registry()

    parser = argparse.ArgumentParser(
        prog="rstools",
        description="Administration helpers for SQL Server Reporting Services",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create a hidden linked report
  rstools new-linked-report --item-path /Finance/Sales \\
    --destination-folder-path /Regional --name "Sales (EMEA)" --hidden

  # Point at another server with explicit credentials
  rstools new-linked-report --item-path /Finance/Sales \\
    --destination-folder-path /Regional --name "Sales (US)" \\
    --report-server-uri http://reports.example.com/reportserver \\
    --username svc_reports --domain CORP --password secret

  # List available commands
  rstools --list-commands

Configuration:
  Connection settings are read from ~/.rstools.yaml (or $RSTOOLS_CONFIG)
  and the RSTOOLS_REPORT_SERVER_URI, RSTOOLS_USERNAME, RSTOOLS_PASSWORD
  and RSTOOLS_DOMAIN environment variables. Command line options win.
        """,
    )

    parser.add_argument(
        "--list-commands",
        action="store_true",
        help="List available commands and exit",
    )
    add_global_options(parser)

    # Subcommands accept the same options after the command name
    global_options = argparse.ArgumentParser(add_help=False)
    add_global_options(global_options, keep_defaults=False)

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    for command_name in registry.get_available_commands():
        command = registry.create_command_instance(command_name)
        info = command.get_command_info()
        subparser = subparsers.add_parser(
            command_name,
            help=info.get("description"),
            description=info.get("description"),
            parents=[global_options],
        )
        command.configure_parser(subparser)

    return parser


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse and validate command line arguments.

    Returns:
        Parsed command line arguments.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list_commands:
        show_available_commands()

    if not args.command:
        parser.error("Must specify a command or use --list-commands")

    return args


def run_command(args: argparse.Namespace) -> int:
    """Execute the selected command and map failures to exit codes.

    Args:
        args: Parsed command line arguments.

    Returns:
        Process exit code (0 for success, >0 for errors).
    """
    configure_logging(args.debug, args.verbose)
    logger = logging.getLogger(__name__)

    registry = get_global_registry()

    try:
        command = registry.create_command_instance(args.command)
        command.run(args)
        return 0

    except (ValidationError, PydanticValidationError) as e:
        logger.error(f"Input validation failed: {e}")
        if hasattr(e, "get_recovery_hint"):
            logger.info(f"Suggestion: {e.get_recovery_hint()}")
        return 1
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        logger.info(f"Suggestion: {e.get_recovery_hint()}")
        return 2
    except ProxyCreationError as e:
        logger.error(f"Could not create report server proxy: {e}")
        return 3
    except LinkedReportCreationError as e:
        logger.error(e.message)
        logger.info(f"Suggestion: {e.get_recovery_hint()}")
        if args.debug:
            logger.exception("Full traceback:")
        return 4
    except ReportingServicesError as e:
        logger.error(f"Reporting Services error: {e}")
        return 5
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.debug:
            logger.exception("Full traceback:")
        return 9


def main(argv: list[str] | None = None) -> NoReturn:
    """Console script entry point."""
    args = parse_arguments(argv)
    sys.exit(run_command(args))


if __name__ == "__main__":
    main()
