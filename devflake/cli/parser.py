"""
devflake CLI argument parser.

This module implements the command-line interface for devflake using argparse.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("devflake")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """devflake command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="devflake",
            description="devflake - reproducible development shells from pinned sources",
            epilog='Use "devflake COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"devflake {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to descriptor file (default: ./devflake.yaml)",
        )
        parser.add_argument(
            "--project-root",
            type=Path,
            metavar="PATH",
            default=Path.cwd(),
            help="Project root directory (default: current directory)",
        )
        parser.add_argument(
            "--catalog",
            type=Path,
            metavar="DIR",
            help="Package catalog directory (default: <project-root>/.devflake/catalog)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_show_command(subparsers)
        self._add_eval_command(subparsers)
        self._add_print_env_command(subparsers)
        self._add_lock_command(subparsers)
        self._add_metadata_command(subparsers)

        return parser

    def _add_system_options(self, parser):
        """Options selecting one output."""
        parser.add_argument(
            "--system",
            metavar="SYSTEM",
            help="Platform to evaluate for (default: current platform)",
        )
        parser.add_argument(
            "--shell",
            default="default",
            metavar="NAME",
            help="Development shell name [default: default]",
        )
        parser.add_argument(
            "--no-lock",
            action="store_true",
            help="Ignore devflake.lock and evaluate inputs as declared",
        )

    def _add_show_command(self, subparsers):
        """Add 'show' subcommand."""
        parser = subparsers.add_parser(
            "show",
            help="Show the outputs of the descriptor",
            description="Evaluate the descriptor and list its outputs per system",
        )
        parser.add_argument(
            "--no-lock",
            action="store_true",
            help="Ignore devflake.lock and evaluate inputs as declared",
        )

    def _add_eval_command(self, subparsers):
        """Add 'eval' subcommand."""
        parser = subparsers.add_parser(
            "eval",
            help="Print a development shell as JSON",
            description="Evaluate a development shell and print it as JSON",
        )
        self._add_system_options(parser)
        parser.add_argument(
            "--all-systems",
            action="store_true",
            help="Print every system's outputs instead of one shell",
        )

    def _add_print_env_command(self, subparsers):
        """Add 'print-env' subcommand."""
        parser = subparsers.add_parser(
            "print-env",
            help="Print an activation script for a development shell",
            description="Render a script that activates a development shell when sourced",
        )
        self._add_system_options(parser)
        parser.add_argument(
            "--format",
            choices=["sh", "ps1"],
            default="sh",
            metavar="FORMAT",
            help="Script format (sh|ps1) [default: sh]",
        )
        parser.add_argument(
            "--output",
            "-o",
            type=Path,
            metavar="FILE",
            help="Write the script to FILE instead of stdout",
        )

    def _add_lock_command(self, subparsers):
        """Add 'lock' subcommand."""
        parser = subparsers.add_parser(
            "lock",
            help="Create or update devflake.lock",
            description="Record the exact revision of every input in devflake.lock",
        )
        parser.add_argument(
            "--update",
            action="append",
            metavar="INPUT",
            default=[],
            help="Re-resolve INPUT even if it is locked (can be used multiple times)",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show changes without writing the lock file",
        )

    def _add_metadata_command(self, subparsers):
        """Add 'metadata' subcommand."""
        subparsers.add_parser(
            "metadata",
            help="Show descriptor metadata and input pins",
            description="Show the description, declared inputs and locked revisions",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        # Configure logging
        self._configure_logging(parsed_args)

        # Check if command specified
        if not parsed_args.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            stream=sys.stderr,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        # Command module mapping
        command_map = {
            "show": "devflake.cli.commands.show",
            "eval": "devflake.cli.commands.eval",
            "print-env": "devflake.cli.commands.print_env",
            "lock": "devflake.cli.commands.lock",
            "metadata": "devflake.cli.commands.metadata",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        import importlib

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
