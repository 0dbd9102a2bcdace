"""
vksdk CLI argument parser.

This module implements the command-line interface for vksdk using argparse.
"""

import argparse
import importlib
import logging
import os
import sys
import traceback
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import List, Optional

try:
    __version__ = version("vksdk")
except PackageNotFoundError:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)

COMMANDS = ("install", "resolve", "versions", "verify")


class ActionsLogFormatter(logging.Formatter):
    """
    Render warnings and errors as GitHub Actions workflow commands.

    Records below WARNING use the wrapped format unchanged.
    """

    _COMMANDS = {
        logging.WARNING: "warning",
        logging.ERROR: "error",
        logging.CRITICAL: "error",
    }

    def format(self, record: logging.LogRecord) -> str:
        command = self._COMMANDS.get(record.levelno)
        if command is None:
            return super().format(record)

        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return f"::{command}::{escape_command_data(message)}"


def escape_command_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def running_in_github_actions(environ=None) -> bool:
    environ = os.environ if environ is None else environ
    return environ.get("GITHUB_ACTIONS", "").lower() == "true"


class CLI:
    """vksdk command-line interface."""

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
            prog="vksdk",
            description="vksdk - Install the Vulkan SDK in CI pipelines",
            epilog='Use "vksdk COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument("--version", action="version", version=f"vksdk {__version__}")
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
            help="Path to configuration file (default: ./vksdk.yaml)",
        )
        parser.add_argument(
            "--api-url",
            metavar="URL",
            help="Base URL of the version query API (default: https://vulkan.lunarg.com)",
        )
        parser.add_argument(
            "--download-url",
            metavar="URL",
            help="Base URL of the SDK downloads (default: https://sdk.lunarg.com)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_install_command(subparsers)
        self._add_resolve_command(subparsers)
        self._add_versions_command(subparsers)
        self._add_verify_command(subparsers)

        return parser

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            help="Install the Vulkan SDK",
            description="Resolve, restore or download, install, verify and publish the Vulkan SDK",
        )
        parser.add_argument(
            "--vulkan-version",
            dest="vulkan_version",
            metavar="VERSION",
            help="SDK version, 'major.minor.build.rev' or 'latest' (default: latest)",
        )
        parser.add_argument(
            "--destination",
            metavar="DIR",
            help="Install root (default: C:\\VulkanSDK on windows, ~/vulkan-sdk elsewhere)",
        )
        # flags default to None so that unset flags do not override other input sources
        parser.add_argument(
            "--install-runtime",
            action="store_true",
            default=None,
            help="Also install the Vulkan runtime components (windows)",
        )
        parser.add_argument(
            "--cache",
            action="store_true",
            default=None,
            help="Restore the SDK from the cache and save fresh installs to it",
        )
        parser.add_argument(
            "--stripdown",
            action="store_true",
            default=None,
            help="Remove demos, docs and templates before caching",
        )
        parser.add_argument(
            "--optional-components",
            dest="optional_components",
            metavar="LIST",
            help="Comma separated optional components (windows)",
        )
        parser.add_argument(
            "--installer-timeout",
            dest="installer_timeout",
            type=int,
            metavar="SECONDS",
            help="Deadline for the windows installer (default: 1800)",
        )
        parser.add_argument(
            "--cache-dir", dest="cache_dir", metavar="DIR", help="Local cache directory"
        )
        parser.add_argument(
            "--download-dir",
            dest="download_dir",
            metavar="DIR",
            help="Directory for downloaded installers (default: system temp dir)",
        )
        parser.add_argument(
            "--strict",
            action="store_true",
            default=None,
            help="Fail when the installed SDK cannot be verified",
        )
        parser.add_argument(
            "--no-publish",
            action="store_true",
            help="Do not export environment variables",
        )

    def _add_resolve_command(self, subparsers):
        """Add 'resolve' subcommand."""
        parser = subparsers.add_parser(
            "resolve",
            help="Print the concrete SDK version",
            description="Resolve 'latest' (or a concrete version) for this platform",
        )
        parser.add_argument(
            "vulkan_version",
            nargs="?",
            default="latest",
            metavar="VERSION",
            help="Version token (default: latest)",
        )

    def _add_versions_command(self, subparsers):
        """Add 'versions' subcommand."""
        parser = subparsers.add_parser(
            "versions",
            help="List available SDK versions",
            description="List the SDK versions published for this platform",
        )
        parser.add_argument(
            "--latest",
            action="store_true",
            help="Show the latest version of every platform instead",
        )

    def _add_verify_command(self, subparsers):
        """Add 'verify' subcommand."""
        parser = subparsers.add_parser(
            "verify",
            help="Verify an SDK installation",
            description="Check the marker binaries of an installed SDK",
        )
        parser.add_argument(
            "install_path", type=Path, metavar="PATH", help="Versioned install folder"
        )
        parser.add_argument(
            "--runtime",
            action="store_true",
            help="Also verify the runtime components (windows)",
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

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            if parsed_args.verbose:
                logger.error(f"Error: {e}\n{traceback.format_exc()}")
            else:
                logger.error(f"Error: {e}")
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

        handler = logging.StreamHandler()
        if running_in_github_actions():
            handler.setFormatter(ActionsLogFormatter(format_str))
        else:
            handler.setFormatter(logging.Formatter(format_str))

        logging.basicConfig(
            level=level,
            handlers=[handler],
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
        if args.command not in COMMANDS:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module_name = f"vksdk.cli.commands.{args.command}"
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            logger.error(f"Failed to load command module: {e}")
            return 1

        if not hasattr(module, "run"):
            logger.error(f"Command module {module_name} has no run() function")
            return 1

        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
