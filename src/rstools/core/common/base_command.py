"""Base implementation for toolkit commands."""

import argparse
import logging
from abc import ABC, abstractmethod
from typing import Any

from ..protocols import Command

logger = logging.getLogger(__name__)


class BaseCommand(Command, ABC):
    """
    Abstract base class for CLI commands.

    Adds the connection arguments shared by every command that talks to a
    report server, and leaves the command-specific arguments and behaviour
    abstract.

    Subclasses must implement:
    - name / description: Command metadata
    - add_arguments(): Command-specific arguments
    - run(): Execute the command
    """

    name: str = ""
    description: str = ""

    def __init__(self):
        """Initialize the command."""
        self._logger = logger.getChild(self.__class__.__name__)

    @abstractmethod
    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        """
        Add the command-specific arguments.

        Args:
            parser: Subparser created for this command
        """
        pass

    @abstractmethod
    def run(self, args: argparse.Namespace) -> None:
        """
        Execute the command.

        Args:
            args: Parsed command line arguments
        """
        pass

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        """Add command-specific and connection arguments to the subparser."""
        self.add_arguments(parser)

        connection = parser.add_argument_group("connection")
        connection.add_argument(
            "--report-server-uri",
            metavar="URI",
            help="Report server URI (default: config file, "
            "RSTOOLS_REPORT_SERVER_URI or http://localhost/reportserver/)",
        )
        connection.add_argument("--username", help="User name for the report server")
        connection.add_argument(
            "--password", help="Password for the report server user"
        )
        connection.add_argument("--domain", help="Windows domain of the user")

    def get_command_info(self) -> dict[str, Any]:
        """Get information about this command."""
        return {
            "name": self.name,
            "description": self.description,
            "class": self.__class__.__module__ + "." + self.__class__.__qualname__,
        }
