import argparse
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from rstools.models import Property


class ReportingServiceProxy(Protocol):
    """Defines the contract for an authenticated report server client."""

    def create_linked_item(
        self,
        name: str,
        parent: str,
        link: str,
        properties: "list[Property]",
    ) -> None:
        """
        Create a linked report on the server.

        Args:
            name: Name of the new linked report
            parent: Path of the folder that will contain the linked report
            link: Path of the report the linked report points at
            properties: Metadata to set on the new item
        """
        ...


class Command(Protocol):
    """Defines the contract for a CLI command of the toolkit."""

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        """
        Add the command's arguments to its subparser.

        Args:
            parser: Subparser created for this command
        """
        ...

    def run(self, args: argparse.Namespace) -> None:
        """
        Execute the command with parsed arguments.

        Args:
            args: Parsed command line arguments
        """
        ...

    def get_command_info(self) -> dict[str, Any]:
        """
        Get information about this command.

        Returns:
            Dictionary with command metadata (name, description, etc.)
        """
        ...
