"""
Linked report creation.

A linked report is a named shortcut to an existing report definition. It has
its own metadata and parameter overrides and lives in its own folder.
"""

import argparse
import logging
from pathlib import Path

from ..core.common.base_command import BaseCommand
from ..core.protocols import ReportingServiceProxy
from ..exceptions import (
    LinkedReportCreationError,
    ReportingServicesError,
    ValidationError,
)
from ..models import Credentials, Property
from ..proxy.web_service import new_web_service_proxy

logger = logging.getLogger(__name__)

DESCRIPTION_PROPERTY = "Description"
HIDDEN_PROPERTY = "Hidden"


def _require_non_empty(value: str | None, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(
            f"Parameter '{field_name}' must be a non-empty string",
            field_name=field_name,
            actual_value=value,
        )
    return value


def build_linked_report_properties(
    description: str | None = None, hidden: bool = False
) -> list[Property]:
    """
    Build the metadata list sent with a linked report.

    Args:
        description: Description of the linked report. Omitted when blank.
        hidden: Hide the linked report in the portal. Omitted when False.

    Returns:
        At most one Property per recognised name, in a stable order
    """
    properties: list[Property] = []

    if description and description.strip():
        properties.append(Property(name=DESCRIPTION_PROPERTY, value=description))

    if hidden:
        properties.append(Property(name=HIDDEN_PROPERTY, value="true"))

    return properties


def new_linked_report(
    item_path: str,
    destination_folder_path: str,
    name: str,
    description: str | None = None,
    hidden: bool = False,
    report_server_uri: str | None = None,
    credentials: Credentials | None = None,
    proxy: ReportingServiceProxy | None = None,
    what_if: bool = False,
    config_file: str | Path | None = None,
) -> None:
    """
    Create a linked report pointing at an existing report.

    Args:
        item_path: Path of the source report (e.g. '/Finance/Sales')
        destination_folder_path: Folder that will contain the linked report
        name: Name of the new linked report
        description: Optional description of the linked report
        hidden: Hide the linked report from the portal
        report_server_uri: Server URI, used only when no proxy is given
        credentials: Credentials, used only when no proxy is given
        proxy: Existing report server client. Built on demand if None.
        what_if: Log what would be created and return without contacting
            the server.
        config_file: Settings file, used only when no proxy is given.
            A proxy built here is closed before returning.

    Raises:
        ValidationError: If a required parameter is empty.
        LinkedReportCreationError: If the report server call fails.
    """
    _require_non_empty(item_path, "item_path")
    _require_non_empty(destination_folder_path, "destination_folder_path")
    _require_non_empty(name, "name")

    if what_if:
        logger.info(
            f"What if: creating linked report '{name}' in "
            f"'{destination_folder_path}' linked to '{item_path}'"
        )
        return

    properties = build_linked_report_properties(description, hidden)
    logger.debug(f"Linked report properties: {[p.model_dump() for p in properties]}")

    logger.info(
        f"Creating linked report '{name}' in '{destination_folder_path}' "
        f"linked to '{item_path}'"
    )

    owns_proxy = proxy is None
    if owns_proxy:
        proxy = new_web_service_proxy(
            report_server_uri, credentials, config_file=config_file
        )

    try:
        proxy.create_linked_item(name, destination_folder_path, item_path, properties)
    except Exception as e:
        message = e.message if isinstance(e, ReportingServicesError) else str(e)
        raise LinkedReportCreationError(
            f"Exception occurred while creating linked report! {message}",
            item_path=item_path,
            destination=destination_folder_path,
            name=name,
        ) from e
    finally:
        if owns_proxy:
            proxy.close()

    logger.info(f"Linked report '{name}' created successfully")


class NewLinkedReportCommand(BaseCommand):
    """CLI wrapper around ``new_linked_report``."""

    name = "new-linked-report"
    description = "Create a linked report pointing at an existing report"

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "--item-path",
            required=True,
            help="Path of the source report (e.g. /Finance/Sales)",
        )
        parser.add_argument(
            "--destination-folder-path",
            required=True,
            help="Folder that will contain the linked report",
        )
        parser.add_argument(
            "--name", required=True, help="Name of the new linked report"
        )
        parser.add_argument("--description", help="Description of the linked report")
        parser.add_argument(
            "--hidden",
            action="store_true",
            help="Hide the linked report in the web portal",
        )
        parser.add_argument(
            "--what-if",
            action="store_true",
            help="Show what would be created without contacting the server",
        )

    def run(self, args: argparse.Namespace) -> None:
        credentials = None
        if args.username:
            credentials = Credentials(
                username=args.username,
                password=args.password or "",
                domain=args.domain,
            )

        new_linked_report(
            item_path=args.item_path,
            destination_folder_path=args.destination_folder_path,
            name=args.name,
            description=args.description,
            hidden=args.hidden,
            report_server_uri=args.report_server_uri,
            credentials=credentials,
            what_if=args.what_if,
            config_file=getattr(args, "config", None),
        )
