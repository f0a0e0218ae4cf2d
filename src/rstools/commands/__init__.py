"""Item management commands."""

from .linked_report import (
    NewLinkedReportCommand,
    build_linked_report_properties,
    new_linked_report,
)

__all__ = [
    "NewLinkedReportCommand",
    "build_linked_report_properties",
    "new_linked_report",
]
