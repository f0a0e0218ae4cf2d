"""Administration helpers for SQL Server Reporting Services."""

from .commands.linked_report import build_linked_report_properties, new_linked_report
from .models import ConnectionSettings, Credentials, Property
from .proxy.web_service import WebServiceProxy, new_web_service_proxy

__version__ = "0.1.0"

__all__ = [
    "ConnectionSettings",
    "Credentials",
    "Property",
    "WebServiceProxy",
    "build_linked_report_properties",
    "new_linked_report",
    "new_web_service_proxy",
]
