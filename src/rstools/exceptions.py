"""
Reporting Services Exception Classes

Custom exceptions for error handling and reporting across the rstools commands.
"""

from typing import Any


class ReportingServicesError(Exception):
    """Base exception for all rstools errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.context = context or {}

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.error_code:
            base_msg = f"[{self.error_code}] {base_msg}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg = f"{base_msg} (Context: {context_str})"
        return base_msg

    @property
    def message(self) -> str:
        """The bare message, without error code and context."""
        return super().__str__()


class ValidationError(ReportingServicesError):
    """Raised when a command parameter is missing or empty."""

    def __init__(
        self,
        message: str,
        field_name: str | None = None,
        actual_value: Any = None,
    ) -> None:
        context = {}
        if field_name:
            context["field_name"] = field_name
        if actual_value is not None:
            context["actual_value"] = repr(actual_value)
        super().__init__(message, "VALIDATION_ERROR", context)

    def get_recovery_hint(self) -> str:
        """Provide a helpful hint for fixing the validation error."""
        if "field_name" in self.context:
            field = self.context["field_name"]
            return f"Provide a non-empty value for '{field}'"
        return "Check the command parameters"


class ConfigurationError(ReportingServicesError):
    """Raised when connection settings cannot be loaded."""

    def __init__(self, message: str, config_file: str | None = None) -> None:
        context = {}
        if config_file:
            context["config_file"] = config_file
        super().__init__(message, "CONFIGURATION_ERROR", context)

    def get_recovery_hint(self) -> str:
        """Provide a helpful hint for fixing the configuration error."""
        if "config_file" in self.context:
            return (
                f"Check that '{self.context['config_file']}' is a YAML mapping "
                "with valid connection settings"
            )
        return "Check the RSTOOLS_* environment variables"


class ProxyCreationError(ReportingServicesError):
    """Raised when a web service proxy cannot be built."""

    def __init__(self, message: str, report_server_uri: str | None = None) -> None:
        context = {}
        if report_server_uri:
            context["report_server_uri"] = report_server_uri
        super().__init__(message, "PROXY_CREATION_ERROR", context)


class ReportServerError(ReportingServicesError):
    """Raised when the report server rejects a request or cannot be reached."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        fault_code: str | None = None,
    ) -> None:
        context: dict[str, Any] = {}
        if status_code is not None:
            context["status_code"] = status_code
        if fault_code:
            context["fault_code"] = fault_code
        super().__init__(message, "REPORT_SERVER_ERROR", context)


class LinkedReportCreationError(ReportingServicesError):
    """Raised when the report server fails to create a linked report."""

    def __init__(
        self,
        message: str,
        item_path: str | None = None,
        destination: str | None = None,
        name: str | None = None,
    ) -> None:
        context = {}
        if item_path:
            context["item_path"] = item_path
        if destination:
            context["destination"] = destination
        if name:
            context["name"] = name
        super().__init__(message, "LINKED_REPORT_CREATION_ERROR", context)

    def get_recovery_hint(self) -> str:
        """Provide a helpful hint for fixing the creation error."""
        return (
            "Ensure the source report and destination folder exist and that "
            "the name is not already used in that folder"
        )
