"""Registry of the commands exposed by the ``rstools`` CLI."""

import logging
from typing import Any

from .protocols import Command

logger = logging.getLogger(__name__)


def _normalize(command_name: str) -> str:
    if not command_name or not command_name.strip():
        raise ValueError("Command name cannot be empty")
    return command_name.strip().lower()


class CommandRegistry:
    """Maps CLI command names to the classes implementing them."""

    def __init__(self):
        self._commands: dict[str, type[Command]] = {}
        self._logger = logger.getChild(self.__class__.__name__)

    def register_command(self, command_name: str, command_class: type[Command]) -> None:
        """
        Register ``command_class`` under ``command_name``.

        Raises:
            ValueError: If the name is empty or the class is missing
        """
        key = _normalize(command_name)
        if command_class is None:
            raise ValueError("Command class cannot be None")

        if key in self._commands:
            self._logger.warning(f"Replacing command registered as '{key}'")

        self._commands[key] = command_class
        self._logger.debug(f"Registered {command_class.__name__} as '{key}'")

    def is_command_available(self, command_name: str) -> bool:
        """Return True if a command is registered under this name."""
        return bool(command_name) and command_name.strip().lower() in self._commands

    def create_command_instance(self, command_name: str) -> Command:
        """
        Instantiate the command registered under ``command_name``.

        Raises:
            ValueError: If no such command is registered
            RuntimeError: If the command class cannot be instantiated
        """
        key = _normalize(command_name)
        command_class = self._commands.get(key)
        if command_class is None:
            known = ", ".join(self.get_available_commands()) or "none"
            raise ValueError(f"Unknown command '{key}'. Available commands: {known}")

        try:
            return command_class()
        except Exception as e:
            raise RuntimeError(f"Cannot create command '{key}': {e}") from e

    def get_available_commands(self) -> list[str]:
        """Registered command names in alphabetical order."""
        return sorted(self._commands)

    def get_command_info(self, command_name: str) -> dict[str, Any]:
        """Metadata reported by the command registered under ``command_name``."""
        return self.create_command_instance(command_name).get_command_info()


_global_registry = CommandRegistry()


def get_global_registry() -> CommandRegistry:
    """Get the registry used by the CLI."""
    return _global_registry


def register_builtin_commands() -> None:
    """Register the commands shipped with rstools. Safe to call repeatedly."""
    # Imported here: the command modules import from rstools.core
    from rstools.commands.linked_report import NewLinkedReportCommand

    registry = get_global_registry()
    if not registry.is_command_available(NewLinkedReportCommand.name):
        registry.register_command(NewLinkedReportCommand.name, NewLinkedReportCommand)
