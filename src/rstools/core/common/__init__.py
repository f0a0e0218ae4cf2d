"""Common base classes for commands."""

from .base_command import BaseCommand

__all__ = ["BaseCommand"]
