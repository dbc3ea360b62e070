"""Exception hierarchy for remote acquisition."""

from __future__ import annotations

from ..utils.cmd import CommandError, ProcessTimeout


class RemoteForensicsError(Exception):
    """Base class for errors raised by the acquisition framework."""


class ConfigurationError(RemoteForensicsError):
    """Raised before any remote contact when the run cannot be configured."""


class CatalogError(RemoteForensicsError):
    """Raised when a command catalog cannot be parsed."""


class TransferError(CommandError):
    """Raised when a file copy to or from a target fails."""


__all__ = [
    "CatalogError",
    "CommandError",
    "ConfigurationError",
    "ProcessTimeout",
    "RemoteForensicsError",
    "TransferError",
]
