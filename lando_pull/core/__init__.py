"""
Core module for lando-pull.

This module contains the exception hierarchy and the command runner
used by every pull stage.
"""

from lando_pull.core.exceptions import (
    LandoPullError,
    ConfigurationError,
    AuthConfigError,
    NothingToDoError,
    DependencyError,
    ExternalToolError,
    StageError,
    RemoteBackupError,
    TransferError,
    FileSyncError,
    DatabaseImportError,
    ImportTimeoutError,
    UpdateError,
)
from lando_pull.core.runner import CommandResult, CommandRunner

__all__ = [
    "LandoPullError",
    "ConfigurationError",
    "AuthConfigError",
    "NothingToDoError",
    "DependencyError",
    "ExternalToolError",
    "StageError",
    "RemoteBackupError",
    "TransferError",
    "FileSyncError",
    "DatabaseImportError",
    "ImportTimeoutError",
    "UpdateError",
    "CommandResult",
    "CommandRunner",
]
