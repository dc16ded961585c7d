"""
Custom exceptions for lando-pull.

This module defines the exception hierarchy used throughout the pull
engine. Stage errors carry the exit code and captured process output
so a failure can be diagnosed without re-running in verbose mode.
"""

from typing import Any, Dict, Optional


class LandoPullError(Exception):
    """Base exception class for lando-pull errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}


class ConfigurationError(LandoPullError):
    """Raised when there's an error in configuration."""
    pass


class AuthConfigError(ConfigurationError):
    """Raised when the selected auth method lacks its credential."""
    pass


class NothingToDoError(ConfigurationError):
    """Raised when both the database and files stages are skipped."""
    pass


class DependencyError(LandoPullError):
    """Raised when required local binaries are missing."""

    def __init__(self, message: str, missing: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.missing = missing or []


class ExternalToolError(LandoPullError):
    """Raised when a spawned process fails or cannot be started."""

    def __init__(
        self,
        message: str,
        exit_code: Optional[int] = None,
        output: str = "",
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.exit_code = exit_code
        self.output = output
        self.details.setdefault("exit_code", exit_code)
        self.details.setdefault("output", output)


class StageError(LandoPullError):
    """Base class for failures of a single pull stage."""

    stage = "pull"

    def __init__(
        self,
        message: str,
        exit_code: Optional[int] = None,
        output: str = "",
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.exit_code = exit_code
        self.output = output
        self.details.setdefault("stage", self.stage)
        self.details.setdefault("exit_code", exit_code)
        self.details.setdefault("output", output)

    @classmethod
    def from_tool_error(cls, message: str, error: ExternalToolError) -> "StageError":
        """Wrap a tool failure, keeping its exit code and output."""
        return cls(message, exit_code=error.exit_code, output=error.output)


class RemoteBackupError(StageError):
    """Raised when the remote dump command fails."""
    stage = "remote_backup"


class TransferError(StageError):
    """Raised when copying the backup to the local host fails."""
    stage = "transfer"


class FileSyncError(StageError):
    """Raised when rsync of the remote file tree fails."""
    stage = "file_sync"


class DatabaseImportError(StageError):
    """Raised when every import strategy has been exhausted."""
    stage = "import"


class ImportTimeoutError(LandoPullError):
    """Raised when an import attempt exceeds its timeout."""

    def __init__(self, message: str, timeout: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.timeout = timeout


class UpdateError(LandoPullError):
    """Raised when a post-import update rule fails."""
    pass
