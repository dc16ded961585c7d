"""
Utilities module for lando-pull.

This module contains utility functions and helper classes
used throughout the application.
"""

from lando_pull.utils.helpers import (
    escape_shell_value,
    generate_run_id,
    redact_command,
    format_duration,
    load_config_file,
    save_config_file,
)
from lando_pull.utils.logging import (
    setup_logging,
    get_logger,
    StageLogger,
)

__all__ = [
    # Helper functions
    "escape_shell_value",
    "generate_run_id",
    "redact_command",
    "format_duration",
    "load_config_file",
    "save_config_file",
    # Logging utilities
    "setup_logging",
    "get_logger",
    "StageLogger",
]
