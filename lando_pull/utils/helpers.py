"""
Helper utilities for lando-pull.

This module contains small functions shared by the pull stages:
shell escaping of credentials, secret redaction for logged commands,
run identifiers, and config file reading/writing.
"""

import json
import re
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import yaml

REDACTED = "***MASKED***"

_SHELL_SPECIAL_CHARS = re.compile(r'([$`"\\])')


def escape_shell_value(value: str) -> str:
    """
    Escape a credential for interpolation into a double-quote-safe shell word.

    Backslash-prefixes the characters ``$``, backtick, ``"`` and ``\\``.
    """
    return _SHELL_SPECIAL_CHARS.sub(r"\\\1", value)


def generate_run_id() -> str:
    """Generate a unique identifier for a single pull run."""
    timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
    return f"{timestamp}-{uuid.uuid4().hex[:8]}"


def redact_command(args: Sequence[str], secrets: Iterable[Optional[str]]) -> List[str]:
    """
    Mask secret values in an argument vector before it is logged.

    A secret is masked wherever it appears, including inside larger
    arguments such as ``-p<password>`` or a remote command string.
    """
    values = sorted({s for s in secrets if s}, key=len, reverse=True)
    redacted = []
    for arg in args:
        for secret in values:
            arg = arg.replace(secret, REDACTED)
        redacted.append(arg)
    return redacted


def format_duration(seconds: float) -> str:
    """Format duration in seconds to human-readable string."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        minutes = seconds / 60
        return f"{minutes:.1f}m"
    else:
        hours = seconds / 3600
        return f"{hours:.1f}h"


def load_config_file(file_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load configuration from a YAML or JSON file.

    Files without a recognised suffix (such as ``.landorc``) are parsed
    as YAML, which also accepts JSON documents.

    Args:
        file_path: Path to configuration file

    Returns:
        Configuration dictionary
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with open(file_path, 'r', encoding='utf-8') as f:
        if file_path.suffix.lower() == '.json':
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Configuration must be a mapping: {file_path}")
    return data


def save_config_file(config: Dict[str, Any], file_path: Union[str, Path], format: str = "json") -> None:
    """
    Save configuration to a YAML or JSON file.

    Args:
        config: Configuration dictionary
        file_path: Path to save configuration
        format: File format ('yaml' or 'json')
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    with open(file_path, 'w', encoding='utf-8') as f:
        if format.lower() == 'yaml':
            yaml.dump(config, f, default_flow_style=False, indent=2, sort_keys=False)
        elif format.lower() == 'json':
            json.dump(config, f, indent=2)
        else:
            raise ValueError(f"Unsupported format: {format}")
