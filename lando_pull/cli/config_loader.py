"""
Configuration discovery, loading and bootstrap for the CLI.

Config files are looked up in the working directory unless a path is
given explicitly. JSON and YAML are both accepted; the parsed mapping
is validated into a :class:`PullConfig`.
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError as PydanticValidationError

from lando_pull.constants import (
    CONFIG_FILENAMES,
    DEFAULT_CONFIG,
    DEFAULT_CONFIG_FILENAME,
    PASSWORD_ENV_VAR,
)
from lando_pull.core.exceptions import ConfigurationError
from lando_pull.models.config import AuthMethod, PullConfig
from lando_pull.utils.helpers import load_config_file, save_config_file


def find_config_file(config_path: Optional[str] = None, search_dir: Optional[Path] = None) -> Optional[Path]:
    """
    Locate the configuration file.

    Args:
        config_path: Explicit path given on the command line
        search_dir: Directory searched for the default names, defaults to cwd

    Returns:
        Resolved path, or None if nothing was found
    """
    if config_path:
        path = Path(config_path).expanduser().resolve()
        return path if path.exists() else None

    search_dir = Path(search_dir or Path.cwd())
    for name in CONFIG_FILENAMES:
        candidate = search_dir / name
        if candidate.exists():
            return candidate.resolve()
    return None


def load_config(file_path: Union[str, Path]) -> PullConfig:
    """
    Load and validate a configuration file.

    Raises:
        ConfigurationError: If the file cannot be parsed or fails validation
    """
    path = Path(file_path)
    try:
        config_dict = load_config_file(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Failed to read or parse config file: {path}",
            details={'path': str(path), 'errors': [str(e)]}
        ) from e

    return parse_config(config_dict, source=str(path))


def parse_config(config_dict: Dict[str, Any], source: str = "<config>") -> PullConfig:
    try:
        return PullConfig.model_validate(config_dict)
    except PydanticValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        ]
        raise ConfigurationError(
            f"Invalid configuration in {source}: " + "; ".join(errors),
            details={'path': source, 'errors': errors}
        ) from e


def apply_overrides(
    config: PullConfig,
    auth_method: Optional[str] = None,
    key_path: Optional[str] = None,
    password: Optional[str] = None,
    environ: Optional[Dict[str, str]] = None
) -> PullConfig:
    """
    Return a copy of ``config`` with command-line auth overrides applied.

    The password falls back to the ``LANDO_REMOTE_PASSWORD`` environment
    variable when not given explicitly.
    """
    environ = os.environ if environ is None else environ
    update: Dict[str, Any] = {}

    if auth_method:
        update['auth_method'] = AuthMethod(auth_method)
    if key_path:
        update['key_path'] = key_path

    password = password or environ.get(PASSWORD_ENV_VAR)
    if password:
        update['password'] = password

    if not update:
        return config

    remote = config.remote.model_copy(update=update)
    return config.model_copy(update={'remote': remote})


def write_default_config(directory: Optional[Path] = None) -> Path:
    """Write the default configuration file and return its path."""
    path = Path(directory or Path.cwd()) / DEFAULT_CONFIG_FILENAME
    save_config_file(copy.deepcopy(DEFAULT_CONFIG), path, format="json")
    return path
