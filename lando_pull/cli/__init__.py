"""
CLI module for lando-pull.

This module provides the command-line interface using Click and Rich.
"""

from lando_pull.cli.main import main

__all__ = ["main"]
