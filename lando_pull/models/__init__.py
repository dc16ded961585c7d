"""
Data models for lando-pull.

This module contains the Pydantic configuration models and the result
model produced by a pull.
"""

from lando_pull.models.config import (
    AuthMethod,
    Condition,
    DatabaseUpdate,
    RemoteEndpoint,
    LocalEndpoint,
    PullConfig,
    PullOptions,
)
from lando_pull.models.result import PullResult, PullStatus

__all__ = [
    # Configuration models
    "AuthMethod",
    "Condition",
    "DatabaseUpdate",
    "RemoteEndpoint",
    "LocalEndpoint",
    "PullConfig",
    "PullOptions",
    # Result models
    "PullResult",
    "PullStatus",
]
