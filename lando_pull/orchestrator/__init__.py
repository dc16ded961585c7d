"""
Pull orchestrator module.

This module coordinates the pull stages, the dependency pre-flight and
the cleanup of transient artifacts.
"""

from .orchestrator import PullOrchestrator, pull
from .cleanup import CleanupCoordinator
from .dependency import check_dependencies, required_binaries

__all__ = [
    "PullOrchestrator",
    "pull",
    "CleanupCoordinator",
    "check_dependencies",
    "required_binaries"
]
