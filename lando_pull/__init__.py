"""
lando-pull

Pulls a remote MySQL database and file tree into a local Lando
development environment over SSH.
"""

__version__ = "0.1.0"

from lando_pull.models.config import PullConfig, PullOptions
from lando_pull.models.result import PullResult, PullStatus
from lando_pull.orchestrator.orchestrator import PullOrchestrator, pull

__all__ = [
    "PullConfig",
    "PullOptions",
    "PullResult",
    "PullStatus",
    "PullOrchestrator",
    "pull",
]
