"""
Local binary pre-flight.

Checks that every executable the requested stages will spawn locally is
on PATH before any remote side effect happens. ``mysqldump`` and
``gzip`` run on the remote host and are not checked here.
"""

import logging
import shutil
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from lando_pull.core.exceptions import DependencyError

logger = logging.getLogger(__name__)

DATABASE_BINARIES = ('ssh', 'scp', 'gunzip', 'mysql')
FILES_BINARIES = ('ssh', 'rsync')


class DependencyStatus(str, Enum):
    """Dependency check status."""
    AVAILABLE = "available"
    MISSING = "missing"


@dataclass
class DependencyCheck:
    """Result of looking up one binary."""
    name: str
    status: DependencyStatus
    path: Optional[str] = None

    @property
    def available(self) -> bool:
        return self.status == DependencyStatus.AVAILABLE


def check_binary(name: str) -> DependencyCheck:
    tool_path = shutil.which(name)
    if not tool_path:
        return DependencyCheck(name=name, status=DependencyStatus.MISSING)
    return DependencyCheck(name=name, status=DependencyStatus.AVAILABLE, path=tool_path)


def required_binaries(
    skip_db: bool,
    skip_files: bool,
    use_password: bool = False
) -> List[str]:
    """List the local binaries needed for the requested stages, without duplicates."""
    binaries: List[str] = []
    if use_password:
        binaries.append('sshpass')
    if not skip_db:
        binaries.extend(DATABASE_BINARIES)
    if not skip_files:
        binaries.extend(FILES_BINARIES)
    return list(dict.fromkeys(binaries))


def check_dependencies(binaries: Iterable[str]) -> List[DependencyCheck]:
    """
    Verify that each binary is on PATH.

    Returns:
        The checks for all binaries

    Raises:
        DependencyError: If any binary is missing
    """
    checks = [check_binary(name) for name in binaries]
    missing = [check.name for check in checks if not check.available]
    if missing:
        logger.error(f"Missing required dependencies: {', '.join(missing)}")
        raise DependencyError(
            f"Missing required dependencies: {', '.join(missing)}",
            missing=missing,
            details={'missing': missing}
        )

    for check in checks:
        logger.debug(f"Found {check.name} at {check.path}")
    return checks
