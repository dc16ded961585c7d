"""Result model returned by a pull."""

from dataclasses import dataclass
from enum import Enum


class PullStatus(str, Enum):
    """Overall outcome of a pull."""
    COMPLETE = "complete"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class PullResult:
    """
    Outcome of one pull invocation.

    A skipped channel counts as successful, so ``success`` is the AND of
    both channels and ``partial_success`` their OR.
    """
    db_success: bool
    files_success: bool
    duration: float

    @property
    def success(self) -> bool:
        return self.db_success and self.files_success

    @property
    def partial_success(self) -> bool:
        return self.db_success or self.files_success

    @property
    def status(self) -> PullStatus:
        if self.success:
            return PullStatus.COMPLETE
        if self.partial_success:
            return PullStatus.PARTIAL
        return PullStatus.FAILED

    def to_dict(self) -> dict:
        return {
            'success': self.success,
            'partial_success': self.partial_success,
            'db_success': self.db_success,
            'files_success': self.files_success,
            'status': self.status.value,
            'duration': self.duration,
        }
