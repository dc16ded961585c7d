"""
Run context for a single pull.

The context carries the run identifier used to name scratch files and
the transient artifacts created during the run. Stages register an
artifact before spawning the process that creates it, so cleanup sees
every path that may exist regardless of where a stage failed.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from lando_pull.utils.helpers import generate_run_id


class ArtifactLocation(str, Enum):
    """Where a transient artifact lives."""
    LOCAL = "local"
    REMOTE = "remote"


@dataclass(frozen=True)
class TransientArtifact:
    """A scratch file created during a run."""
    location: ArtifactLocation
    path: str
    label: str


@dataclass
class RunContext:
    """State threaded through the stages of one pull."""
    run_id: str = field(default_factory=generate_run_id)
    artifacts: List[TransientArtifact] = field(default_factory=list)

    def track(self, location: ArtifactLocation, path: str, label: str) -> TransientArtifact:
        """Register an artifact for cleanup."""
        artifact = TransientArtifact(location=location, path=str(path), label=label)
        self.artifacts.append(artifact)
        return artifact

    def artifacts_at(self, location: ArtifactLocation) -> List[TransientArtifact]:
        return [a for a in self.artifacts if a.location == location]

    def find(self, label: str) -> Optional[TransientArtifact]:
        for artifact in self.artifacts:
            if artifact.label == label:
                return artifact
        return None
