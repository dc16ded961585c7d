"""
Cleanup of transient artifacts.

Every scratch file registered in the run context is removed once the
pull finishes, whatever the outcome. Removal is best-effort: failures
are logged and never raised.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from lando_pull.core.context import ArtifactLocation, RunContext, TransientArtifact
from lando_pull.core.runner import CommandRunner
from lando_pull.transfer.base import SecureChannel
from lando_pull.utils.logging import LogCategory, StageLogger

logger = logging.getLogger(__name__)


class CleanupCoordinator:
    """
    Removes the local and remote artifacts of a run.

    Args:
        channel: Channel used for remote removal
        runner: Command runner used for remote removal
        stage_logger: Optional stage logger for the cleanup stage
    """

    def __init__(self, channel: SecureChannel, runner: CommandRunner, stage_logger: Optional[StageLogger] = None):
        self.channel = channel
        self.runner = runner
        self.stage_logger = stage_logger

    @asynccontextmanager
    async def guard(self, ctx: RunContext, keep_local: bool = False) -> AsyncIterator[RunContext]:
        """Run ``cleanup`` exactly once when the block exits, however it exits."""
        try:
            yield ctx
        finally:
            await self.cleanup(ctx, keep_local=keep_local)

    async def cleanup(self, ctx: RunContext, keep_local: bool = False) -> None:
        if not ctx.artifacts:
            logger.debug("No transient artifacts to clean up")
            return

        if self.stage_logger:
            self.stage_logger.step_start("cleanup", LogCategory.CLEANUP)

        tasks = [self._remove_remote(artifact) for artifact in ctx.artifacts_at(ArtifactLocation.REMOTE)]
        for artifact in ctx.artifacts_at(ArtifactLocation.LOCAL):
            if keep_local:
                logger.info(f"Debug mode: keeping {artifact.label} at {artifact.path}")
            else:
                tasks.append(self._remove_local(artifact))

        results = await asyncio.gather(*tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                logger.warning(f"Cleanup task raised: {result}")

        if self.stage_logger:
            self.stage_logger.step_complete("cleanup", LogCategory.CLEANUP)

    async def _remove_local(self, artifact: TransientArtifact) -> None:
        try:
            await asyncio.to_thread(Path(artifact.path).unlink, missing_ok=True)
            logger.info(f"Removed {artifact.label}: {artifact.path}")
        except OSError as e:
            logger.warning(f"Cleanup warning: could not remove {artifact.path}: {e}")

    async def _remove_remote(self, artifact: TransientArtifact) -> None:
        try:
            command = self.channel.ssh_command(f"rm -f {artifact.path}")
            await self.runner.run(command, f"Failed to remove remote {artifact.label}")
            logger.info(f"Removed remote {artifact.label}: {artifact.path}")
        except Exception as e:
            logger.warning(f"Cleanup warning: could not remove remote {artifact.path}: {e}")
