"""
Backup transfer over scp.

Copies the compressed remote dump into the local scratch directory.
"""

import logging
from pathlib import Path

from lando_pull.core.exceptions import ExternalToolError, TransferError
from lando_pull.core.runner import CommandRunner
from lando_pull.core.context import ArtifactLocation, RunContext
from lando_pull.transfer.base import SecureChannel

logger = logging.getLogger(__name__)


class BackupTransfer:
    """Copies the remote backup to the local host."""

    def __init__(self, channel: SecureChannel, local_temp_folder: str, runner: CommandRunner):
        self.channel = channel
        self.local_temp_folder = Path(local_temp_folder)
        self.runner = runner

    def local_backup_path(self, ctx: RunContext) -> Path:
        return self.local_temp_folder / f"db-backup-{ctx.run_id}.sql.gz"

    async def fetch(self, ctx: RunContext, remote_path: str) -> Path:
        """
        Copy ``remote_path`` into the local scratch directory.

        Returns:
            Path of the local compressed backup

        Raises:
            TransferError: If the scratch directory cannot be created or scp exits non-zero
        """
        try:
            self.local_temp_folder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise TransferError(
                f"Failed to create local temp folder {self.local_temp_folder}: {e}",
                details={'temp_folder': str(self.local_temp_folder)}
            ) from e
        local_path = self.local_backup_path(ctx)
        command = self.channel.scp_command(remote_path, str(local_path))

        ctx.track(ArtifactLocation.LOCAL, str(local_path), "local backup")
        try:
            await self.runner.run(command, 'Failed to copy backup')
        except ExternalToolError as e:
            raise TransferError.from_tool_error('Failed to copy backup', e) from e

        logger.info("Database backup copied successfully")
        return local_path
