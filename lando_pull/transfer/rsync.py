"""
File tree synchronization using rsync.

Mirrors the remote files directory into the local path in archive
mode with compression, deleting local files absent on the remote.
"""

import logging
from typing import List

from lando_pull.core.exceptions import ExternalToolError, FileSyncError
from lando_pull.core.runner import CommandRunner
from lando_pull.transfer.base import SecureChannel

logger = logging.getLogger(__name__)


class FileSynchronizer:
    """Mirrors a remote directory tree to a local path."""

    def __init__(self, channel: SecureChannel, runner: CommandRunner):
        self.channel = channel
        self.runner = runner

    def build_command(self, remote_path: str, local_path: str) -> List[str]:
        return self.channel.rsync_command(remote_path, local_path)

    async def sync(self, remote_path: str, local_path: str) -> None:
        """
        Run rsync once; failures are not retried.

        Raises:
            FileSyncError: If rsync exits non-zero
        """
        command = self.build_command(remote_path, local_path)
        logger.info(f"Synchronizing {self.channel.target}:{remote_path} -> {local_path}")

        try:
            await self.runner.run(command, 'Rsync failed')
        except ExternalToolError as e:
            raise FileSyncError.from_tool_error('Rsync failed', e) from e

        logger.info("Files synchronized successfully")
