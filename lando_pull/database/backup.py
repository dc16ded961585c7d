"""
Remote database backup.

Runs mysqldump on the remote host over ssh, compressing the dump with
gzip into the remote scratch directory. The pipe runs in the remote
shell, so the database password is escaped before interpolation.
"""

import logging
import posixpath

from lando_pull.core.exceptions import ExternalToolError, RemoteBackupError
from lando_pull.core.runner import CommandRunner
from lando_pull.models.config import RemoteEndpoint
from lando_pull.core.context import ArtifactLocation, RunContext
from lando_pull.transfer.base import SecureChannel
from lando_pull.utils.helpers import escape_shell_value

logger = logging.getLogger(__name__)

MYSQLDUMP_OPTIONS = "--force --no-tablespaces --default-character-set=utf8mb3"


def build_dump_command(remote: RemoteEndpoint, remote_file: str) -> str:
    """Build the remote ``mysqldump | gzip`` command string."""
    password = escape_shell_value(remote.db_password)
    return (
        f"mysqldump {MYSQLDUMP_OPTIONS} -u{remote.db_user} -p{password} "
        f"{remote.db_name} | gzip > {remote_file}"
    )


class RemoteBackupProducer:
    """Creates a compressed SQL dump on the remote host."""

    def __init__(self, channel: SecureChannel, runner: CommandRunner):
        self.channel = channel
        self.runner = runner

    @property
    def remote(self) -> RemoteEndpoint:
        return self.channel.remote

    def remote_backup_path(self, ctx: RunContext) -> str:
        return posixpath.join(self.remote.temp_folder, f"lando-pull-{ctx.run_id}.sql.gz")

    async def create(self, ctx: RunContext) -> str:
        """
        Dump and compress the remote database.

        Returns:
            Path of the backup on the remote host

        Raises:
            AuthConfigError: If the channel credential is missing
            RemoteBackupError: If the remote command exits non-zero
        """
        remote_file = self.remote_backup_path(ctx)
        command = self.channel.ssh_command(build_dump_command(self.remote, remote_file))

        ctx.track(ArtifactLocation.REMOTE, remote_file, "remote backup")
        try:
            await self.runner.run(command, 'Failed to create remote backup')
        except ExternalToolError as e:
            raise RemoteBackupError.from_tool_error('Failed to create remote backup', e) from e

        logger.info("Remote database backup created successfully")
        return remote_file
