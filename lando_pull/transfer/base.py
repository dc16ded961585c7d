"""
Secure channel to the remote host.

This module builds the ssh, scp and rsync argument vectors for the
configured authentication method. Key-based auth passes the private
key with ``-i``; password auth prefixes the command with ``sshpass``.
"""

import logging
import os
from typing import List, Sequence

from lando_pull.core.exceptions import AuthConfigError
from lando_pull.models.config import AuthMethod, RemoteEndpoint

logger = logging.getLogger(__name__)

SSH_OPTIONS = ['-o', 'StrictHostKeyChecking=no']


class SecureChannel:
    """
    Command builder for authenticated access to the remote host.

    Args:
        remote: Remote endpoint configuration
    """

    def __init__(self, remote: RemoteEndpoint):
        self.remote = remote

    @property
    def target(self) -> str:
        return f"{self.remote.user}@{self.remote.host}"

    @property
    def uses_password(self) -> bool:
        return self.remote.auth_method == AuthMethod.PASSWORD

    def validate(self) -> None:
        """
        Check that the selected auth method has its credential.

        Raises:
            AuthConfigError: If the key file or password is missing
        """
        if self.uses_password:
            if not self.remote.password:
                raise AuthConfigError(
                    "Password is required for password authentication",
                    details={'auth_method': AuthMethod.PASSWORD.value}
                )
            return

        key_path = self.remote.key_path
        if not key_path:
            raise AuthConfigError(
                "SSH key path required",
                details={'auth_method': AuthMethod.KEY.value}
            )
        if not os.path.exists(os.path.expanduser(key_path)):
            raise AuthConfigError(
                f"SSH key file not found at {key_path}",
                details={'auth_method': AuthMethod.KEY.value, 'key_path': key_path}
            )

    @property
    def key_file(self) -> str:
        return os.path.expanduser(self.remote.key_path or "")

    def _wrap(self, command: List[str]) -> List[str]:
        if self.uses_password:
            return ['sshpass', '-p', self.remote.password or ""] + command
        return command

    def required_binaries(self, *tools: str) -> List[str]:
        """Local binaries needed to run the given tools over this channel."""
        binaries = list(tools)
        if self.uses_password:
            binaries.insert(0, 'sshpass')
        return binaries

    def ssh_command(self, remote_command: str) -> List[str]:
        """Build an ssh invocation running ``remote_command`` on the host."""
        self.validate()
        command = ['ssh'] + SSH_OPTIONS + ['-p', str(self.remote.port)]
        if not self.uses_password:
            command.extend(['-i', self.key_file])
        command.extend([self.target, remote_command])
        return self._wrap(command)

    def scp_command(self, remote_path: str, local_path: str) -> List[str]:
        """Build a compressed scp copy from the remote host."""
        self.validate()
        command = ['scp', '-C'] + SSH_OPTIONS + ['-P', str(self.remote.port)]
        if not self.uses_password:
            command.extend(['-i', self.key_file])
        command.extend([f"{self.target}:{remote_path}", local_path])
        return self._wrap(command)

    def rsync_command(
        self,
        remote_path: str,
        local_path: str,
        options: Sequence[str] = ('-avz',),
        extra: Sequence[str] = ('--progress', '--delete')
    ) -> List[str]:
        """Build an rsync mirror from the remote host over ssh."""
        self.validate()
        transport = f"ssh -o StrictHostKeyChecking=no -p {self.remote.port}"
        if not self.uses_password:
            transport += f" -i {self.key_file}"
        command = ['rsync', *options, '-e', transport, *extra]
        command.extend([f"{self.target}:{remote_path}", local_path])
        return self._wrap(command)
