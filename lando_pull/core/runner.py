"""
Command runner for external tools.

Every remote operation (ssh, scp, rsync) is expressed as a single
process invocation through :class:`CommandRunner`. Arguments are passed
as a vector and never joined into a local shell string.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from lando_pull.core.exceptions import ExternalToolError
from lando_pull.utils.helpers import redact_command

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Result of a successful command invocation."""
    args: List[str]
    exit_code: int
    output: str


class CommandRunner:
    """
    Spawns external processes and resolves them by exit code.

    Args:
        secrets: Values masked whenever a command line is logged
    """

    def __init__(self, secrets: Optional[Iterable[Optional[str]]] = None):
        self.secrets = [s for s in (secrets or []) if s]

    def describe(self, args: Sequence[str]) -> str:
        """Return a loggable, secret-free rendering of a command."""
        return " ".join(redact_command(args, self.secrets))

    async def run(self, args: Sequence[str], error_message: str) -> CommandResult:
        """
        Run a command to completion and collect stdout and stderr.

        Args:
            args: Executable followed by its arguments
            error_message: Message for the raised error on failure

        Returns:
            CommandResult with the combined output

        Raises:
            ExternalToolError: If the process cannot start or exits non-zero
        """
        args = [str(arg) for arg in args]
        logger.debug(f"Running command: {self.describe(args)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except OSError as e:
            logger.error(f"Failed to start {args[0]}: {e}")
            raise ExternalToolError(error_message, exit_code=None, output=str(e)) from e

        stdout, stderr = await process.communicate()
        output = (
            stdout.decode('utf-8', errors='replace') + stderr.decode('utf-8', errors='replace')
        ).strip()

        if process.returncode != 0:
            logger.error(f"Exit code: {process.returncode}")
            if output:
                logger.error(output)
            raise ExternalToolError(error_message, exit_code=process.returncode, output=output)

        if output:
            logger.debug(output)
        return CommandResult(args=args, exit_code=process.returncode, output=output)
