"""
Local database import.

The engine walks an ordered list of strategies. The direct strategy
decompresses the backup into a scratch SQL file and then imports it;
it is tried once. The pipe strategy streams ``gunzip`` straight into
``mysql`` and is retried up to the configured count. The first
successful attempt is followed by the post-import updates.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from lando_pull.core.context import ArtifactLocation, RunContext
from lando_pull.core.exceptions import (
    DatabaseImportError,
    ExternalToolError,
    ImportTimeoutError,
    LandoPullError,
)
from lando_pull.database.pipeline import FileConnector, ImportConnector, StreamConnector
from lando_pull.database.updates import DatabaseUpdater
from lando_pull.models.config import LocalEndpoint
from lando_pull.utils.helpers import escape_shell_value

logger = logging.getLogger(__name__)

DEFAULT_IMPORT_RETRIES = 3
DEFAULT_IMPORT_TIMEOUT = 5 * 60  # seconds


@dataclass
class ImportCommands:
    """Argument vectors for the decompressor and the database client."""
    local: LocalEndpoint
    gunzip: Sequence[str] = ('gunzip',)
    mysql: Sequence[str] = ('mysql',)

    def decompress(self, backup: Path) -> List[str]:
        return [*self.gunzip, '-c', str(backup)]

    def client(self) -> List[str]:
        password = escape_shell_value(self.local.db_password)
        return [
            *self.mysql,
            '-h', self.local.db_host,
            '-P', str(self.local.db_port),
            '-u', self.local.db_user,
            f'-p{password}',
            self.local.db_name,
        ]


class ImportStrategy(ABC):
    """One way of loading the backup into the local database."""

    name = "strategy"

    def __init__(self, attempts: int = 1):
        self.attempts = attempts

    @abstractmethod
    def connector(self, ctx: RunContext, backup: Path) -> ImportConnector:
        """Return the connector for a single attempt."""

    async def attempt(
        self,
        ctx: RunContext,
        backup: Path,
        commands: ImportCommands,
        timeout: float
    ) -> None:
        connector = self.connector(ctx, backup)
        await connector.run(commands.decompress(backup), commands.client(), timeout)


class DirectImportStrategy(ImportStrategy):
    """Decompress into a scratch SQL file, then import that file."""

    name = "direct"

    def connector(self, ctx: RunContext, backup: Path) -> ImportConnector:
        stem = backup.name[:-3] if backup.name.endswith('.gz') else backup.name
        sql_file = backup.with_name(f"{stem}.{time.time_ns()}.sql")
        ctx.track(ArtifactLocation.LOCAL, str(sql_file), "decompressed backup")
        return FileConnector(sql_file)


class PipeImportStrategy(ImportStrategy):
    """Stream the decompressor directly into the client."""

    name = "pipe"

    def connector(self, ctx: RunContext, backup: Path) -> ImportConnector:
        return StreamConnector()


def default_strategies(retries: int = DEFAULT_IMPORT_RETRIES) -> List[ImportStrategy]:
    """Direct import once, then the pipe method with retries."""
    return [DirectImportStrategy(attempts=1), PipeImportStrategy(attempts=retries)]


class ImportEngine:
    """
    Imports a compressed backup into the local database.

    Args:
        local: Local endpoint configuration
        strategies: Ordered strategies, defaults to :func:`default_strategies`
        retries: Pipe strategy attempts when ``strategies`` is not given
        timeout: Seconds allowed per attempt
        updater: Post-import updater, ``None`` to skip updates
        commands: Decompressor and client argument builder
    """

    def __init__(
        self,
        local: LocalEndpoint,
        strategies: Optional[List[ImportStrategy]] = None,
        retries: int = DEFAULT_IMPORT_RETRIES,
        timeout: float = DEFAULT_IMPORT_TIMEOUT,
        updater: Optional[DatabaseUpdater] = None,
        commands: Optional[ImportCommands] = None
    ):
        self.local = local
        self.strategies = strategies if strategies is not None else default_strategies(retries)
        self.timeout = timeout
        self.updater = updater
        self.commands = commands or ImportCommands(local)

    async def run(self, ctx: RunContext, backup: Path) -> str:
        """
        Import ``backup``, falling back through the strategies in order.

        Returns:
            Name of the strategy that succeeded

        Raises:
            DatabaseImportError: If every attempt of every strategy failed
        """
        last_error: Optional[Exception] = None

        for index, strategy in enumerate(self.strategies):
            for attempt in range(1, strategy.attempts + 1):
                logger.info(
                    f"Starting database import using {strategy.name} method "
                    f"(attempt {attempt}/{strategy.attempts})"
                )
                try:
                    await strategy.attempt(ctx, backup, self.commands, self.timeout)
                except (ExternalToolError, ImportTimeoutError, OSError) as e:
                    last_error = e
                    logger.error(f"{strategy.name.capitalize()} import attempt {attempt} failed: {e}")
                    if attempt < strategy.attempts:
                        logger.warning("Retrying...")
                    continue

                logger.info(f"Database import completed successfully with {strategy.name} method")
                await self._run_updates()
                return strategy.name

            if index < len(self.strategies) - 1:
                logger.warning(f"Falling back to {self.strategies[index + 1].name} method...")

        total = sum(s.attempts for s in self.strategies)
        logger.error(f"All {total} import attempts failed.")
        message = f"Database import failed after all attempts: {last_error}"
        if isinstance(last_error, ExternalToolError):
            raise DatabaseImportError.from_tool_error(message, last_error) from last_error
        raise DatabaseImportError(message) from last_error

    async def _run_updates(self) -> None:
        if self.updater is None:
            return
        try:
            report = await self.updater.apply()
        except LandoPullError as e:
            logger.error(f"Database update failed: {e}")
            return
        except Exception as e:
            logger.error(f"Database update failed with unexpected error: {type(e).__name__}: {e}")
            return
        if report.failed:
            logger.warning(f"{len(report.failed)} database update(s) failed")
