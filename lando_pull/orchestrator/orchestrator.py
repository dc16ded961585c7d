"""
Pull orchestrator.

Coordinates one pull: pre-flight checks, the database stages (remote
backup, transfer, import), the file sync stage, and cleanup of every
transient artifact. The database and file stages fail independently;
their outcomes are combined into a :class:`PullResult`.
"""

import logging
import time
from pathlib import Path
from typing import Optional

from lando_pull.core.context import RunContext
from lando_pull.core.exceptions import LandoPullError, NothingToDoError
from lando_pull.core.runner import CommandRunner
from lando_pull.database.backup import RemoteBackupProducer
from lando_pull.database.importer import ImportEngine
from lando_pull.database.updates import DatabaseUpdater
from lando_pull.models.config import PullConfig, PullOptions
from lando_pull.models.result import PullResult
from lando_pull.orchestrator.cleanup import CleanupCoordinator
from lando_pull.orchestrator.dependency import check_dependencies, required_binaries
from lando_pull.transfer.base import SecureChannel
from lando_pull.transfer.rsync import FileSynchronizer
from lando_pull.transfer.scp import BackupTransfer
from lando_pull.utils.helpers import escape_shell_value, format_duration
from lando_pull.utils.logging import LogCategory, StageLogger

logger = logging.getLogger(__name__)

DATABASE_STAGES = {
    "remote_backup": LogCategory.BACKUP,
    "transfer": LogCategory.TRANSFER,
    "import": LogCategory.IMPORT,
}


class PullOrchestrator:
    """
    Runs a pull from the remote environment into the local one.

    Args:
        config: Immutable pull configuration
        runner: Command runner, defaults to one masking the configured secrets
        importer: Import engine, defaults to one built from the run options
        updater: Post-import updater, defaults to one for the local database
        check_binaries: Whether to verify local binaries before running
    """

    def __init__(
        self,
        config: PullConfig,
        runner: Optional[CommandRunner] = None,
        importer: Optional[ImportEngine] = None,
        updater: Optional[DatabaseUpdater] = None,
        check_binaries: bool = True
    ):
        self.config = config
        self.runner = runner or CommandRunner(secrets=self._secrets())
        self.importer = importer
        self.updater = updater
        self.check_binaries = check_binaries
        self.channel = SecureChannel(config.remote)

    def _secrets(self):
        values = [
            self.config.remote.password,
            self.config.remote.db_password,
            self.config.local.db_password,
        ]
        escaped = [escape_shell_value(v) for v in values if v]
        return values + escaped

    def _build_importer(self, options: PullOptions) -> ImportEngine:
        if self.importer is not None:
            return self.importer
        return ImportEngine(
            self.config.local,
            retries=options.import_retries,
            timeout=options.import_timeout,
            updater=self.updater or DatabaseUpdater(self.config.local)
        )

    def preflight(self, options: PullOptions) -> None:
        """
        Validate credentials and local binaries before any side effect.

        Raises:
            AuthConfigError: If the selected auth method lacks its credential
            DependencyError: If a required local binary is missing
        """
        self.channel.validate()
        if self.check_binaries:
            check_dependencies(required_binaries(
                options.skip_db,
                options.skip_files,
                use_password=self.channel.uses_password
            ))

    async def pull(self, options: Optional[PullOptions] = None) -> PullResult:
        """
        Execute a pull.

        Args:
            options: Run options, defaults to syncing both database and files

        Returns:
            PullResult combining the database and file outcomes

        Raises:
            NothingToDoError: If both stages are skipped
            AuthConfigError: If pre-flight credential validation fails
            DependencyError: If required local binaries are missing
        """
        options = options or PullOptions()
        if options.skip_db and options.skip_files:
            raise NothingToDoError(
                "Nothing to do: both database and files sync are skipped",
                details={'skip_db': True, 'skip_files': True}
            )

        started = time.monotonic()
        ctx = RunContext()
        stage_logger = StageLogger(ctx.run_id)
        cleanup = CleanupCoordinator(self.channel, self.runner, stage_logger)
        logger.info(f"Starting pull {ctx.run_id} from {self.channel.target}")

        db_success = True
        files_success = True
        async with cleanup.guard(ctx, keep_local=options.debug):
            self.preflight(options)

            if not options.skip_db:
                db_success = await self._pull_database(ctx, options, stage_logger)
            else:
                logger.info("Skipping database sync")

            if not options.skip_files:
                files_success = await self._pull_files(stage_logger)
            else:
                logger.info("Skipping files sync")

        result = PullResult(
            db_success=db_success,
            files_success=files_success,
            duration=time.monotonic() - started
        )
        self._log_summary(result)
        return result

    async def _pull_database(self, ctx: RunContext, options: PullOptions, stage_logger: StageLogger) -> bool:
        producer = RemoteBackupProducer(self.channel, self.runner)
        transfer = BackupTransfer(self.channel, self.config.local.temp_folder, self.runner)
        importer = self._build_importer(options)

        stage = "remote_backup"
        try:
            stage_logger.step_start(stage, LogCategory.BACKUP)
            remote_file = await producer.create(ctx)
            stage_logger.step_complete(stage, LogCategory.BACKUP)

            stage = "transfer"
            stage_logger.step_start(stage, LogCategory.TRANSFER)
            local_backup: Path = await transfer.fetch(ctx, remote_file)
            stage_logger.step_complete(stage, LogCategory.TRANSFER)

            stage = "import"
            stage_logger.step_start(stage, LogCategory.IMPORT)
            method = await importer.run(ctx, local_backup)
            stage_logger.step_complete(stage, LogCategory.IMPORT)
        except LandoPullError as e:
            stage_logger.step_failed(stage, e, DATABASE_STAGES[stage])
            logger.error(f"Database sync failed: {e}")
            return False
        except Exception as e:
            stage_logger.step_failed(stage, e, DATABASE_STAGES[stage])
            logger.error(f"Database sync failed with unexpected error: {type(e).__name__}: {e}")
            return False

        logger.info(f"Database sync completed using {method} import")
        return True

    async def _pull_files(self, stage_logger: StageLogger) -> bool:
        synchronizer = FileSynchronizer(self.channel, self.runner)
        stage = "file_sync"
        try:
            stage_logger.step_start(stage, LogCategory.FILES)
            await synchronizer.sync(self.config.remote.remote_files, self.config.local.local_files)
            stage_logger.step_complete(stage, LogCategory.FILES)
        except LandoPullError as e:
            stage_logger.step_failed(stage, e, LogCategory.FILES)
            logger.error(f"Files sync failed: {e}")
            return False
        except Exception as e:
            stage_logger.step_failed(stage, e, LogCategory.FILES)
            logger.error(f"Files sync failed with unexpected error: {type(e).__name__}: {e}")
            return False
        return True

    @staticmethod
    def _log_summary(result: PullResult) -> None:
        took = format_duration(result.duration)
        if result.success:
            logger.info(f"Pull completed successfully in {took}")
        elif result.partial_success:
            logger.warning(f"Pull partially completed in {took}")
        else:
            logger.error(f"Pull failed after {took}")


async def pull(config: PullConfig, options: Optional[PullOptions] = None) -> PullResult:
    """Run a pull with default collaborators."""
    return await PullOrchestrator(config).pull(options)
