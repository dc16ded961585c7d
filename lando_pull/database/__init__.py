"""Database backup, import and update module for lando-pull."""

from .backup import RemoteBackupProducer, build_dump_command
from .importer import (
    ImportCommands,
    ImportEngine,
    ImportStrategy,
    DirectImportStrategy,
    PipeImportStrategy,
    default_strategies
)
from .pipeline import ManagedProcess, ImportConnector, FileConnector, StreamConnector
from .updates import DatabaseUpdater, UpdateReport, build_update_query

__all__ = [
    'RemoteBackupProducer',
    'build_dump_command',
    'ImportCommands',
    'ImportEngine',
    'ImportStrategy',
    'DirectImportStrategy',
    'PipeImportStrategy',
    'default_strategies',
    'ManagedProcess',
    'ImportConnector',
    'FileConnector',
    'StreamConnector',
    'DatabaseUpdater',
    'UpdateReport',
    'build_update_query'
]
