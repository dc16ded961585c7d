"""
Transfer module for lando-pull.

This module builds authenticated ssh, scp and rsync commands and runs
the backup copy and the file tree mirror.
"""

from .base import SecureChannel
from .scp import BackupTransfer
from .rsync import FileSynchronizer

__all__ = [
    'SecureChannel',
    'BackupTransfer',
    'FileSynchronizer'
]
