"""
Unit tests for the scp backup transfer and the rsync file synchronizer.
"""

from pathlib import Path

import pytest

from lando_pull.core.context import ArtifactLocation, RunContext
from lando_pull.core.exceptions import FileSyncError, TransferError
from lando_pull.transfer.base import SecureChannel
from lando_pull.transfer.rsync import FileSynchronizer
from lando_pull.transfer.scp import BackupTransfer


class TestBackupTransfer:
    """Test BackupTransfer class."""

    @pytest.mark.asyncio
    async def test_fetch_creates_scratch_dir(self, remote_endpoint, tmp_path, recording_runner):
        """Test that the scratch directory is created and scp is invoked."""
        scratch = tmp_path / "nested" / "scratch"
        transfer = BackupTransfer(SecureChannel(remote_endpoint), str(scratch), recording_runner)
        ctx = RunContext(run_id="abc")

        local_path = await transfer.fetch(ctx, "/tmp/lando-pull-abc.sql.gz")

        assert scratch.is_dir()
        assert local_path == scratch / "db-backup-abc.sql.gz"
        call = recording_runner.calls[0]
        assert call[:2] == ['scp', '-C']
        assert call[-2:] == ['deploy@example.com:/tmp/lando-pull-abc.sql.gz', str(local_path)]

    @pytest.mark.asyncio
    async def test_fetch_failure(self, remote_endpoint, tmp_path, make_runner):
        """Test that an scp failure raises TransferError and keeps the artifact tracked."""
        runner = make_runner(failures={'scp': (1, 'scp: No such file or directory')})
        transfer = BackupTransfer(SecureChannel(remote_endpoint), str(tmp_path), runner)
        ctx = RunContext(run_id="abc")

        with pytest.raises(TransferError) as exc_info:
            await transfer.fetch(ctx, "/tmp/missing.sql.gz")

        assert exc_info.value.message == "Failed to copy backup"
        assert exc_info.value.exit_code == 1
        artifact = ctx.find("local backup")
        assert artifact.location == ArtifactLocation.LOCAL
        assert Path(artifact.path) == tmp_path / "db-backup-abc.sql.gz"

    @pytest.mark.asyncio
    async def test_fetch_unusable_temp_folder(self, remote_endpoint, tmp_path, recording_runner):
        """Test that a temp folder that cannot be created raises TransferError before scp."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        transfer = BackupTransfer(SecureChannel(remote_endpoint), str(blocker / "scratch"), recording_runner)
        ctx = RunContext(run_id="abc")

        with pytest.raises(TransferError) as exc_info:
            await transfer.fetch(ctx, "/tmp/lando-pull-abc.sql.gz")

        assert "Failed to create local temp folder" in exc_info.value.message
        assert exc_info.value.details["stage"] == "transfer"
        assert isinstance(exc_info.value.__cause__, OSError)
        assert recording_runner.calls == []
        assert ctx.artifacts == []


class TestFileSynchronizer:
    """Test FileSynchronizer class."""

    @pytest.mark.asyncio
    async def test_sync_runs_rsync_once(self, remote_endpoint, recording_runner):
        """Test that rsync mirrors the remote tree."""
        synchronizer = FileSynchronizer(SecureChannel(remote_endpoint), recording_runner)

        await synchronizer.sync("/srv/uploads", "uploads")

        assert recording_runner.executables() == ['rsync']
        call = recording_runner.calls[0]
        assert '--delete' in call
        assert call[-2:] == ['deploy@example.com:/srv/uploads', 'uploads']

    @pytest.mark.asyncio
    async def test_sync_failure_not_retried(self, remote_endpoint, make_runner):
        """Test that an rsync failure raises FileSyncError after one attempt."""
        runner = make_runner(failures={'rsync': (23, 'rsync error: some files could not be transferred')})
        synchronizer = FileSynchronizer(SecureChannel(remote_endpoint), runner)

        with pytest.raises(FileSyncError) as exc_info:
            await synchronizer.sync("/srv/uploads", "uploads")

        assert len(runner.calls) == 1
        assert exc_info.value.exit_code == 23
        assert exc_info.value.details["stage"] == "file_sync"
