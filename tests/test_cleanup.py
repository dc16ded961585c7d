"""
Tests for the cleanup coordinator.
"""

import pytest

from lando_pull.core.context import ArtifactLocation, RunContext
from lando_pull.orchestrator.cleanup import CleanupCoordinator
from lando_pull.transfer.base import SecureChannel


class TestCleanupCoordinator:
    """Test CleanupCoordinator class."""

    @pytest.mark.asyncio
    async def test_removes_local_and_remote(self, remote_endpoint, recording_runner, tmp_path):
        """Test that every tracked artifact is removed."""
        local_file = tmp_path / "db-backup.sql.gz"
        local_file.write_bytes(b"x")
        ctx = RunContext()
        ctx.track(ArtifactLocation.REMOTE, "/tmp/lando-pull-1.sql.gz", "remote backup")
        ctx.track(ArtifactLocation.LOCAL, str(local_file), "local backup")

        await CleanupCoordinator(SecureChannel(remote_endpoint), recording_runner).cleanup(ctx)

        assert not local_file.exists()
        assert len(recording_runner.calls) == 1
        assert recording_runner.calls[0][0] == 'ssh'
        assert recording_runner.calls[0][-1] == "rm -f /tmp/lando-pull-1.sql.gz"

    def test_artifacts_grouped_by_location(self):
        """Test that tracked artifacts are selected by location in registration order."""
        ctx = RunContext()
        remote = ctx.track(ArtifactLocation.REMOTE, "/tmp/lando-pull-1.sql.gz", "remote backup")
        local = ctx.track(ArtifactLocation.LOCAL, "/scratch/db-backup-1.sql.gz", "local backup")
        sql = ctx.track(ArtifactLocation.LOCAL, "/scratch/db-backup-1.123.sql", "decompressed backup")

        assert ctx.artifacts_at(ArtifactLocation.REMOTE) == [remote]
        assert ctx.artifacts_at(ArtifactLocation.LOCAL) == [local, sql]

    @pytest.mark.asyncio
    async def test_missing_local_file_ignored(self, remote_endpoint, recording_runner, tmp_path):
        """Test that an artifact that was never created is not an error."""
        ctx = RunContext()
        ctx.track(ArtifactLocation.LOCAL, str(tmp_path / "never-created.sql"), "decompressed backup")

        await CleanupCoordinator(SecureChannel(remote_endpoint), recording_runner).cleanup(ctx)

    @pytest.mark.asyncio
    async def test_keep_local_skips_local_removal(self, remote_endpoint, recording_runner, tmp_path):
        """Test that debug mode keeps local files but still cleans the remote."""
        local_file = tmp_path / "db-backup.sql.gz"
        local_file.write_bytes(b"x")
        ctx = RunContext()
        ctx.track(ArtifactLocation.REMOTE, "/tmp/lando-pull-1.sql.gz", "remote backup")
        ctx.track(ArtifactLocation.LOCAL, str(local_file), "local backup")

        await CleanupCoordinator(SecureChannel(remote_endpoint), recording_runner).cleanup(ctx, keep_local=True)

        assert local_file.exists()
        assert len(recording_runner.calls) == 1

    @pytest.mark.asyncio
    async def test_remote_failure_is_not_raised(self, remote_endpoint, make_runner, tmp_path):
        """Test that a failing remote removal does not stop local removal."""
        runner = make_runner(failures={'rm -f': (255, 'ssh: connect to host example.com port 2222')})
        local_file = tmp_path / "db-backup.sql.gz"
        local_file.write_bytes(b"x")
        ctx = RunContext()
        ctx.track(ArtifactLocation.REMOTE, "/tmp/lando-pull-1.sql.gz", "remote backup")
        ctx.track(ArtifactLocation.LOCAL, str(local_file), "local backup")

        await CleanupCoordinator(SecureChannel(remote_endpoint), runner).cleanup(ctx)

        assert not local_file.exists()

    @pytest.mark.asyncio
    async def test_no_artifacts_is_noop(self, remote_endpoint, recording_runner):
        """Test that cleanup with nothing tracked spawns nothing."""
        await CleanupCoordinator(SecureChannel(remote_endpoint), recording_runner).cleanup(RunContext())

        assert recording_runner.calls == []

    @pytest.mark.asyncio
    async def test_guard_runs_cleanup_on_error(self, remote_endpoint, recording_runner):
        """Test that the guard cleans up when the block raises."""
        coordinator = CleanupCoordinator(SecureChannel(remote_endpoint), recording_runner)
        ctx = RunContext()

        with pytest.raises(RuntimeError):
            async with coordinator.guard(ctx):
                ctx.track(ArtifactLocation.REMOTE, "/tmp/lando-pull-2.sql.gz", "remote backup")
                raise RuntimeError("stage blew up")

        assert recording_runner.calls_matching("rm -f /tmp/lando-pull-2.sql.gz")
