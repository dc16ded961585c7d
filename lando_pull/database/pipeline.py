"""
Two-process import pipelines.

An import runs a decompressor and a database client as two owned
process handles. A connector decides how the decompressor's output
reaches the client:

* :class:`FileConnector` materialises the SQL in a file, then feeds the
  file to the client, so decompression and import fail independently.
* :class:`StreamConnector` couples the processes through an OS pipe.

Both connectors share one deadline per attempt. When it passes, every
live process is killed and :class:`ImportTimeoutError` is raised.
"""

import asyncio
import contextlib
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List, Optional, Sequence

from lando_pull.core.exceptions import ExternalToolError, ImportTimeoutError

logger = logging.getLogger(__name__)


class ManagedProcess:
    """
    A spawned process whose output is drained from the moment it starts.

    Args:
        name: Short name used in log and error messages
        args: Executable followed by its arguments
    """

    def __init__(self, name: str, args: Sequence[str]):
        self.name = name
        self.args = [str(arg) for arg in args]
        self.process: Optional[asyncio.subprocess.Process] = None
        self.output = ""
        self._task: Optional[asyncio.Task] = None

    async def spawn(self, stdin: Any = None, stdout: Any = asyncio.subprocess.PIPE) -> None:
        """
        Start the process.

        Raises:
            ExternalToolError: If the executable cannot be started
        """
        try:
            self.process = await asyncio.create_subprocess_exec(
                *self.args,
                stdin=stdin,
                stdout=stdout,
                stderr=asyncio.subprocess.PIPE
            )
        except OSError as e:
            raise ExternalToolError(
                f"{self.name} process error: {e}", exit_code=None, output=str(e)
            ) from e
        self._task = asyncio.ensure_future(self._drain())

    async def _drain(self) -> int:
        stdout, stderr = await self.process.communicate()
        self.output = "".join(
            stream.decode('utf-8', errors='replace') for stream in (stdout, stderr) if stream
        ).strip()
        return self.process.returncode

    @property
    def task(self) -> asyncio.Task:
        return self._task

    @property
    def running(self) -> bool:
        return self.process is not None and self.process.returncode is None

    @property
    def returncode(self) -> Optional[int]:
        return None if self.process is None else self.process.returncode

    def kill(self) -> None:
        """Forcibly terminate the process if it is still running."""
        if self.running:
            with contextlib.suppress(ProcessLookupError):
                self.process.kill()

    async def finish(self) -> None:
        """Wait until the process has exited and its output is drained."""
        if self._task is not None:
            await self._task

    def failure(self, message: Optional[str] = None) -> ExternalToolError:
        return ExternalToolError(
            message or f"{self.name} exited with code {self.returncode}",
            exit_code=self.returncode,
            output=self.output
        )


class ImportConnector(ABC):
    """Wires a decompressor process to a database client process."""

    name = "connector"

    @abstractmethod
    async def run(
        self,
        decompress_args: Sequence[str],
        client_args: Sequence[str],
        timeout: float
    ) -> None:
        """
        Run both processes to completion.

        Raises:
            ExternalToolError: If either process fails
            ImportTimeoutError: If the attempt exceeds ``timeout`` seconds
        """

    @staticmethod
    async def _abort(processes: List[ManagedProcess]) -> None:
        for process in processes:
            process.kill()
        for process in processes:
            await process.finish()

    async def _timed_out(self, processes: List[ManagedProcess], timeout: float) -> ImportTimeoutError:
        logger.error("Database import timed out")
        await self._abort(processes)
        return ImportTimeoutError(
            f"Database import timed out after {timeout:g}s",
            timeout=timeout,
            details={'connector': self.name}
        )


class FileConnector(ImportConnector):
    """Decompress into ``sql_file``, then stream the file into the client."""

    name = "file"

    def __init__(self, sql_file: Path):
        self.sql_file = Path(sql_file)

    async def run(self, decompress_args, client_args, timeout) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout

        decompressor = ManagedProcess("Gunzip", decompress_args)
        with open(self.sql_file, 'wb') as sink:
            await decompressor.spawn(stdout=sink)
        await self._wait(decompressor, deadline, loop, timeout)
        if decompressor.returncode != 0:
            logger.error(f"Gunzip process exited with code {decompressor.returncode}")
            raise decompressor.failure(f"Gunzip process exited with code {decompressor.returncode}")
        logger.info("File decompressed successfully")

        client = ManagedProcess("MySQL", client_args)
        with open(self.sql_file, 'rb') as source:
            await client.spawn(stdin=source)
        await self._wait(client, deadline, loop, timeout)
        if client.returncode != 0:
            logger.error(f"MySQL exited with code {client.returncode}")
            if client.output:
                logger.error(client.output)
            raise client.failure(f"MySQL import failed with exit code {client.returncode}")

        if client.output:
            logger.info(client.output)

    async def _wait(self, process: ManagedProcess, deadline: float, loop, timeout: float) -> None:
        remaining = max(deadline - loop.time(), 0)
        done, _ = await asyncio.wait({process.task}, timeout=remaining)
        if not done:
            raise await self._timed_out([process], timeout)


class StreamConnector(ImportConnector):
    """Pipe the decompressor's stdout directly into the client's stdin."""

    name = "stream"

    async def run(self, decompress_args, client_args, timeout) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout

        client = ManagedProcess("MySQL", client_args)
        decompressor = ManagedProcess("Gunzip", decompress_args)

        read_fd, write_fd = os.pipe()
        try:
            await client.spawn(stdin=read_fd)
            try:
                await decompressor.spawn(stdout=write_fd)
            except ExternalToolError:
                await self._abort([client])
                raise
        finally:
            # Children hold their own copies; the client sees EOF once the
            # decompressor exits.
            os.close(read_fd)
            os.close(write_fd)

        processes = [client, decompressor]
        while not client.task.done():
            remaining = max(deadline - loop.time(), 0)
            pending = {p.task for p in processes if not p.task.done()}
            done, _ = await asyncio.wait(pending, timeout=remaining, return_when=asyncio.FIRST_COMPLETED)
            if not done:
                raise await self._timed_out(processes, timeout)

            if decompressor.task in done and not client.task.done() and decompressor.returncode != 0:
                logger.error(f"Gunzip exited with code {decompressor.returncode}")
                if decompressor.output:
                    logger.error(decompressor.output)
                await self._abort([client])
                raise decompressor.failure(f"Gunzip failed with exit code {decompressor.returncode}")

        if client.returncode != 0:
            logger.error(f"MySQL exited with code {client.returncode}")
            if client.output:
                logger.error(client.output)
            await self._abort([decompressor])
            raise client.failure(f"MySQL import failed with exit code {client.returncode}")

        if client.output:
            logger.info(client.output)

        # The client may close its input before the decompressor drains.
        if decompressor.running:
            decompressor.kill()
        await decompressor.finish()
        if decompressor.returncode != 0:
            logger.warning("Ignoring decompressor error after successful import")
