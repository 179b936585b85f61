"""
Supervised build tool process.

Runs the build command as a subprocess and tees its combined output to our
stdout, feeding every chunk through the build monitor on the way.
"""
import asyncio
import logging
import sys
from typing import BinaryIO, Optional

from .monitor import BuildMonitor


class BuildProcess:
    """Runs a long-lived build/serve command and pumps its output"""

    def __init__(
        self,
        command: str,
        monitor: BuildMonitor,
        cwd: Optional[str] = None,
        output: Optional[BinaryIO] = None,
        chunk_size: int = 4096
    ):
        """
        Initialize build process wrapper.

        Args:
            command: Shell command starting the build tool in watch mode
            monitor: BuildMonitor receiving every output chunk
            cwd: Working directory for the command
            output: Binary stream the output is echoed to (defaults to stdout)
            chunk_size: Read size for the output pipe
        """
        self.command = command
        self.monitor = monitor
        self.cwd = cwd
        self.output = output
        self.chunk_size = chunk_size
        self._process: Optional[asyncio.subprocess.Process] = None
        self._pump_task: Optional[asyncio.Task] = None
        self.logger = logging.getLogger(__name__)

    @property
    def running(self) -> bool:
        return self._process is not None and self._process.returncode is None

    async def start(self):
        if self._process is not None:
            return

        self.logger.info(f"Starting build command: {self.command}")
        self._process = await asyncio.create_subprocess_shell(
            self.command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            cwd=self.cwd
        )
        self._pump_task = asyncio.create_task(self.pump(self._process.stdout))

    async def pump(self, reader: asyncio.StreamReader):
        """Copy output chunks from reader to the output stream until EOF"""
        output = self.output or sys.stdout.buffer

        while True:
            chunk = await reader.read(self.chunk_size)
            if not chunk:
                break
            output.write(self.monitor.feed(chunk))
            output.flush()

        self.logger.debug("Build output stream closed")

    async def wait(self) -> int:
        if self._process is None:
            raise RuntimeError("Build process was not started")
        return_code = await self._process.wait()
        if self._pump_task is not None:
            await self._pump_task
        self.logger.info(f"Build command exited with code {return_code}")
        return return_code

    async def stop(self, timeout: float = 10.0):
        if not self.running:
            return

        self.logger.info("Stopping build command")
        self._process.terminate()
        try:
            await asyncio.wait_for(self._process.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            self.logger.warning(f"Build command did not exit within {timeout}s, killing it")
            self._process.kill()
            await self._process.wait()

        if self._pump_task is not None:
            await self._pump_task
