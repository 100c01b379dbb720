"""Line-oriented async streams for the server connection and engine process.

Both sides of the bridge speak newline-delimited text. ``LineChannel``
wraps a reader/writer pair, decoding one line at a time and serializing
writes so that lines from concurrent tasks never interleave.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Protocol

from playtak_tei.errors import ProtocolViolation, StreamClosed
from playtak_tei.protocol import normalize_line

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


class AsyncLineReader(Protocol):
    """Protocol for async line readers (duck typing for StreamReader)."""

    async def readline(self) -> bytes:
        """Read a line asynchronously."""
        ...


class AsyncWriter(Protocol):
    """Protocol for async writers (duck typing for StreamWriter)."""

    def write(self, data: bytes) -> None: ...

    async def drain(self) -> None: ...

    def close(self) -> None: ...

    async def wait_closed(self) -> None: ...


class LineChannel:
    """A named, bidirectional line stream.

    Attributes:
        name: Name used in logs and errors ("server" or "engine")
    """

    def __init__(self, name: str, reader: AsyncLineReader, writer: AsyncWriter) -> None:
        self.name = name
        self._reader = reader
        self._writer = writer
        self._writer_lock = asyncio.Lock()
        self._closed = False

    async def read_line(self) -> str:
        """Read the next line, without its line terminator.

        Raises:
            StreamClosed: If the stream reaches EOF
            ProtocolViolation: If the line is longer than the reader's buffer limit
            OSError: If the underlying read fails
        """
        try:
            line_bytes = await self._reader.readline()
        except OSError as e:
            logger.error("Could not read from %s: %s", self.name, e)
            raise
        except ValueError as e:
            # StreamReader.readline raises ValueError when the limit is overrun
            logger.error("Line from %s is too long: %s", self.name, e)
            raise ProtocolViolation(f"line from {self.name} exceeds the read limit") from e

        if not line_bytes:
            logger.error("%s stream closed unexpectedly", self.name.capitalize())
            raise StreamClosed(self.name)

        line = line_bytes.decode("utf-8", errors="replace").rstrip("\r\n")
        logger.debug("Received from %s: %r", self.name, line)
        return line

    async def send(self, line: str) -> None:
        """Write one line, adding the trailing newline if missing.

        Raises:
            OSError: If the write fails
        """
        normalized = normalize_line(line)
        if not normalized:
            return

        async with self._writer_lock:
            logger.debug("Sending to %s: %r", self.name, normalized)
            try:
                self._writer.write(normalized.encode("utf-8"))
                await self._writer.drain()
            except OSError as e:
                logger.error("Could not write to %s: %s", self.name, e)
                raise

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._writer.close()
        with contextlib.suppress(OSError):
            await self._writer.wait_closed()
        logger.info("%s stream closed", self.name.capitalize())


class ServerConnection(LineChannel):
    """TCP connection to the PlayTak server."""

    @classmethod
    async def open(cls, host: str, port: int) -> ServerConnection:
        """Connect to the server.

        Raises:
            OSError: If the connection cannot be established
        """
        try:
            reader, writer = await asyncio.open_connection(host, port)
        except OSError as e:
            logger.error("Could not connect to %s:%d: %s", host, port, e)
            raise
        logger.info("Connected to %s:%d", host, port)
        return cls("server", reader, writer)


class EngineProcess(LineChannel):
    """A TEI engine running as a subprocess, driven over stdin/stdout."""

    def __init__(self, process: asyncio.subprocess.Process) -> None:
        assert process.stdout is not None and process.stdin is not None
        super().__init__("engine", process.stdout, process.stdin)
        self._process = process

    @classmethod
    async def spawn(cls, command: Sequence[str]) -> EngineProcess:
        """Launch the engine.

        Args:
            command: Engine executable followed by its arguments

        Raises:
            OSError: If the engine cannot be started
        """
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error("Could not start engine %r: %s", command[0], e)
            raise
        logger.info("Started engine %r (pid %d)", command[0], process.pid)
        return cls(process)

    async def close(self) -> None:
        await super().close()
        if self._process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                self._process.terminate()
            await self._process.wait()
