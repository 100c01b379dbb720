"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

# Add the src directory to the Python path so tests run without installing
_repo_root = Path(__file__).parent.parent
_src = _repo_root / "src"

if str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from playtak_tei.streams import LineChannel  # noqa: E402


class ScriptedWriter:
    """Fake StreamWriter that records written lines and answers them.

    Replies registered with ``reply()`` are fed into the paired reader the
    next time a line whose first word equals ``command`` is written. Replies
    for the same command are used in registration order.
    """

    def __init__(self, reader: asyncio.StreamReader) -> None:
        self.reader = reader
        self.lines: list[str] = []
        self.closed = False
        self._replies: list[tuple[str, list[str]]] = []

    def reply(self, command: str, *lines: str) -> None:
        self._replies.append((command, list(lines)))

    def write(self, data: bytes) -> None:
        for line in data.decode("utf-8").splitlines():
            self.lines.append(line)
            words = line.split()
            if not words:
                continue
            for index, (command, replies) in enumerate(self._replies):
                if words[0] == command:
                    del self._replies[index]
                    for reply in replies:
                        self.reader.feed_data(f"{reply}\n".encode())
                    break

    async def drain(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True

    async def wait_closed(self) -> None:
        pass


ChannelFactory = Callable[..., tuple[LineChannel, ScriptedWriter]]


@pytest.fixture
def make_channel() -> ChannelFactory:
    """Return a factory for scripted line channels.

    Must be called from inside a running event loop. Positional lines are
    available to read immediately.
    """

    def _make(name: str, *lines: str) -> tuple[LineChannel, ScriptedWriter]:
        reader = asyncio.StreamReader()
        for line in lines:
            reader.feed_data(f"{line}\n".encode())
        writer = ScriptedWriter(reader)
        return LineChannel(name, reader, writer), writer

    return _make
