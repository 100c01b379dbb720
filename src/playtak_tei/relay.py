"""Relay between the PlayTak server and a TEI engine.

Drives one game from connection to game over:

    connect -> handshake -> login -> (resume | seek) -> engine init -> game loop

During the game loop, lines from the engine and the server are read by two
pump tasks into a single queue and handled one at a time, in arrival order.
A keepalive task pings the server for the lifetime of the relay. It shares
the server channel, whose writer is locked per line.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import sys
from collections.abc import Awaitable, Callable, Sequence
from typing import TextIO

from pydantic import BaseModel, model_validator

from playtak_tei.errors import (
    AuthFailure,
    ParseError,
    ProtocolViolation,
    SeekNotFound,
)
from playtak_tei.game import GAME_START_PREFIX, GameSession
from playtak_tei.moves import algebraic_decode, wire_decode, wire_encode
from playtak_tei.options import SpinOption, negotiate_options
from playtak_tei.protocol import (
    AUTH_FAILURE_REPLY,
    BESTMOVE_PREFIX,
    DEFAULT_CLIENT_NAME,
    DEFAULT_ENGINE_NAME,
    DEFAULT_HOST,
    DEFAULT_PING_INTERVAL,
    DEFAULT_PORT,
    ENGINE_NAME_PREFIX,
    LOGIN_BANNER,
    NOK_REPLY,
    OK_REPLY,
    PING_MESSAGE,
    QUIT_MESSAGE,
    RESUMED_MESSAGE,
    SEEK_ANNOUNCEMENT_PREFIX,
    TEI_HANDSHAKE,
    TEI_READY,
    WELCOME_BANNER,
    WELCOME_PREFIX,
    accept_message,
    client_message,
    game_tag,
)
from playtak_tei.seek import Seek
from playtak_tei.streams import EngineProcess, LineChannel, ServerConnection

logger = logging.getLogger(__name__)

ENGINE = "engine"
SERVER = "server"

ServerFactory = Callable[[str, int], Awaitable[LineChannel]]
EngineFactory = Callable[[Sequence[str]], Awaitable[LineChannel]]


# =============================================================================
# Run Modes
# =============================================================================


class ListSeeks(BaseModel):
    """Print the open seeks and quit."""


class AcceptSeek(BaseModel):
    """Accept an open seek, by number or by the seeking player's name."""

    seek_id: int | None = None
    opponent: str | None = None

    @model_validator(mode="after")
    def validate_target(self) -> AcceptSeek:
        if self.seek_id is None and self.opponent is None:
            raise ValueError("either seek_id or opponent must be set")
        return self


class PostSeek(BaseModel):
    """Post a new seek and wait for someone to accept it."""

    seek: Seek


RunMode = ListSeeks | AcceptSeek | PostSeek


# =============================================================================
# Relay
# =============================================================================


class Relay:
    """Plays one PlayTak game with a TEI engine.

    Attributes:
        login: The ``Login ...`` command to authenticate with
        mode: What to do after logging in
        engine_command: Engine executable and arguments
        host: PlayTak server host
        port: PlayTak server port
        client_name: Name announced with the ``Client`` command
        ping_interval: Seconds between keepalive pings
        session: The game being played, once known
        login_name: Name the server welcomed us with
        engine_name: Name the engine reported during the handshake
    """

    def __init__(
        self,
        *,
        login: str,
        mode: RunMode,
        engine_command: Sequence[str] = (),
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        client_name: str = DEFAULT_CLIENT_NAME,
        ping_interval: float = DEFAULT_PING_INTERVAL,
        stdout: TextIO | None = None,
        connect: ServerFactory = ServerConnection.open,
        spawn_engine: EngineFactory = EngineProcess.spawn,
    ) -> None:
        if not isinstance(mode, ListSeeks) and not engine_command:
            raise ValueError("an engine command is required to play a game")

        self.login = login
        self.mode = mode
        self.engine_command = list(engine_command)
        self.host = host
        self.port = port
        self.client_name = client_name
        self.ping_interval = ping_interval
        self._stdout: TextIO = stdout if stdout is not None else sys.stdout
        self._connect = connect
        self._spawn_engine = spawn_engine

        self.session: GameSession | None = None
        self.login_name: str | None = None
        self.engine_name = DEFAULT_ENGINE_NAME

        self._server: LineChannel | None = None
        self._engine: LineChannel | None = None
        self._keepalive_task: asyncio.Task[None] | None = None

    @property
    def server(self) -> LineChannel:
        if self._server is None:
            raise RuntimeError("not connected to the server")
        return self._server

    @property
    def engine(self) -> LineChannel:
        if self._engine is None:
            raise RuntimeError("engine not started")
        return self._engine

    async def run(self) -> None:
        """Run the relay until the game ends, or until seeks are listed.

        Raises:
            BridgeError: On any protocol, parse or configuration failure
            OSError: On any I/O failure
        """
        self._server = await self._connect(self.host, self.port)

        try:
            await self.handshake()
            response = await self.authenticate()
            self.start_keepalive()

            if response.startswith(GAME_START_PREFIX):
                logger.info("Resuming game")
                session = await self.resume_game(response)
            else:
                logger.info("Logged in as %s", self.login_name)
                seeks = await self.collect_seeks()
                if isinstance(self.mode, ListSeeks):
                    self.report_seeks(seeks)
                    await self.server.send(QUIT_MESSAGE)
                    return
                await self.request_game(seeks)
                session = await self.wait_for_game_start()

            self.session = session
            await self.initialize_engine(session)
            await self.run_game(session)
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        """Stop the keepalive task and close both streams."""
        if self._keepalive_task is not None:
            self._keepalive_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._keepalive_task
            self._keepalive_task = None

        if self._engine is not None:
            await self._engine.close()
        if self._server is not None:
            await self._server.close()

    # -------------------------------------------------------------------------
    # Login
    # -------------------------------------------------------------------------

    async def _expect(self, expected: str) -> None:
        line = await self.server.read_line()
        if line != expected:
            logger.error("Unexpected reply: expected %r, received %r", expected, line)
            raise ProtocolViolation(f"expected {expected!r}", received=line)

    async def handshake(self) -> None:
        """Check the server banners and announce this client."""
        await self._expect(WELCOME_BANNER)
        await self._expect(LOGIN_BANNER)
        await self.server.send(client_message(self.client_name))
        await self._expect(OK_REPLY)
        logger.debug("Client acknowledged")

    async def authenticate(self) -> str:
        """Send the login command and return the server's reply.

        The reply is either a welcome line, whose name is stored in
        ``login_name``, or a ``Game Start`` line for a game to resume.

        Raises:
            AuthFailure: If the credentials are rejected
            ProtocolViolation: If the reply is not recognized
        """
        await self.server.send(self.login)
        response = await self.server.read_line()

        if response == AUTH_FAILURE_REPLY:
            logger.error("Could not authenticate. Are the username and password correct?")
            raise AuthFailure("the server rejected the login credentials")

        if response.startswith(GAME_START_PREFIX):
            return response

        parts = response.split()
        if not response.startswith(WELCOME_PREFIX) or len(parts) < 2:
            logger.error("Could not log in")
            raise ProtocolViolation("expected a welcome message", received=response)

        self.login_name = parts[1].removesuffix("!")
        return response

    def start_keepalive(self) -> None:
        if self._keepalive_task is None:
            self._keepalive_task = asyncio.create_task(self._keepalive())

    async def _keepalive(self) -> None:
        while True:
            await asyncio.sleep(self.ping_interval)
            try:
                await self.server.send(PING_MESSAGE)
            except OSError:
                logger.warning("Keepalive stopped after a failed write")
                return

    # -------------------------------------------------------------------------
    # Game setup
    # -------------------------------------------------------------------------

    async def resume_game(self, game_start: str) -> GameSession:
        """Rebuild a game in progress from the server's replay.

        The server follows the ``Game Start`` line with the moves and clocks
        so far, then a resumed message.
        """
        session = GameSession.from_game_start(game_start)

        while True:
            line = await self.server.read_line()
            if line == RESUMED_MESSAGE:
                break

            parts = line.split()
            if len(parts) < 2:
                continue
            if parts[1] in ("P", "M"):
                session.apply_move(wire_decode(line))
            elif parts[1] == "Time":
                if len(parts) < 4:
                    raise ParseError(f"invalid time message {line!r}")
                session.update_clocks(parts[2], parts[3])

        logger.info("Resumed game %d after %d moves", session.id, len(session.moves))
        return session

    async def collect_seeks(self) -> list[Seek]:
        """Read seek announcements until the server is done sending them."""
        seeks = []
        while True:
            line = await self.server.read_line()
            if not line.startswith(SEEK_ANNOUNCEMENT_PREFIX):
                break
            seeks.append(Seek.parse(line))
        logger.debug("Collected %d seeks", len(seeks))
        return seeks

    def report_seeks(self, seeks: Sequence[Seek]) -> None:
        self._stdout.write("Available seeks:\n\n")
        for seek in seeks:
            self._stdout.write(f"{seek.describe()}\n\n")
        self._stdout.flush()

    async def request_game(self, seeks: Sequence[Seek]) -> None:
        """Accept or post a seek, depending on the run mode.

        Raises:
            SeekNotFound: If no open seek belongs to the requested opponent
        """
        if isinstance(self.mode, AcceptSeek):
            seek_id = self.mode.seek_id
            if seek_id is None:
                seek = next((s for s in seeks if s.player == self.mode.opponent), None)
                if seek is None or seek.id is None:
                    logger.error("Cannot find seek from %s", self.mode.opponent)
                    raise SeekNotFound(f"no open seek from {self.mode.opponent}")
                seek_id = seek.id
            logger.info("Accepting seek %d", seek_id)
            await self.server.send(accept_message(seek_id))
        elif isinstance(self.mode, PostSeek):
            logger.info("Posting seek")
            await self.server.send(self.mode.seek.to_seek_string())

    async def wait_for_game_start(self) -> GameSession:
        """Wait for the server to start the accepted or posted game.

        Raises:
            ProtocolViolation: If the server rejects the seek
        """
        while True:
            line = await self.server.read_line()
            if line == NOK_REPLY:
                logger.error("Could not accept or post seek")
                raise ProtocolViolation("the server rejected the seek", received=line)
            if line.startswith(GAME_START_PREFIX):
                return GameSession.from_game_start(line)

    async def initialize_engine(self, session: GameSession) -> None:
        """Start the engine, complete the TEI handshake and apply the game rules.

        Raises:
            OptionMismatch: If the engine cannot be set up for the game's rules
        """
        self._engine = await self._spawn_engine(self.engine_command)
        await self.engine.send(TEI_HANDSHAKE)

        options: list[SpinOption] = []
        while True:
            line = await self.engine.read_line()
            if line.startswith(ENGINE_NAME_PREFIX):
                self.engine_name = line[len(ENGINE_NAME_PREFIX):].strip()
            elif line.startswith("option") and "type spin" in line:
                options.append(SpinOption.parse(line))
            elif line == TEI_READY:
                break

        for command in negotiate_options(options, session):
            await self.engine.send(command)

        logger.info("%s initialized", self.engine_name)

    # -------------------------------------------------------------------------
    # Game loop
    # -------------------------------------------------------------------------

    async def _pump(
        self,
        channel: LineChannel,
        source: str,
        queue: asyncio.Queue[tuple[str, str | BaseException]],
    ) -> None:
        """Forward lines from ``channel`` into ``queue`` until it fails."""
        while True:
            try:
                line = await channel.read_line()
            except Exception as e:
                await queue.put((source, e))
                return
            await queue.put((source, line))

    async def run_game(self, session: GameSession) -> None:
        """Relay moves between the server and the engine until the game is over."""
        logger.info(
            "Starting game %d: size %d against %s, playing %s",
            session.id,
            session.size,
            session.opponent,
            session.color,
        )

        if session.is_our_turn:
            await self.engine.send(session.new_game_command())
            await self.engine.send(session.position_command())
            await self.engine.send(session.search_command())

        queue: asyncio.Queue[tuple[str, str | BaseException]] = asyncio.Queue()
        pumps = [
            asyncio.create_task(self._pump(self.engine, ENGINE, queue)),
            asyncio.create_task(self._pump(self.server, SERVER, queue)),
        ]

        try:
            while True:
                source, item = await queue.get()
                if isinstance(item, BaseException):
                    raise item
                if source == ENGINE:
                    await self.handle_engine_line(session, item)
                elif await self.handle_server_line(session, item):
                    break
        finally:
            for pump in pumps:
                pump.cancel()
            for pump in pumps:
                with contextlib.suppress(asyncio.CancelledError):
                    await pump

    async def handle_engine_line(self, session: GameSession, line: str) -> None:
        """Forward the engine's chosen move to the server."""
        parts = line.split()
        if not parts or parts[0] != BESTMOVE_PREFIX:
            return
        if len(parts) < 2:
            raise ProtocolViolation("bestmove without a move", received=line)

        move = algebraic_decode(parts[1])
        session.apply_move(move)
        await self.server.send(wire_encode(move, session.id))

    async def handle_server_line(self, session: GameSession, line: str) -> bool:
        """Apply a server message to the game.

        Returns:
            True if the game is over
        """
        parts = line.split()
        if not parts:
            return False

        if parts[0] == NOK_REPLY:
            logger.error("Received NOK from the server")
            return False

        if parts[0] != game_tag(session.id) or len(parts) < 2:
            return False

        if parts[1] == "Time":
            if len(parts) < 4:
                raise ParseError(f"invalid time message {line!r}")
            session.update_clocks(parts[2], parts[3])
        elif parts[1] in ("P", "M"):
            session.apply_move(wire_decode(line))
            await self.engine.send(session.position_command())
            await self.engine.send(session.search_command())
        elif parts[1] == "Over":
            result = parts[2] if len(parts) > 2 else "unknown"
            logger.info("Game %d finished: %s", session.id, result)
            return True

        return False
