"""State of the game currently being relayed.

Provides:
- GameSession: identity, rules, clocks and move history of one game
- Builders for the TEI commands that describe the game to the engine
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from playtak_tei.errors import ParseError
from playtak_tei.moves import Move, Place, Spread, algebraic_encode

logger = logging.getLogger(__name__)

GAME_START_PREFIX = "Game Start"


def _parse_int(value: str, name: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise ParseError(f"could not parse {name} {value!r}") from e


class GameSession(BaseModel):
    """One in-progress game on the server.

    Attributes:
        id: Server game number, used to address ``Game#<id>`` messages
        size: Board size
        opponent: Opponent's login name
        color: Color this client plays
        white_ms: White's remaining time in milliseconds
        black_ms: Black's remaining time in milliseconds
        half_komi: Komi times two
        flatstones: Flatstones per player
        capstones: Capstones per player
        moves: Moves played so far, oldest first
    """

    id: int
    size: int = Field(ge=3, le=8)
    opponent: str
    color: Literal["white", "black"]
    white_ms: int = Field(ge=0)
    black_ms: int = Field(ge=0)
    half_komi: int = Field(default=0, ge=0)
    flatstones: int = Field(ge=0)
    capstones: int = Field(ge=0)
    moves: list[Move] = Field(default_factory=list)

    @classmethod
    def from_game_start(cls, line: str) -> GameSession:
        """Parse ``Game Start <id> <size> <white> vs <black> <color> <time> <komi> <flats> <caps>``.

        Raises:
            ParseError: If the line is malformed
        """
        parts = line.split()
        if len(parts) < 12 or " ".join(parts[:2]) != GAME_START_PREFIX:
            raise ParseError(f"invalid game start line {line!r}")

        color = parts[7]
        if color not in ("white", "black"):
            raise ParseError(f"could not parse player color {color!r}")

        # Our own name is on the side of our color.
        opponent = parts[6] if color == "white" else parts[4]
        time_ms = _parse_int(parts[8], "game time") * 1000

        try:
            return cls(
                id=_parse_int(parts[2], "game id"),
                size=_parse_int(parts[3], "board size"),
                opponent=opponent,
                color=color,
                white_ms=time_ms,
                black_ms=time_ms,
                half_komi=_parse_int(parts[9], "komi"),
                flatstones=_parse_int(parts[10], "flatstones"),
                capstones=_parse_int(parts[11], "capstones"),
            )
        except ValidationError as e:
            raise ParseError(f"invalid game start line {line!r}: {e.errors()[0]['msg']}") from e

    @property
    def is_our_turn(self) -> bool:
        """Whether the next move is ours. White moves on even move counts."""
        white_to_move = len(self.moves) % 2 == 0
        return white_to_move == (self.color == "white")

    def apply_move(self, move: Place | Spread) -> None:
        self.moves.append(move)

    def update_clocks(self, white: str, black: str) -> None:
        """Set both clocks from a server ``Time`` message (seconds).

        Raises:
            ParseError: If either value is not an integer
        """
        white_ms = _parse_int(white, "white time") * 1000
        black_ms = _parse_int(black, "black time") * 1000
        self.white_ms, self.black_ms = white_ms, black_ms
        logger.debug("Clocks updated: white=%dms black=%dms", white_ms, black_ms)

    def new_game_command(self) -> str:
        return f"teinewgame {self.size}\n"

    def position_command(self) -> str:
        """Build ``position startpos moves ...`` with the full move history."""
        moves = "".join(f" {algebraic_encode(move)}" for move in self.moves)
        return f"position startpos moves{moves}\n"

    def search_command(self) -> str:
        return f"go wtime {self.white_ms} btime {self.black_ms}\n"
