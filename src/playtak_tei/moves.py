"""Tak moves and their two text notations.

Provides:
- Square codec: ``a1`` <-> ``(0, 0)``
- Move model: a ``Place`` / ``Spread`` union discriminated on ``kind``
- Algebraic (PTN) codec, used on the engine side: ``5b2>122``
- Wire codec, used on the PlayTak side: ``Game#1 M B2 E2 1 2 2``
"""

from __future__ import annotations

import string
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from playtak_tei.errors import ParseError

FILE_LETTERS = "abcdefgh"
RANK_DIGITS = "123456789"

# Largest supported board. It also bounds how many pieces one spread can carry.
MAX_BOARD_SIZE = 8

Coordinate = Annotated[int, Field(ge=0, lt=MAX_BOARD_SIZE)]
DropCount = Annotated[int, Field(gt=0, le=MAX_BOARD_SIZE)]


class PieceType(str, Enum):
    """Kind of stone placed by a ``Place`` move."""

    FLATSTONE = "flatstone"
    STANDING_STONE = "standing_stone"
    CAPSTONE = "capstone"


class Direction(str, Enum):
    """Direction a ``Spread`` move travels in."""

    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"


# North is towards higher ranks, east towards later files.
DIRECTION_DELTAS: dict[Direction, tuple[int, int]] = {
    Direction.NORTH: (0, 1),
    Direction.SOUTH: (0, -1),
    Direction.EAST: (1, 0),
    Direction.WEST: (-1, 0),
}

_ALGEBRAIC_PIECES = {
    "F": PieceType.FLATSTONE,
    "S": PieceType.STANDING_STONE,
    "C": PieceType.CAPSTONE,
}
_ALGEBRAIC_DIRECTIONS = {
    "+": Direction.NORTH,
    "-": Direction.SOUTH,
    ">": Direction.EAST,
    "<": Direction.WEST,
}
_DIRECTION_MARKERS = {v: k for k, v in _ALGEBRAIC_DIRECTIONS.items()}
_WIRE_PIECES = {
    None: PieceType.FLATSTONE,
    "W": PieceType.STANDING_STONE,
    "C": PieceType.CAPSTONE,
}


# =============================================================================
# Square Codec
# =============================================================================


def square_to_coords(text: str) -> tuple[int, int]:
    """Convert a square such as ``c5`` (or ``C5``) into 0-based coordinates.

    Raises:
        ParseError: If the square is not a file letter followed by a rank digit
    """
    if len(text) != 2:
        raise ParseError(f"invalid square {text!r}")

    file_letter, rank_digit = text[0].lower(), text[1]
    if file_letter not in FILE_LETTERS:
        raise ParseError(f"invalid file letter in square {text!r}")
    if rank_digit not in RANK_DIGITS:
        raise ParseError(f"invalid rank number in square {text!r}")

    return FILE_LETTERS.index(file_letter), RANK_DIGITS.index(rank_digit)


def coords_to_square(x: int, y: int) -> str:
    """Convert 0-based coordinates into a lowercase square such as ``c5``.

    The board size is not checked here.
    """
    if x < 0 or y < 0:
        raise ValueError(f"coordinates ({x}, {y}) are off the board")
    return f"{chr(ord('a') + x)}{y + 1}"


# =============================================================================
# Move Model
# =============================================================================


class BaseMoveModel(BaseModel):
    """Base model for moves. Moves are immutable once built."""

    model_config = ConfigDict(frozen=True)


class Place(BaseMoveModel):
    """Place a new stone on an empty square."""

    kind: Literal["place"] = "place"
    square: tuple[Coordinate, Coordinate]
    piece_type: PieceType = PieceType.FLATSTONE


class Spread(BaseMoveModel):
    """Pick up a stack and drop pieces along a straight line.

    ``drops[i]`` pieces are left on the ``i + 1``-th square away from
    ``square`` in ``direction``.
    """

    kind: Literal["spread"] = "spread"
    square: tuple[Coordinate, Coordinate]
    direction: Direction
    drops: list[DropCount] = Field(min_length=1)

    @model_validator(mode="after")
    def validate_reach(self) -> Spread:
        if self.count > MAX_BOARD_SIZE:
            raise ValueError(f"cannot carry more than {MAX_BOARD_SIZE} pieces, got {self.count}")
        x, y = self.target()
        if not (0 <= x < MAX_BOARD_SIZE and 0 <= y < MAX_BOARD_SIZE):
            raise ValueError(f"spread ends off the board at ({x}, {y})")
        return self

    @property
    def count(self) -> int:
        """Number of pieces picked up from the source square."""
        return sum(self.drops)

    def target(self) -> tuple[int, int]:
        """Square the last piece is dropped on."""
        dx, dy = DIRECTION_DELTAS[self.direction]
        x, y = self.square
        return x + dx * len(self.drops), y + dy * len(self.drops)


Move = Annotated[Place | Spread, Field(discriminator="kind")]


def _build(model: type[Place] | type[Spread], text: str, **fields: Any) -> Place | Spread:
    try:
        return model(**fields)
    except ValidationError as e:
        raise ParseError(f"invalid move {text!r}: {e.errors()[0]['msg']}") from e


# =============================================================================
# Algebraic Notation
# =============================================================================


def algebraic_decode(text: str) -> Place | Spread:
    """Parse a move in algebraic notation (``a1``, ``Sc5``, ``5b2>122``).

    A trailing marker after the drop counts (such as ``*``) is ignored.

    Raises:
        ParseError: If the move is malformed
    """
    chars = text.strip()
    if not chars:
        raise ParseError("empty move")

    piece_type = PieceType.FLATSTONE
    pickup = 1
    if chars[0] in _ALGEBRAIC_PIECES:
        piece_type = _ALGEBRAIC_PIECES[chars[0]]
        chars = chars[1:]
    elif chars[0] in string.digits:
        pickup = int(chars[0])
        chars = chars[1:]

    if len(chars) < 2:
        raise ParseError(f"move {text!r} is too short")

    square = square_to_coords(chars[:2])
    rest = chars[2:]
    if not rest:
        return _build(Place, text, square=square, piece_type=piece_type)

    direction = _ALGEBRAIC_DIRECTIONS.get(rest[0])
    if direction is None:
        raise ParseError(f"invalid direction character in move {text!r}")

    drops: list[int] = []
    for char in rest[1:]:
        if char not in string.digits:
            break
        drops.append(int(char))

    return _build(
        Spread,
        text,
        square=square,
        direction=direction,
        drops=drops or [pickup],
    )


def algebraic_encode(move: Place | Spread) -> str:
    """Format a move in algebraic notation."""
    square = coords_to_square(*move.square)

    if isinstance(move, Place):
        marker = {
            PieceType.FLATSTONE: "",
            PieceType.STANDING_STONE: "S",
            PieceType.CAPSTONE: "C",
        }[move.piece_type]
        return f"{marker}{square}"

    count = str(move.count) if move.count > 1 else ""
    drops = "".join(str(drop) for drop in move.drops) if len(move.drops) > 1 else ""
    return f"{count}{square}{_DIRECTION_MARKERS[move.direction]}{drops}"


# =============================================================================
# Wire Notation
# =============================================================================


def wire_decode(line: str) -> Place | Spread:
    """Parse a PlayTak move line (``Game#<id> P <SQ> [W|C]`` or ``Game#<id> M ...``).

    Raises:
        ParseError: If the line is not a well-formed move
    """
    parts = line.split()
    if len(parts) < 3:
        raise ParseError(f"move line {line.strip()!r} is too short")

    if parts[1] == "P":
        square = square_to_coords(parts[2])
        suffix = parts[3] if len(parts) > 3 else None
        if suffix not in _WIRE_PIECES:
            raise ParseError(f"invalid piece type {suffix!r}")
        return _build(Place, line, square=square, piece_type=_WIRE_PIECES[suffix])

    if parts[1] == "M":
        if len(parts) < 5:
            raise ParseError(f"move line {line.strip()!r} is too short")

        x, y = square_to_coords(parts[2])
        tx, ty = square_to_coords(parts[3])
        dx, dy = tx - x, ty - y
        if dx == 0 and dy > 0:
            direction = Direction.NORTH
        elif dx == 0 and dy < 0:
            direction = Direction.SOUTH
        elif dy == 0 and dx > 0:
            direction = Direction.EAST
        elif dy == 0 and dx < 0:
            direction = Direction.WEST
        else:
            raise ParseError(f"move {parts[2]} -> {parts[3]} is not in a straight line")

        try:
            drops = [int(drop) for drop in parts[4:]]
        except ValueError as e:
            raise ParseError(f"invalid drop amount in {line.strip()!r}") from e

        return _build(Spread, line, square=(x, y), direction=direction, drops=drops)

    raise ParseError(f"invalid move type {parts[1]!r}")


def wire_encode(move: Place | Spread, game_id: int) -> str:
    """Format a move as a newline-terminated PlayTak command for ``game_id``."""
    square = coords_to_square(*move.square).upper()

    if isinstance(move, Place):
        line = f"Game#{game_id} P {square}"
        if move.piece_type is PieceType.STANDING_STONE:
            line += " W"
        elif move.piece_type is PieceType.CAPSTONE:
            line += " C"
        return line + "\n"

    target = coords_to_square(*move.target()).upper()
    drops = " ".join(str(drop) for drop in move.drops)
    return f"Game#{game_id} M {square} {target} {drops}\n"
