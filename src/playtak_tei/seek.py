"""Seeks: matchmaking requests posted to or announced by PlayTak.

Handles:
- Default piece counts per board size
- Parsing ``Seek new`` announcements
- Building the ``Seek`` command that posts a new seek
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, ValidationError

from playtak_tei.errors import ParseError

# Board size -> (flatstones, capstones)
PIECE_COUNTS: dict[int, tuple[int, int]] = {
    3: (10, 0),
    4: (15, 0),
    5: (21, 1),
    6: (30, 1),
    7: (40, 2),
    8: (50, 2),
}


def flatstones_for_size(size: int) -> int:
    """Standard number of flatstones per player on a board of ``size``."""
    if size not in PIECE_COUNTS:
        raise ValueError(f"unsupported board size {size}")
    return PIECE_COUNTS[size][0]


def capstones_for_size(size: int) -> int:
    """Standard number of capstones per player on a board of ``size``."""
    if size not in PIECE_COUNTS:
        raise ValueError(f"unsupported board size {size}")
    return PIECE_COUNTS[size][1]


class SeekColor(str, Enum):
    """Color the seeker wants to play."""

    WHITE = "white"
    BLACK = "black"
    RANDOM = "random"

    @property
    def marker(self) -> str:
        return {"white": "W", "black": "B", "random": "A"}[self.value]

    @classmethod
    def from_marker(cls, marker: str) -> SeekColor:
        colors = {"W": cls.WHITE, "B": cls.BLACK, "A": cls.RANDOM}
        if marker not in colors:
            raise ParseError(f"invalid seeker color {marker!r}")
        return colors[marker]


def _parse_flag(value: str, name: str) -> bool:
    if value not in ("0", "1"):
        raise ParseError(f"invalid {name} value {value!r}")
    return value == "1"


class Seek(BaseModel):
    """A seek, either announced by the server or composed locally.

    ``id`` and ``player`` are only known for seeks announced by the server.
    Unset piece counts fall back to the standard counts for ``size``.
    """

    id: int | None = None
    player: str | None = None
    size: int = Field(ge=3, le=8)
    time: int = Field(default=1200, ge=0)
    increment: int = Field(default=20, ge=0)
    color: SeekColor = SeekColor.RANDOM
    half_komi: int = Field(default=0, ge=0)
    flatstones: int | None = Field(default=None, ge=0)
    capstones: int | None = Field(default=None, ge=0)
    unrated: bool = False
    tournament: bool = False
    extra_time_move: int | None = Field(default=None, gt=0)
    extra_time_amount: int | None = Field(default=None, gt=0)
    opponent: str | None = None

    def resolved_flatstones(self) -> int:
        if self.flatstones is not None:
            return self.flatstones
        return flatstones_for_size(self.size)

    def resolved_capstones(self) -> int:
        if self.capstones is not None:
            return self.capstones
        return capstones_for_size(self.size)

    @classmethod
    def parse(cls, line: str) -> Seek:
        """Parse a ``Seek new <id> <player> <size> ...`` announcement.

        Raises:
            ParseError: If a field is missing or malformed
        """
        parts = line.split()
        if len(parts) < 15:
            raise ParseError(f"seek line has too few fields: {line!r}")

        try:
            numbers = [int(part) for part in parts[4:7] + parts[8:11] + parts[13:15]]
        except ValueError as e:
            raise ParseError(f"could not parse seek line {line!r}") from e
        size, time, increment, half_komi, flatstones, capstones, etm, eta = numbers

        try:
            seek_id = int(parts[2])
        except ValueError as e:
            raise ParseError(f"could not parse seek number {parts[2]!r}") from e

        try:
            return cls(
                id=seek_id,
                player=parts[3],
                size=size,
                time=time,
                increment=increment,
                color=SeekColor.from_marker(parts[7]),
                half_komi=half_komi,
                flatstones=flatstones,
                capstones=capstones,
                unrated=_parse_flag(parts[11], "unrated"),
                tournament=_parse_flag(parts[12], "tournament"),
                extra_time_move=etm or None,
                extra_time_amount=eta or None,
                opponent=parts[15] if len(parts) > 15 else None,
            )
        except ValidationError as e:
            raise ParseError(f"invalid seek {line!r}: {e.errors()[0]['msg']}") from e

    def to_seek_string(self) -> str:
        """Build the newline-terminated ``Seek`` command posting this seek."""
        fields = [
            self.size,
            self.time,
            self.increment,
            self.color.marker,
            self.half_komi,
            self.resolved_flatstones(),
            self.resolved_capstones(),
            int(self.unrated),
            int(self.tournament),
            self.extra_time_move or 0,
            self.extra_time_amount or 0,
            self.opponent or "",
        ]
        return "Seek " + " ".join(str(field) for field in fields) + "\n"

    def describe(self) -> str:
        """Human-readable summary used when listing seeks."""
        header = "  Seek"
        header += f" {self.id}: " if self.id is not None else ": "
        header += self.player or ""

        details = [
            f"size: {self.size}",
            f"seeker color: {self.color.value}",
            f"time: {self.time}+{self.increment}",
            f"komi: {self.half_komi / 2:3.1f}",
        ]
        if self.resolved_flatstones() != flatstones_for_size(self.size):
            details.append(f"flatstones: {self.resolved_flatstones()}")
        if self.resolved_capstones() != capstones_for_size(self.size):
            details.append(f"capstones: {self.resolved_capstones()}")
        if self.unrated:
            details.append("unrated")
        if self.tournament:
            details.append("tournament")
        if self.extra_time_move and self.extra_time_amount:
            details.append(f"extra time: +{self.extra_time_amount} at move {self.extra_time_move}")
        if self.opponent:
            details.append(f"opponent: {self.opponent}")

        return f"{header}\n      {', '.join(details)}"
