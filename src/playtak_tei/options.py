"""Engine option parsing and negotiation.

The engine advertises integer ("spin") options during the TEI handshake.
Before a game starts, the game's komi and piece counts are checked against
those options and set where the engine's defaults differ.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel

from playtak_tei.errors import OptionMismatch, ParseError
from playtak_tei.seek import capstones_for_size, flatstones_for_size

if TYPE_CHECKING:
    from collections.abc import Sequence

    from playtak_tei.game import GameSession

logger = logging.getLogger(__name__)


class SpinOption(BaseModel):
    """An integer option advertised by the engine."""

    name: str
    default: int = 0
    min: int = 0
    max: int = 0

    @classmethod
    def parse(cls, line: str) -> SpinOption:
        """Parse ``option name <n> type spin default <d> min <a> max <b>``.

        Raises:
            ParseError: If the option is not a spin option or a value is not an integer
        """
        fields: dict[str, str] = {}
        parts = iter(line.split())
        for part in parts:
            if part in ("name", "type", "default", "min", "max"):
                fields[part] = next(parts, "")

        if fields.get("type") != "spin":
            raise ParseError(f"expected a spin option, got {line!r}")
        if not fields.get("name"):
            raise ParseError(f"option line {line!r} has no name")

        try:
            return cls(
                name=fields["name"],
                default=int(fields.get("default", 0)),
                min=int(fields.get("min", 0)),
                max=int(fields.get("max", 0)),
            )
        except ValueError as e:
            raise ParseError(f"expected an integer in option line {line!r}") from e

    def is_valid_value(self, value: int) -> bool:
        return self.min <= value <= self.max

    def set_command(self, value: int) -> str:
        """Build the ``setoption`` command that sets this option to ``value``."""
        if not self.is_valid_value(value):
            logger.warning(
                "Setting engine option %s to %d, outside its range [%d, %d]",
                self.name,
                value,
                self.min,
                self.max,
            )
        return f"setoption name {self.name} value {value}\n"


def negotiate_option(
    options: Sequence[SpinOption],
    name: str,
    value: int,
    assumed_default: int,
) -> str | None:
    """Decide how to bring the engine's ``name`` option to ``value``.

    Args:
        options: Options advertised by the engine
        name: Option name
        value: Value the game requires
        assumed_default: Value an engine without this option is assumed to use

    Returns:
        The ``setoption`` command to send, or None if nothing needs to be sent

    Raises:
        OptionMismatch: If the engine lacks the option and ``value`` is not the
            assumed default
    """
    option = next((o for o in options if o.name == name), None)

    if option is not None:
        if value != option.default:
            return option.set_command(value)
        logger.debug(
            "Requested option %r is already at the engine's default value, skipping",
            name,
        )
        return None

    if value != assumed_default:
        raise OptionMismatch(name, value, assumed_default)

    return None


def negotiate_options(options: Sequence[SpinOption], session: GameSession) -> list[str]:
    """Build the commands configuring the engine for ``session``'s rules."""
    requirements = [
        ("HalfKomi", session.half_komi, 0),
        ("Flatstones", session.flatstones, flatstones_for_size(session.size)),
        ("Capstones", session.capstones, capstones_for_size(session.size)),
    ]

    commands = []
    for name, value, assumed_default in requirements:
        command = negotiate_option(options, name, value, assumed_default)
        if command is not None:
            commands.append(command)
    return commands
