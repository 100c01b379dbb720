"""Tests for squares, moves and the algebraic and wire notations."""

from __future__ import annotations

import pytest

from playtak_tei.errors import ParseError
from playtak_tei.moves import (
    Direction,
    PieceType,
    Place,
    Spread,
    algebraic_decode,
    algebraic_encode,
    coords_to_square,
    square_to_coords,
    wire_decode,
    wire_encode,
)


# =============================================================================
# Square Codec
# =============================================================================


class TestSquares:
    """Tests for converting between squares and coordinates."""

    def test_corners(self) -> None:
        assert square_to_coords("a1") == (0, 0)
        assert square_to_coords("h8") == (7, 7)
        assert coords_to_square(0, 0) == "a1"
        assert coords_to_square(7, 7) == "h8"

    def test_uppercase_square(self) -> None:
        assert square_to_coords("C6") == (2, 5)

    @pytest.mark.parametrize("size", range(3, 9))
    def test_every_square_on_board(self, size: int) -> None:
        for x in range(size):
            for y in range(size):
                assert square_to_coords(coords_to_square(x, y)) == (x, y)

    @pytest.mark.parametrize("square", ["", "a", "a10", "i1", "a0", "1a", "??"])
    def test_invalid_squares(self, square: str) -> None:
        with pytest.raises(ParseError):
            square_to_coords(square)

    def test_negative_coordinates(self) -> None:
        with pytest.raises(ValueError):
            coords_to_square(-1, 0)


# =============================================================================
# Move Model
# =============================================================================


class TestMoveModel:
    """Tests for the move union."""

    def test_place_defaults_to_flatstone(self) -> None:
        move = Place(square=(1, 2))
        assert move.kind == "place"
        assert move.piece_type is PieceType.FLATSTONE

    def test_spread_requires_drops(self) -> None:
        with pytest.raises(ValueError):
            Spread(square=(0, 0), direction=Direction.NORTH, drops=[])

    def test_spread_count_and_target(self) -> None:
        move = Spread(square=(1, 1), direction=Direction.EAST, drops=[1, 2, 2])
        assert move.count == 5
        assert move.target() == (4, 1)

    def test_moves_compare_by_value(self) -> None:
        assert Place(square=(0, 0)) == Place(square=(0, 0))
        assert Place(square=(0, 0)) != Place(square=(0, 0), piece_type=PieceType.CAPSTONE)

    @pytest.mark.parametrize("square", [(8, 0), (0, 8), (-1, 0)])
    def test_square_must_be_on_board(self, square: tuple[int, int]) -> None:
        with pytest.raises(ValueError):
            Place(square=square)

    @pytest.mark.parametrize(
        ("square", "direction", "drops"),
        [
            ((0, 0), Direction.NORTH, [10]),
            ((0, 0), Direction.NORTH, [5, 5]),
            ((0, 0), Direction.EAST, [2, 2, 2, 2, 1]),
            ((0, 0), Direction.WEST, [1]),
            ((7, 7), Direction.NORTH, [1]),
            ((0, 0), Direction.EAST, [1] * 8),
        ],
    )
    def test_spread_must_fit_on_board(
        self, square: tuple[int, int], direction: Direction, drops: list[int]
    ) -> None:
        with pytest.raises(ValueError):
            Spread(square=square, direction=direction, drops=drops)

    def test_largest_spread(self) -> None:
        move = Spread(square=(0, 0), direction=Direction.EAST, drops=[1] * 7)
        assert move.count == 7
        assert move.target() == (7, 0)


# =============================================================================
# Algebraic Notation
# =============================================================================


class TestAlgebraicDecode:
    """Tests for parsing algebraic moves from the engine."""

    def test_flat_placement(self) -> None:
        assert algebraic_decode("a1") == Place(square=(0, 0), piece_type=PieceType.FLATSTONE)

    def test_explicit_flat_marker(self) -> None:
        assert algebraic_decode("Fd4") == Place(square=(3, 3))

    def test_standing_stone(self) -> None:
        assert algebraic_decode("Sc5") == Place(
            square=(2, 4), piece_type=PieceType.STANDING_STONE
        )

    def test_capstone(self) -> None:
        assert algebraic_decode("Cc3") == Place(square=(2, 2), piece_type=PieceType.CAPSTONE)

    def test_single_piece_spread(self) -> None:
        assert algebraic_decode("b4+") == Spread(
            square=(1, 3), direction=Direction.NORTH, drops=[1]
        )

    def test_pickup_without_drops(self) -> None:
        assert algebraic_decode("3b4+") == Spread(
            square=(1, 3), direction=Direction.NORTH, drops=[3]
        )

    def test_spread_with_drops(self) -> None:
        assert algebraic_decode("5b2>122") == Spread(
            square=(1, 1), direction=Direction.EAST, drops=[1, 2, 2]
        )

    def test_trailing_marker_ignored(self) -> None:
        assert algebraic_decode("5f2<221*") == Spread(
            square=(5, 1), direction=Direction.WEST, drops=[2, 2, 1]
        )

    def test_south(self) -> None:
        assert algebraic_decode("c3-") == Spread(
            square=(2, 2), direction=Direction.SOUTH, drops=[1]
        )

    @pytest.mark.parametrize(
        "text", ["", "a", "3a", "a1x", "a1=", "z1", "a1+0", "a1<", "h8+", "9a1+", "a9"]
    )
    def test_invalid_moves(self, text: str) -> None:
        with pytest.raises(ParseError):
            algebraic_decode(text)


class TestAlgebraicEncode:
    """Tests for formatting moves for the engine."""

    def test_placements(self) -> None:
        assert algebraic_encode(Place(square=(0, 0))) == "a1"
        assert algebraic_encode(
            Place(square=(2, 4), piece_type=PieceType.STANDING_STONE)
        ) == "Sc5"
        assert algebraic_encode(Place(square=(2, 2), piece_type=PieceType.CAPSTONE)) == "Cc3"

    def test_single_piece_spread_has_no_count(self) -> None:
        move = Spread(square=(1, 3), direction=Direction.NORTH, drops=[1])
        assert algebraic_encode(move) == "b4+"

    def test_single_drop_has_no_drop_digits(self) -> None:
        move = Spread(square=(1, 3), direction=Direction.NORTH, drops=[3])
        assert algebraic_encode(move) == "3b4+"

    def test_multiple_drops(self) -> None:
        move = Spread(square=(5, 1), direction=Direction.WEST, drops=[2, 2, 1])
        assert algebraic_encode(move) == "5f2<221"

    @pytest.mark.parametrize(
        "move",
        [
            Place(square=(4, 4), piece_type=PieceType.CAPSTONE),
            Spread(square=(0, 0), direction=Direction.NORTH, drops=[2]),
            Spread(square=(3, 5), direction=Direction.SOUTH, drops=[1, 1, 3]),
            Spread(square=(0, 0), direction=Direction.NORTH, drops=[8]),
            Spread(square=(0, 7), direction=Direction.EAST, drops=[2, 1, 1, 1, 1, 1, 1]),
        ],
    )
    def test_decode_inverts_encode(self, move: Place | Spread) -> None:
        assert algebraic_decode(algebraic_encode(move)) == move


# =============================================================================
# Wire Notation
# =============================================================================


class TestWireDecode:
    """Tests for parsing PlayTak move lines."""

    def test_flat_placement(self) -> None:
        assert wire_decode("Game#123456 P A1") == Place(square=(0, 0))

    def test_capstone_placement(self) -> None:
        assert wire_decode("Game#123456 P C6 C") == Place(
            square=(2, 5), piece_type=PieceType.CAPSTONE
        )

    def test_wall_placement(self) -> None:
        assert wire_decode("Game#1 P D2 W") == Place(
            square=(3, 1), piece_type=PieceType.STANDING_STONE
        )

    def test_spread_east(self) -> None:
        assert wire_decode("Game#123456 M B4 F4 2 1 2 1") == Spread(
            square=(1, 3), direction=Direction.EAST, drops=[2, 1, 2, 1]
        )

    @pytest.mark.parametrize(
        ("line", "direction"),
        [
            ("Game#1 M C3 C4 1", Direction.NORTH),
            ("Game#1 M C3 C1 1 1", Direction.SOUTH),
            ("Game#1 M C3 A3 1 1", Direction.WEST),
        ],
    )
    def test_direction_from_squares(self, line: str, direction: Direction) -> None:
        move = wire_decode(line)
        assert isinstance(move, Spread)
        assert move.direction is direction

    @pytest.mark.parametrize(
        "line",
        [
            "Game#1 P",
            "Game#1 P A1 X",
            "Game#1 M A1 B2 1",
            "Game#1 M A1 A1 1",
            "Game#1 M A1 A2",
            "Game#1 M A1 A2 x",
            "Game#1 M A1 A2 0",
            "Game#1 M A1 A2 9",
            "Game#1 M A1 A3 5 5",
            "Game#1 P A9",
            "Game#1 Q A1",
        ],
    )
    def test_invalid_lines(self, line: str) -> None:
        with pytest.raises(ParseError):
            wire_decode(line)


class TestWireEncode:
    """Tests for formatting moves for the server."""

    def test_flat_placement(self) -> None:
        assert wire_encode(Place(square=(0, 0)), 123456) == "Game#123456 P A1\n"

    def test_capstone_placement(self) -> None:
        move = Place(square=(2, 5), piece_type=PieceType.CAPSTONE)
        assert wire_encode(move, 123456) == "Game#123456 P C6 C\n"

    def test_wall_placement(self) -> None:
        move = Place(square=(3, 1), piece_type=PieceType.STANDING_STONE)
        assert wire_encode(move, 7) == "Game#7 P D2 W\n"

    def test_spread_destination(self) -> None:
        move = Spread(square=(1, 3), direction=Direction.EAST, drops=[2, 1, 2, 1])
        assert wire_encode(move, 123456) == "Game#123456 M B4 F4 2 1 2 1\n"

    def test_spread_south(self) -> None:
        move = Spread(square=(2, 2), direction=Direction.SOUTH, drops=[1, 1])
        assert wire_encode(move, 5) == "Game#5 M C3 C1 1 1\n"

    @pytest.mark.parametrize(
        "move",
        [
            Place(square=(4, 0), piece_type=PieceType.STANDING_STONE),
            Spread(square=(5, 5), direction=Direction.WEST, drops=[3, 1]),
        ],
    )
    def test_decode_inverts_encode(self, move: Place | Spread) -> None:
        assert wire_decode(wire_encode(move, 99)) == move
