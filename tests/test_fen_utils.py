"""Tests for FEN completion, parsing and rotation."""

import pytest

from chess_scan.errors import MalformedPositionError
from chess_scan.postprocessing.fen_utils import (
    complete_fen,
    expand_row,
    find_piece_row,
    parse_fen,
    parse_placement,
    rotate_fen,
    rotate_position,
    rotate_square_name,
    rotate_squares,
    squares_to_placement,
    toggle_turn,
    validate_placement,
)

START = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


class TestCompletion:
    """Test filling of missing FEN fields."""

    def test_placement_only(self):
        assert complete_fen("8/8/8/8/8/2k5/2P5/2K5") == "8/8/8/8/8/2k5/2P5/2K5 w - - 0 1"

    def test_four_fields(self):
        assert complete_fen("8/8/8/8/8/2k5/2P5/2K5 b Kq e3") == (
            "8/8/8/8/8/2k5/2P5/2K5 b Kq e3 0 1"
        )

    def test_complete_string_unchanged(self):
        assert complete_fen(START) == START

    def test_completed_string_has_six_fields(self):
        for n in range(1, 7):
            raw = " ".join(START.split()[:n])
            assert len(complete_fen(raw).split()) == 6

    def test_empty_string_rejected(self):
        with pytest.raises(MalformedPositionError):
            complete_fen("   ")


class TestParsing:
    """Test parse_fen and serialisation."""

    def test_start_position(self):
        pos = parse_fen(START)
        assert pos.squares[0] == "r"
        assert pos.squares[4] == "k"
        assert pos.squares[60] == "K"
        assert pos.active_color == "w"
        assert pos.castling == "KQkq"
        assert pos.halfmove_clock == 0
        assert pos.fullmove_number == 1
        assert pos.to_fen() == START

    def test_rows_view(self):
        pos = parse_fen(START)
        rows = pos.rows()
        assert len(rows) == 8
        assert rows[7] == ["R", "N", "B", "Q", "K", "B", "N", "R"]
        assert rows[3] == [""] * 8

    def test_expand_row(self):
        assert expand_row("r3k2r") == ["r", "", "", "", "k", "", "", "r"]

    def test_placement_roundtrip_compresses_empties(self):
        squares = parse_placement("8/8/8/8/8/2k5/2P5/2K5")
        assert squares_to_placement(squares) == "8/8/8/8/8/2k5/2P5/2K5"

    @pytest.mark.parametrize("placement", [
        "8/8/8/8/8/8/8",              # 7 ranks
        "8/8/8/8/8/8/8/8/8",          # 9 ranks
        "8/8/8/8/8/8/8/7",            # short rank
        "8/8/8/8/8/8/8/9",            # bad digit
        "8/8/8/8/8/8/8/ppppppppp",    # long rank
        "8/8/8/8/8/8/8/xxxxxxxx",     # bad piece letter
    ])
    def test_malformed_placement_rejected(self, placement):
        with pytest.raises(MalformedPositionError):
            parse_fen(f"{placement} w - - 0 1")

    @pytest.mark.parametrize("fen", [
        "8/8/8/8/8/8/8/8 x - - 0 1",
        "8/8/8/8/8/8/8/8 w KX - 0 1",
        "8/8/8/8/8/8/8/8 w KK - 0 1",
        "8/8/8/8/8/8/8/8 w - e9 0 1",
        "8/8/8/8/8/8/8/8 w - - -1 1",
        "8/8/8/8/8/8/8/8 w - - 0 0",
        "8/8/8/8/8/8/8/8 w - - 0 1 extra",
        "8/8/8/8/8/8/8/8",
    ])
    def test_malformed_fields_rejected(self, fen):
        with pytest.raises(MalformedPositionError):
            parse_fen(fen)

    def test_malformed_position_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_fen("not a fen at all ok")

    def test_find_piece_row(self):
        squares = parse_placement("8/8/8/8/8/2k5/2P5/2K5")
        assert find_piece_row(squares, "K") == 7
        assert find_piece_row(squares, "k") == 5
        assert find_piece_row(squares, "Q") is None


class TestRotation:
    """Test the 180° rotation transform."""

    def test_rotate_squares_reverses_rows_and_files(self):
        squares = parse_placement("r3k2r/8/8/8/8/8/8/R3K2R")
        rotated = rotate_squares(squares)
        assert squares_to_placement(rotated) == "R2K3R/8/8/8/8/8/8/r2k3r"

    @pytest.mark.parametrize("placement", [
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR",
        "8/8/8/8/8/2k5/2P5/2K5",
        "r1bq1rk1/pp2bppp/2n1pn2/3p4/2PP4/2N2N2/PP2BPPP/R2QKB1R",
        "8/8/8/8/8/8/8/8",
    ])
    def test_rotation_is_involution(self, placement):
        squares = parse_placement(placement)
        assert rotate_squares(rotate_squares(squares)) == squares

    def test_rotation_preserves_pieces(self):
        squares = parse_placement("r1bq1rk1/pp2bppp/2n1pn2/3p4/2PP4/2N2N2/PP2BPPP/R2QKB1R")
        assert sorted(rotate_squares(squares)) == sorted(squares)

    def test_rotation_does_not_mutate_input(self):
        pos = parse_fen(START)
        before = list(pos.squares)
        rotate_position(pos)
        assert pos.squares == before

    def test_rotation_keeps_side_to_move_by_default(self):
        pos = parse_fen("8/8/8/8/8/2k5/2P5/2K5 b - - 3 40")
        rotated = rotate_position(pos)
        assert rotated.active_color == "b"
        assert rotated.halfmove_clock == 3
        assert rotated.fullmove_number == 40

    def test_rotation_with_flip_turn(self):
        pos = parse_fen("8/8/8/8/8/2k5/2P5/2K5 w - - 0 1")
        assert rotate_position(pos, flip_turn=True).active_color == "b"

    def test_en_passant_square_rotates(self):
        assert rotate_square_name("e3") == "d6"
        assert rotate_square_name("a1") == "h8"
        assert rotate_square_name("-") == "-"

    def test_rotate_fen_completes_partial_input(self):
        assert rotate_fen("8/8/8/8/8/2k5/2P5/2K5") == "5K2/5P2/5k2/8/8/8/8/8 w - - 0 1"

    def test_rotate_fen_twice(self):
        fen = "rnbqkbnr/pp1ppppp/8/2p5/4P3/8/PPPP1PPP/RNBQKBNR w KQkq c6 0 2"
        assert rotate_fen(rotate_fen(fen)) == fen


class TestToggleTurn:

    def test_toggle(self):
        pos = parse_fen(START)
        assert toggle_turn(pos).active_color == "b"
        assert toggle_turn(toggle_turn(pos)).active_color == "w"
        assert pos.active_color == "w"


class TestValidation:
    """Test placement sanity checks."""

    def test_start_position_valid(self):
        is_valid, violations = validate_placement(parse_fen(START).squares)
        assert is_valid
        assert violations == []

    def test_missing_king(self):
        is_valid, violations = validate_placement(parse_placement("8/8/8/8/8/8/8/4K3"))
        assert not is_valid
        assert any("Black king" in v for v in violations)

    def test_pawn_on_back_rank(self):
        _, violations = validate_placement(parse_placement("P3k3/8/8/8/8/8/8/4K3"))
        assert "Pawn found on rank 1 or 8" in violations

    def test_too_many_pawns(self):
        _, violations = validate_placement(parse_placement("4k3/pppppppp/p7/8/8/8/8/4K3"))
        assert any("Black pawn count = 9" in v for v in violations)
