"""Tests for optimistic castling-rights inference."""

import pytest

from chess_scan.postprocessing.castling import apply_castling_rights, infer_castling_rights
from chess_scan.postprocessing.fen_utils import parse_fen, parse_placement


@pytest.mark.parametrize("placement, expected", [
    ("r3k2r/8/8/8/8/8/8/R3K2R", "KQkq"),
    ("r3k2r/8/8/8/8/8/8/8", "kq"),
    ("8/8/8/8/8/8/8/R3K2R", "KQ"),
    ("4k2r/8/8/8/8/8/8/R3K3", "Qk"),
    ("r3k3/8/8/8/8/8/8/4K2R", "Kq"),
    ("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR", "KQkq"),
])
def test_rights_from_back_ranks(placement, expected):
    assert infer_castling_rights(parse_placement(placement)) == expected


def test_displaced_king_loses_rights():
    # Rooks on a8/h8 but king on d8
    assert infer_castling_rights(parse_placement("r2k3r/8/8/8/8/8/8/8")) == "-"
    # White king on f1
    assert infer_castling_rights(parse_placement("8/8/8/8/8/8/8/R4K1R")) == "-"


def test_wrong_colour_rook_ignored():
    assert infer_castling_rights(parse_placement("R3k2R/8/8/8/8/8/8/r3K2r")) == "-"


def test_no_kings_yields_no_rights():
    assert infer_castling_rights(parse_placement("8/8/8/8/8/8/8/8")) == "-"


def test_apply_overwrites_existing_field():
    pos = parse_fen("8/8/8/8/8/2k5/2P5/2K5 w KQkq - 0 1")
    updated = apply_castling_rights(pos)
    assert updated.castling == "-"
    assert pos.castling == "KQkq"
