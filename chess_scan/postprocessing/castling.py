"""
Optimistic castling-rights inference.

The recognizer sees placement only, so move history is unknown.  A side
keeps a castling right whenever its king stands on the e-file of its back
rank and the matching rook stands on the a- or h-file.  Pieces that moved
away and came back are indistinguishable from unmoved ones.
"""

from __future__ import annotations

import logging
from typing import List

from chess_scan.postprocessing.fen_utils import NO_CASTLING, PositionDescriptor

log = logging.getLogger(__name__)

# Flat indices, a8 = 0 … h1 = 63
_BACK_RANKS = {
    # colour: (king, rook, first square of back rank, castling letters)
    "white": ("K", "R", 56, ("K", "Q")),
    "black": ("k", "r", 0, ("k", "q")),
}
_FILE_A, _FILE_E, _FILE_H = 0, 4, 7


def infer_castling_rights(squares: List[str]) -> str:
    """Return the castling field (e.g. ``"KQkq"``) implied by the placement.

    Never fails; returns ``"-"`` when no right qualifies.
    """
    rights = ""
    for king, rook, start, (kingside, queenside) in _BACK_RANKS.values():
        if squares[start + _FILE_E] != king:
            continue
        if squares[start + _FILE_H] == rook:
            rights += kingside
        if squares[start + _FILE_A] == rook:
            rights += queenside
    return rights or NO_CASTLING


def apply_castling_rights(position: PositionDescriptor) -> PositionDescriptor:
    """Return a copy of *position* with the inferred castling field."""
    updated = position.copy()
    updated.castling = infer_castling_rights(position.squares)
    log.debug("Castling rights inferred: %s", updated.castling)
    return updated
