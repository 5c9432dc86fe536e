"""
Orientation Detection
=====================

The recognizer reports the board exactly as photographed.  When the
photo was taken from Black's side, White's pieces appear at the top and
the placement must be rotated 180° before use.

Primary signal – king rows (works in every game phase):
    Rows are indexed 0 (top, rank 8) → 7 (bottom, rank 1).
    ``score = (3.5 − white_king_row) + (black_king_row − 3.5)``, each term
    counted only if that king was found.  ``score > 1.5`` ⇒ flipped.  The
    margin tolerates centralised kings in endgames.

Fallback – piece distribution (only when neither king is found):
    Flipped when White owns > 65 % of the top-half pieces **and** Black
    owns > 65 % of the bottom-half pieces.

When neither signal is conclusive the board is assumed normal.  That is
a policy choice: a wrong default is better than a blocked pipeline, but
it is logged as a warning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from chess_scan.config import KING_SCORE_THRESHOLD, MAJORITY_THRESHOLD
from chess_scan.postprocessing.fen_utils import find_piece_row

log = logging.getLogger(__name__)

CENTRE_ROW: float = 3.5


@dataclass
class OrientationDecision:
    """Outcome of the orientation heuristic."""
    flipped: bool
    method: str                     # "king" | "distribution" | "default"
    score: Optional[float] = None   # king score, when kings were found

    @property
    def inconclusive(self) -> bool:
        return self.method == "default"


def king_score(squares: List[str]) -> Optional[float]:
    """Flip score from king rows, or ``None`` when no king is on the board."""
    white_row = find_piece_row(squares, "K")
    black_row = find_piece_row(squares, "k")
    if white_row is None and black_row is None:
        return None

    score = 0.0
    if white_row is not None:
        score += CENTRE_ROW - white_row   # positive if White's king is on top
    if black_row is not None:
        score += black_row - CENTRE_ROW   # positive if Black's king is below
    return score


def piece_distribution(squares: List[str]) -> Dict[str, int]:
    """Count White / Black pieces in the top and bottom halves."""
    top, bottom = squares[:32], squares[32:]
    return {
        "white_top": sum(1 for sq in top if sq.isupper()),
        "black_top": sum(1 for sq in top if sq.islower()),
        "white_bottom": sum(1 for sq in bottom if sq.isupper()),
        "black_bottom": sum(1 for sq in bottom if sq.islower()),
    }


def _share(part: int, other: int) -> float:
    return part / ((part + other) or 1)


def detect_orientation(
    squares: List[str],
    king_threshold: float = KING_SCORE_THRESHOLD,
    majority_threshold: float = MAJORITY_THRESHOLD,
) -> OrientationDecision:
    """Decide whether the placement was photographed from Black's side."""
    score = king_score(squares)
    if score is not None:
        flipped = score > king_threshold
        log.info("Orientation – king score %.2f → %s", score, "FLIPPED" if flipped else "normal")
        return OrientationDecision(flipped=flipped, method="king", score=score)

    counts = piece_distribution(squares)
    white_on_top = _share(counts["white_top"], counts["black_top"])
    black_below = _share(counts["black_bottom"], counts["white_bottom"])

    if white_on_top > majority_threshold and black_below > majority_threshold:
        log.info(
            "Orientation – piece distribution (%.0f%% / %.0f%%) → FLIPPED",
            white_on_top * 100, black_below * 100,
        )
        return OrientationDecision(flipped=True, method="distribution")

    black_on_top = _share(counts["black_top"], counts["white_top"])
    white_below = _share(counts["white_bottom"], counts["black_bottom"])
    if black_on_top > majority_threshold and white_below > majority_threshold:
        log.info("Orientation – piece distribution → normal")
        return OrientationDecision(flipped=False, method="distribution")

    log.warning(
        "Orientation inconclusive (no kings, counts=%s); assuming normal", counts,
    )
    return OrientationDecision(flipped=False, method="default")


def is_flipped(
    squares: List[str],
    king_threshold: float = KING_SCORE_THRESHOLD,
    majority_threshold: float = MAJORITY_THRESHOLD,
) -> bool:
    return detect_orientation(squares, king_threshold, majority_threshold).flipped
