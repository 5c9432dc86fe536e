"""
FEN Utilities – Parsing, Completion & Rotation
===============================================

Responsibilities:
  1. Complete a partial FEN returned by the recognizer (it often sends
     the placement field only) with neutral defaults.
  2. Parse a 6-field FEN into a ``PositionDescriptor`` and serialise it
     back.  Unparseable input raises ``MalformedPositionError``; nothing
     is guessed.
  3. Rotate a placement by 180° for boards photographed from Black's
     side, and toggle the side to move.
  4. Report basic placement sanity issues (king / pawn counts).  These
     are informational only – legality is left to the rules engine.

Placement layout: a flat list of 64 strings in FEN row-major order
(index 0 = a8, 63 = h1).  ``""`` marks an empty square.
"""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from chess_scan.errors import MalformedPositionError

log = logging.getLogger(__name__)


PIECE_CHARS: str = "PNBRQKpnbrqk"
CASTLING_ORDER: str = "KQkq"
NO_CASTLING: str = "-"
NO_EN_PASSANT: str = "-"

# Defaults for fields 2–6, appended in order when missing
DEFAULT_FIELDS: Tuple[str, ...] = ("w", NO_CASTLING, NO_EN_PASSANT, "0", "1")
FEN_FIELD_COUNT: int = 6

_SQUARE_RE = re.compile(r"^[a-h][1-8]$")


# ── Data structures ────────────────────────────────────────────────────

@dataclass
class PositionDescriptor:
    """A fully-shaped chess position."""
    squares: List[str]                   # 64 entries, a8 → h1, "" = empty
    active_color: str = "w"              # "w" | "b"
    castling: str = NO_CASTLING          # subset of "KQkq" or "-"
    en_passant: str = NO_EN_PASSANT      # e.g. "e3" or "-"
    halfmove_clock: int = 0
    fullmove_number: int = 1

    @property
    def placement(self) -> str:
        return squares_to_placement(self.squares)

    def rows(self) -> List[List[str]]:
        """The placement as 8 rows of 8, row 0 = rank 8."""
        return [self.squares[r * 8:(r + 1) * 8] for r in range(8)]

    def copy(self) -> "PositionDescriptor":
        return copy.deepcopy(self)

    def to_fen(self) -> str:
        return " ".join([
            self.placement,
            self.active_color,
            self.castling,
            self.en_passant,
            str(self.halfmove_clock),
            str(self.fullmove_number),
        ])


# ── Completion ─────────────────────────────────────────────────────────

def complete_fen(raw: str) -> str:
    """Fill any missing trailing FEN fields with defaults.

    ``"8/8/8/8/8/2k5/2P5/2K5"`` → ``"8/8/8/8/8/2k5/2P5/2K5 w - - 0 1"``.
    A string that already has all six fields is returned unchanged.
    """
    fields = raw.split()
    if not fields:
        raise MalformedPositionError("Empty position string")
    if len(fields) >= FEN_FIELD_COUNT:
        return raw

    missing = DEFAULT_FIELDS[len(fields) - 1:]
    log.debug("Completing FEN with defaults %s", " ".join(missing))
    return " ".join(fields + list(missing))


# ── Placement (de)serialisation ────────────────────────────────────────

def expand_row(row: str) -> List[str]:
    """Expand one FEN rank (``"r3k2r"``) into 8 square strings."""
    squares: List[str] = []
    for ch in row:
        if ch in "12345678":
            squares.extend([""] * int(ch))
        elif ch in PIECE_CHARS:
            squares.append(ch)
        else:
            raise MalformedPositionError(f"Invalid character {ch!r} in rank {row!r}")
    if len(squares) != 8:
        raise MalformedPositionError(
            f"Rank {row!r} has {len(squares)} squares (expected 8)"
        )
    return squares


def parse_placement(placement: str) -> List[str]:
    """Parse the placement field into the flat 64-square list."""
    rows = placement.split("/")
    if len(rows) != 8:
        raise MalformedPositionError(f"Expected 8 ranks, got {len(rows)}")
    squares: List[str] = []
    for row in rows:
        squares.extend(expand_row(row))
    return squares


def squares_to_placement(squares: List[str]) -> str:
    """Inverse of ``parse_placement``."""
    if len(squares) != 64:
        raise ValueError(f"Expected 64 squares, got {len(squares)}")

    rows: List[str] = []
    for rank_start in range(0, 64, 8):
        row_chars: List[str] = []
        empty_count = 0
        for sq in squares[rank_start:rank_start + 8]:
            if sq == "":
                empty_count += 1
            else:
                if empty_count > 0:
                    row_chars.append(str(empty_count))
                    empty_count = 0
                row_chars.append(sq)
        if empty_count > 0:
            row_chars.append(str(empty_count))
        rows.append("".join(row_chars))

    return "/".join(rows)


def _parse_int(value: str, name: str, minimum: int) -> int:
    if not (value.isascii() and value.isdigit()) or int(value) < minimum:
        raise MalformedPositionError(f"Invalid {name} {value!r}")
    return int(value)


def parse_fen(fen: str) -> PositionDescriptor:
    """Parse a complete 6-field FEN string.

    Call ``complete_fen`` first for recognizer output.

    Raises
    ------
    MalformedPositionError
        On any field that cannot be parsed.
    """
    fields = fen.split()
    if len(fields) != FEN_FIELD_COUNT:
        raise MalformedPositionError(
            f"Expected {FEN_FIELD_COUNT} FEN fields, got {len(fields)}: {fen!r}"
        )
    placement, active, castling, en_passant, halfmove, fullmove = fields

    if active not in ("w", "b"):
        raise MalformedPositionError(f"Invalid active colour {active!r}")

    if castling != NO_CASTLING:
        if (
            any(ch not in CASTLING_ORDER for ch in castling)
            or len(set(castling)) != len(castling)
        ):
            raise MalformedPositionError(f"Invalid castling field {castling!r}")

    if en_passant != NO_EN_PASSANT and not _SQUARE_RE.match(en_passant):
        raise MalformedPositionError(f"Invalid en-passant square {en_passant!r}")

    return PositionDescriptor(
        squares=parse_placement(placement),
        active_color=active,
        castling=castling,
        en_passant=en_passant,
        halfmove_clock=_parse_int(halfmove, "halfmove clock", 0),
        fullmove_number=_parse_int(fullmove, "fullmove number", 1),
    )


# ── Rotation ───────────────────────────────────────────────────────────

def rotate_squares(squares: List[str]) -> List[str]:
    """Rotate the 8×8 grid by 180°.

    Reversing the rank order and the files within each rank is the same
    as reversing the flat a8 → h1 list.
    """
    if len(squares) != 64:
        raise ValueError(f"Expected 64 squares, got {len(squares)}")
    return squares[::-1]


def rotate_square_name(square: str) -> str:
    """``"e3"`` → ``"d6"``; ``"-"`` is returned as is."""
    if square == NO_EN_PASSANT:
        return square
    file_ch, rank_ch = square[0], square[1]
    return chr(ord("h") - (ord(file_ch) - ord("a"))) + str(9 - int(rank_ch))


def rotate_position(
    position: PositionDescriptor, flip_turn: bool = False,
) -> PositionDescriptor:
    """Return a 180°-rotated copy of *position*.

    Rotation is purely geometric: the en-passant square turns with the
    board, but the side to move only changes when *flip_turn* is set.
    Castling is left for re-inference by the caller.
    """
    rotated = position.copy()
    rotated.squares = rotate_squares(position.squares)
    rotated.en_passant = rotate_square_name(position.en_passant)
    if flip_turn:
        rotated.active_color = "b" if position.active_color == "w" else "w"
    return rotated


def rotate_fen(fen: str, flip_turn: bool = False) -> str:
    """Rotate a (possibly partial) FEN string by 180°."""
    return rotate_position(parse_fen(complete_fen(fen)), flip_turn).to_fen()


def toggle_turn(position: PositionDescriptor) -> PositionDescriptor:
    """Return a copy with the side to move swapped."""
    toggled = position.copy()
    toggled.active_color = "b" if position.active_color == "w" else "w"
    return toggled


# ── Validation ─────────────────────────────────────────────────────────

def validate_placement(squares: List[str]) -> Tuple[bool, List[str]]:
    """Check basic plausibility of a placement.

    Returns ``(is_valid, list_of_violation_strings)``.
    """
    violations: List[str] = []

    wk = squares.count("K")
    bk = squares.count("k")
    if wk != 1:
        violations.append(f"White king count = {wk} (expected 1)")
    if bk != 1:
        violations.append(f"Black king count = {bk} (expected 1)")

    wp = squares.count("P")
    bp = squares.count("p")
    if wp > 8:
        violations.append(f"White pawn count = {wp} (max 8)")
    if bp > 8:
        violations.append(f"Black pawn count = {bp} (max 8)")

    back_ranks = squares[:8] + squares[56:]
    if any(sq in ("P", "p") for sq in back_ranks):
        violations.append("Pawn found on rank 1 or 8")

    return len(violations) == 0, violations


def find_piece_row(squares: List[str], piece: str) -> Optional[int]:
    """Row (0 = rank 8) of the first occurrence of *piece*, or None."""
    try:
        return squares.index(piece) // 8
    except ValueError:
        return None
