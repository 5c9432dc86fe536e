"""
Chess Board Scan – Main Entry Point
====================================

Commands:

  1. **Clean**        – Compress a photo and run the bleed-removal
                        filter, writing the image sent to the recognizer.
  2. **Correct**      – Complete a raw recognizer FEN, fix its
                        orientation and infer castling rights.
  3. **Rotate**       – Rotate a FEN 180° (fix a wrong scan orientation).
  4. **Toggle-turn**  – Swap the side to move in a FEN.

Usage examples
--------------

**Cleaning**::

    python chess_scan.py clean \\
        --image board.jpg \\
        --output board_clean.png

**Correction**::

    python chess_scan.py correct --fen "8/8/8/8/8/2k5/2P5/2K5"

**Rotation**::

    python chess_scan.py rotate --fen "R3K2R/8/8/8/8/8/8/r3k2r w - - 0 1"
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional

from chess_scan import config
from chess_scan.errors import ChessScanError

log = logging.getLogger("chess_scan")


# ═══════════════════════════════════════════════════════════════════════
# Pre-processing
# ═══════════════════════════════════════════════════════════════════════

def cmd_clean(args: argparse.Namespace) -> None:
    """Run the pre-processing pipeline on an image file."""
    from chess_scan.pipeline import prepare_image

    image_path = Path(args.image)
    if not image_path.is_file():
        log.error("Could not read image: %s", args.image)
        sys.exit(1)

    pre = config.PreprocessConfig(
        max_width=args.max_width,
        quality=args.quality,
        background_sigma=args.background_sigma,
        denoise_sigma=args.denoise_sigma,
        blend_factor=args.blend,
    )
    prepared = prepare_image(image_path.read_bytes(), pre)

    output = Path(args.output)
    output.write_bytes(prepared.data)
    log.info(
        "Saved cleaned image to %s  (%dx%d, %d → %d bytes)",
        output, prepared.width, prepared.height,
        prepared.original_bytes, len(prepared.data),
    )


# ═══════════════════════════════════════════════════════════════════════
# Post-processing
# ═══════════════════════════════════════════════════════════════════════

def cmd_correct(args: argparse.Namespace) -> None:
    """Complete and correct a raw recognizer FEN."""
    from chess_scan.pipeline import correct_position

    post = config.PostprocessConfig(
        king_score_threshold=args.king_threshold,
        majority_threshold=args.majority_threshold,
    )
    result = correct_position(args.fen, post)

    if args.json:
        print(json.dumps(asdict(result), indent=2))
        return

    print("\n" + "=" * 60)
    print("  POSITION CORRECTION RESULT")
    print("=" * 60)
    print(f"  Raw FEN        : {result.raw_fen}")
    print(f"  Final FEN      : {result.fen}")
    score = "" if result.orientation_score is None else f" (score={result.orientation_score:+.2f})"
    print(f"  Orientation    : {'flipped' if result.flipped else 'normal'} "
          f"via {result.orientation_method}{score}")
    print(f"  Castling       : {result.castling}")
    if result.violations:
        print(f"  Violations     : {result.violations}")
    print("=" * 60 + "\n")


def cmd_rotate(args: argparse.Namespace) -> None:
    """Rotate a FEN by 180°."""
    from chess_scan.postprocessing.fen_utils import rotate_fen

    print(rotate_fen(args.fen, flip_turn=args.flip_turn))


def cmd_toggle_turn(args: argparse.Namespace) -> None:
    """Swap the side to move."""
    from chess_scan.postprocessing.fen_utils import complete_fen, parse_fen, toggle_turn

    print(toggle_turn(parse_fen(complete_fen(args.fen))).to_fen())


# ═══════════════════════════════════════════════════════════════════════
# CLI
# ═══════════════════════════════════════════════════════════════════════

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chess_scan",
        description="Photographed chessboard pre/post-processing.",
    )
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", help="Available commands")

    # ── clean ──
    p_clean = sub.add_parser("clean", help="Compress and clean a board photo")
    p_clean.add_argument("--image", required=True, help="Path to input photo")
    p_clean.add_argument("--output", required=True, help="Path for the cleaned PNG")
    p_clean.add_argument("--max-width", type=int, default=config.MAX_WIDTH)
    p_clean.add_argument("--quality", type=float, default=config.JPEG_QUALITY,
                         help="JPEG quality fraction in (0, 1]")
    p_clean.add_argument("--background-sigma", type=float, default=config.BACKGROUND_SIGMA)
    p_clean.add_argument("--denoise-sigma", type=float, default=config.DENOISE_SIGMA)
    p_clean.add_argument("--blend", type=float, default=config.BLEND_FACTOR,
                         help="Weight of the normalised image in [0, 1]")

    # ── correct ──
    p_corr = sub.add_parser("correct", help="Correct a raw recognizer FEN")
    p_corr.add_argument("--fen", required=True, help="Raw FEN (placement only is fine)")
    p_corr.add_argument("--king-threshold", type=float,
                        default=config.KING_SCORE_THRESHOLD)
    p_corr.add_argument("--majority-threshold", type=float,
                        default=config.MAJORITY_THRESHOLD)
    p_corr.add_argument("--json", action="store_true", help="Print JSON output")

    # ── rotate ──
    p_rot = sub.add_parser("rotate", help="Rotate a FEN 180°")
    p_rot.add_argument("--fen", required=True)
    p_rot.add_argument("--flip-turn", action="store_true",
                       help="Also swap the side to move")

    # ── toggle-turn ──
    p_turn = sub.add_parser("toggle-turn", help="Swap the side to move")
    p_turn.add_argument("--fen", required=True)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    dispatch = {
        "clean": cmd_clean,
        "correct": cmd_correct,
        "rotate": cmd_rotate,
        "toggle-turn": cmd_toggle_turn,
    }

    try:
        dispatch[args.command](args)
    except (ChessScanError, ValueError) as exc:
        log.error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
