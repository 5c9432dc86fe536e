"""
Scan Pipeline – Photo → Recognizer → Corrected FEN
===================================================

Two independent pipelines sit on either side of the external board
recognizer:

  Pre-processing:
    1. Compression    – downscale / JPEG re-encode large uploads
    2. Bleed removal  – illumination normalisation, grey PNG output

  Post-processing:
    1. Completion     – pad missing FEN fields
    2. Parsing        – reject malformed placements
    3. Orientation    – king score, piece-distribution fallback
    4. Rotation       – 180° when shot from Black's side
    5. Castling       – optimistic rights from back ranks

The recognizer is injected as a plain callable (``bytes → str``) so the
network transport stays outside this package.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional

from chess_scan.config import PostprocessConfig, PreprocessConfig
from chess_scan.errors import RecognitionError
from chess_scan.postprocessing.castling import apply_castling_rights
from chess_scan.postprocessing.fen_utils import (
    complete_fen,
    parse_fen,
    rotate_position,
    validate_placement,
)
from chess_scan.postprocessing.orientation import detect_orientation
from chess_scan.preprocessing.bleed_filter import remove_bleeding
from chess_scan.preprocessing.compress import compress_image, decode_image, encode_image

log = logging.getLogger(__name__)

Recognizer = Callable[[bytes], str]


# ── Result dataclasses ────────────────────────────────────────────────

@dataclass
class PreparedImage:
    """Output of the pre-processing pipeline."""
    data: bytes                     # PNG bytes for the recognizer
    width: int
    height: int
    original_bytes: int             # size of the upload
    compressed_bytes: int           # size after compression / pass-through
    mime_type: str = "image/png"


@dataclass
class CorrectionResult:
    """Output of the post-processing pipeline."""
    fen: str                        # Final 6-field FEN
    raw_fen: str                    # As returned by the recognizer
    completed_fen: str              # After field completion
    flipped: bool                   # Rotation applied
    orientation_method: str         # "king" | "distribution" | "default"
    orientation_score: Optional[float]
    castling: str
    violations: List[str] = field(default_factory=list)

    @property
    def is_plausible(self) -> bool:
        return not self.violations


# ── Free-function pipelines ───────────────────────────────────────────

def prepare_image(data: bytes, config: Optional[PreprocessConfig] = None) -> PreparedImage:
    """Compress an upload and run the bleed-removal filter on it."""
    config = config or PreprocessConfig()

    compressed = compress_image(
        data,
        max_width=config.max_width,
        quality=config.quality,
        passthrough_bytes=config.passthrough_bytes,
    )
    image = decode_image(compressed.data)
    cleaned = remove_bleeding(
        image,
        background_sigma=config.background_sigma,
        denoise_sigma=config.denoise_sigma,
        blend_factor=config.blend_factor,
    )
    png = encode_image(cleaned, "PNG")
    h, w = cleaned.shape[:2]

    log.info("Prepared image  %dx%d  %d bytes", w, h, len(png))
    return PreparedImage(
        data=png,
        width=w,
        height=h,
        original_bytes=len(data),
        compressed_bytes=len(compressed.data),
    )


def correct_position(raw_fen: str, config: Optional[PostprocessConfig] = None) -> CorrectionResult:
    """Turn raw recognizer output into a complete, oriented FEN.

    Raises
    ------
    MalformedPositionError
        If the placement (or any supplied field) cannot be parsed.
    """
    config = config or PostprocessConfig()

    completed = complete_fen(raw_fen.strip())
    position = parse_fen(completed)

    decision = detect_orientation(
        position.squares,
        king_threshold=config.king_score_threshold,
        majority_threshold=config.majority_threshold,
    )
    if decision.flipped:
        position = rotate_position(position)

    position = apply_castling_rights(position)
    _, violations = validate_placement(position.squares)
    if violations:
        log.info("Placement violations (not enforced): %s", violations)

    fen = position.to_fen()
    log.info("Final FEN: %s", fen)
    return CorrectionResult(
        fen=fen,
        raw_fen=raw_fen,
        completed_fen=completed,
        flipped=decision.flipped,
        orientation_method=decision.method,
        orientation_score=decision.score,
        castling=position.castling,
        violations=violations,
    )


def extract_fen(payload: Mapping[str, Any]) -> str:
    """Pull the position out of a ``{"results": [{"fen": ...}]}`` response."""
    results = payload.get("results") or []
    first = results[0] if results else None
    fen = first.get("fen") if isinstance(first, Mapping) else None
    if not fen or not isinstance(fen, str):
        raise RecognitionError("Could not detect board")
    return fen


# ── Pipeline class ─────────────────────────────────────────────────────

class BoardScanPipeline:
    """Photo → corrected FEN, with the recognizer supplied by the caller.

    Parameters
    ----------
    preprocess : PreprocessConfig, optional
        Compression and filter settings.
    postprocess : PostprocessConfig, optional
        Orientation thresholds.
    """

    def __init__(
        self,
        preprocess: Optional[PreprocessConfig] = None,
        postprocess: Optional[PostprocessConfig] = None,
    ) -> None:
        self.preprocess = preprocess or PreprocessConfig()
        self.postprocess = postprocess or PostprocessConfig()

    def prepare(self, data: bytes) -> PreparedImage:
        return prepare_image(data, self.preprocess)

    def correct(self, raw_fen: str) -> CorrectionResult:
        return correct_position(raw_fen, self.postprocess)

    def scan(self, data: bytes, recognizer: Recognizer) -> CorrectionResult:
        """Run both pipelines around *recognizer*.

        Errors from the recognizer propagate unchanged; there is no retry.
        """
        prepared = self.prepare(data)
        raw_fen = recognizer(prepared.data)
        if not raw_fen:
            raise RecognitionError("Recognizer returned no position")
        log.info("Recognizer FEN: %s", raw_fen)
        return self.correct(raw_fen)
