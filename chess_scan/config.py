"""
Pipeline Configuration
======================

Default tuning values live here as module constants; the two frozen
dataclasses bundle them per pipeline and validate overrides.

The blur sigmas and blend factor were picked empirically.  Changing them
alters visual quality only, never correctness of the FEN stages.
"""

from __future__ import annotations

from dataclasses import dataclass

# ── Pre-processing ─────────────────────────────────────────────────────

MAX_WIDTH: int = 1024               # px, downscale target
JPEG_QUALITY: float = 0.7           # fraction in (0, 1]
PASSTHROUGH_BYTES: int = 300_000    # uploads smaller than this skip re-encode
BACKGROUND_SIGMA: float = 25.0      # illumination estimate blur
DENOISE_SIGMA: float = 2.0          # speckle suppression blur
BLEND_FACTOR: float = 0.5           # weight of the normalised image

# ── Post-processing ────────────────────────────────────────────────────

KING_SCORE_THRESHOLD: float = 1.5   # flip when king score exceeds this
MAJORITY_THRESHOLD: float = 0.65    # piece-distribution fallback


@dataclass(frozen=True)
class PreprocessConfig:
    """Settings for compression and bleed removal."""
    max_width: int = MAX_WIDTH
    quality: float = JPEG_QUALITY
    passthrough_bytes: int = PASSTHROUGH_BYTES
    background_sigma: float = BACKGROUND_SIGMA
    denoise_sigma: float = DENOISE_SIGMA
    blend_factor: float = BLEND_FACTOR

    def __post_init__(self) -> None:
        if self.max_width <= 0:
            raise ValueError(f"max_width must be positive, got {self.max_width}")
        if not 0.0 < self.quality <= 1.0:
            raise ValueError(f"quality must be in (0, 1], got {self.quality}")
        if self.passthrough_bytes < 0:
            raise ValueError(
                f"passthrough_bytes must be non-negative, got {self.passthrough_bytes}"
            )
        if self.background_sigma <= 0 or self.denoise_sigma <= 0:
            raise ValueError("blur sigmas must be positive")
        if not 0.0 <= self.blend_factor <= 1.0:
            raise ValueError(f"blend_factor must be in [0, 1], got {self.blend_factor}")


@dataclass(frozen=True)
class PostprocessConfig:
    """Settings for orientation detection."""
    king_score_threshold: float = KING_SCORE_THRESHOLD
    majority_threshold: float = MAJORITY_THRESHOLD

    def __post_init__(self) -> None:
        if self.king_score_threshold < 0:
            raise ValueError(
                f"king_score_threshold must be non-negative, got {self.king_score_threshold}"
            )
        if not 0.5 <= self.majority_threshold < 1.0:
            raise ValueError(
                f"majority_threshold must be in [0.5, 1), got {self.majority_threshold}"
            )
