"""
Chess Board Scan System
=======================

Turns a photograph of a physical chessboard into an analysis-ready FEN
string.  Board recognition itself is delegated to an external service;
this package owns the two pipelines around it.

Architecture:
    1. Compression        – downscale / JPEG re-encode large uploads
    2. Bleed removal      – background normalisation + denoise (luminance)
    3. Recognition        – external service: image bytes → raw FEN
    4. Completion         – pad missing FEN fields with defaults
    5. Orientation        – detect boards shot from Black's side, rotate
    6. Castling inference – optimistic rights from back-rank placement
"""

__version__ = "1.0.0"
