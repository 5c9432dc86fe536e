"""Exception types raised by the scan pipelines."""

from __future__ import annotations


class ChessScanError(Exception):
    """Base class for every error raised by ``chess_scan``."""


class DecodeError(ChessScanError, ValueError):
    """Input bytes (or data URL) could not be decoded as an image."""


class MalformedPositionError(ChessScanError, ValueError):
    """A position string could not be parsed."""


class RecognitionError(ChessScanError):
    """The recognizer response did not contain a position."""
