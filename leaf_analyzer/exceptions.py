# leaf_analyzer/exceptions.py
"""Errors raised by the leaf analysis engine and its vision collaborator."""


class LeafAnalyzerError(Exception):
    """Base class for all leaf analyzer failures."""


class InvalidLabelError(LeafAnalyzerError, ValueError):
    """A label handed to the engine is malformed (missing description, missing or out-of-range score)."""


class VisionProviderError(LeafAnalyzerError):
    """The vision provider could not be reached or reported a failure."""


class UnreadableImageError(LeafAnalyzerError):
    """The uploaded bytes could not be decoded as an image."""
