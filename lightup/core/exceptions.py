"""Custom exception hierarchy for the Light-Up engine.

Search outcomes are reported through return values; these exceptions are
reserved for malformed input and misuse of the board API.
"""


class LightUpError(Exception):
    """Base exception for engine failures."""


class BoardFormatError(LightUpError):
    """Raised when a textual board layout cannot be parsed."""


class PlacementError(LightUpError):
    """Raised when a bulb or dot is written to a cell that cannot hold one."""
