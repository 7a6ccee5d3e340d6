"""Exceptions raised by alphadigest.

Only fatal conditions are exceptions. Cancellation and windows exceeding the
ambiguity budget are regular outcomes of the iterators, not errors.
"""


class DigestionError(Exception):
    """Base class for all alphadigest errors."""


class ConfigurationError(DigestionError, ValueError):
    """Invalid digestion or modification configuration.

    Raised when an iterator or a registry is constructed, never mid-scan.
    """


class UnsupportedResidueError(DigestionError, ValueError):
    """A residue code that is neither concrete nor a known combination."""

    def __init__(self, residue: str, index: int = -1):
        self.residue = residue
        self.index = index
        if index >= 0:
            message = f"Unsupported residue {residue!r} at index {index}"
        else:
            message = f"Unsupported residue {residue!r}"
        super().__init__(message)
