"""Exception types raised by the alignment core and its callers."""

from __future__ import annotations


class DtwAlignError(Exception):
    """Base class for alignment errors."""


class InvalidArgumentError(DtwAlignError, ValueError):
    """An argument was rejected before any computation started.

    Raised for window lengths below 2, mismatched center index arrays,
    unknown distance names and inconsistent multi-pass configurations.
    """


class DegenerateBandError(DtwAlignError):
    """Backtracking hit cells with no finite predecessor.

    The band was too narrow to contain the optimal path. The core never raises
    this itself; callers opt in via ``AlignmentResult.raise_if_degenerate()``
    and typically retry with a larger window.
    """

    def __init__(self, message: str, degenerate_steps=None):
        super().__init__(message)
        self.degenerate_steps = list(degenerate_steps or [])
