"""Core data types for the dtwalign alignment core.

This module defines the path and result structures passed between the
cost-matrix builder, the backtracker, the compactor and the pass loop.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..errors import DegenerateBandError


@dataclass(frozen=True)
class AlignmentPathEntry:
    """One traversed cell of a raw alignment path.

    Attributes:
        source: Index into the first sequence
        dest: Index into the second sequence
    """
    source: int
    dest: int


@dataclass
class CompactedPathEntry:
    """Inclusive range of destination indices matched to one source index.

    Invariant: first <= last
    """
    first: int
    last: int


@dataclass
class AlignmentResult:
    """Result of a single windowed DTW call.

    Attributes:
        path: Raw alignment path, ascending in source from (0, 0) to (N-1, M-1)
        path_cost: Accumulated cost of the terminal cell
        degenerate_steps: (source, dest) cells where backtracking found no
            finite predecessor; empty for a healthy band
        window_max_length: Band height requested by the caller
    """
    path: List[AlignmentPathEntry]
    path_cost: float
    degenerate_steps: List[Tuple[int, int]] = field(default_factory=list)
    window_max_length: Optional[int] = None

    @property
    def is_degenerate(self) -> bool:
        return len(self.degenerate_steps) > 0

    def raise_if_degenerate(self) -> None:
        """Raise DegenerateBandError if backtracking left the reachable band."""
        if self.degenerate_steps:
            raise DegenerateBandError(
                f"Window of length {self.window_max_length} was too narrow: "
                f"{len(self.degenerate_steps)} backtracking step(s) had no finite predecessor",
                self.degenerate_steps,
            )


@dataclass
class TimelineEntry:
    """A timed segment (word, phone, sentence) that can be mapped through a path.

    Attributes:
        type: Segment kind, e.g. "word" or "phone"
        text: Segment text
        start_time: Start in seconds
        end_time: End in seconds
        timeline: Optional nested entries (e.g. phones of a word)
    """
    type: str
    text: str
    start_time: float
    end_time: float
    timeline: Optional[List["TimelineEntry"]] = None
