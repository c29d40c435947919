"""Alignment path compaction and frame index lookup.

A raw DTW path lists every traversed cell. Timeline mapping only needs, for
each source index, the range of destination indices it was matched to; this
module produces that compacted form and answers lookups against it.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Sequence, Tuple, Union

from dtwalign.errors import InvalidArgumentError
from dtwalign.util.types import AlignmentPathEntry, CompactedPathEntry


PathEntryLike = Union[AlignmentPathEntry, Tuple[int, int]]


def _as_source_dest(entry: PathEntryLike) -> Tuple[int, int]:
    if isinstance(entry, AlignmentPathEntry):
        return entry.source, entry.dest
    source, dest = entry
    return int(source), int(dest)


def compact_path(path: Iterable[PathEntryLike]) -> List[CompactedPathEntry]:
    """Collapse a raw path into one {first, last} range per source index.

    The path must be ordered by non-decreasing source with source advancing by
    at most one per step, which is what ``align`` produces. A new entry is
    opened whenever a source index is seen for the first time; otherwise the
    last entry's ``last`` is moved to the current dest.
    """
    compacted_path: List[CompactedPathEntry] = []

    for entry in path:
        source, dest = _as_source_dest(entry)

        if len(compacted_path) <= source:
            compacted_path.append(CompactedPathEntry(first=dest, last=dest))
        else:
            compacted_path[-1].last = dest

    return compacted_path


def get_mapped_frame_index(
    reference_frame_index: int,
    compacted_path: Sequence[CompactedPathEntry],
    kind: str = "first",
) -> int:
    """Map a source frame index to a destination frame index.

    Out-of-range indices are clamped to the nearest compacted entry. An empty
    path maps everything to 0.
    """
    if kind not in ("first", "last"):
        raise InvalidArgumentError(f"Unknown mapping kind: {kind}")

    if len(compacted_path) == 0:
        return 0

    index = min(max(int(reference_frame_index), 0), len(compacted_path) - 1)
    entry = compacted_path[index]

    return entry.first if kind == "first" else entry.last


def compute_relative_centers(
    compacted_path: Sequence[CompactedPathEntry],
    dest_length: int,
) -> List[float]:
    """Midpoint of each compacted range as a fraction of the destination length."""
    if dest_length <= 0:
        return []
    return [(entry.first + entry.last) / 2 / dest_length for entry in compacted_path]


def project_center_indexes(
    relative_centers: Sequence[float],
    source_length: int,
    dest_length: int,
) -> List[int]:
    """Project relative centers from a previous pass onto a new frame grid.

    Used between coarse-to-fine passes: each new source index picks the
    relative center at the same proportional position and scales it to the
    new destination length.
    """
    if not relative_centers:
        return []

    center_indexes: List[int] = []
    for i in range(source_length):
        relative_position = i / source_length
        relative_center = relative_centers[math.floor(relative_position * len(relative_centers))]
        center_indexes.append(math.floor(relative_center * dest_length))

    return center_indexes
