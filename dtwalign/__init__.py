"""Windowed dynamic time warping for speech and feature sequence alignment."""

from .analysis.dtw import align, align_full, get_cost_matrix_memory_size_mb
from .analysis.features import align_feature_frames
from .analysis.path import compact_path, get_mapped_frame_index
from .errors import DegenerateBandError, DtwAlignError, InvalidArgumentError
from .util.types import AlignmentPathEntry, AlignmentResult, CompactedPathEntry, TimelineEntry

__all__ = [
    "align",
    "align_full",
    "align_feature_frames",
    "compact_path",
    "get_mapped_frame_index",
    "get_cost_matrix_memory_size_mb",
    "AlignmentPathEntry",
    "AlignmentResult",
    "CompactedPathEntry",
    "TimelineEntry",
    "DtwAlignError",
    "DegenerateBandError",
    "InvalidArgumentError",
]
