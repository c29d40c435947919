"""DTW alignment of per-frame feature vectors (MFCCs, embeddings, ...)."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from dtwalign.analysis.distance import (
    cosine_distance_precomputed_magnitudes,
    euclidean_distance,
)
from dtwalign.analysis.dtw import align
from dtwalign.errors import InvalidArgumentError
from dtwalign.util.types import AlignmentResult


DISTANCE_KINDS = ("euclidean", "cosine")


def align_feature_frames(
    frames1,
    frames2,
    window_length: float,
    distance: str = "euclidean",
    center_indexes: Optional[Sequence[int]] = None,
) -> AlignmentResult:
    """Align two frame sequences with windowed DTW.

    Args:
        frames1: Reference frames, shape [T1, D]
        frames2: Source frames, shape [T2, D]
        window_length: Band height in frames (fractional values are floored)
        distance: "euclidean" or "cosine"
        center_indexes: Optional per-frame window centers into frames2

    Returns:
        AlignmentResult from the windowed DTW core
    """
    if distance not in DISTANCE_KINDS:
        raise InvalidArgumentError(f"Invalid distance function: {distance}")

    frames1 = np.asarray(frames1, dtype=np.float64)
    frames2 = np.asarray(frames2, dtype=np.float64)
    # Scalar frames
    if frames1.ndim == 1:
        frames1 = frames1.reshape(-1, 1)
    if frames2.ndim == 1:
        frames2 = frames2.reshape(-1, 1)
    window_length = int(window_length)

    if distance == "euclidean":
        return align(frames1, frames2, euclidean_distance, window_length, center_indexes)

    # Cosine: align frame indexes so each magnitude is computed only once
    magnitudes1 = np.linalg.norm(frames1, axis=1)
    magnitudes2 = np.linalg.norm(frames2, axis=1)

    def cost(i: int, j: int) -> float:
        return cosine_distance_precomputed_magnitudes(
            frames1[i], frames2[j], float(magnitudes1[i]), float(magnitudes2[j])
        )

    return align(range(len(frames1)), range(len(frames2)), cost, window_length, center_indexes)
