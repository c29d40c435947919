"""Frame distance functions usable as DTW cost functions."""

from __future__ import annotations

import math

import numpy as np

from dtwalign.errors import InvalidArgumentError


def _as_pair(vector1, vector2):
    a = np.asarray(vector1, dtype=np.float64)
    b = np.asarray(vector2, dtype=np.float64)
    if a.shape != b.shape:
        raise InvalidArgumentError(f"Vectors are not the same length: {a.shape} vs {b.shape}")
    return a, b


def squared_euclidean_distance(vector1, vector2) -> float:
    a, b = _as_pair(vector1, vector2)
    if a.size == 0:
        return 0.0
    d = a - b
    return float(np.dot(d, d))


def euclidean_distance(vector1, vector2) -> float:
    return math.sqrt(squared_euclidean_distance(vector1, vector2))


def magnitude(vector) -> float:
    v = np.asarray(vector, dtype=np.float64)
    return float(np.linalg.norm(v))


def cosine_similarity(vector1, vector2) -> float:
    """Cosine similarity; 0.0 for empty or zero-magnitude vectors."""
    a, b = _as_pair(vector1, vector2)
    if a.size == 0:
        return 0.0
    norm_a = float(np.linalg.norm(a))
    norm_b = float(np.linalg.norm(b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return float(np.dot(a, b) / (norm_a * norm_b))


def cosine_distance(vector1, vector2) -> float:
    return 1.0 - cosine_similarity(vector1, vector2)


def cosine_distance_precomputed_magnitudes(vector1, vector2, magnitude1: float, magnitude2: float) -> float:
    """Cosine distance reusing magnitudes computed once per frame."""
    a, b = _as_pair(vector1, vector2)
    if a.size == 0:
        return 1.0
    similarity = float(np.dot(a, b)) / (magnitude1 * magnitude2 + 1e-40)
    return 1.0 - similarity
