import numpy as np
import pytest

from dtwalign.analysis.distance import (
    cosine_distance,
    cosine_distance_precomputed_magnitudes,
    cosine_similarity,
    euclidean_distance,
    magnitude,
    squared_euclidean_distance,
)
from dtwalign.errors import InvalidArgumentError


class TestEuclidean:
    def test_distance(self):
        assert euclidean_distance([0, 0], [3, 4]) == pytest.approx(5.0)
        assert squared_euclidean_distance([0, 0], [3, 4]) == pytest.approx(25.0)

    def test_accepts_numpy(self):
        assert euclidean_distance(np.array([1.0, 2.0, 3.0]), np.array([1.0, 2.0, 3.0])) == 0.0

    def test_empty_vectors(self):
        assert euclidean_distance([], []) == 0.0

    def test_length_mismatch(self):
        with pytest.raises(InvalidArgumentError, match="same length"):
            euclidean_distance([1, 2], [1, 2, 3])


class TestCosine:
    def test_parallel_and_orthogonal(self):
        assert cosine_similarity([1, 2], [2, 4]) == pytest.approx(1.0)
        assert cosine_similarity([1, 0], [0, 1]) == pytest.approx(0.0)
        assert cosine_distance([1, 0], [0, 1]) == pytest.approx(1.0)
        assert cosine_distance([1, 0], [-1, 0]) == pytest.approx(2.0)

    def test_zero_and_empty_vectors(self):
        assert cosine_similarity([0, 0], [1, 1]) == 0.0
        assert cosine_similarity([], []) == 0.0
        assert cosine_distance([], []) == 1.0

    def test_precomputed_magnitudes(self):
        a, b = [3.0, 4.0], [6.0, 8.0]
        d = cosine_distance_precomputed_magnitudes(a, b, magnitude(a), magnitude(b))
        assert d == pytest.approx(0.0, abs=1e-12)
        assert d == pytest.approx(cosine_distance(a, b), abs=1e-12)

    def test_precomputed_zero_magnitude_is_finite(self):
        assert cosine_distance_precomputed_magnitudes([0, 0], [0, 0], 0.0, 0.0) == 1.0

    def test_length_mismatch(self):
        with pytest.raises(InvalidArgumentError):
            cosine_similarity([1], [1, 2])


def test_magnitude():
    assert magnitude([3, 4]) == pytest.approx(5.0)
    assert magnitude([]) == 0.0
