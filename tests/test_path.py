import pytest

from dtwalign.analysis.dtw import align
from dtwalign.analysis.path import (
    compact_path,
    compute_relative_centers,
    get_mapped_frame_index,
    project_center_indexes,
)
from dtwalign.errors import InvalidArgumentError
from dtwalign.util.types import AlignmentPathEntry, CompactedPathEntry


def abs_cost(a, b):
    return abs(a - b)


class TestCompactPath:
    def test_compacts_raw_path(self):
        path = [AlignmentPathEntry(0, 0), AlignmentPathEntry(0, 1), AlignmentPathEntry(1, 2),
                AlignmentPathEntry(2, 3), AlignmentPathEntry(2, 4)]
        assert compact_path(path) == [
            CompactedPathEntry(0, 1),
            CompactedPathEntry(2, 2),
            CompactedPathEntry(3, 4),
        ]

    def test_accepts_tuples(self):
        path = [(0, 0), (1, 0), (1, 1), (1, 2), (2, 3)]
        assert compact_path(path) == [
            CompactedPathEntry(0, 0),
            CompactedPathEntry(0, 2),
            CompactedPathEntry(3, 3),
        ]

    def test_empty_path(self):
        assert compact_path([]) == []

    def test_compacted_ranges_cover_align_output(self):
        seq1 = [0, 1, 1, 2, 3, 5, 8, 13]
        seq2 = [0, 0, 1, 2, 2, 3, 4, 5, 7, 8, 9, 12, 13]
        result = align(seq1, seq2, abs_cost, 5)
        compacted = compact_path(result.path)

        assert len(compacted) == len(seq1)
        for i, entry in enumerate(compacted):
            dests = [e.dest for e in result.path if e.source == i]
            assert entry.first <= entry.last
            assert entry.first in dests
            assert entry.last in dests
            assert entry.first == dests[0]
            assert entry.last == dests[-1]

        for previous, current in zip(compacted, compacted[1:]):
            assert current.first >= previous.last


class TestMappedFrameIndex:
    compacted = [CompactedPathEntry(0, 1), CompactedPathEntry(2, 2), CompactedPathEntry(3, 4)]

    def test_first_and_last(self):
        assert get_mapped_frame_index(0, self.compacted) == 0
        assert get_mapped_frame_index(0, self.compacted, "last") == 1
        assert get_mapped_frame_index(2, self.compacted, "last") == 4

    def test_clamps_out_of_range(self):
        assert get_mapped_frame_index(-5, self.compacted) == 0
        assert get_mapped_frame_index(100, self.compacted) == 3

    def test_empty_path_maps_to_zero(self):
        assert get_mapped_frame_index(7, []) == 0

    def test_unknown_kind(self):
        with pytest.raises(InvalidArgumentError):
            get_mapped_frame_index(0, self.compacted, "middle")


class TestCenterProjection:
    def test_relative_centers(self):
        compacted = [CompactedPathEntry(0, 2), CompactedPathEntry(4, 4), CompactedPathEntry(6, 8)]
        assert compute_relative_centers(compacted, 8) == [0.125, 0.5, 0.875]

    def test_relative_centers_empty_dest(self):
        assert compute_relative_centers([CompactedPathEntry(0, 0)], 0) == []

    def test_project_center_indexes(self):
        assert project_center_indexes([0.25, 0.75], 4, 8) == [2, 2, 6, 6]

    def test_project_upsamples_previous_pass(self):
        centers = project_center_indexes([0.0, 0.5], 6, 10)
        assert len(centers) == 6
        assert centers[0] == 0
        assert centers[-1] == 5
        assert all(b >= a for a, b in zip(centers, centers[1:]))

    def test_project_empty(self):
        assert project_center_indexes([], 5, 10) == []
