"""Windowed dynamic time warping for feature sequence alignment.

This module implements band-limited DTW using:
- A transposed accumulated cost matrix, one band per first-sequence index
- Diagonal-following window placement (or caller-supplied window centers)
- Backtracking over the banded representation with a fixed tie-break order

The computed path is optimal only within the band. Callers that need a
tighter band run several passes, re-centering each pass on the previous one
(see ``dtwalign.pipelines.multipass_pipeline``).
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, List, Optional, Sequence, Tuple

import numpy as np

from dtwalign.errors import InvalidArgumentError
from dtwalign.util.types import AlignmentPathEntry, AlignmentResult


logger = logging.getLogger(__name__)

CostFunction = Callable[[Any, Any], float]


# =============================================================================
# HELPER FUNCTIONS (Core algorithms)
# =============================================================================

def _minimum_of_3(x1: float, x2: float, x3: float) -> float:
    if x1 <= x2 and x1 <= x3:
        return x1
    elif x2 <= x3:
        return x2
    else:
        return x3


def _arg_index_of_minimum_of_3(x1: float, x2: float, x3: float) -> int:
    """Return 1, 2 or 3 for the first minimal argument (ties favor the earlier one)."""
    if x1 <= x2 and x1 <= x3:
        return 1
    elif x2 <= x3:
        return 2
    else:
        return 3


def _compute_window_start(
    column_index: int,
    column_count: int,
    sequence2_length: int,
    row_count: int,
    half_window: int,
    center_indexes: Optional[Sequence[int]] = None,
) -> int:
    """Place the band for one column.

    The first and last columns are pinned to the start and end of sequence2 so
    the path always runs from (0, 0) to (N-1, M-1). Every other column is
    centered on the proportional diagonal, or on ``center_indexes`` if given.
    """
    max_start = sequence2_length - row_count

    if column_index == 0:
        return 0
    if column_index == column_count - 1:
        return max_start

    if center_indexes is None:
        window_center = (column_index * sequence2_length) // column_count
    else:
        window_center = int(center_indexes[column_index])

    return min(max(window_center - half_window, 0), max_start)


def _compute_accumulated_cost_matrix_transposed(
    sequence1: Sequence[Any],
    sequence2: Sequence[Any],
    cost_function: CostFunction,
    window_max_length: int,
    center_indexes: Optional[Sequence[int]] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """Build the banded accumulated cost matrix column by column.

    Returns:
        (matrix, window_start_offsets) - matrix has shape (N, band_height),
        matrix[c, r] is the accumulated cost of absolute cell
        (c, window_start_offsets[c] + r)
    """
    half_window = window_max_length // 2

    column_count = len(sequence1)
    sequence2_length = len(sequence2)
    row_count = min(window_max_length, sequence2_length)

    matrix = np.empty((column_count, row_count), dtype=np.float64)
    window_start_offsets = np.zeros(column_count, dtype=np.int64)

    previous_column: List[float] = []
    previous_window_start = 0

    for column_index in range(column_count):
        window_start = _compute_window_start(
            column_index, column_count, sequence2_length, row_count, half_window, center_indexes
        )
        window_start_offsets[column_index] = window_start

        target = sequence1[column_index]
        column = [0.0] * row_count

        if column_index == 0:
            # First column: only the 'up' neighbor exists
            accumulated = 0.0
            for row_index in range(row_count):
                accumulated += float(cost_function(target, sequence2[window_start + row_index]))
                column[row_index] = accumulated
        else:
            window_offset_delta = window_start - previous_window_start

            for row_index in range(row_count):
                cost = float(cost_function(target, sequence2[window_start + row_index]))

                # 'up' (insertion)
                up_cost = column[row_index - 1] if row_index > 0 else math.inf

                # 'left' (deletion)
                left_row_index = row_index + window_offset_delta
                if 0 <= left_row_index < row_count:
                    left_cost = previous_column[left_row_index]
                else:
                    left_cost = math.inf

                # 'up and left' (match)
                up_and_left_row_index = left_row_index - 1
                if 0 <= up_and_left_row_index < row_count:
                    up_and_left_cost = previous_column[up_and_left_row_index]
                else:
                    up_and_left_cost = math.inf

                column[row_index] = cost + _minimum_of_3(up_cost, left_cost, up_and_left_cost)

        matrix[column_index, :] = column
        previous_column = column
        previous_window_start = window_start

    return matrix, window_start_offsets


def _compute_best_path_transposed(
    matrix: np.ndarray,
    window_start_offsets: np.ndarray,
) -> Tuple[List[AlignmentPathEntry], List[Tuple[int, int]]]:
    """Backtrack from the terminal cell to the origin.

    Returns:
        (path, degenerate_steps) - path ascending in source; degenerate_steps
        lists the (source, dest) cells where no predecessor was finite
    """
    column_count, row_count = matrix.shape

    best_path: List[AlignmentPathEntry] = []
    degenerate_steps: List[Tuple[int, int]] = []

    column_index = column_count - 1
    row_index = row_count - 1

    while column_index > 0 or row_index > 0:
        window_start = int(window_start_offsets[column_index])
        if column_index > 0:
            window_start_delta = window_start - int(window_start_offsets[column_index - 1])
        else:
            window_start_delta = 0

        dest = window_start + row_index
        best_path.append(AlignmentPathEntry(source=column_index, dest=dest))

        up_row_index = row_index - 1
        up_cost = float(matrix[column_index, up_row_index]) if up_row_index >= 0 else math.inf

        left_row_index = row_index + window_start_delta
        left_column_index = column_index - 1
        if left_column_index >= 0 and 0 <= left_row_index < row_count:
            left_cost = float(matrix[left_column_index, left_row_index])
        else:
            left_cost = math.inf

        up_and_left_row_index = left_row_index - 1
        if left_column_index >= 0 and 0 <= up_and_left_row_index < row_count:
            up_and_left_cost = float(matrix[left_column_index, up_and_left_row_index])
        else:
            up_and_left_cost = math.inf

        if up_cost == math.inf and left_cost == math.inf and up_and_left_cost == math.inf:
            logger.debug("No finite predecessor at cell (%d, %d)", column_index, dest)
            degenerate_steps.append((column_index, dest))

            # Keep walking inside the band so the path still terminates
            if row_index > 0:
                row_index = up_row_index
            else:
                column_index = left_column_index
                row_index = min(max(left_row_index, 0), row_count - 1)
            continue

        direction = _arg_index_of_minimum_of_3(up_cost, left_cost, up_and_left_cost)

        if direction == 1:
            row_index = up_row_index
        elif direction == 2:
            row_index = left_row_index
            column_index = left_column_index
        else:
            row_index = up_and_left_row_index
            column_index = left_column_index

    best_path.append(AlignmentPathEntry(source=0, dest=0))
    best_path.reverse()
    degenerate_steps.reverse()

    if degenerate_steps:
        first_source, first_dest = degenerate_steps[0]
        logger.warning(
            "Backtracking found no finite predecessor at %d cell(s), earliest at (%d, %d); "
            "the window is too narrow for this alignment",
            len(degenerate_steps), first_source, first_dest,
        )

    return best_path, degenerate_steps


# =============================================================================
# PUBLIC API
# =============================================================================

def align(
    sequence1: Sequence[Any],
    sequence2: Sequence[Any],
    cost_function: CostFunction,
    window_max_length: int,
    center_indexes: Optional[Sequence[int]] = None,
) -> AlignmentResult:
    """Align two sequences with windowed DTW.

    Args:
        sequence1: First sequence (one matrix column per element)
        sequence2: Second sequence
        cost_function: Pure distance ``f(a, b) -> float``, lower is more similar
        window_max_length: Band height, number of sequence2 indices considered
            per sequence1 index (>= 2)
        center_indexes: Optional per-column window centers into sequence2,
            typically projected from a previous coarser pass

    Returns:
        AlignmentResult with the raw path and the terminal accumulated cost

    Raises:
        InvalidArgumentError: if window_max_length < 2, or center_indexes does
            not have one non-decreasing entry per sequence1 element
    """
    if window_max_length < 2:
        raise InvalidArgumentError(f"Window length must be greater or equal to 2, got {window_max_length}")

    window_max_length = int(window_max_length)

    if len(sequence1) == 0 or len(sequence2) == 0:
        return AlignmentResult(path=[], path_cost=0.0, window_max_length=window_max_length)

    if center_indexes is not None:
        if len(center_indexes) != len(sequence1):
            raise InvalidArgumentError(
                f"Expected {len(sequence1)} center indexes, got {len(center_indexes)}"
            )
        # Windows may only move forward, or backtracking could step back in sequence2
        for index in range(1, len(center_indexes)):
            if center_indexes[index] < center_indexes[index - 1]:
                raise InvalidArgumentError(
                    f"center indexes must be non-decreasing, got {center_indexes[index - 1]} "
                    f"followed by {center_indexes[index]} at index {index}"
                )

    matrix, window_start_offsets = _compute_accumulated_cost_matrix_transposed(
        sequence1, sequence2, cost_function, window_max_length, center_indexes
    )

    path, degenerate_steps = _compute_best_path_transposed(matrix, window_start_offsets)

    # Best path cost is the bottom right element of the matrix
    path_cost = float(matrix[-1, -1])

    band_height = matrix.shape[1]
    if len(sequence1) == 1 and band_height < len(sequence2):
        # A single column's window cannot reach the end of sequence2
        tail = [(0, dest) for dest in range(band_height, len(sequence2))]
        path.extend(AlignmentPathEntry(source=0, dest=dest) for _, dest in tail)
        degenerate_steps.extend(tail)
        path_cost = math.inf
        logger.warning(
            "Single-element sequence1 with a %d-row window cannot reach %d of sequence2's %d elements; "
            "the window is too narrow for this alignment",
            band_height, len(tail), len(sequence2),
        )

    return AlignmentResult(
        path=path,
        path_cost=path_cost,
        degenerate_steps=degenerate_steps,
        window_max_length=window_max_length,
    )


def align_full(
    sequence1: Sequence[Any],
    sequence2: Sequence[Any],
    cost_function: CostFunction,
) -> AlignmentResult:
    """Unbanded DTW: a band covering all of sequence2 in every column."""
    return align(sequence1, sequence2, cost_function, max(2, len(sequence2)))


def get_cost_matrix_memory_size_mb(sequence1_length: int, sequence2_length: int, window_length: float) -> float:
    """Approximate size of the banded cost matrix in megabytes (float64 cells)."""
    return sequence1_length * min(sequence2_length, window_length) * 8 / 1_000_000
