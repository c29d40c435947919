"""Coarse-to-fine multi-pass DTW alignment pipeline.

This pipeline takes precomputed feature frames for one or more granularities,
aligns them with windowed DTW pass by pass, and re-centers each pass's window
on the alignment found by the previous pass. The final compacted path can be
used to map timelines from the reference timebase to the source timebase.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table

from ..analysis.dtw import get_cost_matrix_memory_size_mb
from ..analysis.features import DISTANCE_KINDS, align_feature_frames
from ..analysis.path import (
    compact_path,
    compute_relative_centers,
    get_mapped_frame_index,
    project_center_indexes,
)
from ..config import DEFAULT_WINDOW_DURATIONS, MIN_RECOMMENDED_WINDOW_RATIO
from ..errors import InvalidArgumentError
from ..util.types import CompactedPathEntry, TimelineEntry


logger = logging.getLogger(__name__)


@dataclass
class MultiPassAlignmentConfig:
    """Configuration for the multi-pass alignment pipeline."""
    window_durations: List[float] = field(default_factory=lambda: list(DEFAULT_WINDOW_DURATIONS))
    distance: str = "euclidean"  # euclidean, cosine
    min_window_ratio: float = MIN_RECOMMENDED_WINDOW_RATIO
    verbose: bool = True


@dataclass
class FeaturePass:
    """Feature frames of both recordings at one granularity."""
    reference_frames: Any  # [T_ref, D]
    source_frames: Any     # [T_src, D]
    frames_per_second: float


@dataclass
class PassResult:
    """Summary of one alignment pass."""
    pass_index: int
    window_duration: float
    window_length: int
    frames_per_second: float
    reference_frame_count: int
    source_frame_count: int
    path_length: int
    path_cost: float
    memory_mb: float
    degenerate_steps: int
    recentered: bool
    elapsed_seconds: float


@dataclass
class MultiPassResult:
    """Result of the complete pass loop."""
    compacted_path: List[CompactedPathEntry]
    frames_per_second: float
    passes: List[PassResult]
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frames_per_second": self.frames_per_second,
            "compacted_path": [[e.first, e.last] for e in self.compacted_path],
            "passes": [vars(p) for p in self.passes],
            "warnings": list(self.warnings),
        }


class MultiPassAlignmentPipeline:
    """Pipeline running windowed DTW over successively finer feature passes."""

    def __init__(self, config: MultiPassAlignmentConfig, console: Optional[Console] = None):
        self.config = config
        self.console = console or Console()
        self.metadata: Dict[str, Any] = {}

    def run(self, passes: List[FeaturePass]) -> MultiPassResult:
        """Run every pass and return the final compacted path."""
        self._validate(passes)

        start_time = time.time()
        warnings: List[str] = []
        pass_results: List[PassResult] = []

        compacted_path: List[CompactedPathEntry] = []
        relative_centers: Optional[List[float]] = None
        frames_per_second = passes[0].frames_per_second

        try:
            for pass_index, (feature_pass, window_duration) in enumerate(zip(passes, self.config.window_durations)):
                frames_per_second = feature_pass.frames_per_second
                reference_count = len(feature_pass.reference_frames)
                source_count = len(feature_pass.source_frames)
                source_duration = source_count / frames_per_second

                share = (window_duration / source_duration * 100) if source_duration > 0 else 100.0
                self._log_progress(
                    f"Starting alignment pass {pass_index + 1}/{len(passes)} "
                    f"(max window duration: {window_duration}s, {share:.1f}%)"
                )

                if pass_index == 0:
                    min_duration = self.config.min_window_ratio * source_duration
                    if window_duration < min_duration:
                        message = (
                            f"Maximum DTW window duration is set to {window_duration:.1f}s ({share:.1f}%), "
                            f"which is less than {self.config.min_window_ratio * 100:.0f}% of the source "
                            f"duration ({source_duration:.1f}s). This may lead to suboptimal results; "
                            f"consider increasing the window duration."
                        )
                        warnings.append(message)
                        self._log_warning(message)

                window_length = math.floor(window_duration * frames_per_second)
                memory_mb = get_cost_matrix_memory_size_mb(reference_count, source_count, window_length)
                logger.info("Pass %d: DTW cost matrix memory size %.1fMB", pass_index + 1, memory_mb)

                center_indexes = None
                if relative_centers:
                    center_indexes = project_center_indexes(relative_centers, reference_count, source_count) or None

                pass_start = time.time()
                result = align_feature_frames(
                    feature_pass.reference_frames,
                    feature_pass.source_frames,
                    window_length,
                    distance=self.config.distance,
                    center_indexes=center_indexes,
                )
                compacted_path = compact_path(result.path)
                relative_centers = compute_relative_centers(compacted_path, source_count)

                if result.is_degenerate:
                    message = (
                        f"Pass {pass_index + 1}: window of {window_length} frames was too narrow "
                        f"({len(result.degenerate_steps)} degenerate backtracking steps)"
                    )
                    warnings.append(message)
                    self._log_warning(message)

                pass_results.append(PassResult(
                    pass_index=pass_index,
                    window_duration=window_duration,
                    window_length=window_length,
                    frames_per_second=frames_per_second,
                    reference_frame_count=reference_count,
                    source_frame_count=source_count,
                    path_length=len(result.path),
                    path_cost=result.path_cost,
                    memory_mb=round(memory_mb, 3),
                    degenerate_steps=len(result.degenerate_steps),
                    recentered=center_indexes is not None,
                    elapsed_seconds=round(time.time() - pass_start, 3),
                ))

        except Exception as e:
            self._log_error(f"Pipeline failed: {str(e)}")
            raise

        self.metadata["processing_time"] = round(time.time() - start_time, 3)
        self.metadata["num_passes"] = len(pass_results)

        output = MultiPassResult(
            compacted_path=compacted_path,
            frames_per_second=frames_per_second,
            passes=pass_results,
            warnings=warnings,
        )

        if self.config.verbose:
            self._output_table(output)

        return output

    def _validate(self, passes: List[FeaturePass]) -> None:
        durations = self.config.window_durations
        if len(durations) == 0:
            raise InvalidArgumentError("Window durations array has length 0.")
        if len(durations) != len(passes):
            raise InvalidArgumentError(
                f"Window durations ({len(durations)}) and feature passes ({len(passes)}) are not the same length."
            )
        if self.config.distance not in DISTANCE_KINDS:
            raise InvalidArgumentError(f"Invalid distance function: {self.config.distance}")
        for feature_pass in passes:
            if feature_pass.frames_per_second <= 0:
                raise InvalidArgumentError(f"Frames per second must be positive, got {feature_pass.frames_per_second}")

    def _log_progress(self, message: str) -> None:
        """Log progress message."""
        logger.info(message)
        if self.console and self.config.verbose:
            self.console.print(f"[blue]{message}[/blue]")

    def _log_warning(self, message: str) -> None:
        logger.warning(message)
        if self.console and self.config.verbose:
            self.console.print(f"[yellow]Warning:[/yellow] {message}")

    def _log_error(self, message: str) -> None:
        """Log error message."""
        logger.error(message)
        if self.console:
            self.console.print(f"[red]{message}[/red]")

    def _output_table(self, result: MultiPassResult) -> None:
        table = Table(title="DTW Alignment Passes")
        table.add_column("Pass", justify="right")
        table.add_column("Window", style="cyan")
        table.add_column("Frames (ref/src)", justify="right")
        table.add_column("Path cost", style="green", justify="right")
        table.add_column("Memory", justify="right")
        table.add_column("Status")

        for p in result.passes:
            status = "✓" if p.degenerate_steps == 0 else f"✗ {p.degenerate_steps} degenerate"
            table.add_row(
                str(p.pass_index + 1),
                f"{p.window_duration}s ({p.window_length} frames)",
                f"{p.reference_frame_count}/{p.source_frame_count}",
                f"{p.path_cost:.3f}",
                f"{p.memory_mb:.1f}MB",
                status,
            )

        self.console.print(table)


def map_timeline(
    timeline: List[TimelineEntry],
    compacted_path: List[CompactedPathEntry],
    frames_per_second: float,
) -> List[TimelineEntry]:
    """Map timeline entries from the reference timebase to the source timebase.

    Start and end times are converted to frame indices, looked up through the
    compacted path (clamped to its range) and converted back to seconds.
    Nested entries are mapped recursively.
    """
    return [_map_timeline_entry(entry, compacted_path, frames_per_second) for entry in timeline]


def _map_timeline_entry(
    entry: TimelineEntry,
    compacted_path: List[CompactedPathEntry],
    frames_per_second: float,
) -> TimelineEntry:
    start_frame = math.floor(entry.start_time * frames_per_second)
    end_frame = math.floor(entry.end_time * frames_per_second)

    if start_frame < 0 or end_frame < 0:
        raise InvalidArgumentError("Encountered a negative timestamp in timeline")

    mapped_start = get_mapped_frame_index(start_frame, compacted_path, "first") / frames_per_second
    mapped_end = get_mapped_frame_index(end_frame, compacted_path, "first") / frames_per_second

    inner = None
    if entry.timeline is not None:
        inner = [_map_timeline_entry(e, compacted_path, frames_per_second) for e in entry.timeline]

    return TimelineEntry(
        type=entry.type,
        text=entry.text,
        start_time=mapped_start,
        end_time=max(mapped_end, mapped_start),
        timeline=inner,
    )
