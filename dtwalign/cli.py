"""dtwalign CLI - Command-line interface for windowed DTW alignment.

Primary Commands:
  - align: Align two feature files with a single windowed DTW pass
  - plan: Run the coarse-to-fine multi-pass pipeline over two feature files
  - memory: Estimate the cost matrix memory size for given lengths and window
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import numpy as np
import typer
from rich import print
from rich.table import Table

from .analysis.dtw import get_cost_matrix_memory_size_mb
from .analysis.features import align_feature_frames
from .analysis.path import compact_path
from .config import DEFAULT_WINDOW_LENGTH, DEFAULT_WINDOW_DURATIONS, LOG_LEVEL, parse_durations
from .errors import InvalidArgumentError
from .pipelines.multipass_pipeline import FeaturePass, MultiPassAlignmentConfig, MultiPassAlignmentPipeline


logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = typer.Typer(add_completion=False, no_args_is_help=True)


def load_feature_frames(path: str) -> np.ndarray:
	"""Load feature frames [T, D] from .npy, .csv/.txt or .json."""
	p = Path(path)
	if not p.is_file():
		raise FileNotFoundError(f"Feature file not found: {path}")
	ext = p.suffix.lower().lstrip(".")
	if ext == "npy":
		frames = np.load(p)
	elif ext in ("csv", "txt"):
		frames = np.loadtxt(p, delimiter="," if ext == "csv" else None, ndmin=2)
	elif ext == "json":
		frames = np.asarray(json.loads(p.read_text(encoding="utf-8")), dtype=np.float64)
	else:
		raise typer.BadParameter(f"Unsupported extension: {ext}")
	frames = np.asarray(frames, dtype=np.float64)
	if frames.ndim == 1:
		frames = frames.reshape(-1, 1)
	if frames.ndim != 2:
		raise typer.BadParameter(f"Expected a 2-D frame array in {path}, got shape {frames.shape}")
	return frames


def _parse_durations(value: str) -> list[float]:
	try:
		return parse_durations(value)
	except ValueError:
		raise typer.BadParameter(f"Invalid window durations: {value}")


def _write_or_print(result: dict, out: str | None) -> None:
	if out:
		Path(out).write_text(json.dumps(result, indent=2), encoding="utf-8")
		print(f"[green]Wrote[/green] {out}")
	else:
		typer.echo(json.dumps(result, indent=2))


@app.command(name="align")
def align_cmd(
	file_a: str = typer.Argument(..., help="Reference feature file (.npy/.csv/.txt/.json)"),
	file_b: str = typer.Argument(..., help="Source feature file (.npy/.csv/.txt/.json)"),
	window: int = typer.Option(DEFAULT_WINDOW_LENGTH, help="Window max length in frames (>= 2)"),
	distance: str = typer.Option("euclidean", help="Frame distance: euclidean or cosine"),
	compact: bool = typer.Option(True, help="Include the compacted path in the output"),
	show_limit: int = typer.Option(20, help="Max compacted path rows to show (0 to hide)"),
	out: str | None = typer.Option(None, help="Write JSON result to this file"),
) -> None:
	"""Align two feature sequences with a single windowed DTW pass."""
	frames_a = load_feature_frames(file_a)
	frames_b = load_feature_frames(file_b)

	print(f"[green]Loaded:[/green] {len(frames_a)} frames from A, {len(frames_b)} frames from B")
	print(f"[blue]Running windowed DTW (window={window}, distance={distance})...[/blue]")

	try:
		result = align_feature_frames(frames_a, frames_b, window, distance=distance)
	except InvalidArgumentError as e:
		raise typer.BadParameter(str(e))

	compacted = compact_path(result.path)

	if result.is_degenerate:
		print(f"[yellow]Warning:[/yellow] window too narrow, {len(result.degenerate_steps)} degenerate backtracking steps")

	if show_limit > 0 and compacted:
		table = Table(title=f"Compacted path (showing {min(show_limit, len(compacted))} of {len(compacted)})")
		table.add_column("source", justify="right")
		table.add_column("first", justify="right")
		table.add_column("last", justify="right")
		for i, entry in enumerate(compacted[:show_limit]):
			table.add_row(str(i), str(entry.first), str(entry.last))
		print(table)

	output = {
		"file_a": file_a,
		"file_b": file_b,
		"window": window,
		"distance": distance,
		"path_cost": result.path_cost,
		"path_length": len(result.path),
		"degenerate_steps": len(result.degenerate_steps),
		"path": [[e.source, e.dest] for e in result.path],
	}
	if compact:
		output["compacted_path"] = [[e.first, e.last] for e in compacted]

	_write_or_print(output, out)


@app.command(name="plan")
def plan_cmd(
	file_a: str = typer.Argument(..., help="Reference feature file (.npy/.csv/.txt/.json)"),
	file_b: str = typer.Argument(..., help="Source feature file (.npy/.csv/.txt/.json)"),
	fps: float = typer.Option(..., help="Feature frames per second"),
	durations: str = typer.Option(",".join(str(d) for d in DEFAULT_WINDOW_DURATIONS), help="Comma-separated window durations in seconds, one per pass"),
	distance: str = typer.Option("euclidean", help="Frame distance: euclidean or cosine"),
	out: str | None = typer.Option(None, help="Write JSON result to this file"),
) -> None:
	"""Run coarse-to-fine multi-pass alignment over one pair of feature files."""
	frames_a = load_feature_frames(file_a)
	frames_b = load_feature_frames(file_b)
	window_durations = _parse_durations(durations)

	passes = [FeaturePass(reference_frames=frames_a, source_frames=frames_b, frames_per_second=fps) for _ in window_durations]
	config = MultiPassAlignmentConfig(window_durations=window_durations, distance=distance)

	try:
		result = MultiPassAlignmentPipeline(config).run(passes)
	except InvalidArgumentError as e:
		raise typer.BadParameter(str(e))

	_write_or_print(result.to_dict(), out)


@app.command(name="memory")
def memory_cmd(
	length_a: int = typer.Argument(..., help="Length of the first sequence"),
	length_b: int = typer.Argument(..., help="Length of the second sequence"),
	window: int = typer.Argument(..., help="Window max length in frames"),
) -> None:
	"""Estimate the banded cost matrix memory size."""
	size_mb = get_cost_matrix_memory_size_mb(length_a, length_b, window)
	print(f"DTW cost matrix memory size: [cyan]{size_mb:.1f}MB[/cyan]")


if __name__ == "__main__":
	app()
