"""Project-level defaults for window sizes and logging.

Defaults can be overridden via environment variables:
- DTWALIGN_WINDOW_LENGTH: default band height in frames for single-pass alignment
- DTWALIGN_WINDOW_DURATIONS: comma-separated per-pass window durations in seconds
- DTWALIGN_LOG_LEVEL: logging level name used by the CLI (defaults to INFO)
"""

import os
from typing import Final, List


def parse_durations(value: str) -> List[float]:
	"""Parse a comma-separated list of seconds, ignoring empty items."""
	return [float(item) for item in value.split(",") if item.strip()]


DEFAULT_WINDOW_LENGTH: Final[int] = int(os.getenv("DTWALIGN_WINDOW_LENGTH", "200"))
DEFAULT_WINDOW_DURATIONS: Final[List[float]] = parse_durations(os.getenv("DTWALIGN_WINDOW_DURATIONS", "60,15"))
LOG_LEVEL: Final[str] = os.getenv("DTWALIGN_LOG_LEVEL", "INFO").upper()

# Below this share of the source duration, a first-pass window is likely too narrow
MIN_RECOMMENDED_WINDOW_RATIO: Final[float] = 0.2
