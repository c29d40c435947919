"""Pipeline modules for orchestrating multi-pass alignment."""

from .multipass_pipeline import (
    FeaturePass,
    MultiPassAlignmentConfig,
    MultiPassAlignmentPipeline,
    MultiPassResult,
    map_timeline,
)

__all__ = [
    "FeaturePass",
    "MultiPassAlignmentConfig",
    "MultiPassAlignmentPipeline",
    "MultiPassResult",
    "map_timeline",
]
