"""Command-line interface tools."""

from .replay import ReplayPipeline, run_replay

__all__ = [
    "ReplayPipeline",
    "run_replay",
]
