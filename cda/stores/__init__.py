"""Persistent state kept between runs."""

from .checkpoint import CHECKPOINT_FILENAME, ProgressCheckpoint

__all__ = ["CHECKPOINT_FILENAME", "ProgressCheckpoint"]
