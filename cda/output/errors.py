"""Errors raised while persisting analysis output."""

from __future__ import annotations


class OutputError(RuntimeError):
    """Raised when an output document or directory cannot be written."""


__all__ = ["OutputError"]
