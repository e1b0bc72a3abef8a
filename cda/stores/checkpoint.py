"""Append-only record of files whose analysis has completed."""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Set

CHECKPOINT_FILENAME = ".cda-progress"


class ProgressCheckpoint:
    """One completed path per line; safe to append from worker threads.

    The file only ever grows. Appending a path already on record is a no-op, so
    each completed path appears exactly once.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = threading.Lock()
        self._recorded: Set[str] = set()
        self._loaded = False

    @classmethod
    def in_directory(cls, output_root: Path) -> "ProgressCheckpoint":
        return cls(output_root / CHECKPOINT_FILENAME)

    @property
    def path(self) -> Path:
        return self._path

    def completed(self) -> Set[str]:
        """Return the recorded paths, reading the file on first use."""
        with self._lock:
            self._ensure_loaded()
            return set(self._recorded)

    def append(self, file_path: str) -> bool:
        """Record ``file_path``; return False when it was already recorded."""
        entry = file_path.strip()
        if not entry or "\n" in entry:
            raise ValueError(f"Invalid checkpoint entry: {file_path!r}")
        with self._lock:
            self._ensure_loaded()
            if entry in self._recorded:
                return False
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(entry + "\n")
                handle.flush()
                os.fsync(handle.fileno())
            self._recorded.add(entry)
            return True

    def clear(self) -> None:
        """Delete the checkpoint file (used for fresh runs)."""
        with self._lock:
            try:
                self._path.unlink()
            except FileNotFoundError:
                pass
            self._recorded.clear()
            self._loaded = True

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            text = ""
        self._recorded = {line.strip() for line in text.splitlines() if line.strip()}
        self._loaded = True


__all__ = ["CHECKPOINT_FILENAME", "ProgressCheckpoint"]
