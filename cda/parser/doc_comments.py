"""Backward walks that associate comment blocks with declarations."""

from __future__ import annotations

from typing import List, Sequence


def collect_line_comments(
    lines: Sequence[str],
    line_number: int,
    *,
    marker: str,
    skip_prefixes: Sequence[str] = (),
    attribute_prefixes: Sequence[str] = (),
) -> str:
    """Join the contiguous ``marker`` comment lines above ``line_number``.

    Walks upward from the line before the declaration. Lines starting with one
    of ``skip_prefixes`` or ``attribute_prefixes`` are stepped over, and blank
    lines are stepped over once at least one comment line has been collected.
    Anything else ends the block. The result is oldest-first, joined with
    single spaces.
    """
    if line_number <= 0 or line_number > len(lines):
        return ""

    collected: List[str] = []
    index = line_number - 2
    while index >= 0:
        stripped = lines[index].strip()
        if any(stripped.startswith(prefix) for prefix in skip_prefixes):
            index -= 1
        elif stripped.startswith(marker):
            collected.append(stripped[len(marker) :].strip())
            index -= 1
        elif any(stripped.startswith(prefix) for prefix in attribute_prefixes):
            index -= 1
        elif not stripped and collected:
            index -= 1
        else:
            break

    collected.reverse()
    return " ".join(part for part in collected if part).strip()


def collect_block_comment(lines: Sequence[str], line_number: int) -> str:
    """Return the ``/** ... */`` block above ``line_number``, up to its first ``@tag``."""
    if line_number <= 0 or line_number > len(lines):
        return ""

    collected: List[str] = []
    index = line_number - 2
    in_block = False
    while index >= 0:
        stripped = lines[index].strip()
        if not in_block and stripped.endswith("*/"):
            in_block = True
            if stripped.startswith("/*"):
                # Single-line block: /** text */
                text = stripped[:-2].lstrip("/").lstrip("*").strip()
                if text:
                    collected.append(text)
                break
            text = stripped[:-2].strip().lstrip("*").strip()
            if text:
                collected.append(text)
            index -= 1
        elif in_block:
            if stripped.startswith("/*"):
                text = stripped.lstrip("/").lstrip("*").strip()
                if text:
                    collected.append(text)
                break
            text = stripped.lstrip("*").strip()
            if text:
                collected.append(text)
            index -= 1
        elif not stripped:
            index -= 1
        else:
            break

    collected.reverse()
    description: List[str] = []
    for text in collected:
        if text.startswith("@"):
            break
        description.append(text)
    return " ".join(description).strip()


__all__ = ["collect_block_comment", "collect_line_comments"]
