"""Documentation output for a completed analysis."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import List

from ..models import Analysis, CrossReference
from . import json_report, markdown
from .errors import OutputError


class OutputFormat(str, Enum):
    MARKDOWN = "markdown"
    JSON = "json"


def ensure_output_root(output_root: Path) -> Path:
    """Create the output directory; failure here is fatal for the run."""
    try:
        output_root.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputError(f"Cannot create output directory {output_root}: {exc}") from exc
    return output_root


def generate(
    analysis: Analysis,
    crossref: CrossReference,
    output_root: Path,
    fmt: OutputFormat = OutputFormat.MARKDOWN,
    *,
    skip_existing_modules: bool = False,
) -> List[Path]:
    """Render ``analysis`` and ``crossref`` under ``output_root``."""
    ensure_output_root(output_root)
    if OutputFormat(fmt) is OutputFormat.JSON:
        return [json_report.generate(analysis, crossref, output_root)]
    return markdown.generate(
        analysis, crossref, output_root, skip_existing_modules=skip_existing_modules
    )


__all__ = ["OutputError", "OutputFormat", "ensure_output_root", "generate"]
