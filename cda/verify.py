"""Compare a previous analysis on disk with the current state of the codebase."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence

from .discovery import discover
from .logging import get_logger
from .output import OutputError
from .output.markdown import existing_module_documents, module_document_name

_LOGGER = get_logger("verify")


@dataclass
class VerifyReport:
    """Discrepancies between source files and module documents."""

    analyzed: int = 0
    missing: List[str] = field(default_factory=list)
    orphaned: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing and not self.orphaned


def verify_output(
    codebase_root: str | Path,
    output_root: str | Path,
    *,
    exclude_paths: Sequence[str] = (),
) -> VerifyReport:
    """Report source files without documents and documents without source files."""
    output_root = Path(output_root)
    if not output_root.is_dir():
        raise OutputError(f"No analysis found at {output_root}")

    inventory = discover(codebase_root, exclude_paths=exclude_paths)
    documents = existing_module_documents(output_root)
    expected = {module_document_name(source.path): source.path for source in inventory.source_files}

    report = VerifyReport(analyzed=len(documents))
    report.missing = sorted(path for name, path in expected.items() if name not in documents)
    report.orphaned = sorted(name for name in documents if name not in expected)
    _LOGGER.info(
        "Verified %d module documents: %d missing, %d orphaned",
        len(documents),
        len(report.missing),
        len(report.orphaned),
    )
    return report


__all__ = ["VerifyReport", "verify_output"]
