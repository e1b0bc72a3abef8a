"""Single-document JSON rendering of an analysis."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from ..models import Analysis, CrossReference, ModuleAnalysis
from .errors import OutputError
from .stats import build_statistics

SCHEMA_VERSION = "1.0"
JSON_FILENAME = "analysis.json"


def _module_payload(module: ModuleAnalysis) -> Dict[str, Any]:
    return {
        "path": module.path,
        "language": module.language.value,
        "summary": module.summary,
        "has_deep_analysis": module.has_deep_analysis,
        "exports": [
            {
                "name": export.name,
                "kind": export.kind.value,
                "signature": export.signature,
                "description": export.description,
                "line": export.line_number,
            }
            for export in module.exports
        ],
        "imports": [
            {
                "source": item.source,
                "items": list(item.items),
                "external": item.is_external,
            }
            for item in module.imports
        ],
    }


def build_payload(analysis: Analysis, crossref: CrossReference) -> Dict[str, Any]:
    """Return the versioned JSON-ready structure."""
    return {
        "version": SCHEMA_VERSION,
        "architecture_overview": crossref.architecture_overview,
        "modules": [_module_payload(module) for module in analysis.sorted_modules()],
        "cross_reference": {
            "dependencies": [
                {"module": module, "depends_on": list(targets)}
                for module, targets in sorted(crossref.dependencies.items())
            ],
            "external_deps": list(crossref.external_deps),
            "gaps": [
                {
                    "kind": gap.kind.value,
                    "description": gap.description,
                    "location": gap.location,
                }
                for gap in crossref.gaps
            ],
        },
        "statistics": build_statistics(analysis, crossref),
    }


def generate(analysis: Analysis, crossref: CrossReference, output_root: Path) -> Path:
    target = output_root / JSON_FILENAME
    payload = build_payload(analysis, crossref)
    try:
        target.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        raise OutputError(f"Failed to write {target}: {exc}") from exc
    return target


__all__ = ["JSON_FILENAME", "SCHEMA_VERSION", "build_payload", "generate"]
