"""Aggregate statistics shared by the markdown and JSON renderers."""

from __future__ import annotations

from typing import Dict

from ..models import Analysis, CrossReference


def build_statistics(analysis: Analysis, crossref: CrossReference) -> Dict[str, int]:
    return {
        "total_modules": len(analysis.modules),
        "total_exports": analysis.total_exports(),
        "external_dependencies": len(crossref.external_deps),
        "potential_gaps": len(crossref.gaps),
        "llm_analyzed_modules": analysis.deep_analyzed_count(),
    }


__all__ = ["build_statistics"]
