"""Dependency graph and documentation gaps derived from an analysis."""

from __future__ import annotations

from typing import Dict, List, Set

from .llm import CompletionConfig, LLMProvider, ProviderError
from .logging import get_logger
from .models import Analysis, CrossReference, Gap, GapKind
from .prompting import build_architecture_messages

OVERVIEW_COMPLETION = CompletionConfig(max_tokens=2048, temperature=0.0)

_LOGGER = get_logger("crossref")


def _is_exempt(name: str) -> bool:
    return name == "main" or "test" in name


def cross_reference(analysis: Analysis) -> CrossReference:
    """Resolve internal imports against exports and flag undocumented, unused exports.

    Exports are keyed by bare name; when two modules export the same name the
    module seen last wins.
    """
    _LOGGER.info("Cross-referencing %d modules", len(analysis.modules))

    defined_in: Dict[str, str] = {}
    for module in analysis.modules:
        for export in module.exports:
            defined_in[export.name] = module.path

    used: Set[str] = set()
    external: Set[str] = set()
    dependencies: Dict[str, List[str]] = {}
    for module in analysis.modules:
        targets: Set[str] = set()
        for item in module.imports:
            if item.is_external:
                external.add(item.source)
                continue
            for name in item.items:
                target = defined_in.get(name)
                if target is not None:
                    targets.add(target)
                    used.add(name)
        dependencies[module.path] = sorted(targets)

    gaps: List[Gap] = []
    for module in analysis.modules:
        for export in module.exports:
            if _is_exempt(export.name):
                continue
            if export.name in used or export.description:
                continue
            gaps.append(
                Gap(
                    kind=GapKind.MISSING_DOCUMENTATION,
                    description=f"Public {export.kind.label} `{export.name}` has no documentation",
                    location=f"{module.path}:{export.line_number}",
                )
            )

    return CrossReference(
        dependencies=dependencies,
        gaps=gaps,
        external_deps=sorted(external),
    )


def cross_reference_with_llm(
    analysis: Analysis,
    provider: LLMProvider,
    config: CompletionConfig = OVERVIEW_COMPLETION,
) -> CrossReference:
    """As :func:`cross_reference`, plus an architecture overview from ``provider``."""
    crossref = cross_reference(analysis)
    try:
        crossref.architecture_overview = provider.complete(
            build_architecture_messages(analysis), config
        )
    except ProviderError as exc:
        _LOGGER.warning("Failed to generate architecture overview: %s", exc)
    return crossref


__all__ = ["OVERVIEW_COMPLETION", "cross_reference", "cross_reference_with_llm"]
