"""Tests for cda.crossref."""

from __future__ import annotations

import textwrap

import pytest

from cda.crossref import cross_reference, cross_reference_with_llm
from cda.llm import ProviderError
from cda.models import (
    Analysis,
    Export,
    ExportKind,
    GapKind,
    Import,
    Language,
    ModuleAnalysis,
)
from cda.parser import parse_file
from tests._fixtures.doubles import ScriptedProvider
from tests._fixtures.grammars import requires_grammar


def _export(name: str, description: str = "", line: int = 1) -> Export:
    return Export(
        name=name,
        kind=ExportKind.FUNCTION,
        signature=None,
        description=description,
        line_number=line,
    )


def _module(path: str, exports=(), imports=()) -> ModuleAnalysis:
    return ModuleAnalysis(
        path=path,
        language=Language.RUST,
        exports=list(exports),
        imports=list(imports),
    )


@pytest.mark.parametrize(
    ("documented", "used", "expect_gap"),
    [
        (False, False, True),
        (True, False, False),
        (False, True, False),
        (True, True, False),
    ],
)
def test_gap_emitted_only_for_undocumented_unused_exports(documented, used, expect_gap) -> None:
    target = _module("lib.rs", exports=[_export("thing", "Docs." if documented else "", line=7)])
    consumer_imports = [Import(source="crate", items=("thing",), is_external=False)] if used else []
    analysis = Analysis(modules=[target, _module("main.rs", imports=consumer_imports)])

    gaps = cross_reference(analysis).gaps

    if expect_gap:
        assert len(gaps) == 1
        assert gaps[0].kind is GapKind.MISSING_DOCUMENTATION
        assert gaps[0].description == "Public fn `thing` has no documentation"
        assert gaps[0].location == "lib.rs:7"
    else:
        assert gaps == []


def test_entry_point_and_test_names_are_exempt() -> None:
    analysis = Analysis(
        modules=[
            _module(
                "a.rs",
                exports=[_export("main"), _export("test_helper"), _export("Testing"), _export("attest")],
            )
        ]
    )

    gaps = cross_reference(analysis).gaps

    # "Testing" does not contain the lowercase substring.
    assert [gap.description for gap in gaps] == ["Public fn `Testing` has no documentation"]


def test_external_imports_do_not_resolve_against_exports() -> None:
    analysis = Analysis(
        modules=[
            _module("a.rs", exports=[_export("Serialize")]),
            _module(
                "b.rs",
                imports=[
                    Import(source="serde", items=("Serialize",), is_external=True),
                    Import(source="tokio", items=(), is_external=True),
                    Import(source="serde", items=(), is_external=True),
                ],
            ),
        ]
    )

    crossref = cross_reference(analysis)

    assert crossref.dependencies == {"a.rs": [], "b.rs": []}
    assert crossref.external_deps == ["serde", "tokio"]
    assert len(crossref.gaps) == 1


def test_dependencies_sorted_and_deduplicated() -> None:
    analysis = Analysis(
        modules=[
            _module("z.rs", exports=[_export("zeta", "z")]),
            _module("y.rs", exports=[_export("ypsilon", "y"), _export("why", "y")]),
            _module(
                "consumer.rs",
                imports=[
                    Import(source="crate", items=("zeta", "ypsilon"), is_external=False),
                    Import(source="crate", items=("why", "unknown"), is_external=False),
                ],
            ),
        ]
    )

    assert cross_reference(analysis).dependencies["consumer.rs"] == ["y.rs", "z.rs"]


def test_duplicate_export_names_resolve_to_last_module() -> None:
    analysis = Analysis(
        modules=[
            _module("first.rs", exports=[_export("shared", "one")]),
            _module("second.rs", exports=[_export("shared", "two")]),
            _module("user.rs", imports=[Import(source="crate", items=("shared",), is_external=False)]),
        ]
    )

    assert cross_reference(analysis).dependencies["user.rs"] == ["second.rs"]


@requires_grammar("rust")
def test_end_to_end_two_module_scenario() -> None:
    module_a = textwrap.dedent(
        """\
        /// Adds one.
        pub fn helper(x: u32) -> u32 {
            x + 1
        }
        """
    )
    module_b = textwrap.dedent(
        """\
        use crate::module_a::helper;

        pub fn run() -> u32 {
            helper(1)
        }
        """
    )
    modules = []
    for path, source in (("module_a", module_a), ("module_b", module_b)):
        result = parse_file(source, Language.RUST)
        modules.append(
            ModuleAnalysis(
                path=path,
                language=Language.RUST,
                exports=result.exports,
                imports=result.imports,
            )
        )
    analysis = Analysis(modules=modules)

    crossref = cross_reference(analysis)

    assert crossref.dependencies["module_b"] == ["module_a"]
    assert [gap.location for gap in crossref.gaps] == ["module_b:3"]
    assert "`run`" in crossref.gaps[0].description
    assert crossref.external_deps == []
    assert analysis.total_exports() == 2


def test_llm_overview_attached_when_available() -> None:
    analysis = Analysis(modules=[_module("src/a.rs")])
    provider = ScriptedProvider(["An overview."])

    crossref = cross_reference_with_llm(analysis, provider)

    assert crossref.architecture_overview == "An overview."
    prompt = provider.calls[0][-1].content
    assert "### a.rs" in prompt
    assert prompt.endswith("Generate an architecture overview.")


def test_llm_overview_failure_is_not_fatal() -> None:
    analysis = Analysis(modules=[_module("a.rs", exports=[_export("x")])])
    provider = ScriptedProvider([ProviderError("Anthropic API error 500: boom")])

    crossref = cross_reference_with_llm(analysis, provider)

    assert crossref.architecture_overview is None
    assert len(crossref.gaps) == 1
