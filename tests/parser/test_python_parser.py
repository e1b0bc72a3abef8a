"""Tests for the Python structural parser."""

from __future__ import annotations

import textwrap
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import pytest

from cda.models import ExportKind, Import, Language
from cda.parser import StructuralParser, parse_file
from cda.parser.base import SourceText
from cda.parser.python import PythonParser
from tests._fixtures.grammars import requires_grammar

SAMPLE = textwrap.dedent(
    '''\
    """Module docstring."""

    import os
    import xml.etree.ElementTree as ET
    from . import siblings
    from ..core.models import Export, Import
    from mypkg.util import helper
    from typing import TypeAlias

    MAX_SIZE = 100
    verbose = False
    PathLike: TypeAlias = str


    # Loads the configuration.
    # Second comment line.
    @cached
    def load(path):
        return path


    def documented():
        """Reads the docstring.

        Further detail that is not part of the summary.
        """


    def _private():
        pass


    class Mode(Enum):
        A = 1


    class Reader(typing.Protocol):
        pass


    class Plain:
        """Plain class."""
    '''
)


@requires_grammar("python")
def test_python_exports_public_module_level_names() -> None:
    result = parse_file(SAMPLE, Language.PYTHON)

    kinds = {export.name: export.kind for export in result.exports}
    assert kinds == {
        "MAX_SIZE": ExportKind.CONST,
        "PathLike": ExportKind.TYPE,
        "load": ExportKind.FUNCTION,
        "documented": ExportKind.FUNCTION,
        "Mode": ExportKind.ENUM,
        "Reader": ExportKind.TRAIT,
        "Plain": ExportKind.CLASS,
    }


@requires_grammar("python")
def test_python_descriptions_from_comments_then_docstrings() -> None:
    result = parse_file(SAMPLE, Language.PYTHON)
    exports = {export.name: export for export in result.exports}

    assert exports["load"].description == "Loads the configuration. Second comment line."
    assert exports["load"].signature == "def load(path):"
    assert exports["documented"].description == "Reads the docstring."
    assert exports["Plain"].description == "Plain class."
    assert exports["Mode"].description == ""


@requires_grammar("python")
def test_python_all_narrows_exports() -> None:
    source = textwrap.dedent(
        """\
        __all__ = ["kept"]

        def kept():
            pass

        def dropped():
            pass
        """
    )

    result = parse_file(source, Language.PYTHON)

    assert [export.name for export in result.exports] == ["kept"]


@requires_grammar("python")
def test_python_imports_classify_relative_and_project_modules() -> None:
    parser = StructuralParser(internal_modules={"mypkg"})

    result = parser.parse(SAMPLE, Language.PYTHON)

    assert result.imports == [
        Import(source="os", items=(), is_external=True),
        Import(source="xml", items=("etree", "ElementTree"), is_external=True),
        Import(source=".", items=("siblings",), is_external=False),
        Import(source="..core", items=("models", "Export", "Import"), is_external=False),
        Import(source="mypkg", items=("util", "helper"), is_external=False),
        Import(source="typing", items=("TypeAlias",), is_external=True),
    ]


@dataclass
class _FakeNode:
    """Just enough of ``tree_sitter.Node`` for the module-level walk."""

    type: str
    start_byte: int
    end_byte: int
    start_point: Tuple[int, int]
    named_children: List["_FakeNode"] = field(default_factory=list)
    fields: Dict[str, "_FakeNode"] = field(default_factory=dict)

    def child_by_field_name(self, name: str) -> Optional["_FakeNode"]:
        return self.fields.get(name)


TREE_SOURCE = '__all__ = ["kept", "LIMIT"]\nLIMIT = 3\ndef kept():\n    """Kept docstring."""\ndef dropped():\n    pass\n'


def _node(kind: str, fragment: str, after: int = 0, **kwargs: object) -> _FakeNode:
    start = TREE_SOURCE.index(fragment, after)
    row = TREE_SOURCE.count("\n", 0, start)
    column = start - (TREE_SOURCE.rfind("\n", 0, start) + 1)
    return _FakeNode(kind, start, start + len(fragment), (row, column), **kwargs)  # type: ignore[arg-type]


def _module_tree(wrapped: bool) -> _FakeNode:
    def statement(node: _FakeNode) -> _FakeNode:
        if not wrapped:
            return node
        return _FakeNode(
            "expression_statement", node.start_byte, node.end_byte, node.start_point, [node]
        )

    all_list = _node(
        "list",
        '["kept", "LIMIT"]',
        named_children=[_node("string", '"kept"'), _node("string", '"LIMIT"')],
    )
    all_left = _node("identifier", "__all__")
    declare_all = _node(
        "assignment",
        '__all__ = ["kept", "LIMIT"]',
        named_children=[all_left, all_list],
        fields={"left": all_left, "right": all_list},
    )

    limit_at = TREE_SOURCE.index("LIMIT = 3")
    limit_left = _node("identifier", "LIMIT", limit_at)
    limit_right = _node("integer", "3", limit_at)
    limit = _node(
        "assignment",
        "LIMIT = 3",
        named_children=[limit_left, limit_right],
        fields={"left": limit_left, "right": limit_right},
    )

    kept_at = TREE_SOURCE.index("def kept")
    docstring = statement(_node("string", '"""Kept docstring."""'))
    kept_body = _node("block", '"""Kept docstring."""', named_children=[docstring])
    kept_name = _node("identifier", "kept", kept_at)
    kept = _node(
        "function_definition",
        'def kept():\n    """Kept docstring."""',
        fields={"name": kept_name, "body": kept_body},
    )

    dropped_at = TREE_SOURCE.index("def dropped")
    dropped_name = _node("identifier", "dropped", dropped_at)
    dropped = _node("function_definition", "def dropped():\n    pass", fields={"name": dropped_name})

    root = _FakeNode("module", 0, len(TREE_SOURCE), (0, 0))
    root.named_children = [statement(declare_all), statement(limit), kept, dropped]
    return root


@pytest.mark.parametrize("wrapped", [True, False], ids=["expression-statement", "bare"])
def test_python_module_walk_handles_both_statement_shapes(wrapped: bool) -> None:
    root = _module_tree(wrapped)

    exports = list(PythonParser().extract_exports(root, SourceText(TREE_SOURCE)))  # type: ignore[arg-type]

    assert [(export.name, export.kind) for export in exports] == [
        ("LIMIT", ExportKind.CONST),
        ("kept", ExportKind.FUNCTION),
    ]
    assert exports[0].line_number == 2
    assert exports[1].description == "Kept docstring."
    assert exports[1].signature == "def kept():"
