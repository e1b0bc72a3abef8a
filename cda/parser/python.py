"""Python structural parser."""

from __future__ import annotations

import ast
from typing import AbstractSet, Iterator, List, Optional, Set

from tree_sitter import Node

from ..models import Export, ExportKind, Import
from .base import LanguageParser, SourceText, compile_query, iter_matches
from .doc_comments import collect_line_comments

_IMPORT_QUERY = """
(import_statement) @import
(import_from_statement) @import_from
"""

_DEFINITION_TYPES = {"function_definition", "class_definition"}
_ENUM_BASES = {"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag"}
_PROTOCOL_BASES = {"Protocol"}


class PythonParser(LanguageParser):
    """Module-level names without a leading underscore, narrowed by ``__all__``."""

    grammar = "python"

    def extract_exports(self, root: Node, source: SourceText) -> Iterator[Export]:
        declared = _declared_all(root, source)
        for statement in root.named_children:
            node = _unwrap_statement(statement)
            if node.type == "decorated_definition":
                node = node.child_by_field_name("definition") or node
            if node.type in _DEFINITION_TYPES:
                name_node = node.child_by_field_name("name")
            elif node.type == "assignment":
                name_node = node.child_by_field_name("left")
            else:
                continue
            if name_node is None or name_node.type != "identifier":
                continue
            name = source.text(name_node)
            if not _is_public(name, declared):
                continue

            line_number = source.line_number(name_node)
            if node.type == "function_definition":
                kind = ExportKind.FUNCTION
                signature = source.signature_line(node)
            elif node.type == "class_definition":
                kind = _class_kind(node, source)
                signature = None
            else:
                kind = _assignment_kind(node, name, source)
                if kind is None:
                    continue
                signature = None

            yield Export(
                name=name,
                kind=kind,
                signature=signature,
                description=_describe(node, source, line_number),
                line_number=line_number,
            )

    def extract_imports(
        self, root: Node, source: SourceText, internal_modules: AbstractSet[str]
    ) -> Iterator[Import]:
        query = compile_query(self.grammar, _IMPORT_QUERY)
        for captures in iter_matches(query, root):
            for node in captures.get("import", []):
                for name_node in node.children_by_field_name("name"):
                    yield _module_import(_dotted(name_node, source), [], internal_modules)
            for node in captures.get("import_from", []):
                module_node = node.child_by_field_name("module_name")
                names: List[str] = []
                for name_node in node.children_by_field_name("name"):
                    names.append(_dotted(name_node, source))
                if any(child.type == "wildcard_import" for child in node.children):
                    names.append("*")
                yield _module_import(source.text(module_node), names, internal_modules)


def doc_comment(lines: List[str], line_number: int) -> str:
    """Collect ``#`` lines above a definition, stepping over decorators."""
    return collect_line_comments(
        lines,
        line_number,
        marker="#",
        skip_prefixes=("#!",),
        attribute_prefixes=("@",),
    )


def _describe(node: Node, source: SourceText, line_number: int) -> str:
    comment = doc_comment(source.lines, line_number)
    if comment:
        return comment
    return _docstring_summary(node, source)


def _docstring_summary(node: Node, source: SourceText) -> str:
    body = node.child_by_field_name("body")
    if body is None or not body.named_children:
        return ""
    literal = _unwrap_statement(body.named_children[0])
    if literal.type != "string":
        return ""
    value = _literal_string(source.text(literal))
    if not value:
        return ""
    paragraph = value.strip().split("\n\n", 1)[0]
    return " ".join(paragraph.split())


def _unwrap_statement(node: Node) -> Node:
    # Newer python grammars place assignments and strings directly in the block.
    if node.type == "expression_statement" and node.named_children:
        return node.named_children[0]
    return node


def _literal_string(text: str) -> Optional[str]:
    try:
        value = ast.literal_eval(text)
    except (ValueError, SyntaxError):
        return None
    return value if isinstance(value, str) else None


def _declared_all(root: Node, source: SourceText) -> Optional[Set[str]]:
    for statement in root.named_children:
        assignment = _unwrap_statement(statement)
        if assignment.type != "assignment":
            continue
        left = assignment.child_by_field_name("left")
        right = assignment.child_by_field_name("right")
        if left is None or right is None or source.text(left) != "__all__":
            continue
        if right.type not in {"list", "tuple"}:
            return None
        names: Set[str] = set()
        for element in right.named_children:
            if element.type == "string":
                value = _literal_string(source.text(element))
                if value:
                    names.add(value)
        return names
    return None


def _is_public(name: str, declared: Optional[Set[str]]) -> bool:
    if not name or name.startswith("_"):
        return False
    return declared is None or name in declared


def _class_kind(node: Node, source: SourceText) -> ExportKind:
    bases = node.child_by_field_name("superclasses")
    if bases is None:
        return ExportKind.CLASS
    for base in bases.named_children:
        leaf = source.text(base).split("[", 1)[0].rsplit(".", 1)[-1]
        if leaf in _ENUM_BASES:
            return ExportKind.ENUM
        if leaf in _PROTOCOL_BASES:
            return ExportKind.TRAIT
    return ExportKind.CLASS


def _assignment_kind(node: Node, name: str, source: SourceText) -> Optional[ExportKind]:
    annotation = node.child_by_field_name("type")
    if annotation is not None and source.text(annotation).rsplit(".", 1)[-1] == "TypeAlias":
        return ExportKind.TYPE
    if name.upper() == name and any(char.isalpha() for char in name):
        return ExportKind.CONST
    return None


def _dotted(node: Node, source: SourceText) -> str:
    if node.type == "aliased_import":
        node = node.child_by_field_name("name") or node
    return source.text(node)


def _module_import(module: str, names: List[str], internal_modules: AbstractSet[str]) -> Import:
    stripped = module.lstrip(".")
    dots = module[: len(module) - len(stripped)]
    segments = [segment for segment in stripped.split(".") if segment]
    head = segments[0] if segments else ""
    items = segments[1:] + names
    if dots:
        return Import(source=f"{dots}{head}", items=tuple(items), is_external=False)
    return Import(source=head, items=tuple(items), is_external=head not in internal_modules)


__all__ = ["PythonParser", "doc_comment"]
