"""JavaScript / TypeScript structural parser."""

from __future__ import annotations

from typing import AbstractSet, Iterator, List, Optional

from tree_sitter import Node

from ..models import Export, ExportKind, Import
from .base import LanguageParser, SourceText
from .doc_comments import collect_block_comment

_FUNCTION_NODES = {
    "function_declaration",
    "generator_function_declaration",
    "function",
    "function_expression",
}
_CLASS_NODES = {"class_declaration", "abstract_class_declaration", "class"}
_VARIABLE_NODES = {"lexical_declaration", "variable_declaration"}
_FUNCTION_VALUES = {"arrow_function", "function", "function_expression", "generator_function"}
_SIMPLE_KINDS = {
    "type_alias_declaration": ExportKind.TYPE,
    "interface_declaration": ExportKind.TRAIT,
    "enum_declaration": ExportKind.ENUM,
}

_INTERNAL_PREFIXES = (".", "/", "@/")


class JavaScriptParser(LanguageParser):
    """Walks ``export``/``import`` statements anywhere in the tree."""

    def __init__(self, grammar: str = "javascript") -> None:
        self.grammar = grammar

    def extract_exports(self, root: Node, source: SourceText) -> Iterator[Export]:
        for node in _walk(root, "export_statement"):
            yield from self._exports_from_statement(node, source)

    def extract_imports(
        self, root: Node, source: SourceText, internal_modules: AbstractSet[str]
    ) -> Iterator[Import]:
        for node in _walk(root, "import_statement", "export_statement"):
            source_node = node.child_by_field_name("source")
            if source_node is None:
                continue
            module = source.text(source_node).strip("\"'`")
            if node.type == "import_statement":
                items = _import_bindings(node, source)
            else:
                # export { a } from "./b"
                items = _specifier_names(node, source, "export_specifier")
            yield Import(
                source=module,
                items=tuple(items),
                is_external=not module.startswith(_INTERNAL_PREFIXES),
            )

    def _exports_from_statement(self, statement: Node, source: SourceText) -> Iterator[Export]:
        for child in statement.named_children:
            if child.type in _FUNCTION_NODES:
                name_node = child.child_by_field_name("name")
                if name_node is not None:
                    yield self._export(
                        source, name_node, ExportKind.FUNCTION, source.signature_line(statement)
                    )
                return
            if child.type in _CLASS_NODES:
                name_node = child.child_by_field_name("name")
                if name_node is not None:
                    yield self._export(source, name_node, ExportKind.CLASS, None)
                return
            if child.type in _VARIABLE_NODES:
                for declarator in child.named_children:
                    if declarator.type != "variable_declarator":
                        continue
                    name_node = declarator.child_by_field_name("name")
                    if name_node is None or name_node.type != "identifier":
                        continue
                    value = declarator.child_by_field_name("value")
                    if value is not None and value.type in _FUNCTION_VALUES:
                        yield self._export(
                            source,
                            name_node,
                            ExportKind.FUNCTION,
                            source.signature_line(statement),
                        )
                    else:
                        yield self._export(source, name_node, ExportKind.CONST, None)
                return
            kind = _SIMPLE_KINDS.get(child.type)
            if kind is not None:
                name_node = child.child_by_field_name("name")
                if name_node is not None:
                    yield self._export(source, name_node, kind, None)
                return

    @staticmethod
    def _export(
        source: SourceText, name_node: Node, kind: ExportKind, signature: Optional[str]
    ) -> Export:
        line_number = source.line_number(name_node)
        return Export(
            name=source.text(name_node),
            kind=kind,
            signature=signature,
            description=collect_block_comment(source.lines, line_number),
            line_number=line_number,
        )


def _walk(node: Node, *types: str) -> Iterator[Node]:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type in types:
            yield current
        stack.extend(reversed(current.children))


def _import_bindings(statement: Node, source: SourceText) -> List[str]:
    items: List[str] = []
    for clause in statement.named_children:
        if clause.type != "import_clause":
            continue
        for child in clause.named_children:
            if child.type == "identifier":
                items.append(source.text(child))
            elif child.type == "named_imports":
                items.extend(_specifier_names(child, source, "import_specifier"))
    return items


def _specifier_names(node: Node, source: SourceText, specifier_type: str) -> List[str]:
    names: List[str] = []
    for specifier in _walk(node, specifier_type):
        name_node = specifier.child_by_field_name("name")
        if name_node is not None:
            names.append(source.text(name_node).strip("\"'"))
    return names


__all__ = ["JavaScriptParser"]
