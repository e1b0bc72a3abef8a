"""Rust structural parser."""

from __future__ import annotations

from typing import AbstractSet, Iterator, List

from tree_sitter import Node

from ..models import Export, ExportKind, Import
from .base import LanguageParser, SourceText, compile_query, iter_matches
from .doc_comments import collect_line_comments

_EXPORT_QUERY = """
(function_item (visibility_modifier) @vis name: (identifier) @name) @function
(struct_item (visibility_modifier) @vis name: (type_identifier) @name) @struct
(enum_item (visibility_modifier) @vis name: (type_identifier) @name) @enum
(type_item (visibility_modifier) @vis name: (type_identifier) @name) @type
(const_item (visibility_modifier) @vis name: (identifier) @name) @const
(static_item (visibility_modifier) @vis name: (identifier) @name) @const
(trait_item (visibility_modifier) @vis name: (type_identifier) @name) @trait
(mod_item (visibility_modifier) @vis name: (identifier) @name) @module
"""

_IMPORT_QUERY = """
(use_declaration argument: (_) @path) @use
"""

_KIND_BY_CAPTURE = {
    "function": ExportKind.FUNCTION,
    "struct": ExportKind.STRUCT,
    "enum": ExportKind.ENUM,
    "type": ExportKind.TYPE,
    "const": ExportKind.CONST,
    "trait": ExportKind.TRAIT,
    "module": ExportKind.MODULE,
}

_INTERNAL_ROOTS = {"crate", "self", "super"}


class RustParser(LanguageParser):
    """Exports are items carrying a ``pub`` visibility modifier."""

    grammar = "rust"

    def extract_exports(self, root: Node, source: SourceText) -> Iterator[Export]:
        query = compile_query(self.grammar, _EXPORT_QUERY)
        for captures in iter_matches(query, root):
            vis_nodes = captures.get("vis", [])
            name_nodes = captures.get("name", [])
            if not vis_nodes or not name_nodes:
                continue
            if "pub" not in source.text(vis_nodes[0]):
                continue
            name = source.text(name_nodes[0])
            if not name:
                continue

            kind = ExportKind.FUNCTION
            signature = None
            for capture, candidate in _KIND_BY_CAPTURE.items():
                nodes = captures.get(capture)
                if nodes:
                    kind = candidate
                    if candidate is ExportKind.FUNCTION:
                        signature = source.signature_line(nodes[0])
                    break

            line_number = source.line_number(name_nodes[0])
            yield Export(
                name=name,
                kind=kind,
                signature=signature,
                description=doc_comment(source.lines, line_number),
                line_number=line_number,
            )

    def extract_imports(
        self, root: Node, source: SourceText, internal_modules: AbstractSet[str]
    ) -> Iterator[Import]:
        query = compile_query(self.grammar, _IMPORT_QUERY)
        for captures in iter_matches(query, root):
            for node in captures.get("path", []):
                path = source.text(node)
                if path:
                    yield split_use_path(path)


def doc_comment(lines: List[str], line_number: int) -> str:
    """Collect ``///`` lines above a declaration, stepping over ``//!`` and ``#[...]``."""
    return collect_line_comments(
        lines,
        line_number,
        marker="///",
        skip_prefixes=("//!",),
        attribute_prefixes=("#[",),
    )


def split_use_path(path: str) -> Import:
    """Split ``a::b::{c, d as e}`` into source ``a`` and items ``[b, c, d]``."""
    compact = " ".join(path.split())
    head, brace, group = compact.partition("{")
    segments = [segment.strip() for segment in head.split("::") if segment.strip()]

    items: List[str] = segments[1:]
    if brace:
        items.extend(_group_leaves(group.rsplit("}", 1)[0]))
    elif items:
        items[-1] = items[-1].split(" as ", 1)[0].strip()
    elif segments:
        segments[0] = segments[0].split(" as ", 1)[0].strip()

    source = segments[0] if segments else ""
    return Import(
        source=source,
        items=tuple(items),
        is_external=source not in _INTERNAL_ROOTS,
    )


def _group_leaves(group: str) -> List[str]:
    leaves: List[str] = []
    for member in _split_group(group):
        if "{" in member:
            inner = member.split("{", 1)[1].rsplit("}", 1)[0]
            leaves.extend(_group_leaves(inner))
            continue
        leaf = member.split(" as ", 1)[0].split("::")[-1].strip()
        if leaf and leaf != "self":
            leaves.append(leaf)
    return leaves


def _split_group(group: str) -> List[str]:
    members: List[str] = []
    depth = 0
    current: List[str] = []
    for char in group:
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        if char == "," and depth == 0:
            members.append("".join(current))
            current = []
            continue
        current.append(char)
    if current:
        members.append("".join(current))
    return [member.strip() for member in members if member.strip()]


__all__ = ["RustParser", "doc_comment", "split_use_path"]
