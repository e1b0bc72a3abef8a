"""Shared tree-sitter plumbing for the per-language structural parsers."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import AbstractSet, Dict, Iterator, List, Optional, Tuple

from tree_sitter import Language as Grammar
from tree_sitter import Node, Parser, Query, QueryCursor, Tree
from tree_sitter_language_pack import get_language

from ..models import Export, Import


class ParseError(RuntimeError):
    """Raised when a grammar cannot be loaded or a tree cannot be built."""


@dataclass
class ParseResult:
    """Structural facts extracted from one source text."""

    exports: List[Export] = field(default_factory=list)
    imports: List[Import] = field(default_factory=list)


_GRAMMARS: Dict[str, Grammar] = {}
_QUERIES: Dict[Tuple[str, str], Query] = {}
_CACHE_LOCK = threading.Lock()


def load_grammar(name: str) -> Grammar:
    """Return the cached tree-sitter grammar for ``name``."""
    with _CACHE_LOCK:
        grammar = _GRAMMARS.get(name)
        if grammar is not None:
            return grammar
        try:
            grammar = get_language(name)  # type: ignore[arg-type]
        except Exception as exc:
            raise ParseError(f"Failed to load tree-sitter grammar '{name}': {exc}") from exc
        _GRAMMARS[name] = grammar
        return grammar


def compile_query(grammar_name: str, source: str) -> Query:
    """Return a cached query compiled against ``grammar_name``."""
    grammar = load_grammar(grammar_name)
    key = (grammar_name, source)
    with _CACHE_LOCK:
        query = _QUERIES.get(key)
        if query is not None:
            return query
        try:
            query = Query(grammar, source)
        except Exception as exc:
            raise ParseError(f"Invalid {grammar_name} query: {exc}") from exc
        _QUERIES[key] = query
        return query


def build_tree(grammar_name: str, source: bytes) -> Tree:
    # Parser objects are not shared between threads; one per call.
    parser = Parser(load_grammar(grammar_name))
    try:
        tree = parser.parse(source)
    except Exception as exc:
        raise ParseError(f"tree-sitter failed to parse {grammar_name} source: {exc}") from exc
    if tree is None or tree.root_node is None:
        raise ParseError(f"tree-sitter returned no tree for {grammar_name} source")
    return tree


def iter_matches(query: Query, node: Node) -> Iterator[Dict[str, List[Node]]]:
    """Yield each query match as ``capture name -> nodes``."""
    cursor = QueryCursor(query)
    for _pattern_index, captures in cursor.matches(node):
        yield {
            name: nodes if isinstance(nodes, list) else [nodes]
            for name, nodes in captures.items()
        }


class SourceText:
    """Source bytes plus a line index aligned with tree-sitter rows."""

    def __init__(self, content: str) -> None:
        self.content = content
        self.data = content.encode("utf-8")
        self.lines = [line.rstrip("\r") for line in content.split("\n")]

    def text(self, node: Optional[Node]) -> str:
        if node is None:
            return ""
        return self.data[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")

    def line(self, row: int) -> Optional[str]:
        if 0 <= row < len(self.lines):
            return self.lines[row]
        return None

    @staticmethod
    def line_number(node: Node) -> int:
        """1-indexed line of ``node``."""
        return node.start_point[0] + 1

    def signature_line(self, node: Node) -> Optional[str]:
        line = self.line(node.start_point[0])
        if line is None:
            return None
        return line.strip() or None


class LanguageParser(ABC):
    """Extracts exports and imports for one grammar family."""

    grammar: str

    def parse(self, content: str, *, internal_modules: AbstractSet[str] = frozenset()) -> ParseResult:
        source = SourceText(content)
        tree = build_tree(self.grammar, source.data)
        return ParseResult(
            exports=list(self.extract_exports(tree.root_node, source)),
            imports=list(self.extract_imports(tree.root_node, source, internal_modules)),
        )

    @abstractmethod
    def extract_exports(self, root: Node, source: SourceText) -> Iterator[Export]:
        """Yield publicly visible declarations."""

    @abstractmethod
    def extract_imports(
        self, root: Node, source: SourceText, internal_modules: AbstractSet[str]
    ) -> Iterator[Import]:
        """Yield import statements."""


__all__ = [
    "LanguageParser",
    "ParseError",
    "ParseResult",
    "SourceText",
    "build_tree",
    "compile_query",
    "iter_matches",
    "load_grammar",
]
