"""Grammar-driven extraction of exports, imports and doc comments."""

from __future__ import annotations

from typing import AbstractSet, Dict, Iterable, Optional

from ..models import Language
from .base import LanguageParser, ParseError, ParseResult
from .javascript import JavaScriptParser
from .python import PythonParser
from .rust import RustParser


def _default_registry() -> Dict[Language, LanguageParser]:
    return {
        Language.RUST: RustParser(),
        Language.TYPESCRIPT: JavaScriptParser("typescript"),
        Language.JAVASCRIPT: JavaScriptParser("javascript"),
        Language.PYTHON: PythonParser(),
    }


class StructuralParser:
    """Dispatches source text to the parser registered for its language.

    Languages without a registered grammar produce an empty
    :class:`ParseResult`. Grammar or tree construction failures raise
    :class:`ParseError`; callers decide whether to log and continue.
    """

    def __init__(
        self,
        internal_modules: Iterable[str] = (),
        *,
        parsers: Optional[Dict[Language, LanguageParser]] = None,
    ) -> None:
        self.internal_modules: AbstractSet[str] = frozenset(internal_modules)
        self._parsers = parsers if parsers is not None else _default_registry()

    def supports(self, language: Language) -> bool:
        return language in self._parsers

    def parse(self, content: str, language: Language) -> ParseResult:
        parser = self._parsers.get(language)
        if parser is None:
            return ParseResult()
        return parser.parse(content, internal_modules=self.internal_modules)


def parse_file(
    content: str, language: Language, *, internal_modules: Iterable[str] = ()
) -> ParseResult:
    """Parse ``content`` with a throwaway :class:`StructuralParser`."""
    return StructuralParser(internal_modules).parse(content, language)


__all__ = [
    "JavaScriptParser",
    "LanguageParser",
    "ParseError",
    "ParseResult",
    "PythonParser",
    "RustParser",
    "StructuralParser",
    "parse_file",
]
