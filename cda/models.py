"""Core data models shared across cda components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class Language(str, Enum):
    """Source language detected from a file extension."""

    RUST = "Rust"
    TYPESCRIPT = "TypeScript"
    JAVASCRIPT = "JavaScript"
    PYTHON = "Python"
    GO = "Go"
    JAVA = "Java"
    CSHARP = "CSharp"
    CPP = "Cpp"
    C = "C"
    RUBY = "Ruby"
    SHELL = "Shell"
    UNKNOWN = "Unknown"

    @classmethod
    def from_extension(cls, ext: str) -> "Language":
        return _LANGUAGE_BY_EXTENSION.get(ext.lower().lstrip("."), cls.UNKNOWN)

    @classmethod
    def parse(cls, value: object) -> "Language":
        """Return the member matching ``value`` (case-insensitive), or UNKNOWN."""
        if isinstance(value, Language):
            return value
        if isinstance(value, str):
            lowered = value.lower()
            for member in cls:
                if member.value.lower() == lowered:
                    return member
        return cls.UNKNOWN


_LANGUAGE_BY_EXTENSION: Dict[str, Language] = {
    "rs": Language.RUST,
    "ts": Language.TYPESCRIPT,
    "tsx": Language.TYPESCRIPT,
    "js": Language.JAVASCRIPT,
    "jsx": Language.JAVASCRIPT,
    "mjs": Language.JAVASCRIPT,
    "cjs": Language.JAVASCRIPT,
    "py": Language.PYTHON,
    "go": Language.GO,
    "java": Language.JAVA,
    "cs": Language.CSHARP,
    "cpp": Language.CPP,
    "cc": Language.CPP,
    "cxx": Language.CPP,
    "hpp": Language.CPP,
    "c": Language.C,
    "h": Language.C,
    "rb": Language.RUBY,
    "sh": Language.SHELL,
    "bash": Language.SHELL,
    "zsh": Language.SHELL,
}


class ExportKind(str, Enum):
    FUNCTION = "function"
    CLASS = "class"
    TYPE = "type"
    CONST = "const"
    ENUM = "enum"
    TRAIT = "trait"
    STRUCT = "struct"
    MODULE = "module"

    @property
    def label(self) -> str:
        """Short form used in prose and tables."""
        return _EXPORT_LABELS[self]


_EXPORT_LABELS = {
    ExportKind.FUNCTION: "fn",
    ExportKind.CLASS: "class",
    ExportKind.TYPE: "type",
    ExportKind.CONST: "const",
    ExportKind.ENUM: "enum",
    ExportKind.TRAIT: "trait",
    ExportKind.STRUCT: "struct",
    ExportKind.MODULE: "mod",
}


class GapKind(str, Enum):
    # Only MISSING_DOCUMENTATION is produced today.
    UNUSED_EXPORT = "unused_export"
    MISSING_DOCUMENTATION = "missing_docs"
    DEAD_CODE = "dead_code"
    UNTESTED_FUNCTION = "untested"
    UNDOCUMENTED_COMMAND = "undocumented_command"


@dataclass(frozen=True)
class SourceFile:
    """A discovered source file."""

    path: str
    language: Language
    size: int


@dataclass
class FileInventory:
    """Categorized view of the files under a codebase root."""

    root: str
    source_files: List[SourceFile] = field(default_factory=list)
    config_files: List[str] = field(default_factory=list)
    doc_files: List[str] = field(default_factory=list)
    test_files: List[str] = field(default_factory=list)

    def total_files(self) -> int:
        return (
            len(self.source_files)
            + len(self.config_files)
            + len(self.doc_files)
            + len(self.test_files)
        )


@dataclass(frozen=True)
class Export:
    """A publicly exported symbol extracted from a source file."""

    name: str
    kind: ExportKind
    signature: Optional[str]
    description: str
    line_number: int


@dataclass(frozen=True)
class Import:
    """A reference from one file to symbols defined elsewhere."""

    source: str
    items: tuple[str, ...] = ()
    is_external: bool = True


@dataclass
class ModuleAnalysis:
    """Structural (and optionally enriched) view of one source file."""

    path: str
    language: Language
    exports: List[Export] = field(default_factory=list)
    imports: List[Import] = field(default_factory=list)
    summary: str = ""
    has_deep_analysis: bool = False


@dataclass
class Analysis:
    """Aggregate of every processed module.

    ``modules`` is in completion order, which is not stable under concurrency.
    Use :meth:`sorted_modules` when a deterministic order matters.
    """

    modules: List[ModuleAnalysis] = field(default_factory=list)

    def total_exports(self) -> int:
        return sum(len(module.exports) for module in self.modules)

    def deep_analyzed_count(self) -> int:
        return sum(1 for module in self.modules if module.has_deep_analysis)

    def sorted_modules(self) -> List[ModuleAnalysis]:
        return sorted(self.modules, key=lambda module: module.path)


@dataclass
class Gap:
    """A documentation or usage deficiency found during cross-referencing."""

    kind: GapKind
    description: str
    location: Optional[str] = None


@dataclass
class CrossReference:
    """Dependency graph and gaps derived from an :class:`Analysis`."""

    dependencies: Dict[str, List[str]] = field(default_factory=dict)
    gaps: List[Gap] = field(default_factory=list)
    external_deps: List[str] = field(default_factory=list)
    architecture_overview: Optional[str] = None


__all__ = [
    "Analysis",
    "CrossReference",
    "Export",
    "ExportKind",
    "FileInventory",
    "Gap",
    "GapKind",
    "Import",
    "Language",
    "ModuleAnalysis",
    "SourceFile",
]
