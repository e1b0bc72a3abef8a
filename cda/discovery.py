"""File discovery and categorization for a codebase root."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

from .config import CONFIG_FILENAME
from .logging import get_logger
from .models import FileInventory, Language, SourceFile

_LOGGER = get_logger("discovery")

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "node_modules",
    "target",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".tox",
    ".idea",
    ".vscode",
}

_EXCLUDED_FILES = {".DS_Store", "Thumbs.db"}

_BINARY_EXTENSIONS = {
    "png", "jpg", "jpeg", "gif", "ico", "webp", "svg",
    "pdf", "doc", "docx", "xls", "xlsx",
    "zip", "tar", "gz", "rar", "7z",
    "exe", "dll", "so", "dylib", "o", "a",
    "wasm", "class", "pyc", "pyo",
    "mp3", "mp4", "wav", "avi", "mov",
    "ttf", "otf", "woff", "woff2", "eot",
}

_CONFIG_NAMES = {
    "package.json", "cargo.toml", "pyproject.toml", "go.mod",
    "tsconfig.json", "webpack.config.js", "vite.config.ts",
    ".eslintrc", ".prettierrc", "dockerfile", "docker-compose.yml",
    "makefile", "justfile", ".env.example", CONFIG_FILENAME,
}

_CONFIG_EXTENSIONS = {"toml", "yaml", "yml"}

_DOC_EXTENSIONS = {"md", "rst", "txt", "adoc"}

_DOC_NAMES = {"readme", "changelog", "contributing", "license", "authors"}

_TEST_DIR_MARKERS = ("/test/", "/tests/", "/__tests__/", "/spec/")

_TEST_NAME_MARKERS = ("_test.", ".test.", "_spec.", ".spec.")

_SOURCE_EXTENSIONS = {
    "rs", "ts", "tsx", "js", "jsx", "mjs", "cjs",
    "py", "go", "java", "cs", "cpp", "cc", "cxx", "c", "h", "hpp",
    "rb", "php", "swift", "kt", "scala", "clj",
    "sh", "bash", "zsh", "ps1",
    "sql", "graphql", "proto",
}


class DiscoveryError(RuntimeError):
    """Raised when the codebase root cannot be walked."""


@dataclass
class IgnoreRule:
    """A single .gitignore-style pattern."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False
        if self.anchored or "/" in self.pattern:
            return fnmatchcase(rel_path, self.pattern)
        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rule(raw: str) -> IgnoreRule | None:
    pattern = raw.strip()
    if not pattern or pattern.startswith("#"):
        return None
    negate = pattern.startswith("!")
    if negate:
        pattern = pattern[1:]
    directory_only = pattern.endswith("/")
    pattern = pattern.rstrip("/")
    anchored = pattern.startswith("/")
    pattern = pattern.lstrip("/")
    if not pattern:
        return None
    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
    )


def _load_ignore_rules(root: Path, extra_patterns: Sequence[str]) -> List[IgnoreRule]:
    rules: List[IgnoreRule] = []
    gitignore = root / ".gitignore"
    if gitignore.is_file():
        try:
            lines = gitignore.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as exc:
            _LOGGER.warning("Ignoring unreadable %s: %s", gitignore, exc)
            lines = []
        for line in lines:
            rule = build_ignore_rule(line)
            if rule is not None:
                rules.append(rule)
    for pattern in extra_patterns:
        rule = build_ignore_rule(pattern)
        if rule is not None:
            rules.append(rule)
    return rules


def _is_ignored(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _iter_files(root: Path, search: Path, rules: Sequence[IgnoreRule]) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(search):
        current = Path(dirpath)
        rel_dir = current.relative_to(root).as_posix() if current != root else ""

        kept = []
        for name in sorted(dirnames):
            if name in _EXCLUDED_DIRS:
                continue
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if _is_ignored(rel_path, True, rules):
                continue
            kept.append(name)
        dirnames[:] = kept

        for filename in sorted(filenames):
            if filename in _EXCLUDED_FILES:
                continue
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if _is_ignored(rel_path, False, rules):
                continue
            yield current / filename


def _extension(name: str) -> str:
    return name.rsplit(".", 1)[1].lower() if "." in name.lstrip(".") else ""


def is_config_file(name: str, ext: str) -> bool:
    lowered = name.lower()
    if lowered in _CONFIG_NAMES:
        return True
    return ext in _CONFIG_EXTENSIONS and "test" not in lowered


def is_doc_file(name: str, ext: str) -> bool:
    return ext in _DOC_EXTENSIONS or name.lower() in _DOC_NAMES


def is_test_file(rel_path: str, name: str) -> bool:
    padded = f"/{rel_path.lower()}"
    lowered = name.lower()
    return any(marker in padded for marker in _TEST_DIR_MARKERS) or any(
        marker in lowered for marker in _TEST_NAME_MARKERS
    )


def is_source_file(ext: str) -> bool:
    return ext in _SOURCE_EXTENSIONS


def discover(
    root: str | Path,
    module: str | None = None,
    *,
    exclude_paths: Sequence[str] = (),
    max_file_size: int | None = None,
) -> FileInventory:
    """Walk ``root`` (optionally only ``module`` beneath it) and categorize files."""
    root_path = Path(root).expanduser().resolve()
    if not root_path.exists():
        raise DiscoveryError(f"Codebase path not found: {root}")
    if not root_path.is_dir():
        raise DiscoveryError(f"Codebase path is not a directory: {root}")

    search = root_path / module if module else root_path
    if not search.is_dir():
        raise DiscoveryError(f"Module directory not found: {search}")

    rules = _load_ignore_rules(root_path, exclude_paths)
    inventory = FileInventory(root=str(root_path))

    for path in _iter_files(root_path, search, rules):
        rel_path = path.relative_to(root_path).as_posix()
        name = path.name
        ext = _extension(name)
        if ext in _BINARY_EXTENSIONS:
            continue

        if is_config_file(name, ext):
            _LOGGER.debug("Config file: %s", rel_path)
            inventory.config_files.append(rel_path)
        elif is_doc_file(name, ext):
            _LOGGER.debug("Doc file: %s", rel_path)
            inventory.doc_files.append(rel_path)
        elif is_test_file(rel_path, name):
            _LOGGER.debug("Test file: %s", rel_path)
            inventory.test_files.append(rel_path)
        elif is_source_file(ext):
            try:
                size = path.stat().st_size
            except OSError as exc:
                raise DiscoveryError(f"Cannot stat {rel_path}: {exc}") from exc
            if max_file_size is not None and size > max_file_size:
                _LOGGER.debug("Skipping oversized source file: %s (%d bytes)", rel_path, size)
                continue
            _LOGGER.debug("Source file: %s (%d bytes)", rel_path, size)
            inventory.source_files.append(
                SourceFile(path=rel_path, language=Language.from_extension(ext), size=size)
            )

    return inventory


__all__ = [
    "DiscoveryError",
    "IgnoreRule",
    "build_ignore_rule",
    "discover",
    "is_config_file",
    "is_doc_file",
    "is_source_file",
    "is_test_file",
]
