"""Markdown rendering: one document per module plus an index."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader

from ..models import Analysis, CrossReference, Export, Import, Language, ModuleAnalysis
from .errors import OutputError
from .stats import build_statistics

MODULES_DIRNAME = "modules"
INDEX_FILENAME = "index.md"

_TEMPLATES_DIR = Path(__file__).with_name("templates")

_FENCES = {
    Language.RUST: "rust",
    Language.TYPESCRIPT: "typescript",
    Language.JAVASCRIPT: "javascript",
    Language.PYTHON: "python",
}


def _table_cell(value: object, limit: int = 50) -> str:
    text = " ".join(str(value or "").split()).replace("|", "\\|")
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


def _create_env() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["table_cell"] = _table_cell
    return env


_ENV = _create_env()


def tidy_markdown(markdown: str) -> str:
    """Normalise newlines, collapse blank runs and keep a blank line before headings."""
    lines = markdown.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    cleaned: List[str] = []
    in_code = False
    for raw in lines:
        line = raw.rstrip()
        if line.startswith("```"):
            in_code = not in_code
            cleaned.append(line)
            continue
        if not in_code:
            if not line:
                if cleaned and cleaned[-1] == "":
                    continue
                cleaned.append("")
                continue
            if line.startswith("#") and cleaned and cleaned[-1] != "":
                cleaned.append("")
        cleaned.append(line)

    while cleaned and cleaned[-1] == "":
        cleaned.pop()
    return "\n".join(cleaned) + "\n"


def module_document_name(path: str) -> str:
    """Flatten a source path into a single file name."""
    safe = path.replace("/", "_").replace("\\", "_").replace(".", "_")
    return f"{safe}.md"


def module_document_path(output_root: Path, path: str) -> Path:
    return output_root / MODULES_DIRNAME / module_document_name(path)


def _format_import(item: Import) -> str:
    label = f"`{item.source}`"
    if item.items:
        label += " (" + ", ".join(item.items) + ")"
    return label


def render_module_document(
    path: str,
    language: Language,
    exports: Sequence[Export],
    imports: Sequence[Import],
    deep_analysis: Optional[str] = None,
) -> str:
    """Render the markdown document for one module."""
    module_name = PurePosixPath(path.replace("\\", "/")).stem or "unknown"
    template = _ENV.get_template("module.md.j2")
    rendered = template.render(
        module_name=module_name,
        path=path,
        language=language.value,
        deep_analysis=(deep_analysis or "").strip(),
        exports=list(exports),
        fence=_FENCES.get(language, ""),
        external=[_format_import(item) for item in imports if item.is_external],
        internal=[_format_import(item) for item in imports if not item.is_external],
    )
    return tidy_markdown(rendered)


def write_module_document(
    output_root: Path,
    module: ModuleAnalysis,
    deep_analysis: Optional[str] = None,
) -> Path:
    """Write a module document immediately; raises :class:`OutputError` on failure."""
    target = module_document_path(output_root, module.path)
    content = render_module_document(
        module.path, module.language, module.exports, module.imports, deep_analysis
    )
    _write(target, content)
    return target


def render_index(analysis: Analysis, crossref: CrossReference) -> str:
    modules = analysis.sorted_modules()
    rows = [
        {
            "path": module.path,
            "link": f"{MODULES_DIRNAME}/{module_document_name(module.path)}",
            "language": module.language.value,
            "exports": len(module.exports),
            "summary": module.summary,
        }
        for module in modules
    ]
    dependencies = [
        (module, targets)
        for module, targets in sorted(crossref.dependencies.items())
        if targets
    ]
    template = _ENV.get_template("index.md.j2")
    rendered = template.render(
        stats=build_statistics(analysis, crossref),
        overview=(crossref.architecture_overview or "").strip(),
        modules=rows,
        dependencies=dependencies,
        external_deps=crossref.external_deps,
        gaps=crossref.gaps,
    )
    return tidy_markdown(rendered)


def generate(
    analysis: Analysis,
    crossref: CrossReference,
    output_root: Path,
    *,
    skip_existing_modules: bool = False,
) -> List[Path]:
    """Write ``index.md`` and any module documents not already on disk."""
    written: List[Path] = []
    for module in analysis.sorted_modules():
        target = module_document_path(output_root, module.path)
        if skip_existing_modules and target.exists():
            continue
        written.append(write_module_document(output_root, module))

    index_path = output_root / INDEX_FILENAME
    _write(index_path, render_index(analysis, crossref))
    written.append(index_path)
    return written


def existing_module_documents(output_root: Path) -> Dict[str, Path]:
    """Map module document file names to their paths."""
    modules_dir = output_root / MODULES_DIRNAME
    if not modules_dir.is_dir():
        return {}
    return {entry.name: entry for entry in modules_dir.glob("*.md")}


def _write(target: Path, content: str) -> None:
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise OutputError(f"Failed to write {target}: {exc}") from exc


__all__ = [
    "INDEX_FILENAME",
    "MODULES_DIRNAME",
    "existing_module_documents",
    "generate",
    "module_document_name",
    "module_document_path",
    "render_index",
    "render_module_document",
    "tidy_markdown",
    "write_module_document",
]
