"""Drives structural parsing and enrichment over a file inventory."""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path, PurePosixPath
from typing import Callable, Iterable, List, Optional, Sequence, Set

from .llm import CompletionConfig, LLMProvider, Message, ProviderError, is_transient
from .logging import get_logger
from .models import Analysis, FileInventory, Language, ModuleAnalysis, SourceFile
from .output import OutputError
from .output.markdown import MODULES_DIRNAME, write_module_document
from .parser import ParseError, ParseResult, StructuralParser
from .prompting import build_module_messages, summary_line
from .stores import ProgressCheckpoint

DEFAULT_MAX_ENRICHMENT_BYTES = 50_000
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_BASE = 1.0
DEFAULT_PARALLELISM = 4
MODULE_COMPLETION = CompletionConfig(max_tokens=2048, temperature=0.0)

PREVIOUSLY_ANALYZED = "(previously analyzed)"


def python_internal_modules(source_files: Iterable[SourceFile]) -> Set[str]:
    """Top-level module names of the analyzed project, for Python import classification."""
    names: Set[str] = set()
    for source in source_files:
        if source.language is not Language.PYTHON:
            continue
        parts = PurePosixPath(source.path).parts
        if len(parts) >= 2 and parts[0] == "src":
            parts = parts[1:]
        if len(parts) == 1:
            names.add(PurePosixPath(parts[0]).stem)
        elif parts:
            names.add(parts[0])
    names.discard("__init__")
    return names


class Orchestrator:
    """Runs the per-file pipeline in static or streaming (enriched) mode.

    ``Analysis.modules`` comes back in completion order. Callers that need a
    stable order should use :meth:`Analysis.sorted_modules`.
    """

    def __init__(
        self,
        parser: StructuralParser | None = None,
        *,
        max_enrichment_bytes: int = DEFAULT_MAX_ENRICHMENT_BYTES,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff_base: float = DEFAULT_BACKOFF_BASE,
        sleep: Callable[[float], None] = time.sleep,
        completion: CompletionConfig = MODULE_COMPLETION,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._parser = parser
        self.max_enrichment_bytes = max_enrichment_bytes
        self.max_attempts = max_attempts
        self.backoff_base = backoff_base
        self.completion = completion
        self._sleep = sleep
        self.logger = get_logger("orchestrator")

    def run_static(self, inventory: FileInventory) -> Analysis:
        """Parse every source file without calling an enrichment provider."""
        root = Path(inventory.root)
        parser = self._resolve_parser(inventory)
        analysis = Analysis()
        total = len(inventory.source_files)
        for index, source in enumerate(inventory.source_files, start=1):
            self.logger.debug("[%d/%d] Parsing: %s", index, total, source.path)
            try:
                content = self._read(root, source)
            except (OSError, UnicodeDecodeError) as exc:
                analysis.modules.append(self._read_failure(source, exc))
                continue

            result = self._parse(parser, content, source)
            count = len(result.exports)
            if count:
                summary = f"{source.language.value} file with {count} public exports"
            else:
                summary = f"{source.language.value} file with no public exports"
            analysis.modules.append(
                ModuleAnalysis(
                    path=source.path,
                    language=source.language,
                    exports=list(result.exports),
                    imports=list(result.imports),
                    summary=summary,
                )
            )
        return analysis

    def run_streaming(
        self,
        inventory: FileInventory,
        provider: LLMProvider,
        output_root: Path,
        parallelism: int = DEFAULT_PARALLELISM,
    ) -> Analysis:
        """Parse and enrich each file, writing its document as soon as it completes.

        Paths recorded in the progress checkpoint are not processed again; they
        are represented by placeholder modules so aggregate counts stay whole.
        """
        if parallelism < 1:
            raise ValueError("parallelism must be at least 1")
        output_root = Path(output_root)
        modules_dir = output_root / MODULES_DIRNAME
        try:
            modules_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputError(f"Cannot create output directory {modules_dir}: {exc}") from exc

        checkpoint = ProgressCheckpoint.in_directory(output_root)
        completed = checkpoint.completed()
        analysis = Analysis()
        remaining: List[SourceFile] = []
        for source in inventory.source_files:
            if source.path in completed:
                analysis.modules.append(
                    ModuleAnalysis(
                        path=source.path,
                        language=source.language,
                        summary=PREVIOUSLY_ANALYZED,
                        has_deep_analysis=True,
                    )
                )
            else:
                remaining.append(source)

        if analysis.modules:
            self.logger.info(
                "Resuming: %d files already analyzed, %d remaining",
                len(analysis.modules),
                len(remaining),
            )
        if not remaining:
            return analysis

        root = Path(inventory.root)
        parser = self._resolve_parser(inventory)
        limiter = threading.BoundedSemaphore(parallelism)
        total = len(remaining)
        self.logger.info("Analyzing %d files with parallelism %d", total, parallelism)

        with ThreadPoolExecutor(max_workers=parallelism, thread_name_prefix="cda") as executor:
            for start in range(0, total, parallelism):
                batch = remaining[start : start + parallelism]
                futures = [
                    executor.submit(
                        self._analyze_file,
                        root,
                        source,
                        parser,
                        provider,
                        limiter,
                        checkpoint,
                        output_root,
                        start + offset + 1,
                        total,
                    )
                    for offset, source in enumerate(batch)
                ]
                for future in as_completed(futures):
                    analysis.modules.append(future.result())

        return analysis

    def enrich(
        self, provider: LLMProvider, messages: Sequence[Message], *, label: str = ""
    ) -> Optional[str]:
        """Call ``provider`` with retry; return None after a terminal failure.

        Only transient errors (rate limiting, overload) are retried, sleeping
        ``backoff_base * 2 ** (attempt - 1)`` seconds between attempts.
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                return provider.complete(messages, self.completion)
            except ProviderError as exc:
                if not is_transient(exc):
                    self.logger.warning("LLM analysis failed for %s: %s", label, exc)
                    return None
                if attempt >= self.max_attempts:
                    self.logger.warning(
                        "LLM analysis failed for %s after %d attempts: %s", label, attempt, exc
                    )
                    return None
                delay = self.backoff_base * (2 ** (attempt - 1))
                self.logger.warning(
                    "Rate limited on %s (attempt %d/%d), retrying in %.1fs",
                    label,
                    attempt,
                    self.max_attempts,
                    delay,
                )
                self._sleep(delay)
            except Exception as exc:
                self.logger.warning(
                    "LLM analysis failed for %s: %s", label, exc, exc_info=True
                )
                return None
        return None

    def _analyze_file(
        self,
        root: Path,
        source: SourceFile,
        parser: StructuralParser,
        provider: LLMProvider,
        limiter: threading.BoundedSemaphore,
        checkpoint: ProgressCheckpoint,
        output_root: Path,
        index: int,
        total: int,
    ) -> ModuleAnalysis:
        self.logger.info("[%d/%d] Analyzing: %s", index, total, source.path)
        try:
            content = self._read(root, source)
        except (OSError, UnicodeDecodeError) as exc:
            return self._read_failure(source, exc)

        result = self._parse(parser, content, source)
        module = ModuleAnalysis(
            path=source.path,
            language=source.language,
            exports=list(result.exports),
            imports=list(result.imports),
        )
        language = source.language.value

        deep: Optional[str] = None
        size = len(content.encode("utf-8"))
        if size > self.max_enrichment_bytes:
            self.logger.info("Skipping LLM analysis for %s (%d bytes)", source.path, size)
            module.summary = f"{language} file (too large for LLM analysis)"
        else:
            messages = build_module_messages(source.path, content, result)
            with limiter:
                deep = self.enrich(provider, messages, label=source.path)
            if deep is None:
                module.summary = f"{language} file with {len(module.exports)} exports"
            else:
                module.has_deep_analysis = True
                module.summary = (
                    summary_line(deep) or f"{language} file with {len(module.exports)} exports"
                )

        self._persist(output_root, module, deep, checkpoint)
        return module

    def _persist(
        self,
        output_root: Path,
        module: ModuleAnalysis,
        deep: Optional[str],
        checkpoint: ProgressCheckpoint,
    ) -> None:
        try:
            write_module_document(output_root, module, deep)
        except OutputError as exc:
            self.logger.warning("Could not write module document: %s", exc)
        try:
            checkpoint.append(module.path)
        except OSError as exc:
            self.logger.warning("Could not update checkpoint for %s: %s", module.path, exc)

    def _resolve_parser(self, inventory: FileInventory) -> StructuralParser:
        if self._parser is not None:
            return self._parser
        return StructuralParser(python_internal_modules(inventory.source_files))

    def _parse(self, parser: StructuralParser, content: str, source: SourceFile) -> ParseResult:
        try:
            return parser.parse(content, source.language)
        except ParseError as exc:
            self.logger.warning("Parse failed for %s: %s", source.path, exc)
            return ParseResult()

    @staticmethod
    def _read(root: Path, source: SourceFile) -> str:
        return (root / source.path).read_text(encoding="utf-8")

    def _read_failure(self, source: SourceFile, exc: Exception) -> ModuleAnalysis:
        self.logger.warning("Failed to read %s: %s", source.path, exc)
        return ModuleAnalysis(
            path=source.path,
            language=source.language,
            summary=f"Failed to read: {exc}",
        )


__all__ = [
    "DEFAULT_MAX_ENRICHMENT_BYTES",
    "MODULE_COMPLETION",
    "Orchestrator",
    "PREVIOUSLY_ANALYZED",
    "python_internal_modules",
]
