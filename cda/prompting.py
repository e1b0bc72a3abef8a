"""Prompt construction for enrichment calls."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import List

from .llm import Message, Role
from .models import Analysis
from .parser import ParseResult

MODULE_SYSTEM_PROMPT = """You are a code analysis expert. Your job is to analyze source code and produce clear, structured documentation that helps other developers (and AI assistants) understand the codebase.

For each module, provide:
1. **Purpose**: One sentence explaining what this module does
2. **Key Components**: Brief description of each important function/type
3. **Data Flow**: How data moves through this module
4. **Dependencies**: What this module relies on and why
5. **Usage**: How other code would use this module

Be concise but thorough. Focus on INTENT and BEHAVIOR, not just listing code.
Output in markdown format. Keep response under 2000 tokens."""

ARCHITECTURE_SYSTEM_PROMPT = """You are a software architect. Analyze the module summaries and produce a high-level architecture overview.

Include:
1. **System Purpose**: What does this codebase do overall?
2. **Core Components**: The main modules and their roles
3. **Data Flow**: How data moves through the system
4. **Entry Points**: Where does execution start?
5. **Extension Points**: Where can the system be extended?

Be concise. Write for developers who need to understand the codebase quickly."""


def build_static_context(path: str, result: ParseResult) -> str:
    """Render the structural facts handed to the model alongside the source."""
    lines: List[str] = [f"## File: {path}", "", "## Static Analysis Results", ""]

    if result.exports:
        lines.append("### Exports")
        for export in result.exports:
            entry = f"- `{export.name}` ({export.kind.label})"
            if export.signature:
                entry += f": `{export.signature}`"
            if export.description:
                entry += f" - {export.description}"
            lines.append(entry)
        lines.append("")

    if result.imports:
        lines.append("### Dependencies")
        for item in result.imports:
            suffix = " (external)" if item.is_external else ""
            lines.append(f"- `{item.source}`{suffix}")
        lines.append("")

    return "\n".join(lines) + "\n"


def build_module_messages(path: str, content: str, result: ParseResult) -> List[Message]:
    filename = PurePosixPath(path.replace("\\", "/")).name or path
    user_prompt = (
        f"Analyze this source file: `{filename}`\n\n"
        f"{build_static_context(path, result)}\n"
        "## Source Code\n\n"
        f"```\n{content}\n```\n\n"
        "Provide a deep analysis of this module."
    )
    return [
        Message(role=Role.SYSTEM, content=MODULE_SYSTEM_PROMPT),
        Message(role=Role.USER, content=user_prompt),
    ]


def build_architecture_messages(analysis: Analysis) -> List[Message]:
    sections: List[str] = []
    for module in analysis.sorted_modules():
        filename = PurePosixPath(module.path.replace("\\", "/")).name or module.path
        sections.append(f"### {filename}\n{module.summary}\n")
    user_prompt = (
        "Here are the analyzed modules:\n\n"
        + "\n".join(sections)
        + "\nGenerate an architecture overview."
    )
    return [
        Message(role=Role.SYSTEM, content=ARCHITECTURE_SYSTEM_PROMPT),
        Message(role=Role.USER, content=user_prompt),
    ]


def summary_line(text: str) -> str:
    """First non-empty line of an enrichment response, without heading markers."""
    for line in text.splitlines():
        stripped = line.strip().lstrip("#").strip()
        if stripped:
            return stripped
    return ""


__all__ = [
    "ARCHITECTURE_SYSTEM_PROMPT",
    "MODULE_SYSTEM_PROMPT",
    "build_architecture_messages",
    "build_module_messages",
    "build_static_context",
    "summary_line",
]
