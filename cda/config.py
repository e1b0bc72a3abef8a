"""Configuration loading for cda (.cda.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".cda.yml"

DEFAULT_PROVIDER = "anthropic"
DEFAULT_PARALLELISM = 4
DEFAULT_OUTPUT_DIR = "cda-output"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class LLMConfig:
    """Enrichment provider settings."""

    provider: Optional[str] = None
    model: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    request_timeout: Optional[float] = None


@dataclass
class AnalysisConfig:
    """Discovery and orchestration knobs."""

    parallelism: Optional[int] = None
    exclude_paths: List[str] = field(default_factory=list)
    max_file_size: Optional[int] = None
    max_enrichment_bytes: Optional[int] = None
    max_attempts: Optional[int] = None
    backoff_base: Optional[float] = None


@dataclass
class OutputConfig:
    """Where and how results are written."""

    format: Optional[str] = None
    directory: Optional[str] = None


@dataclass
class CdaConfig:
    """Represents the settings defined in .cda.yml."""

    root: Path
    llm: LLMConfig = field(default_factory=LLMConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def config_path_for(path: Path) -> Path:
    """Return the .cda.yml location for a repository directory or config file path."""
    path = path.expanduser()
    if path.is_dir():
        return (path / CONFIG_FILENAME).resolve()
    if path.name != CONFIG_FILENAME:
        return (path.parent / CONFIG_FILENAME).resolve()
    return path.resolve()


def load_config(path: Path) -> CdaConfig:
    """Load configuration from disk, returning defaults when no file exists."""
    config_file = config_path_for(path)
    root = config_file.parent

    if not config_file.exists():
        return CdaConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    llm_data = _as_dict(data.get("llm"))
    llm = LLMConfig(
        provider=_as_str(llm_data.get("provider")),
        model=_as_str(llm_data.get("model")),
        max_tokens=_as_int(llm_data.get("max_tokens")),
        temperature=_as_float(llm_data.get("temperature")),
        request_timeout=_as_float(llm_data.get("request_timeout")),
    )

    analysis_data = _as_dict(data.get("analysis"))
    analysis = AnalysisConfig(
        parallelism=_as_positive_int(analysis_data.get("parallelism")),
        exclude_paths=_as_str_list(analysis_data.get("exclude_paths")),
        max_file_size=_as_positive_int(analysis_data.get("max_file_size")),
        max_enrichment_bytes=_as_positive_int(analysis_data.get("max_enrichment_bytes")),
        max_attempts=_as_positive_int(analysis_data.get("max_attempts")),
        backoff_base=_as_float(analysis_data.get("backoff_base")),
    )

    output_data = _as_dict(data.get("output"))
    output = OutputConfig(
        format=_as_str(output_data.get("format")),
        directory=_as_str(output_data.get("directory")),
    )

    return CdaConfig(root=root, llm=llm, analysis=analysis, output=output)


def render_default_config() -> str:
    """Return the commented template written by ``cda config --init``."""
    return _DEFAULT_CONFIG


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_positive_int(value: Any) -> Optional[int]:
    number = _as_int(value)
    if number is None or number <= 0:
        return None
    return number


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


_DEFAULT_CONFIG = """\
# cda configuration

llm:
  # anthropic | openai | ollama
  provider: anthropic
  # model: claude-sonnet-4-20250514
  max_tokens: 2048
  temperature: 0.0

analysis:
  # Concurrent enrichment calls
  parallelism: 4
  # Patterns ignored in addition to .gitignore
  exclude_paths:
    - node_modules
    - target
    - dist
    - "*.min.js"
    - "*.map"
  # Source files larger than this are not inventoried (bytes)
  max_file_size: 1048576
  # Files larger than this skip enrichment (bytes)
  max_enrichment_bytes: 50000
  max_attempts: 3
  backoff_base: 1.0

output:
  # markdown | json
  format: markdown
  directory: cda-output
"""


__all__ = [
    "AnalysisConfig",
    "CdaConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_OUTPUT_DIR",
    "DEFAULT_PARALLELISM",
    "DEFAULT_PROVIDER",
    "LLMConfig",
    "OutputConfig",
    "config_path_for",
    "load_config",
    "render_default_config",
]
