from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.doubles import RecordingSleep
from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a reusable codebase builder rooted at the pytest tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture(autouse=True)
def _isolate_provider_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "CDA_PROVIDER",
        "CDA_MODEL",
        "CDA_LOG_FILE",
        "ANTHROPIC_API_KEY",
        "OPENAI_API_KEY",
        "OPENAI_BASE_URL",
        "OLLAMA_URL",
    ):
        monkeypatch.delenv(key, raising=False)
