"""Tests for cda.verify."""

from __future__ import annotations

from pathlib import Path

import pytest

from cda.output import OutputError
from cda.verify import verify_output
from tests._fixtures.repo_builder import RepoBuilder


def _write_doc(output_root: Path, name: str) -> None:
    modules = output_root / "modules"
    modules.mkdir(parents=True, exist_ok=True)
    (modules / name).write_text("# doc\n", encoding="utf-8")


def test_verify_reports_missing_and_orphaned(repo_builder: RepoBuilder, tmp_path: Path) -> None:
    repo_builder.write({"src/a.rs": "pub fn a() {}\n", "src/b.rs": "pub fn b() {}\n"})
    output_root = tmp_path / "out"
    _write_doc(output_root, "src_a_rs.md")
    _write_doc(output_root, "src_removed_rs.md")

    report = verify_output(repo_builder.path(), output_root)

    assert report.ok is False
    assert report.missing == ["src/b.rs"]
    assert report.orphaned == ["src_removed_rs.md"]
    assert report.analyzed == 2


def test_verify_clean_output(repo_builder: RepoBuilder, tmp_path: Path) -> None:
    repo_builder.write({"lib.py": "A = 1\n"})
    output_root = tmp_path / "out"
    _write_doc(output_root, "lib_py.md")

    report = verify_output(repo_builder.path(), output_root)

    assert report.ok is True


def test_verify_requires_existing_output(repo_builder: RepoBuilder, tmp_path: Path) -> None:
    with pytest.raises(OutputError):
        verify_output(repo_builder.path(), tmp_path / "missing")
