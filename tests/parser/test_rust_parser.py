"""Tests for the Rust structural parser."""

from __future__ import annotations

import textwrap

from cda.models import ExportKind, Import, Language
from cda.parser import parse_file
from cda.parser.rust import doc_comment, split_use_path
from tests._fixtures.grammars import requires_grammar

SAMPLE = textwrap.dedent(
    """\
    //! Crate level docs that belong to no item.
    use std::collections::HashMap;
    use crate::core::{parser, analyzer::Analysis};

    /// Parses the input.
    /// Returns the number of tokens.
    #[inline]
    pub fn parse(input: &str) -> usize {
        input.len()
    }

    fn private_helper() {}

    pub struct Config {
        pub name: String,
    }

    /// Output formats.
    pub enum Format { Markdown, Json }

    pub trait Provider {}

    pub type Alias = u32;

    pub const LIMIT: usize = 10;

    pub mod nested {}

    struct Hidden;
    """
)


@requires_grammar("rust")
def test_rust_exports_only_public_items() -> None:
    result = parse_file(SAMPLE, Language.RUST)

    kinds = {export.name: export.kind for export in result.exports}
    assert kinds == {
        "parse": ExportKind.FUNCTION,
        "Config": ExportKind.STRUCT,
        "Format": ExportKind.ENUM,
        "Provider": ExportKind.TRAIT,
        "Alias": ExportKind.TYPE,
        "LIMIT": ExportKind.CONST,
        "nested": ExportKind.MODULE,
    }


@requires_grammar("rust")
def test_rust_doc_comment_skips_attributes_and_keeps_order() -> None:
    result = parse_file(SAMPLE, Language.RUST)
    parse = next(export for export in result.exports if export.name == "parse")

    assert parse.description == "Parses the input. Returns the number of tokens."
    assert parse.line_number == 8
    assert parse.signature == "pub fn parse(input: &str) -> usize {"


@requires_grammar("rust")
def test_rust_signature_only_for_functions() -> None:
    result = parse_file(SAMPLE, Language.RUST)
    config = next(export for export in result.exports if export.name == "Config")

    assert config.signature is None
    assert config.description == ""


@requires_grammar("rust")
def test_rust_imports_classify_crate_paths_as_internal() -> None:
    result = parse_file(SAMPLE, Language.RUST)

    assert result.imports == [
        Import(source="std", items=("collections", "HashMap"), is_external=True),
        Import(source="crate", items=("core", "parser", "Analysis"), is_external=False),
    ]


def test_split_use_path_handles_nested_groups_and_aliases() -> None:
    parsed = split_use_path("super::{a::{b, c as d}, self, e}")

    assert parsed.source == "super"
    assert parsed.items == ("b", "c", "e")
    assert parsed.is_external is False


def test_split_use_path_strips_alias_on_plain_path() -> None:
    assert split_use_path("serde::Serialize as Ser").items == ("Serialize",)
    assert split_use_path("tokio").items == ()


def test_doc_comment_tolerates_blank_lines_inside_block() -> None:
    lines = [
        "/// First line.",
        "",
        "/// Second line.",
        "#[derive(Debug)]",
        "pub struct Thing;",
    ]

    assert doc_comment(lines, 5) == "First line. Second line."


def test_doc_comment_stops_at_regular_code() -> None:
    lines = [
        "/// Belongs to the previous item.",
        "pub fn earlier() {}",
        "pub fn later() {}",
    ]

    assert doc_comment(lines, 3) == ""
