"""Tests for the JavaScript / TypeScript structural parser."""

from __future__ import annotations

import textwrap

from cda.models import ExportKind, Import, Language
from cda.parser import parse_file
from tests._fixtures.grammars import requires_grammar

TS_SAMPLE = textwrap.dedent(
    """\
    import React, { useState, useEffect as useFx } from "react";
    import { helper } from "./utils";
    import config from "@/config";

    /**
     * Renders the dashboard.
     * Second line of prose.
     * @param props component props
     */
    export function Dashboard(props: Props) {
      return null;
    }

    /** Shared limit. */
    export const LIMIT = 10;

    export const handler = async (event: Event) => event;

    export class Store {}

    export interface Props { title: string }

    export type Id = string;

    export enum Mode { Light, Dark }

    function internalOnly() {}

    export { helper as reexported } from "./utils";
    """
)


@requires_grammar("typescript")
def test_typescript_exports_and_kinds() -> None:
    result = parse_file(TS_SAMPLE, Language.TYPESCRIPT)

    kinds = {export.name: export.kind for export in result.exports}
    assert kinds == {
        "Dashboard": ExportKind.FUNCTION,
        "LIMIT": ExportKind.CONST,
        "handler": ExportKind.FUNCTION,
        "Store": ExportKind.CLASS,
        "Props": ExportKind.TRAIT,
        "Id": ExportKind.TYPE,
        "Mode": ExportKind.ENUM,
    }


@requires_grammar("typescript")
def test_typescript_jsdoc_stops_at_first_tag() -> None:
    result = parse_file(TS_SAMPLE, Language.TYPESCRIPT)
    exports = {export.name: export for export in result.exports}

    assert exports["Dashboard"].description == "Renders the dashboard. Second line of prose."
    assert exports["Dashboard"].signature == "export function Dashboard(props: Props) {"
    assert exports["Dashboard"].line_number == 10
    assert exports["LIMIT"].description == "Shared limit."
    assert exports["Store"].description == ""
    assert exports["Store"].signature is None


@requires_grammar("typescript")
def test_typescript_imports_split_internal_and_external() -> None:
    result = parse_file(TS_SAMPLE, Language.TYPESCRIPT)

    assert result.imports == [
        Import(source="react", items=("React", "useState", "useEffect"), is_external=True),
        Import(source="./utils", items=("helper",), is_external=False),
        Import(source="@/config", items=("config",), is_external=False),
        Import(source="./utils", items=("helper",), is_external=False),
    ]


@requires_grammar("javascript")
def test_javascript_grammar_handles_plain_modules() -> None:
    source = textwrap.dedent(
        """\
        const fs = require("fs");
        import path from "path";

        /** Reads a file. */
        export function read(name) {
          return fs.readFileSync(name);
        }

        export default function () {}
        """
    )

    result = parse_file(source, Language.JAVASCRIPT)

    assert [(export.name, export.kind) for export in result.exports] == [
        ("read", ExportKind.FUNCTION)
    ]
    assert result.exports[0].description == "Reads a file."
    assert result.imports == [Import(source="path", items=("path",), is_external=True)]
