"""Tests for import-reference extraction and resolution."""

from __future__ import annotations

from pathlib import Path

from conftest import write_file

from tokenpack.references import (
    extract_css_references,
    extract_js_references,
    extract_python_references,
    extract_references,
    family_for_extension,
    resolution_candidates,
    resolve_reference,
)


class TestJsReferences:
    """Tests for the javascript-family extractor."""

    def test_import_forms(self) -> None:
        content = (
            'import React from "react";\n'
            'import { a, b } from "./utils";\n'
            "import * as api from '../api/client';\n"
            'import "./styles.css";\n'
            'export { thing } from "./thing";\n'
            'const x = require("./legacy");\n'
            'const y = await import("./lazy");\n'
            'import type { T } from "./types";\n'
        )
        assert extract_js_references(content) == [
            "./utils",
            "../api/client",
            "./styles.css",
            "./thing",
            "./legacy",
            "./lazy",
            "./types",
        ]

    def test_multiline_named_imports(self) -> None:
        content = 'import {\n  one,\n  two,\n} from "./numbers";\n'
        assert extract_js_references(content) == ["./numbers"]

    def test_bare_specifiers_ignored(self) -> None:
        content = 'import lodash from "lodash";\nrequire("fs");\n'
        assert extract_js_references(content) == []

    def test_deduplicated_in_first_order(self) -> None:
        content = 'import a from "./a";\nimport b from "./b";\nrequire("./a");\n'
        assert extract_js_references(content) == ["./a", "./b"]

    def test_query_suffix_stripped(self) -> None:
        assert extract_js_references('import raw from "./doc.md?raw";') == ["./doc.md"]


class TestCssReferences:
    """Tests for the css-family extractor."""

    def test_import_and_use(self) -> None:
        content = (
            '@import "./base.css";\n'
            "@use '../theme/colors';\n"
            '@import url("./print.css");\n'
            '@import "https://fonts.example.com/x.css";\n'
        )
        assert extract_css_references(content) == [
            "./base.css",
            "../theme/colors",
            "./print.css",
        ]


class TestPythonReferences:
    """Tests for the tree-sitter python extractor."""

    def test_relative_from_imports(self) -> None:
        content = (
            "import os\n"
            "from pathlib import Path\n"
            "from .models import User\n"
            "from ..core.db import session\n"
        )
        assert extract_python_references(content) == ["./models", "../core/db"]

    def test_bare_dot_imports_names(self) -> None:
        content = "from . import views, forms as f\n"
        assert extract_python_references(content) == ["./views", "./forms"]

    def test_empty(self) -> None:
        assert extract_python_references("") == []


class TestExtractReferences:
    """Tests for extension dispatch."""

    def test_dispatch_by_extension(self) -> None:
        assert extract_references(Path("page.tsx"), 'import a from "./a";') == ["./a"]
        assert extract_references(Path("x.scss"), '@use "./vars";') == ["./vars"]

    def test_unknown_extension(self) -> None:
        assert extract_references(Path("notes.md"), 'import a from "./a";') == []

    def test_family_lookup(self) -> None:
        family = family_for_extension(".TS")
        assert family is not None
        assert family.name == "javascript"
        assert family_for_extension(".rs") is None


class TestResolveReference:
    """Tests for reference resolution."""

    def test_candidate_order(self, tmp_path: Path) -> None:
        paths = resolution_candidates(tmp_path, "./utils")
        assert paths[0] == tmp_path / "utils"
        assert paths[1] == tmp_path / "utils.ts"
        assert tmp_path / "utils" / "index.ts" in paths
        assert paths.index(tmp_path / "utils.js") < paths.index(
            tmp_path / "utils" / "index.ts"
        )

    def test_extension_appended(self, tmp_path: Path) -> None:
        target = write_file(tmp_path / "utils.ts", "")
        assert resolve_reference(tmp_path, "./utils") == target.resolve()

    def test_literal_wins(self, tmp_path: Path) -> None:
        literal = write_file(tmp_path / "styles.css", "")
        write_file(tmp_path / "styles.css.ts", "")
        assert resolve_reference(tmp_path, "./styles.css") == literal.resolve()

    def test_first_extension_wins(self, tmp_path: Path) -> None:
        ts = write_file(tmp_path / "dup.ts", "")
        write_file(tmp_path / "dup.js", "")
        assert resolve_reference(tmp_path, "./dup") == ts.resolve()

    def test_directory_index(self, tmp_path: Path) -> None:
        index = write_file(tmp_path / "Button" / "index.tsx", "")
        assert resolve_reference(tmp_path, "./Button") == index.resolve()

    def test_python_package(self, tmp_path: Path) -> None:
        init = write_file(tmp_path / "core" / "__init__.py", "")
        assert resolve_reference(tmp_path, "./core") == init.resolve()

    def test_parent_directory(self, tmp_path: Path) -> None:
        target = write_file(tmp_path / "shared.js", "")
        sub = tmp_path / "sub"
        sub.mkdir()
        assert resolve_reference(sub, "../shared") == target.resolve()

    def test_missing_returns_none(self, tmp_path: Path) -> None:
        assert resolve_reference(tmp_path, "./ghost") is None
