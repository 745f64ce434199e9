"""Import-reference extraction and resolution, per language family.

Every extractor has the same narrow shape, ``(content) -> list[str]``, and
returns relative references (``./x``, ``../y``) in order of first
appearance. Resolution maps a reference onto an existing file.
"""

from __future__ import annotations

import functools
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import TYPE_CHECKING

from tree_sitter_language_pack import get_language, get_parser

if TYPE_CHECKING:
    from tree_sitter import Node, Parser, Query

Extractor = Callable[[str], list[str]]

RESOLVE_EXTENSIONS: tuple[str, ...] = (
    ".ts",
    ".tsx",
    ".js",
    ".jsx",
    ".mjs",
    ".cjs",
    ".py",
    ".css",
    ".scss",
    ".json",
    ".vue",
    ".svelte",
)
INDEX_STEM = "index"
PACKAGE_INIT = "__init__.py"

_JS_PATTERNS: tuple[re.Pattern[str], ...] = (
    # import x from "./a"; import { a, b } from "./a"; export * from "./a"
    re.compile(
        r"""\b(?:import|export)\s+(?:type\s+)?[\w*{}\s,$]*?"""
        r"""\bfrom\s*(['"])([^'"\n]+)\1"""
    ),
    # import "./side-effect"
    re.compile(r"""\bimport\s*(['"])([^'"\n]+)\1"""),
    # require("./a"), import("./a")
    re.compile(r"""\b(?:require|import)\s*\(\s*(['"`])([^'"`\n]+)\1\s*\)"""),
)
_CSS_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"""@(?:import|use|forward)\s+(?:url\(\s*)?(['"])([^'"\n]+)\1"""),
)


def is_relative(reference: str) -> bool:
    return reference.startswith(("./", "../"))


def _scan(content: str, patterns: tuple[re.Pattern[str], ...]) -> list[str]:
    """Run patterns over content and merge hits in source order."""
    hits: list[tuple[int, str]] = []
    for pattern in patterns:
        for match in pattern.finditer(content):
            hits.append((match.start(2), match.group(2).strip()))
    hits.sort()
    return _unique_relative(ref for _, ref in hits)


def _unique_relative(refs: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for ref in refs:
        ref = re.split(r"[?#]", ref, maxsplit=1)[0]
        if not is_relative(ref) or ref in seen:
            continue
        seen.add(ref)
        out.append(ref)
    return out


def extract_js_references(content: str) -> list[str]:
    """Relative specifiers from import/export/require statements."""
    return _scan(content, _JS_PATTERNS)


def extract_css_references(content: str) -> list[str]:
    """Relative paths from ``@import``, ``@use`` and ``@forward`` rules."""
    return _scan(content, _CSS_PATTERNS)


@functools.cache
def _python_parser() -> Parser:
    return get_parser("python")


@functools.cache
def _python_import_query() -> Query:
    from tree_sitter import Query as TSQuery

    scm_text = (
        resources.files("tokenpack.queries")
        .joinpath("python.scm")
        .read_text(encoding="utf-8")
    )
    return TSQuery(get_language("python"), scm_text)


def extract_python_references(content: str) -> list[str]:
    """Relative ``from`` imports, rewritten as paths.

    ``from .models import User`` yields ``./models``; ``from ..core.db
    import x`` yields ``../core/db``; ``from . import a, b`` yields ``./a``
    and ``./b``.
    """
    from tree_sitter import QueryCursor

    source = content.encode("utf-8")
    if not source:
        return []
    tree = _python_parser().parse(source)
    captures = QueryCursor(_python_import_query()).captures(tree.root_node)
    nodes = sorted(captures.get("import.relative", []), key=lambda n: n.start_byte)

    refs: list[str] = []
    for node in nodes:
        text = node.text.decode("utf-8")
        module = text.lstrip(".")
        dots = len(text) - len(module)
        prefix = "./" if dots == 1 else "../" * (dots - 1)
        if module:
            refs.append(prefix + module.replace(".", "/"))
            continue
        statement = node.parent
        if statement is None:
            continue
        for name in _imported_names(statement):
            refs.append(prefix + name.replace(".", "/"))
    return _unique_relative(refs)


def _imported_names(statement: Node) -> list[str]:
    names: list[str] = []
    for child in statement.children_by_field_name("name"):
        if child.type == "aliased_import":
            child = child.child_by_field_name("name") or child
        names.append(child.text.decode("utf-8"))
    return names


@dataclass(frozen=True)
class LanguageFamily:
    """A group of extensions sharing one reference extractor."""

    name: str
    extensions: tuple[str, ...]
    extract: Extractor


FAMILIES: dict[str, LanguageFamily] = {
    "javascript": LanguageFamily(
        name="javascript",
        extensions=(
            ".js",
            ".jsx",
            ".mjs",
            ".cjs",
            ".ts",
            ".tsx",
            ".mts",
            ".cts",
            ".vue",
            ".svelte",
        ),
        extract=extract_js_references,
    ),
    "css": LanguageFamily(
        name="css",
        extensions=(".css", ".scss", ".sass", ".less"),
        extract=extract_css_references,
    ),
    "python": LanguageFamily(
        name="python",
        extensions=(".py", ".pyi"),
        extract=extract_python_references,
    ),
}

EXTENSION_MAP: dict[str, str] = {
    ext: family.name for family in FAMILIES.values() for ext in family.extensions
}


def family_for_extension(ext: str) -> LanguageFamily | None:
    """Look up a language family by file extension (including the dot)."""
    name = EXTENSION_MAP.get(ext.lower())
    if name is None:
        return None
    return FAMILIES[name]


def extract_references(path: Path, content: str) -> list[str]:
    """Extract relative import references from a file's content.

    Files of an unknown language family yield no references.
    """
    family = family_for_extension(path.suffix)
    if family is None:
        return []
    return family.extract(content)


def resolution_candidates(base_dir: Path, reference: str) -> list[Path]:
    """Ordered paths tried when resolving reference from base_dir."""
    literal = base_dir / reference
    paths = [literal]
    paths.extend(Path(f"{literal}{ext}") for ext in RESOLVE_EXTENSIONS)
    paths.extend(literal / f"{INDEX_STEM}{ext}" for ext in RESOLVE_EXTENSIONS)
    paths.append(literal / PACKAGE_INIT)
    return paths


def resolve_reference(base_dir: Path, reference: str) -> Path | None:
    """Return the first existing file for reference, canonicalised, or None."""
    for path in resolution_candidates(base_dir, reference):
        if path.is_file():
            return path.resolve()
    return None
