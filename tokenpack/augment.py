"""Single-pass, non-transitive import augmentation.

Each candidate in the input is scanned once for relative import
references. Resolved files not already in the working set are appended in
discovery order and tagged ``Origin.IMPORT``. Appended files are never
scanned themselves, so dependencies of dependencies are missed on purpose:
the pass stays linear and cannot loop on cyclic imports.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import networkx as nx

from tokenpack.models import Candidate, Dependency, Origin
from tokenpack.references import extract_references, resolve_reference

logger = logging.getLogger(__name__)

ReadText = Callable[[Path], str]


def _read_utf8(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


@dataclass
class AugmentResult:
    """Augmented candidate list plus the import edges that produced it."""

    candidates: list[Candidate]
    dependencies: list[Dependency] = field(default_factory=list)
    graph: nx.DiGraph = field(default_factory=nx.DiGraph)

    @property
    def added(self) -> list[Candidate]:
        return [c for c in self.candidates if c.origin is Origin.IMPORT]


def augment_with_imports(
    candidates: Sequence[Candidate],
    root: Path,
    *,
    read_text: ReadText = _read_utf8,
) -> AugmentResult:
    """Append files imported by candidates, scanning only the originals.

    Args:
        candidates: The classified sequence, treated as already selected.
        root: Source directory; resolved files outside it are ignored.
        read_text: Content reader, injectable for tests.

    Returns:
        AugmentResult whose candidates are the input followed by new
        import-derived files.
    """
    root = root.resolve()
    working: list[Candidate] = list(candidates)
    known: set[Path] = {c.path.resolve() for c in working}

    graph = nx.DiGraph()
    for c in working:
        graph.add_node(c.path)

    dependencies: list[Dependency] = []

    # Snapshot: only the original candidates are scanned.
    for source in tuple(working):
        try:
            content = read_text(source.path)
        except OSError as exc:
            logger.debug("Skip import scan of %s: %s", source.rel_path, exc)
            continue

        for reference in extract_references(source.path, content):
            target = resolve_reference(source.path.parent, reference)
            if target is None:
                logger.debug("Unresolved %r in %s", reference, source.rel_path)
                continue
            if not target.is_relative_to(root) or target == source.path.resolve():
                continue

            if not graph.has_edge(source.path, target):
                graph.add_edge(source.path, target, reference=reference)
                dependencies.append(
                    Dependency(source=source.path, target=target, reference=reference)
                )

            if target in known:
                continue
            added = _candidate_for(target, root)
            if added is None:
                continue
            known.add(target)
            working.append(added)
            logger.debug(
                "+ import %s (from %s via %r)",
                added.rel_path,
                source.rel_path,
                reference,
            )

    return AugmentResult(candidates=working, dependencies=dependencies, graph=graph)


def _candidate_for(path: Path, root: Path) -> Candidate | None:
    try:
        stat = path.stat()
    except OSError:
        return None
    return Candidate(
        path=path,
        rel_path=path.relative_to(root),
        size_bytes=stat.st_size,
        modified_at=stat.st_mtime,
        origin=Origin.IMPORT,
    )
