"""Candidate discovery with gitignore, extension and binary filtering."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

import pathspec

from tokenpack.models import Candidate

logger = logging.getLogger(__name__)

SKIP_DIRS: frozenset[str] = frozenset(
    {
        "__pycache__",
        "node_modules",
        ".git",
        ".hg",
        ".svn",
        "venv",
        ".venv",
        "env",
        ".env",
        "build",
        "dist",
        "target",
        "coverage",
        "bower_components",
        ".tox",
        ".mypy_cache",
        ".ruff_cache",
        ".pytest_cache",
        ".next",
        ".nuxt",
        ".cache",
    }
)

EGG_INFO_SUFFIX = ".egg-info"

DEFAULT_EXCLUDE_EXTS: frozenset[str] = frozenset(
    """
    png jpg jpeg gif bmp svg ico webp tiff mp3 mp4 avi mov mkv wav ogg webm flac
    zip tar gz bz2 xz rar 7z pdf doc docx xls xlsx ppt pptx exe dll so dylib bin
    o a class pyc woff woff2 ttf eot otf db sqlite sqlite3 lock swp swo bak map
    """.split()
)

_BINARY_SNIFF_BYTES = 8192


def _git_ls_files(root: Path) -> set[str] | None:
    """Return the set of git-tracked and untracked-but-not-ignored files.

    Uses ``git ls-files -z --cached --others --exclude-standard`` to respect
    all gitignore files (root, subdirectory, and global). NUL-separated
    output keeps non-ASCII names unquoted.

    Returns:
        Set of repo-relative file paths, or None if git is unavailable
        or the directory is not a git repository.
    """
    if not (root / ".git").exists():
        return None
    try:
        result = subprocess.run(
            ["git", "ls-files", "-z", "--cached", "--others", "--exclude-standard"],
            cwd=root,
            capture_output=True,
            encoding="utf-8",
            timeout=10,
            check=False,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    return {name for name in result.stdout.split("\0") if name}


def is_binary(path: Path) -> bool:
    """Check for a NUL byte in the first 8 KiB of a file."""
    try:
        with path.open("rb") as fh:
            return b"\x00" in fh.read(_BINARY_SNIFF_BYTES)
    except OSError:
        return True


def discover_candidates(
    root: Path,
    *,
    include_exts: frozenset[str] = frozenset(),
    exclude_exts: frozenset[str] = frozenset(),
    exclude_dirs: frozenset[str] | None = None,
    extra_ignores: list[str] | None = None,
    max_size_bytes: int | None = None,
    since: float | None = None,
    recent: int = 0,
) -> list[Candidate]:
    """Walk root and return candidate files, newest first.

    Args:
        root: Source directory.
        include_exts: If non-empty, only these extensions (lowercase, no dot).
        exclude_exts: Extensions to skip in addition to the binary/asset defaults.
        exclude_dirs: Directory names to prune; defaults to SKIP_DIRS.
        extra_ignores: Additional gitignore-style patterns to exclude.
        max_size_bytes: Skip files larger than this.
        since: Skip files modified before this epoch timestamp.
        recent: Keep only this many newest files (0 keeps all).

    Returns:
        Candidates sorted by modification time descending, ties by path.
    """
    root = root.resolve()
    skip_dirs = SKIP_DIRS if exclude_dirs is None else exclude_dirs
    git_files = _git_ls_files(root)
    gitignore = _load_gitignore(root) if git_files is None else None

    extra_spec = None
    if extra_ignores:
        extra_spec = pathspec.PathSpec.from_lines("gitignore", extra_ignores)

    results: list[Candidate] = []

    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        # Prune skip dirs and hidden dirs in-place to prevent descent
        dirnames[:] = sorted(
            d
            for d in dirnames
            if d not in skip_dirs
            and not d.startswith(".")
            and not d.endswith(EGG_INFO_SUFFIX)
        )

        rel_dir = Path(dirpath).relative_to(root)

        for fname in sorted(filenames):
            if fname.startswith("."):
                continue

            full_path = Path(dirpath) / fname
            if full_path.is_symlink():
                continue

            rel = rel_dir / fname
            rel_posix = rel.as_posix()

            if git_files is not None:
                if rel_posix not in git_files:
                    continue
            elif gitignore and gitignore.match_file(rel_posix):
                continue

            if extra_spec and extra_spec.match_file(rel_posix):
                continue

            ext = full_path.suffix.lstrip(".").lower()
            if include_exts and ext not in include_exts:
                continue
            if ext in exclude_exts or ext in DEFAULT_EXCLUDE_EXTS:
                continue

            try:
                stat = full_path.stat()
            except OSError as exc:
                logger.debug("Skip unreadable %s: %s", rel_posix, exc)
                continue

            if max_size_bytes is not None and stat.st_size > max_size_bytes:
                logger.debug("Skip oversized %s (%d bytes)", rel_posix, stat.st_size)
                continue
            if since is not None and stat.st_mtime < since:
                continue
            if is_binary(full_path):
                logger.debug("Skip binary %s", rel_posix)
                continue

            results.append(
                Candidate(
                    path=full_path,
                    rel_path=rel,
                    size_bytes=stat.st_size,
                    modified_at=stat.st_mtime,
                )
            )

    results.sort(key=lambda c: (-c.modified_at, c.rel_path.as_posix()))
    if recent > 0:
        results = results[:recent]
    return results


def _load_gitignore(root: Path) -> pathspec.PathSpec:
    """Load .gitignore from root, returning a PathSpec matcher."""
    gitignore_path = root / ".gitignore"
    if gitignore_path.is_file():
        lines = gitignore_path.read_text(encoding="utf-8").splitlines()
        return pathspec.PathSpec.from_lines("gitignore", lines)
    return pathspec.PathSpec.from_lines("gitignore", [])
