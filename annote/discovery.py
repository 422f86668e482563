"""Source file discovery under a root path."""

from __future__ import annotations

import os
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from .logging import get_logger
from .models import SourceFile

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "node_modules",
    "__pycache__",
}


def _matches_any(name: str, patterns: Sequence[str]) -> bool:
    return any(fnmatchcase(name, pattern) for pattern in patterns)


def _is_excluded(rel_path: str, excludes: Sequence[str]) -> bool:
    for pattern in excludes:
        cleaned = pattern.strip().rstrip("/")
        if not cleaned:
            continue
        if fnmatchcase(rel_path, cleaned) or rel_path.startswith(f"{cleaned}/"):
            return True
        if "/" not in cleaned and any(fnmatchcase(part, cleaned) for part in rel_path.split("/")):
            return True
    return False


class SourceScanner:
    """Walks a directory tree and yields files matching name patterns.

    Depth follows ``find -maxdepth``: files directly under the root are at
    depth 1, so ``maxdepth=1`` only documents the root level.
    """

    def __init__(self) -> None:
        self.logger = get_logger("discovery")

    def scan(
        self,
        root: Path | str,
        patterns: Sequence[str],
        maxdepth: Optional[int] = None,
        exclude: Sequence[str] = (),
    ) -> List[SourceFile]:
        root_path = Path(root).expanduser()
        if not root_path.exists():
            raise FileNotFoundError(f"Source path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Source path is not a directory: {root}")

        found = sorted(
            self._iter_files(root_path, patterns, maxdepth, exclude),
            key=lambda source: source.relative.as_posix(),
        )
        self.logger.debug("Found %d file(s) under %s matching %s", len(found), root_path, list(patterns))
        return found

    def _iter_files(
        self,
        root: Path,
        patterns: Sequence[str],
        maxdepth: Optional[int],
        exclude: Sequence[str],
    ) -> Iterator[SourceFile]:
        for dirpath, dirnames, filenames in os.walk(root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root)
            depth = len(rel_dir.parts)

            if maxdepth is not None and depth + 1 >= maxdepth:
                # Files in this directory may still qualify, its children may not.
                dirnames[:] = []
            else:
                dirnames[:] = sorted(
                    name
                    for name in dirnames
                    if name not in _EXCLUDED_DIRS
                    and not _is_excluded((rel_dir / name).as_posix(), exclude)
                )

            if maxdepth is not None and depth + 1 > maxdepth:
                continue

            for filename in sorted(filenames):
                if not _matches_any(filename, patterns):
                    continue
                relative = rel_dir / filename
                if _is_excluded(relative.as_posix(), exclude):
                    continue
                yield SourceFile(path=Path(os.path.normpath(root / relative)), relative=relative)


__all__ = ["SourceScanner"]
