"""Output path mapping and atomic document writes."""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path

from .errors import WriteFailure
from .logging import get_logger
from .models import SourceFile

OUTPUT_SUFFIX = ".html"


def output_path_for(source: SourceFile, write_to: Path) -> Path:
    """Map a source file to its document path, e.g. ``lib/a.js`` -> ``docs/lib/a.js.html``.

    Absolute sources are mirrored relative to the working directory when they
    live below it, otherwise relative to the scan root.
    """
    discovered = source.path
    if discovered.is_absolute():
        try:
            discovered = discovered.relative_to(Path.cwd())
        except ValueError:
            discovered = source.relative
    normalized = Path(os.path.normpath(discovered))
    parts = [part for part in normalized.parts if part not in ("..", ".")]
    relative = Path(*parts) if parts else source.relative
    return Path(write_to) / relative.with_name(relative.name + OUTPUT_SUFFIX)


class DocumentWriter:
    """Persists rendered documents without ever leaving a partial file behind."""

    def __init__(self, mode: int | None = None) -> None:
        self.logger = get_logger("writer")
        self.mode = _default_file_mode() if mode is None else mode

    def write(self, target: Path, contents: str) -> Path:
        target = Path(target)
        self.ensure_directory(target.parent)
        self.logger.debug("Writing: %s (%d chars)", target, len(contents))
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent)
            )
        except OSError as exc:
            raise WriteFailure(target, exc) from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
                handle.write(contents)
            # mkstemp creates owner-only files; publish with the usual permissions.
            os.chmod(tmp_name, self._mode_for(target))
            os.replace(tmp_name, target)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise WriteFailure(target, exc) from exc
        return target

    def ensure_directory(self, directory: Path) -> None:
        self.logger.debug("Checking for dir: %s", directory)
        if directory.is_dir():
            return
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise WriteFailure(directory, exc) from exc
        self.logger.debug("Made directory: %s", directory)

    def _mode_for(self, target: Path) -> int:
        try:
            return stat.S_IMODE(target.stat().st_mode)
        except FileNotFoundError:
            return self.mode


def _default_file_mode() -> int:
    """Mode a plain ``open(path, "w")`` would give a new file under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


__all__ = ["DocumentWriter", "OUTPUT_SUFFIX", "output_path_for"]
