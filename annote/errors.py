"""Error taxonomy for per-file annotation failures."""

from __future__ import annotations

from pathlib import Path


class AnnotationError(RuntimeError):
    """A failure while annotating a single source file.

    Carries the offending path and the pipeline stage so callers can report
    every failure of a batch with enough context to act on it.
    """

    stage = "annotate"

    def __init__(self, path: Path | str, cause: BaseException | str) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"{self.stage} failed for {self.path}: {cause}")


class ReadFailure(AnnotationError):
    """The source file could not be read or decoded."""

    stage = "read"


class RenderFailure(AnnotationError):
    """Markdown, highlighting or template binding raised on this file."""

    stage = "render"


class WriteFailure(AnnotationError):
    """The output directory or document could not be written."""

    stage = "write"


__all__ = ["AnnotationError", "ReadFailure", "RenderFailure", "WriteFailure"]
